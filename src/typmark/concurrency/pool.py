"""Thread pool for rendering many fragments in parallel."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class RenderPool:
    """Runs a render function over a batch of inputs on worker threads.

    Results come back in input order. A failing item does not stop the
    others: its exception takes the place of its result.
    """

    def __init__(self, max_workers: int = 4) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._max_workers = max_workers

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def process_batch(
        self,
        render_fn: Callable[[T], R],
        items: Sequence[T],
    ) -> list[R | Exception]:
        if not items:
            return []

        def worker(item: T) -> R | Exception:
            try:
                return render_fn(item)
            except Exception as exc:
                logger.warning("Render failed: %s", exc)
                return exc

        if self._max_workers == 1 or len(items) == 1:
            return [worker(item) for item in items]

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(items))) as executor:
            return list(executor.map(worker, items))
