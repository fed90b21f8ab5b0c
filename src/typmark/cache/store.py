"""Thread-safe content-addressed store persisted as a single binary file."""

from __future__ import annotations

import contextlib
import gzip
import logging
import os
import threading
import zlib
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from typmark.cache.stats import CacheStats
from typmark.errors.exceptions import CacheIoError, CacheLoadError

logger = logging.getLogger(__name__)

V = TypeVar("V")


class ContentCache(Generic[V]):
    """In-memory key → value map, written out wholesale by :meth:`persist`.

    On disk a cache is one gzip-compressed blob of the JSON-encoded map.

    ``get`` and ``insert`` may be called from any number of render threads.
    The lock only guards dict access, so a reader never waits on a compile.
    ``insert`` overwrites: two racing misses for the same key both compile
    and the last writer wins, which is harmless since renders are
    deterministic.
    """

    def __init__(
        self,
        value_type: Any,
        path: Path | None = None,
        name: str = "",
    ) -> None:
        self._adapter: TypeAdapter[dict[str, V]] = TypeAdapter(dict[str, value_type])
        self._path = path
        self._name = name or (path.stem if path else "memory")
        self._entries: dict[str, V] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def load(cls, path: str | Path, value_type: Any, name: str = "") -> ContentCache[V]:
        """Open the cache stored at ``path``.

        A missing file yields an empty cache (and its directory is created).
        A file that exists but cannot be decoded raises ``CacheLoadError``.
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheLoadError(
                f"Cannot create cache directory {path.parent}: {e}", path=path, original=e
            ) from e

        cache: ContentCache[V] = cls(value_type, path=path, name=name)
        if not path.exists():
            logger.info("No cache file at %s, starting empty", path)
            return cache

        try:
            data = path.read_bytes()
        except OSError as e:
            raise CacheLoadError(f"Cannot read cache file {path}: {e}", path=path, original=e) from e

        try:
            entries = cache._adapter.validate_json(gzip.decompress(data))
        except (OSError, EOFError, zlib.error, ValidationError) as e:
            raise CacheLoadError(
                f"Cache file {path} is corrupt; delete it to start over", path=path, original=e
            ) from e

        cache._entries = entries
        logger.info("Loaded %d entries from %s", len(entries), path)
        return cache

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, key: str) -> V | None:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
        return value

    def insert(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def persist(self) -> None:
        """Replace the cache file with the current entry set.

        The write goes to a sibling temp file that is renamed into place, so a
        failure never truncates the previous file or touches memory.
        """
        if self._path is None:
            logger.debug("Cache '%s' has no backing file, nothing to persist", self._name)
            return

        with self._lock:
            snapshot = dict(self._entries)
        payload = gzip.compress(self._adapter.dump_json(snapshot), mtime=0)

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise CacheIoError(
                f"Failed to write cache file {self._path}: {e}", path=self._path, original=e
            ) from e

        logger.info("Persisted %d entries to %s", len(snapshot), self._path)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            entries, hits, misses = len(self._entries), self._hits, self._misses
        size = 0
        if self._path is not None and self._path.exists():
            size = self._path.stat().st_size
        return CacheStats(
            name=self._name, entries=entries, size_bytes=size, hits=hits, misses=misses
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
