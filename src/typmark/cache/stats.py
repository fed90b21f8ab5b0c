"""Cache statistics models."""

from __future__ import annotations

from pydantic import BaseModel


class CacheStats(BaseModel):
    """Statistics for one logical cache, or an aggregate of several."""

    name: str = ""
    entries: int = 0
    size_bytes: int = 0
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)
