"""Concurrency — thread pool for batch fragment rendering."""

from typmark.concurrency.pool import RenderPool

__all__ = ["RenderPool"]
