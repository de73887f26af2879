"""Freshness tracking: staleness decisions and file watching."""

from texweave.freshness.checker import is_stale, modification_time
from texweave.freshness.watcher import SourceWatcher

__all__ = [
    "SourceWatcher",
    "is_stale",
    "modification_time",
]
