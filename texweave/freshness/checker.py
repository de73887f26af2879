"""Staleness decision for a single source file."""

from __future__ import annotations

from pathlib import Path

from texweave.ledger import PathLedger


def modification_time(path: Path) -> int:
    """Whole-second mtime of *path*. Raises OSError if it cannot be read."""
    return int(Path(path).stat().st_mtime)


def is_stale(path: Path, ledger: PathLedger) -> bool:
    """True if *path* has no ledger entry or was modified after it.

    Comparison is at second granularity, so an edit within the same second
    as the recorded timestamp counts as fresh.
    """
    recorded = ledger.get(path)
    if recorded is None:
        return True
    return modification_time(path) > recorded
