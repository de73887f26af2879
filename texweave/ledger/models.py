"""Data models for the modification-time ledger."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerEntry:
    """Last successful compilation time for one canonical path."""

    canonical_path: str
    last_compiled: int  # Unix seconds, UTC

    def __post_init__(self) -> None:
        if not self.canonical_path:
            raise ValueError("canonical_path must be non-empty")
        if self.last_compiled < 0:
            raise ValueError(f"last_compiled must be >= 0, got {self.last_compiled}")
