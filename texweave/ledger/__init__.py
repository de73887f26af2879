"""Persistent modification-time ledger keyed by canonical path."""

from texweave.ledger.models import LedgerEntry
from texweave.ledger.store import PathLedger, canonical_path, ledger_path

__all__ = [
    "LedgerEntry",
    "PathLedger",
    "canonical_path",
    "ledger_path",
]
