"""Line-oriented ledger file mapping canonical paths to compile timestamps."""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from texweave.errors import LedgerError
from texweave.ledger.models import LedgerEntry
from texweave.reporting import Level, NullReporter, Reporter

logger = logging.getLogger(__name__)

DEFAULT_LEDGER_FILENAME = ".texweave_ledger"
DEFAULT_DELIMITER = ";"


def canonical_path(path: str | Path) -> str:
    """Absolute, symlink-resolved identity of *path*.

    Every ledger key goes through here, both when looking up and when
    recording, so two spellings of the same file always share one entry.
    """
    return str(Path(path).resolve())


def ledger_path(root: Path, filename: str = DEFAULT_LEDGER_FILENAME) -> Path:
    """Where the ledger sidecar lives inside the source root."""
    return root / filename


class PathLedger:
    """In-memory ledger, loaded once per run and saved wholesale."""

    def __init__(
        self,
        entries: dict[str, int] | None = None,
        delimiter: str = DEFAULT_DELIMITER,
    ) -> None:
        self._entries: dict[str, int] = dict(entries or {})
        self.delimiter = delimiter

    # ------------------------------------------------------------------
    # Mapping access; paths are canonicalized here and nowhere else
    # ------------------------------------------------------------------

    def get(self, path: str | Path) -> int | None:
        return self._entries.get(canonical_path(path))

    def record(self, path: str | Path, timestamp: int) -> LedgerEntry:
        """Overwrite the entry for *path* with *timestamp*."""
        entry = LedgerEntry(canonical_path(path), int(timestamp))
        self._entries[entry.canonical_path] = entry.last_compiled
        return entry

    def forget(self, path: str | Path) -> bool:
        return self._entries.pop(canonical_path(path), None) is not None

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return canonical_path(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def entries(self) -> list[LedgerEntry]:
        return [LedgerEntry(p, t) for p, t in self._entries.items()]

    def prune_missing(self) -> list[str]:
        """Drop entries whose file no longer exists. Returns the dropped keys."""
        gone = [p for p in self._entries if not os.path.exists(p)]
        for p in gone:
            del self._entries[p]
        if gone:
            logger.debug("Pruned %d ledger entries for vanished files", len(gone))
        return gone

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def dumps(self) -> str:
        """Serialize one ``path<delimiter>seconds`` record per line.

        Paths containing a line break cannot be represented and are left out,
        so such a file is simply rebuilt on every run.
        """
        lines = []
        for path, ts in self._entries.items():
            if path.splitlines() != [path]:
                logger.warning("Not saving ledger entry for %r: path contains a line break", path)
                continue
            lines.append(f"{path}{self.delimiter}{ts}\n")
        return "".join(lines)

    @classmethod
    def loads(
        cls,
        text: str,
        delimiter: str = DEFAULT_DELIMITER,
        reporter: Reporter | None = None,
        source: str = "ledger",
    ) -> PathLedger:
        """Parse ledger text, skipping malformed lines with a warning."""
        reporter = reporter or NullReporter()
        entries: dict[str, int] = {}
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            # Split on the last delimiter so paths containing it still parse
            path, sep, raw_ts = line.rpartition(delimiter)
            if not sep or not path:
                reporter.report(
                    Level.WARN, source, f"Skipping malformed ledger line {lineno}: no delimiter"
                )
                continue
            try:
                ts = int(raw_ts.strip())
            except ValueError:
                reporter.report(
                    Level.WARN,
                    source,
                    f"Skipping malformed ledger line {lineno}: bad timestamp {raw_ts!r}",
                )
                continue
            if ts < 0:
                reporter.report(
                    Level.WARN, source, f"Skipping malformed ledger line {lineno}: negative timestamp"
                )
                continue
            entries[path] = ts
        return cls(entries, delimiter=delimiter)

    @classmethod
    def load(
        cls,
        path: Path,
        delimiter: str = DEFAULT_DELIMITER,
        reporter: Reporter | None = None,
    ) -> PathLedger:
        """Read the ledger file, or start empty if it is absent or unreadable."""
        reporter = reporter or NullReporter()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            reporter.report(Level.WARN, "ledger", f"Load modification times table: {e}")
            return cls(delimiter=delimiter)
        ledger = cls.loads(text, delimiter=delimiter, reporter=reporter, source=path.name)
        logger.debug("Loaded %d ledger entries from %s", len(ledger), path)
        return ledger

    def save(self, path: Path) -> None:
        """Replace the ledger file atomically. Raises LedgerError on failure."""
        tmp = Path(f"{path}.tmp")
        try:
            tmp.write_text(self.dumps(), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise LedgerError(path, e) from e
        logger.debug("Saved %d ledger entries to %s", len(self), path)
