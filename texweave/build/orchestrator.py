"""Load ledger, scan, convert stale files, persist."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from texweave.build.models import BuildReport, FileResult
from texweave.config.models import TexweaveConfig
from texweave.converter import Converter, PandocConverter, mirrored_output_path
from texweave.errors import (
    ConversionError,
    ConversionTimeoutError,
    LedgerError,
    OutputDirectoryError,
)
from texweave.freshness.checker import is_stale
from texweave.ledger import PathLedger, ledger_path
from texweave.reporting import Level, NullReporter, Reporter
from texweave.scanner import scan_tree

logger = logging.getLogger(__name__)


def _utc_now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


class Builder:
    """Runs the convert-if-stale policy over one source root.

    The converter is discovered on first use, so constructing a Builder
    never fails. ``run`` raises ConverterNotFoundError or
    OutputDirectoryError for startup failures; everything that goes wrong
    for a single file ends up in that file's FileResult instead.
    """

    def __init__(
        self,
        root: str | Path,
        config: TexweaveConfig | None = None,
        converter: Converter | None = None,
        reporter: Reporter | None = None,
        clock: Callable[[], int] = _utc_now,
    ) -> None:
        self.root = Path(root).absolute()
        self.config = config or TexweaveConfig()
        self.reporter = reporter or NullReporter()
        self.output_root = self.root / self.config.output.directory
        self.ledger_file = ledger_path(self.root, self.config.ledger.filename)
        self._converter = converter
        self._clock = clock
        self._persist_failed = False

    def ensure_converter(self) -> Converter:
        """Return the converter, discovering pandoc on PATH if none was given."""
        if self._converter is None:
            self._converter = PandocConverter.discover(self.config.converter)
        return self._converter

    def _relative(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def prepare_output_root(self) -> Path:
        """Create the output root if needed. Raises OutputDirectoryError."""
        try:
            self.output_root.mkdir(exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(self.output_root, e) from e
        return self.output_root

    def load_ledger(self) -> PathLedger:
        return PathLedger.load(
            self.ledger_file,
            delimiter=self.config.ledger.delimiter,
            reporter=self.reporter,
        )

    # ------------------------------------------------------------------
    # Per-file
    # ------------------------------------------------------------------

    def process_file(self, path: Path, ledger: PathLedger) -> FileResult:
        """Evaluate one file, convert it if stale, and update *ledger*.

        The ledger entry is written only when the file was found fresh or
        converted successfully; failures leave any previous entry untouched
        so the file is retried on the next run.
        """
        rel = self._relative(path)

        if not path.exists():
            self.reporter.report(Level.ERROR, rel, "File does not exist")
            return FileResult(
                path=str(path), relative_path=rel, status="missing",
                message="File does not exist",
            )

        now = self._clock()
        try:
            stale = is_stale(path, ledger)
        except OSError as e:
            msg = f"Could not read modification time: {e}"
            self.reporter.report(Level.ERROR, rel, msg)
            return FileResult(path=str(path), relative_path=rel, status="error", message=msg)

        if not stale:
            self.reporter.report(Level.INFO, rel, "No changes since last compilation")
            ledger.record(path, now)
            return FileResult(path=str(path), relative_path=rel, status="unchanged")

        cfg = self.config.converter
        self.reporter.report(
            Level.INFO, rel, f"Compiling {cfg.source_format} to {cfg.target_format}"
        )
        destination = mirrored_output_path(
            path, self.root, self.output_root, self.config.output.extension
        )
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Could not create {self._relative(destination.parent)}: {e}"
            self.reporter.report(Level.ERROR, rel, msg)
            return FileResult(path=str(path), relative_path=rel, status="error", message=msg)

        try:
            self.ensure_converter().convert(path, destination)
        except ConversionTimeoutError as e:
            self.reporter.report(Level.ERROR, rel, e.reason)
            return FileResult(
                path=str(path), relative_path=rel, status="failed",
                message=e.reason, output_path=str(destination), timed_out=True,
            )
        except ConversionError as e:
            self.reporter.report(Level.ERROR, rel, e.reason)
            return FileResult(
                path=str(path), relative_path=rel, status="failed",
                message=e.reason, output_path=str(destination),
            )

        ledger.record(path, now)
        self.reporter.report(
            Level.INFO, rel, f"Successfully compiled to {self._relative(destination)}"
        )
        return FileResult(
            path=str(path), relative_path=rel, status="converted",
            output_path=str(destination),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _save(self, ledger: PathLedger, report: BuildReport) -> bool:
        try:
            ledger.save(self.ledger_file)
        except LedgerError as e:
            report.ledger_error = str(e)
            self.reporter.report(Level.ERROR, self.config.ledger.filename, str(e))
            return False
        report.ledger_error = None
        return True

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> BuildReport:
        """Build every stale source file under the root."""
        self.ensure_converter()
        self.prepare_output_root()

        ledger = self.load_ledger()
        files = scan_tree(self.root, self.config.source.extension, reporter=self.reporter)
        report = BuildReport(root=str(self.root))
        per_file = self.config.ledger.persist == "per-file"
        self._persist_failed = False

        for path in files:
            result = self.process_file(path, ledger)
            report.results.append(result)
            # One failed intermediate save is enough; the final save retries
            if per_file and result.recorded and not self._persist_failed:
                self._persist_failed = not self._save(ledger, report)

        if self.config.ledger.prune_missing:
            report.pruned = ledger.prune_missing()

        report.ledger_saved = self._save(ledger, report)
        logger.debug("Build finished: %s", report.counts())
        return report


def run_build(
    root: str | Path,
    config: TexweaveConfig | None = None,
    converter: Converter | None = None,
    reporter: Reporter | None = None,
) -> BuildReport:
    """Convenience wrapper around Builder(...).run()."""
    return Builder(root, config=config, converter=converter, reporter=reporter).run()
