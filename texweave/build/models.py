"""Per-file outcomes and the aggregated build report."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

FileStatus = Literal["converted", "unchanged", "failed", "missing", "error"]


class FileResult(BaseModel):
    """Outcome of evaluating (and possibly converting) one source file."""

    path: str
    relative_path: str
    status: FileStatus
    message: str = ""
    output_path: str | None = None
    timed_out: bool = False

    @property
    def recorded(self) -> bool:
        """Whether this outcome wrote a ledger entry."""
        return self.status in ("converted", "unchanged")


class BuildReport(BaseModel):
    """Outcome of a full build run."""

    root: str
    results: list[FileResult] = Field(default_factory=list)
    pruned: list[str] = Field(default_factory=list)
    ledger_saved: bool = False
    ledger_error: str | None = None

    def _with_status(self, status: FileStatus) -> list[str]:
        return [r.relative_path for r in self.results if r.status == status]

    @property
    def converted(self) -> list[str]:
        return self._with_status("converted")

    @property
    def unchanged(self) -> list[str]:
        return self._with_status("unchanged")

    @property
    def failed(self) -> list[str]:
        return self._with_status("failed")

    @property
    def missing(self) -> list[str]:
        return self._with_status("missing")

    @property
    def errors(self) -> list[str]:
        return self._with_status("error")

    @property
    def timed_out(self) -> list[str]:
        return [r.relative_path for r in self.results if r.timed_out]

    def counts(self) -> dict[str, int]:
        counts = {s: 0 for s in ("converted", "unchanged", "failed", "missing", "error")}
        for r in self.results:
            counts[r.status] += 1
        return counts
