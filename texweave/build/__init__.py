"""Incremental build orchestration."""

from texweave.build.models import BuildReport, FileResult, FileStatus
from texweave.build.orchestrator import Builder, run_build

__all__ = [
    "BuildReport",
    "Builder",
    "FileResult",
    "FileStatus",
    "run_build",
]
