"""Shared test fixtures for texweave."""

from __future__ import annotations

from pathlib import Path

import pytest

from texweave.config.models import TexweaveConfig
from texweave.converter.models import ConversionResult
from texweave.errors import ConversionError, ConversionTimeoutError
from texweave.reporting import Level


class RecordingReporter:
    """Collects reports instead of printing them."""

    def __init__(self) -> None:
        self.records: list[tuple[Level, str, str]] = []

    def report(self, level: Level, context: str, message: str) -> None:
        self.records.append((level, context, message))

    def at(self, level: Level) -> list[tuple[str, str]]:
        return [(c, m) for lvl, c, m in self.records if lvl is level]

    def messages_for(self, context: str) -> list[str]:
        return [m for _, c, m in self.records if c == context]


class FakeConverter:
    """Stands in for pandoc: writes a stub output file and records every call.

    Source file names listed in *fail* or *timeout* raise the matching error.
    """

    def __init__(self, fail: set[str] | None = None, timeout: set[str] | None = None) -> None:
        self.calls: list[tuple[Path, Path]] = []
        self.fail = set(fail or ())
        self.timeout = set(timeout or ())

    def convert(self, source: Path, destination: Path) -> ConversionResult:
        self.calls.append((Path(source), Path(destination)))
        name = Path(source).name
        if name in self.timeout:
            raise ConversionTimeoutError(Path(source), 5.0)
        if name in self.fail:
            raise ConversionError(Path(source), "pandoc exited 64", returncode=64)
        Path(destination).write_text(f"<p>{name}</p>")
        return ConversionResult(
            source_path=str(source), output_path=str(destination), command=["fake-pandoc"]
        )


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def fake_converter():
    return FakeConverter()


@pytest.fixture
def sample_config():
    return TexweaveConfig()


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """An empty source root directory."""
    root = tmp_path / "notes"
    root.mkdir()
    return root
