"""pandoc invocation and output path mirroring."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Protocol

from texweave.config.models import ConverterConfig
from texweave.converter.models import ConversionResult
from texweave.errors import ConversionError, ConversionTimeoutError, ConverterNotFoundError

logger = logging.getLogger(__name__)

_STDERR_TAIL = 500


class Converter(Protocol):
    """Anything that can turn one source file into one output file."""

    def convert(self, source: Path, destination: Path) -> ConversionResult:
        """Convert *source* into *destination*. Raises ConversionError on failure."""
        ...


def find_converter(executable: str) -> str:
    """Resolve *executable* on PATH, raising ConverterNotFoundError if absent."""
    found = shutil.which(executable)
    if found is None:
        raise ConverterNotFoundError(executable)
    return found


def mirrored_output_path(
    source: Path,
    root: Path,
    output_root: Path,
    target_extension: str,
) -> Path:
    """Map ``root/a/b.tex`` to ``output_root/a/b<target_extension>``.

    Raises ValueError if *source* is not under *root*.
    """
    relative = Path(source).relative_to(root)
    return Path(output_root) / relative.with_suffix(target_extension)


class PandocConverter:
    """Runs pandoc synchronously for one file at a time."""

    def __init__(self, config: ConverterConfig, executable: str | None = None) -> None:
        self._config = config
        self.executable = executable or config.executable

    @classmethod
    def discover(cls, config: ConverterConfig) -> PandocConverter:
        """Build a converter whose executable was found on PATH."""
        return cls(config, executable=find_converter(config.executable))

    def build_command(self, source: Path, destination: Path) -> list[str]:
        return [
            self.executable,
            str(source),
            "-f",
            self._config.source_format,
            "-t",
            self._config.target_format,
            "-o",
            str(destination),
            *self._config.extra_args,
        ]

    def convert(self, source: Path, destination: Path) -> ConversionResult:
        """Run the converter and wait for it, bounded by the configured timeout."""
        cmd = self.build_command(source, destination)
        logger.debug("Running %s", " ".join(cmd))
        started = time.monotonic()
        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self._config.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ConversionTimeoutError(source, self._config.timeout or 0.0, cause=e) from e
        except OSError as e:
            raise ConversionError(source, f"could not start {self.executable}: {e}", cause=e) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()[-_STDERR_TAIL:]
            reason = f"{self.executable} exited {result.returncode}"
            if stderr:
                reason = f"{reason}: {stderr}"
            raise ConversionError(source, reason, returncode=result.returncode)

        if result.stderr:
            logger.debug("%s stderr for %s: %s", self.executable, source, result.stderr.strip())

        return ConversionResult(
            source_path=str(source),
            output_path=str(destination),
            command=cmd,
            duration_seconds=time.monotonic() - started,
        )
