"""Exception hierarchy for texweave."""

from __future__ import annotations

from pathlib import Path


class TexweaveError(Exception):
    """Base class for all texweave errors."""


class ConverterNotFoundError(TexweaveError):
    """The external converter is not on the search path."""

    def __init__(self, executable: str) -> None:
        self.executable = executable
        super().__init__(f"Could not find a suitable {executable} installation on PATH")


class OutputDirectoryError(TexweaveError):
    """The output root could not be created."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        super().__init__(f"Error while creating output directory {path}: {cause}")
        self.__cause__ = cause


class LedgerError(TexweaveError):
    """The ledger file could not be written."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        super().__init__(f"Failed to save ledger {path}: {cause}")
        self.__cause__ = cause


class ConversionError(TexweaveError):
    """A single conversion failed: non-zero exit, spawn failure, or timeout."""

    def __init__(
        self,
        source: Path,
        reason: str,
        cause: Exception | None = None,
        returncode: int | None = None,
    ) -> None:
        self.source = source
        self.reason = reason
        self.returncode = returncode
        super().__init__(f"{source}: {reason}")
        if cause is not None:
            self.__cause__ = cause


class ConversionTimeoutError(ConversionError):
    """The converter did not finish within the configured timeout."""

    def __init__(self, source: Path, timeout: float, cause: Exception | None = None) -> None:
        self.timeout = timeout
        super().__init__(source, f"converter timed out after {timeout:g}s", cause=cause)
