from typing import Literal

from pydantic import BaseModel, Field, field_validator


def _check_extension(value: str) -> str:
    if not value.startswith(".") or len(value) < 2:
        raise ValueError(f"extension must start with '.', got {value!r}")
    return value


class SourceConfig(BaseModel):
    extension: str = ".tex"

    @field_validator("extension")
    @classmethod
    def check_extension(cls, value: str) -> str:
        return _check_extension(value)


class OutputConfig(BaseModel):
    directory: str = Field(default="html", min_length=1)
    extension: str = ".html"

    @field_validator("extension")
    @classmethod
    def check_extension(cls, value: str) -> str:
        return _check_extension(value)


class ConverterConfig(BaseModel):
    executable: str = "pandoc"
    source_format: str = "latex"
    target_format: str = "html"
    extra_args: list[str] = Field(default_factory=lambda: ["--katex"])
    timeout: float | None = Field(default=300.0, gt=0)


class LedgerConfig(BaseModel):
    filename: str = ".texweave_ledger"
    delimiter: str = Field(default=";", min_length=1)
    persist: Literal["per-file", "end"] = "per-file"
    prune_missing: bool = True


class WatchConfig(BaseModel):
    debounce_seconds: float = Field(default=1.0, ge=0)


class TexweaveConfig(BaseModel):
    source: SourceConfig = Field(default_factory=SourceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    converter: ConverterConfig = Field(default_factory=ConverterConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
