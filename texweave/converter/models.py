"""Pydantic models for the conversion subsystem."""

from __future__ import annotations

from pydantic import BaseModel


class ConversionResult(BaseModel):
    """Result of a successful converter run."""

    source_path: str
    output_path: str
    command: list[str]
    duration_seconds: float = 0.0
