"""Document conversion subsystem: wraps the external pandoc process."""

from texweave.converter.converter import (
    Converter,
    PandocConverter,
    find_converter,
    mirrored_output_path,
)
from texweave.converter.models import ConversionResult

__all__ = [
    "ConversionResult",
    "Converter",
    "PandocConverter",
    "find_converter",
    "mirrored_output_path",
]
