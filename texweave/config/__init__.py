from .loader import DEFAULT_CONFIG_TEMPLATE, load_config
from .models import (
    ConverterConfig,
    LedgerConfig,
    OutputConfig,
    SourceConfig,
    TexweaveConfig,
    WatchConfig,
)

__all__ = [
    "ConverterConfig",
    "DEFAULT_CONFIG_TEMPLATE",
    "LedgerConfig",
    "OutputConfig",
    "SourceConfig",
    "TexweaveConfig",
    "WatchConfig",
    "load_config",
]
