"""texweave - incremental LaTeX to HTML builds driven by a modification-time ledger."""

from texweave.build import BuildReport, Builder, FileResult, run_build
from texweave.config import TexweaveConfig, load_config
from texweave.converter import PandocConverter, mirrored_output_path
from texweave.freshness import is_stale
from texweave.ledger import PathLedger, canonical_path
from texweave.scanner import scan_tree

__version__ = "0.1.0"

__all__ = [
    "BuildReport",
    "Builder",
    "FileResult",
    "PandocConverter",
    "PathLedger",
    "TexweaveConfig",
    "canonical_path",
    "is_stale",
    "load_config",
    "mirrored_output_path",
    "run_build",
    "scan_tree",
]
