"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import TexweaveConfig

CONFIG_FILENAME = "texweave.yaml"


def load_config(cli_path: str | None = None, root: str | Path | None = None) -> TexweaveConfig:
    """Load config with resolution order: CLI > source root > cwd > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path(root) / CONFIG_FILENAME if root is not None else None,
        Path(".") / CONFIG_FILENAME,
        Path.home() / ".texweave" / "config.yaml",
    ]

    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                if not isinstance(raw, dict):
                    raise ValueError(f"Invalid config in {path}: expected a mapping at top level")
                raw = _expand_env_vars(raw)
                return TexweaveConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return TexweaveConfig()


_ENV_REF = re.compile(r"\$\{(\w+)\}")


def _expand_env_vars(value: object) -> object:
    """Replace ${NAME} in every string of a parsed YAML tree; unset names become ''."""
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value
    return _ENV_REF.sub(lambda match: os.getenv(match.group(1), ""), value)


# Reference YAML with every setting at its default
DEFAULT_CONFIG_TEMPLATE = """\
# texweave.yaml

# Source documents
source:
  extension: ".tex"

# Rendered output, mirrored under <root>/<directory>
output:
  directory: "html"
  extension: ".html"

# External converter
converter:
  executable: "pandoc"
  source_format: "latex"
  target_format: "html"
  extra_args: ["--katex"]
  timeout: 300                 # seconds; null waits forever

# Modification-time ledger
ledger:
  filename: ".texweave_ledger"
  delimiter: ";"
  persist: "per-file"          # per-file | end
  prune_missing: true

# Watch mode
watch:
  debounce_seconds: 1.0

# Logging
log_level: "info"              # debug | info | warn | error
"""
