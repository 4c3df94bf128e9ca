"""Configuration file loading."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from cargo_relay.config.schema import RelayConfig
from cargo_relay.errors import ConfigurationError

CONFIG_FILENAME = "cargo-relay.yaml"


def load_config(path: Path) -> RelayConfig:
    """Load and validate a configuration file.

    Args:
        path: Path to cargo-relay.yaml.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If the file cannot be read, is not YAML, or fails validation.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"cannot read config: {e}", path=path) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML: {e}", path=path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("config must be a mapping", path=path)

    try:
        return RelayConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(str(e), path=path) from e


def find_config(root: Path) -> Path | None:
    """Return the config file in `root` if there is one."""
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config_or_default(root: Path) -> RelayConfig:
    """Load the config in `root`, or defaults when there is none."""
    path = find_config(root)
    if path is None:
        return RelayConfig()
    return load_config(path)
