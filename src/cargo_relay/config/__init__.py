"""cargo-relay configuration."""

from cargo_relay.config.loader import CONFIG_FILENAME, find_config, load_config, load_config_or_default
from cargo_relay.config.schema import PublishConfig, RelayConfig

__all__ = [
    "CONFIG_FILENAME",
    "PublishConfig",
    "RelayConfig",
    "find_config",
    "load_config",
    "load_config_or_default",
]
