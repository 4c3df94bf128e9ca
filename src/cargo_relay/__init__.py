"""cargo-relay - publish Cargo workspaces in dependency order.

Provides:
- Workspace discovery from Cargo.toml member patterns
- Local dependency graph and topological publish order
- Sequential `cargo publish` with retries and exponential backoff
"""

from cargo_relay.config import RelayConfig, load_config
from cargo_relay.errors import (
    ConfigurationError,
    CyclicDependencyError,
    DuplicatePackageError,
    ManifestError,
    ManifestParseError,
    ManifestReadError,
    PackageNotFoundError,
    PublishError,
    RelayError,
    WorkspaceNotFoundError,
)
from cargo_relay.execution import PublishExecutor, PublishReport, PublishResult
from cargo_relay.workspace import DependencyGraph, Package, Workspace

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "Package",
    "DependencyGraph",
    "RelayConfig",
    "load_config",
    # Execution
    "PublishExecutor",
    "PublishResult",
    "PublishReport",
    # Errors
    "RelayError",
    "ConfigurationError",
    "WorkspaceNotFoundError",
    "ManifestError",
    "ManifestReadError",
    "ManifestParseError",
    "DuplicatePackageError",
    "PackageNotFoundError",
    "CyclicDependencyError",
    "PublishError",
]
