"""Workspace facade."""

from __future__ import annotations

from functools import cached_property
from pathlib import Path

from cargo_relay.config import RelayConfig, load_config_or_default
from cargo_relay.errors import PackageNotFoundError, WorkspaceNotFoundError
from cargo_relay.workspace.discovery import discover_packages
from cargo_relay.workspace.graph import DependencyGraph
from cargo_relay.workspace.package import MANIFEST_NAME, Package, package_dir


class Workspace:
    """A discovered Cargo workspace.

    Attributes:
        manifest_path: Root Cargo.toml.
        root: Directory of the root manifest.
        config: cargo-relay settings for this workspace.
        packages: Packages by name, in discovery order.
    """

    def __init__(
        self,
        manifest_path: Path,
        packages: list[Package],
        config: RelayConfig | None = None,
    ) -> None:
        self.manifest_path = manifest_path
        self.root = package_dir(manifest_path)
        self.config = config or RelayConfig()
        self.packages: dict[str, Package] = {pkg.name: pkg for pkg in packages}

    @classmethod
    def discover(cls, manifest_path: Path | None = None) -> Workspace:
        """Load the workspace rooted at `manifest_path`.

        Args:
            manifest_path: Root Cargo.toml, or a directory containing one.
                Defaults to Cargo.toml in the current directory.

        Raises:
            WorkspaceNotFoundError: If the manifest does not exist.
            ManifestError: If a manifest cannot be read or parsed.
            ConfigurationError: If cargo-relay.yaml is invalid.
        """
        if manifest_path is None:
            manifest_path = Path(MANIFEST_NAME)
        elif manifest_path.is_dir():
            manifest_path = manifest_path / MANIFEST_NAME

        if not manifest_path.is_file():
            raise WorkspaceNotFoundError(manifest_path)

        packages = discover_packages(manifest_path)
        config = load_config_or_default(package_dir(manifest_path))
        return cls(manifest_path, packages, config)

    @cached_property
    def graph(self) -> DependencyGraph:
        """Local dependency graph, built on first access."""
        return DependencyGraph(list(self.packages.values()))

    def get_package(self, name: str) -> Package:
        """Look up a package by name.

        Raises:
            PackageNotFoundError: If there is no such package.
        """
        try:
            return self.packages[name]
        except KeyError:
            raise PackageNotFoundError(name) from None

    def publish_order(self) -> list[Package]:
        """Packages in dependency order.

        Raises:
            CyclicDependencyError: If local dependencies form a cycle.
        """
        return self.graph.topological_order()

    def __len__(self) -> int:
        return len(self.packages)
