"""cargo-relay exception hierarchy."""

from __future__ import annotations

from pathlib import Path


class RelayError(Exception):
    """Base class for all cargo-relay errors.

    Attributes:
        message: Human readable description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(RelayError):
    """Invalid or unreadable cargo-relay.yaml."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class WorkspaceNotFoundError(RelayError):
    """The root manifest does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No Cargo.toml found at {path}")


class ManifestError(RelayError):
    """A Cargo.toml could not be turned into a package record.

    Attributes:
        path: Manifest that failed.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class ManifestReadError(ManifestError):
    """The manifest file could not be read."""

    def __init__(self, path: Path, reason: str | None = None) -> None:
        self.reason = reason
        message = "failed to read manifest"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(path, message)


class ManifestParseError(ManifestError):
    """The manifest is not valid TOML or lacks required fields."""

    def __init__(self, path: Path, reason: str) -> None:
        self.reason = reason
        super().__init__(path, f"failed to parse manifest: {reason}")


class DuplicatePackageError(RelayError):
    """Two manifests declare the same package name."""

    def __init__(self, name: str, paths: list[Path]) -> None:
        self.name = name
        self.paths = paths
        locations = ", ".join(str(p) for p in paths)
        super().__init__(f"Package '{name}' is declared more than once: {locations}")


class PackageNotFoundError(RelayError):
    """A package name is not part of the workspace."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Package '{name}' not found in workspace")


class CyclicDependencyError(RelayError):
    """The local dependency graph cannot be ordered.

    Attributes:
        packages: Packages that were left unordered. They include every
            package on a cycle but may also include packages downstream of one.
    """

    def __init__(self, packages: list[str]) -> None:
        self.packages = packages
        message = "Circular dependency detected"
        if packages:
            message = f"{message} among: {', '.join(packages)}"
        super().__init__(message)


class PublishError(RelayError):
    """A single publish attempt failed.

    Raised inside the retry loop and recorded on the publish result; it
    never escapes the executor.
    """

    def __init__(self, package_name: str, diagnostic: str) -> None:
        self.package_name = package_name
        self.diagnostic = diagnostic
        super().__init__(f"Failed to publish {package_name}: {diagnostic}")
