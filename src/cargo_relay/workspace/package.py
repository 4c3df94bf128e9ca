"""Package model and Cargo.toml manifest reading."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cargo_relay.errors import ManifestParseError, ManifestReadError

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

MANIFEST_NAME = "Cargo.toml"

DEPENDENCY_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


@dataclass(frozen=True)
class Package:
    """A crate discovered in the workspace.

    Attributes:
        name: Crate name, unique within the workspace.
        version: Declared version. Only used for display.
        path: Directory containing the manifest; publish runs here.
        local_dependencies: Dependencies resolved inside the repository.
        manifest_path: The Cargo.toml this record was read from.
    """

    name: str
    version: str
    path: Path
    local_dependencies: frozenset[str] = field(default_factory=frozenset)
    manifest_path: Path | None = None

    def depends_on(self, name: str) -> bool:
        """Check whether this package declares a local dependency on `name`."""
        return name in self.local_dependencies


def load_manifest(path: Path) -> dict[str, Any]:
    """Read and parse a TOML manifest.

    Args:
        path: Path to Cargo.toml.

    Returns:
        Parsed document.

    Raises:
        ManifestReadError: If the file cannot be read.
        ManifestParseError: If the content is not valid TOML.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(path, str(e)) from e

    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(path, str(e)) from e


def is_local_dependency(spec: object) -> bool:
    """Classify a dependency entry by its shape.

    A bare version string is a registry dependency. A table is local when
    it has a ``path`` key or ``workspace = true``.
    """
    if isinstance(spec, str):
        return False
    if isinstance(spec, Mapping):
        return "path" in spec or spec.get("workspace") is True
    return False


def extract_local_dependencies(doc: Mapping[str, Any]) -> frozenset[str]:
    """Collect local dependency names across all dependency sections."""
    names: set[str] = set()
    for section in DEPENDENCY_SECTIONS:
        table = doc.get(section)
        if not isinstance(table, Mapping):
            continue
        names.update(name for name, spec in table.items() if is_local_dependency(spec))
    return frozenset(names)


def package_dir(manifest_path: Path) -> Path:
    """Directory of a manifest, "." when the path has no parent component."""
    parent = manifest_path.parent
    return parent if str(parent) else Path(".")


def package_from_document(
    doc: Mapping[str, Any],
    manifest_path: Path,
    inherited: Mapping[str, Any] | None = None,
) -> Package:
    """Build a package record from an already parsed manifest.

    Args:
        doc: Parsed manifest.
        manifest_path: Where the manifest lives.
        inherited: The root's ``[workspace.package]`` table, used to resolve
            ``version.workspace = true``.

    Raises:
        ManifestParseError: If ``[package]`` or its string fields are missing.
    """
    table = doc.get("package")
    if not isinstance(table, Mapping):
        raise ManifestParseError(manifest_path, "missing [package] table")

    name = table.get("name")
    if not isinstance(name, str) or not name:
        raise ManifestParseError(manifest_path, "missing string field package.name")

    version = table.get("version")
    if isinstance(version, Mapping) and version.get("workspace") is True and inherited:
        version = inherited.get("version")
    if not isinstance(version, str):
        raise ManifestParseError(manifest_path, "missing string field package.version")

    return Package(
        name=name,
        version=version,
        path=package_dir(manifest_path),
        local_dependencies=extract_local_dependencies(doc),
        manifest_path=manifest_path,
    )


def read_manifest(manifest_path: Path, inherited: Mapping[str, Any] | None = None) -> Package:
    """Load a package from its Cargo.toml.

    Args:
        manifest_path: Path to the manifest file.
        inherited: Workspace-level package fields, see `package_from_document`.

    Returns:
        The package record.

    Raises:
        ManifestReadError: If the file cannot be read.
        ManifestParseError: If it is malformed or lacks name/version.
    """
    return package_from_document(load_manifest(manifest_path), manifest_path, inherited)
