"""Workspace member discovery."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from cargo_relay.errors import DuplicatePackageError, ManifestReadError
from cargo_relay.workspace.package import (
    MANIFEST_NAME,
    Package,
    load_manifest,
    package_dir,
    package_from_document,
    read_manifest,
)

logger = logging.getLogger(__name__)

WILDCARD = "*"


def expand_member(base: Path, pattern: str) -> Iterator[Path]:
    """Resolve one ``workspace.members`` entry to manifest paths.

    A pattern with a wildcard yields every immediate subdirectory of the
    pattern's parent directory that holds a Cargo.toml. A literal pattern
    yields its own manifest. Directories without a manifest are skipped.

    Args:
        base: Directory of the root manifest.
        pattern: Member path pattern, relative to `base`.

    Yields:
        Manifest paths in directory order.

    Raises:
        ManifestReadError: If a wildcard parent directory cannot be listed.
    """
    if WILDCARD in pattern:
        parent = base / Path(pattern).parent
        if not parent.is_dir():
            logger.debug("Member pattern %s: %s is not a directory", pattern, parent)
            return
        try:
            entries = sorted(parent.iterdir())
        except OSError as e:
            raise ManifestReadError(parent, str(e)) from e
        for entry in entries:
            manifest = entry / MANIFEST_NAME
            if entry.is_dir() and manifest.is_file():
                yield manifest
            else:
                logger.debug("Member pattern %s: skipping %s", pattern, entry)
    else:
        manifest = base / pattern / MANIFEST_NAME
        if manifest.is_file():
            yield manifest
        else:
            logger.debug("Member %s has no %s, skipping", pattern, MANIFEST_NAME)


def _is_excluded(manifest: Path, base: Path, exclude: list[str]) -> bool:
    try:
        relative = manifest.parent.relative_to(base).as_posix()
    except ValueError:
        return False
    return any(fnmatch.fnmatch(relative, pattern) for pattern in exclude)


def _string_list(table: Mapping[str, Any], key: str) -> list[str] | None:
    value = table.get(key)
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def check_unique_names(packages: list[Package]) -> None:
    """Reject workspaces where two manifests share a package name.

    Raises:
        DuplicatePackageError: On the first repeated name.
    """
    seen: dict[str, Package] = {}
    for pkg in packages:
        if pkg.name in seen:
            raise DuplicatePackageError(pkg.name, [seen[pkg.name].path, pkg.path])
        seen[pkg.name] = pkg


def discover_packages(root_manifest: Path) -> list[Package]:
    """Find every package of a Cargo workspace.

    With a ``[workspace]`` member list, members are resolved relative to the
    root manifest's directory, in member-list order. A root that also has a
    ``[package]`` table comes first. Without a member list the root manifest
    is the only package.

    Args:
        root_manifest: Path to the root Cargo.toml.

    Returns:
        Packages in discovery order. May be empty.

    Raises:
        ManifestReadError: If a manifest cannot be read or a member
            directory cannot be listed.
        ManifestParseError: If a manifest is malformed.
        DuplicatePackageError: If two manifests declare the same name.
    """
    doc = load_manifest(root_manifest)
    workspace = doc.get("workspace")
    if not isinstance(workspace, Mapping):
        workspace = {}
    inherited = workspace.get("package")
    if not isinstance(inherited, Mapping):
        inherited = None

    members = _string_list(workspace, "members")
    if members is None:
        logger.debug("No workspace members in %s, single package mode", root_manifest)
        return [package_from_document(doc, root_manifest, inherited)]

    base = package_dir(root_manifest)
    exclude = _string_list(workspace, "exclude") or []

    packages: list[Package] = []
    if "package" in doc:
        packages.append(package_from_document(doc, root_manifest, inherited))

    seen: set[Path] = {root_manifest.resolve()}
    for pattern in members:
        for manifest in expand_member(base, pattern):
            key = manifest.resolve()
            if key in seen:
                continue
            seen.add(key)
            if _is_excluded(manifest, base, exclude):
                logger.debug("Excluded by workspace.exclude: %s", manifest)
                continue
            packages.append(read_manifest(manifest, inherited))

    check_unique_names(packages)
    logger.debug("Discovered %d packages from %s", len(packages), root_manifest)
    return packages
