"""Cargo workspace discovery and dependency ordering."""

from cargo_relay.workspace.discovery import discover_packages, expand_member
from cargo_relay.workspace.graph import DependencyGraph, topological_sort
from cargo_relay.workspace.package import MANIFEST_NAME, Package, read_manifest
from cargo_relay.workspace.workspace import Workspace

__all__ = [
    "MANIFEST_NAME",
    "DependencyGraph",
    "Package",
    "Workspace",
    "discover_packages",
    "expand_member",
    "read_manifest",
    "topological_sort",
]
