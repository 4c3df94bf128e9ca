"""Shared test fixtures for cargo-relay tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_crate() -> Callable[..., Path]:
    """Factory writing a crate manifest.

    Usage: ``write_crate(dir, "name", deps={"other": '{ path = "../other" }'})``.
    """

    def _write(
        directory: Path,
        name: str,
        version: str = "0.1.0",
        *,
        deps: dict[str, str] | None = None,
        dev_deps: dict[str, str] | None = None,
        build_deps: dict[str, str] | None = None,
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        lines = ["[package]", f'name = "{name}"', f'version = "{version}"', ""]
        for section, entries in (
            ("dependencies", deps),
            ("dev-dependencies", dev_deps),
            ("build-dependencies", build_deps),
        ):
            if entries:
                lines.append(f"[{section}]")
                lines.extend(f"{dep} = {spec}" for dep, spec in entries.items())
                lines.append("")
        manifest = directory / "Cargo.toml"
        manifest.write_text("\n".join(lines))
        return manifest

    return _write


@pytest.fixture
def workspace_dir(temp_dir: Path, write_crate: Callable[..., Path]) -> Path:
    """Create a sample Cargo workspace.

    core <- utils <- app, plus a crates/ directory without a manifest.
    """
    (temp_dir / "Cargo.toml").write_text("""\
[workspace]
members = ["crates/*"]
resolver = "2"
""")

    crates = temp_dir / "crates"
    write_crate(crates / "core", "demo-core", "1.0.0", deps={"serde": '"1.0"'})
    write_crate(
        crates / "utils",
        "demo-utils",
        "1.1.0",
        deps={"demo-core": '{ path = "../core", version = "1.0.0" }'},
    )
    write_crate(
        crates / "app",
        "demo-app",
        "0.3.0",
        deps={"demo-utils": "{ workspace = true }"},
        dev_deps={"demo-core": '{ path = "../core" }', "tokio": '{ version = "1" }'},
    )
    (crates / "docs").mkdir()
    (crates / "docs" / "README.md").write_text("not a crate\n")

    return temp_dir


@pytest.fixture
def single_crate_dir(temp_dir: Path, write_crate: Callable[..., Path]) -> Path:
    """A directory holding one standalone crate."""
    write_crate(temp_dir, "solo", "2.0.0", deps={"anyhow": '"1"'})
    return temp_dir
