"""cargo-relay CLI application."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from cargo_relay.cli.log import configure_logging
from cargo_relay.commands import handle_list_command, handle_publish_command
from cargo_relay.errors import RelayError
from cargo_relay.workspace import MANIFEST_NAME, Workspace


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from cargo_relay import __version__

        print(f"cargo-relay {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="cargo-relay",
    help="Publish Cargo workspace crates in dependency order",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _app_callback(
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", "-V", help="Show version and exit", callback=version_callback),
    ] = False,
) -> None:
    """Publish Cargo workspace crates in dependency order."""
    pass


console = Console()
error_console = Console(stderr=True)


def get_workspace(manifest_path: Path | None = None) -> Workspace:
    """Load the workspace from the given manifest or ./Cargo.toml."""
    try:
        return Workspace.discover(manifest_path)
    except RelayError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e


ManifestOption = Annotated[
    Path,
    typer.Option("--manifest-path", "-m", help="Path to the root Cargo.toml"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging and cargo output"),
]


@app.command()
def publish(
    manifest_path: ManifestOption = Path(MANIFEST_NAME),
    max_retries: Annotated[
        int | None,
        typer.Option("--max-retries", "-r", min=0, help="Retries per package [default: 3]"),
    ] = None,
    registry: Annotated[
        str | None,
        typer.Option("--registry", help="Registry to publish to"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the publish order without publishing"),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Publish all workspace packages in dependency order."""
    configure_logging(verbose, error_console)
    workspace = get_workspace(manifest_path)

    asyncio.run(
        handle_publish_command(
            workspace,
            console=console,
            error_console=error_console,
            max_retries=max_retries,
            registry=registry,
            dry_run=dry_run,
            verbose=verbose,
        )
    )


@app.command("list")
def list_cmd(
    manifest_path: ManifestOption = Path(MANIFEST_NAME),
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    graph: Annotated[
        bool,
        typer.Option("--graph", help="Show local dependencies"),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """List workspace packages in publish order."""
    configure_logging(verbose, error_console)
    workspace = get_workspace(manifest_path)
    handle_list_command(
        workspace,
        console=console,
        error_console=error_console,
        json_output=json_output,
        graph=graph,
    )


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
