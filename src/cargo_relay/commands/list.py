"""List command implementation."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cargo_relay.commands.base import CommandContext, SyncCommand
from cargo_relay.errors import RelayError

if TYPE_CHECKING:
    from cargo_relay.workspace import Package
    from cargo_relay.workspace.workspace import Workspace


class ListFormat(Enum):
    """Output format for list command."""

    TABLE = "table"
    JSON = "json"
    GRAPH = "graph"


@dataclass
class PackageInfo:
    """Information about a package for display."""

    name: str
    version: str
    path: str
    dependencies: list[str]
    dependents: list[str]


@dataclass
class ListResult:
    """Result of list command."""

    packages: list[PackageInfo]


@dataclass
class ListOptions:
    """Options for list command."""

    publish_order: bool = True


class ListCommand(SyncCommand[ListResult]):
    """List packages in the workspace."""

    def __init__(self, context: CommandContext, options: ListOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or ListOptions()

    def get_packages(self) -> list[Package]:
        """Packages in publish order, or sorted by name.

        Raises:
            CyclicDependencyError: If publish order was requested and the graph has a cycle.
        """
        if self.options.publish_order:
            return self.workspace.publish_order()
        return sorted(self.workspace.packages.values(), key=lambda p: p.name)

    def _relative_path(self, pkg: Package) -> str:
        try:
            return str(pkg.path.relative_to(self.workspace.root))
        except ValueError:
            return str(pkg.path)

    def execute(self) -> ListResult:
        """Execute the list command."""
        graph = self.workspace.graph
        infos = [
            PackageInfo(
                name=pkg.name,
                version=pkg.version,
                path=self._relative_path(pkg),
                dependencies=[d.name for d in graph.dependencies_of(pkg.name)],
                dependents=[d.name for d in graph.dependents_of(pkg.name)],
            )
            for pkg in self.get_packages()
        ]
        return ListResult(packages=infos)


def list_packages(
    workspace: Workspace,
    *,
    publish_order: bool = True,
) -> ListResult:
    """Convenience function to list packages.

    Args:
        workspace: Workspace to list.
        publish_order: Order rows by publish order instead of by name.

    Returns:
        List result with package info.
    """
    context = CommandContext(workspace=workspace)
    options = ListOptions(publish_order=publish_order)
    return ListCommand(context, options).execute()


def handle_list_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    json_output: bool = False,
    graph: bool = False,
) -> None:
    fmt = ListFormat.TABLE
    if json_output:
        fmt = ListFormat.JSON
    elif graph:
        fmt = ListFormat.GRAPH

    try:
        result = list_packages(workspace)
    except RelayError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    if fmt is ListFormat.JSON:
        console.print_json(json.dumps([asdict(p) for p in result.packages]))
    elif fmt is ListFormat.GRAPH:
        for pkg in result.packages:
            if not pkg.dependencies:
                console.print(f"[bold]{escape(pkg.name)}[/bold] v{pkg.version}")
            else:
                deps_str = ", ".join(pkg.dependencies)
                console.print(f"[bold]{escape(pkg.name)}[/bold] v{pkg.version} <- {deps_str}")
    else:
        table = Table(title="Packages (publish order)")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Version")
        table.add_column("Path")
        table.add_column("Local dependencies")

        for i, pkg in enumerate(result.packages, start=1):
            deps = ", ".join(pkg.dependencies) if pkg.dependencies else "-"
            table.add_row(str(i), pkg.name, pkg.version, pkg.path, deps)

        console.print(table)
