"""Publish command implementation."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cargo_relay.commands.base import Command, CommandContext
from cargo_relay.errors import RelayError
from cargo_relay.execution import CargoPublisher, PublishExecutor, PublishFn, PublishReport

if TYPE_CHECKING:
    from cargo_relay.execution import PublishResult
    from cargo_relay.workspace import Package
    from cargo_relay.workspace.workspace import Workspace


@dataclass
class PublishOptions:
    """Options for publish command.

    Unset values fall back to the workspace configuration.
    """

    max_retries: int | None = None
    backoff_base: float | None = None
    registry: str | None = None
    dry_run: bool = False


@dataclass
class PublishCommandResult:
    """Result of publish command."""

    order: list[Package]
    report: PublishReport = field(default_factory=PublishReport)
    skipped: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return self.report.all_success


class PublishCommand(Command[PublishCommandResult]):
    """Publish workspace packages in dependency order."""

    def __init__(
        self,
        context: CommandContext,
        options: PublishOptions | None = None,
        *,
        publisher: PublishFn | None = None,
        on_start: Callable[[Package], None] | None = None,
        on_result: Callable[[PublishResult], None] | None = None,
        output_handler: Callable[[str, str, bool], None] | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options or PublishOptions()
        self.publisher = publisher
        self.on_start = on_start
        self.on_result = on_result
        self.output_handler = output_handler

    @property
    def is_dry_run(self) -> bool:
        return self.options.dry_run or self.context.dry_run

    @property
    def max_retries(self) -> int:
        if self.options.max_retries is not None:
            return self.options.max_retries
        return self.workspace.config.publish.max_retries

    @property
    def backoff_base(self) -> float:
        if self.options.backoff_base is not None:
            return self.options.backoff_base
        return self.workspace.config.publish.backoff_base

    def validate(self) -> list[str]:
        errors = super().validate()
        if self.max_retries < 0:
            errors.append(f"max retries must be >= 0, got {self.max_retries}")
        if self.backoff_base <= 0:
            errors.append(f"backoff base must be > 0, got {self.backoff_base}")
        return errors

    def _build_publisher(self) -> PublishFn:
        if self.publisher is not None:
            return self.publisher
        settings = self.workspace.config.publish
        env = dict(self.context.env)
        env.update(settings.env)
        return CargoPublisher(
            settings.args,
            registry=self.options.registry or settings.registry,
            env=env,
            timeout=settings.timeout,
            output_handler=self.output_handler if self.context.verbose else None,
        )

    async def execute(self) -> PublishCommandResult:
        """Execute the publish command.

        Raises:
            CyclicDependencyError: Before any publish attempt if the order
                cannot be computed.
        """
        errors = self.validate()
        if errors:
            raise ValueError("; ".join(errors))

        order = self.workspace.publish_order()
        config = self.workspace.config
        to_publish = [pkg for pkg in order if not config.is_excluded(pkg.name)]
        skipped = [pkg.name for pkg in order if config.is_excluded(pkg.name)]

        if self.is_dry_run or not to_publish:
            return PublishCommandResult(order=to_publish, skipped=skipped, dry_run=self.is_dry_run)

        executor = PublishExecutor(
            self._build_publisher(),
            max_retries=self.max_retries,
            backoff_base=self.backoff_base,
        )
        report = await executor.execute(to_publish, on_start=self.on_start, on_result=self.on_result)
        return PublishCommandResult(order=to_publish, report=report, skipped=skipped)


async def publish(
    workspace: Workspace,
    *,
    max_retries: int | None = None,
    backoff_base: float | None = None,
    registry: str | None = None,
    dry_run: bool = False,
    publisher: PublishFn | None = None,
    on_start: Callable[[Package], None] | None = None,
    on_result: Callable[[PublishResult], None] | None = None,
    verbose: bool = False,
    output_handler: Callable[[str, str, bool], None] | None = None,
) -> PublishCommandResult:
    """Convenience function to publish a workspace.

    With `verbose`, each line cargo prints is passed to `output_handler`
    as ``(package_name, line, is_stderr)``.
    """
    context = CommandContext(workspace=workspace, dry_run=dry_run, verbose=verbose)
    options = PublishOptions(
        max_retries=max_retries,
        backoff_base=backoff_base,
        registry=registry,
        dry_run=dry_run,
    )
    cmd = PublishCommand(
        context,
        options,
        publisher=publisher,
        on_start=on_start,
        on_result=on_result,
        output_handler=output_handler,
    )
    return await cmd.execute()


def print_result(result: PublishResult, console: Console, error_console: Console) -> None:
    """Report one package's outcome."""
    name = escape(result.package_name)
    if result.success:
        if result.retries == 0:
            console.print(f"[green]✓[/green] Published {name}")
        else:
            console.print(f"[green]✓[/green] Published {name} (retried {result.retries} times)")
    elif result.error:
        error_console.print(f"[red]✗[/red] Failed to publish {name}: {escape(result.error)}")
    else:
        error_console.print(f"[red]✗[/red] Failed to publish {name}")


async def handle_publish_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    max_retries: int | None = None,
    backoff_base: float | None = None,
    registry: str | None = None,
    dry_run: bool = False,
    verbose: bool = False,
) -> None:
    """Handle the publish command from the CLI."""

    def output_handler(pkg_name: str, line: str, is_stderr: bool) -> None:
        prefix = escape(f"[{pkg_name}] ")
        if is_stderr:
            error_console.print(f"[red]{prefix}[/red]{escape(line)}")
        else:
            console.print(f"[dim]{prefix}[/dim]{escape(line)}")

    def on_start(pkg: Package) -> None:
        console.print(f"Publishing [bold]{escape(pkg.name)}[/bold] v{escape(pkg.version)}...")

    def on_result(result: PublishResult) -> None:
        print_result(result, console, error_console)

    try:
        result = await publish(
            workspace,
            max_retries=max_retries,
            backoff_base=backoff_base,
            registry=registry,
            dry_run=dry_run,
            on_start=on_start,
            on_result=on_result,
            verbose=verbose,
            output_handler=output_handler,
        )
    except (RelayError, ValueError) as e:
        message = e.message if isinstance(e, RelayError) else str(e)
        error_console.print(f"[red]Error:[/red] {escape(message)}")
        raise typer.Exit(1) from e

    if result.skipped:
        console.print(f"[dim]Skipped (excluded): {', '.join(result.skipped)}[/dim]")

    if not result.order:
        console.print("[yellow]No packages to publish[/yellow]")
        return

    if result.dry_run:
        console.print("[yellow]Dry run - nothing will be published[/yellow]\n")
        table = Table(title="Publish order")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Package", style="cyan")
        table.add_column("Version", style="green")
        table.add_column("Path")
        for i, pkg in enumerate(result.order, start=1):
            table.add_row(str(i), pkg.name, pkg.version, str(pkg.path))
        console.print(table)
        return

    report = result.report
    if report.all_success:
        console.print(f"\n[green]All {len(report)} packages published successfully[/green]")
    else:
        error_console.print(
            f"\n[red]Publish completed with {report.failure_count} failures[/red] "
            f"({report.success_count} published)"
        )
        for failed in report.failed:
            error_console.print(f"  - {escape(failed.package_name)}")
        raise typer.Exit(1)
