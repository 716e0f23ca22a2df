"""CLI application for debby."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from debby.checker import Checker
from debby.detect import MANAGERS, create_managers
from debby.errors import DebbyError
from debby.log import configure_logging
from debby.models import CheckReport
from debby.notify import EmailNotifier, WebhookNotifier, render_failures, render_json, render_text
from debby.options import Options

console = Console()

FORMATS = ("text", "json", "table")


def echo(text: str) -> None:
    """Print plain text without rich markup or wrapping."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def format_table(report: CheckReport) -> Table:
    """Format updatable packages as a rich table."""
    table = Table(title=f"Updatable packages in {report.root}")
    table.add_column("Manager")
    table.add_column("Package")
    table.add_column("Required")
    table.add_column("Installed")
    table.add_column("Latest", style="green")

    for result in report.results:
        table.add_row(
            result.manager,
            result.name,
            result.required_version or "",
            result.installed_version or "",
            result.updatable_version,
        )

    return table


app = typer.Typer(
    name="debby",
    help="debby - Check a project's dependencies for newer releases",
    add_completion=False,
)


@app.command()
def check(
    path: str = typer.Argument(".", help="Project root holding composer.json, package.json and their lock files"),
    managers: list[str] | None = typer.Option(None, "--manager", "-m", help="Manager to check (repeatable, default: detect)"),
    composer_executable: str | None = typer.Option(None, "--composer-executable", envvar="DEBBY_COMPOSER", help="Composer command"),
    npm_executable: str | None = typer.Option(None, "--npm-executable", envvar="DEBBY_NPM", help="npm command"),
    timeout: float = typer.Option(30.0, "--timeout", envvar="DEBBY_TIMEOUT", help="Seconds per tool invocation"),
    max_concurrency: int = typer.Option(6, "--max-concurrency", envvar="DEBBY_MAX_CONCURRENCY", help="Concurrent tool invocations"),
    format_type: str = typer.Option("text", "--format", help="Output format: text, json or table"),
    notify_address: str | None = typer.Option(None, "--notify", envvar="DEBBY_NOTIFY_ADDRESS", help="Email the report to this address"),
    webhook_url: str | None = typer.Option(None, "--webhook-url", envvar="DEBBY_WEBHOOK_URL", help="Post the report to this URL"),
    keep_going: bool = typer.Option(False, "--keep-going", help="Report failing managers instead of aborting"),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 2 when updates are found"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every package checked"),
) -> None:
    """Check a project for updatable packages."""
    configure_logging(verbose)

    if format_type not in FORMATS:
        console.print(f"Error: Unsupported format: {format_type}", style="red", soft_wrap=True)
        raise typer.Exit(1)

    executables = {}
    if composer_executable:
        executables["composer"] = composer_executable
    if npm_executable:
        executables["npm"] = npm_executable

    try:
        options = Options(
            root_dir=path,
            managers=managers or [],
            executables=executables,
            timeout=timeout,
            max_concurrency=max_concurrency,
            notify_address=notify_address,
            webhook_url=webhook_url,
            keep_going=keep_going,
        )

        checker = Checker(options.root_dir, create_managers(options), fail_fast=not options.keep_going)
        report = asyncio.run(checker.check())

        if format_type == "json":
            echo(render_json(report))
        elif format_type == "table" and report.has_updates:
            console.print(format_table(report))
            if report.has_failures:
                echo(render_failures(report))
        else:
            echo(render_text(report))

        if options.notify_address:
            EmailNotifier(options.notify_address).notify(report)
        if options.webhook_url:
            WebhookNotifier(options.webhook_url, timeout=options.timeout).notify(report)

    except (DebbyError, ValueError) as e:
        console.print(f"Error: {e}", style="red", markup=False, soft_wrap=True)
        raise typer.Exit(1)

    if report.has_failures:
        raise typer.Exit(1)
    if strict and report.has_updates:
        raise typer.Exit(2)


@app.command(name="managers")
def list_managers() -> None:
    """List the supported package managers."""
    for name, manager in MANAGERS.items():
        echo(f"{name}: {manager.manifest_file}, {manager.lock_file}")


if __name__ == "__main__":
    app()
