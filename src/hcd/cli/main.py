"""
CLI for the headless delivery client.

Commands:
    hcd sync - Fetch delta updates of the stack
    hcd entry CONTENT_TYPE ENTRY_UID - Fetch one entry
    hcd config - Show current configuration
    hcd version - Print version
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from hcd import __version__
from hcd.config import Settings, clear_settings_cache, get_settings
from hcd.exceptions import HCDError
from hcd.logging import setup_logging
from hcd.stack import Stack
from hcd.types import PublishType

app = typer.Typer(
    name="hcd",
    help="Headless delivery client - fetch content and sync deltas",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except Exception:
        return None


def _require_settings() -> Settings:
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'hcd config' to see what's missing."
        )
        raise typer.Exit(1)
    setup_logging(settings.LOG_LEVEL)
    return settings


async def _run_sync(settings: Settings, params: dict[str, Any], recursive: bool) -> dict[str, Any]:
    async with Stack.from_settings(settings) as s:
        return await s.sync(params, recursive=recursive)


async def _run_entry(settings: Settings, content_type: str, entry_uid: str, locale: str | None) -> Any:
    async with Stack.from_settings(settings) as s:
        entry = s.content_type(content_type).entry(entry_uid)
        if locale:
            entry.locale(locale)
        return await entry.fetch()


def _emit(payload: Any, output: Path | None) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text)
        console.print(f"[green]Wrote[/green] {output}")
    else:
        console.print_json(text)


@app.command()
def sync(
    event_type: Annotated[
        Optional[list[PublishType]],
        typer.Option("--type", "-t", help="Event types to include (repeatable)"),
    ] = None,
    locale: Annotated[Optional[str], typer.Option("--locale", "-l", help="Locale")] = None,
    start_date: Annotated[
        Optional[str], typer.Option("--start-date", help="Only changes after this date")
    ] = None,
    content_type: Annotated[
        Optional[str], typer.Option("--content-type", "-c", help="Content type uid")
    ] = None,
    sync_token: Annotated[
        Optional[str], typer.Option("--sync-token", help="Resume a previous sync")
    ] = None,
    pagination_token: Annotated[
        Optional[str], typer.Option("--pagination-token", help="Fetch the next page")
    ] = None,
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="Follow pagination to the sync token")
    ] = False,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write the result to a file")
    ] = None,
) -> None:
    """Fetch delta updates of the stack.

    Without a token a fresh sync is initialized. Pass --recursive to drain
    every page and obtain the next sync token.
    """
    settings = _require_settings()

    params: dict[str, Any] = {}
    if event_type:
        params["type"] = list(event_type)
    if locale:
        params["locale"] = locale
    if start_date:
        params["startDate"] = start_date
    if content_type:
        params["contentTypeUid"] = content_type
    if sync_token:
        params["syncToken"] = sync_token
    if pagination_token:
        params["paginationToken"] = pagination_token

    try:
        result = asyncio.run(_run_sync(settings, params, recursive))
    except HCDError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    items = result.get("items") or []
    token = result.get("sync_token") or result.get("pagination_token")
    error_console.print(f"[bold]{len(items)}[/bold] items, next token: {token}")
    _emit(result, output)


@app.command()
def entry(
    content_type: Annotated[str, typer.Argument(help="Content type uid")],
    entry_uid: Annotated[str, typer.Argument(help="Entry uid")],
    locale: Annotated[Optional[str], typer.Option("--locale", "-l", help="Locale")] = None,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write the entry to a file")
    ] = None,
) -> None:
    """Fetch one entry, honoring the configured cache policy."""
    settings = _require_settings()

    try:
        result = asyncio.run(_run_entry(settings, content_type, entry_uid, locale))
    except HCDError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _emit(result, output)


@app.command()
def config() -> None:
    """Show current configuration.

    Displays all configuration values with secrets redacted.
    """
    settings = _get_settings_safe()

    if settings is None:
        error_console.print("[red]Configuration is invalid or incomplete.[/red]")
        error_console.print()
        error_console.print("Required environment variables:")
        error_console.print("  - HCD_API_KEY")
        error_console.print("  - HCD_DELIVERY_TOKEN")
        error_console.print("  - HCD_ENVIRONMENT")
        error_console.print()
        error_console.print("Create a .env file or set environment variables.")
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in settings.redacted_display().items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(key, display_value)

    console.print(table)


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"headless-delivery version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
