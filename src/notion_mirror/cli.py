"""Command-line interface for the Notion mirror."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import DEFAULT_NOTION_VERSION, ensure_config, resolve_config
from .errors import ConfigError, NotionAPIError
from .logs import configure_logging
from .notion.client import create_client
from .sync.service import BackupResult, run_backup

app = typer.Typer(help="Back up a Notion page tree into a local folder of Markdown files.")
console = Console()


def _print_banner() -> None:
    console.print(Panel.fit("Notion Recursive Backup Started", border_style="cyan"))


def _format_result(result: BackupResult) -> None:
    table = Table(title="Notion Backup Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Root page", result.root_page_id)
    table.add_row("Output directory", str(result.output_dir))
    table.add_row("Processed pages", str(result.pages_processed))
    table.add_row("Errors", str(result.errors))
    table.add_row("Elapsed", f"{result.elapsed:.1f}s")
    console.print(table)
    if result.errors:
        console.print("[red]Backup completed with errors; check the log for failed pages.[/red]")
    else:
        console.print("[green]Backup completed successfully.[/green]")


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a configuration TOML file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"config_path": config_path}


@app.command()
def backup(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory to store the mirrored page tree",
    ),
    root_page_id: Optional[str] = typer.Option(
        None,
        "--root-id",
        help="Root Notion page ID to back up",
    ),
    parallel: Optional[bool] = typer.Option(
        None,
        "--parallel/--sequential",
        help="Process sibling pages concurrently or one at a time",
    ),
    delay: Optional[int] = typer.Option(None, "--delay", help="Pause before every API call, in milliseconds"),
    clean: Optional[bool] = typer.Option(
        None,
        "--clean/--no-clean",
        help="Remove the output directory before running",
    ),
    max_concurrency: Optional[int] = typer.Option(
        None,
        "--max-concurrency",
        help="Upper bound on simultaneous API requests",
    ),
    token: Optional[str] = typer.Option(None, help="Notion integration token"),
) -> None:
    """Mirror a Notion page and all of its descendants."""

    _print_banner()
    try:
        config = ensure_config(
            token=token,
            root_page_id=root_page_id,
            output_dir=output,
            parallel_processing=parallel,
            api_delay_ms=delay,
            clean_output=clean,
            max_concurrency=max_concurrency,
            config_path=ctx.obj.get("config_path"),
        )
    except ConfigError as exc:
        console.print(f"[red]Fatal error: {exc}[/red]")
        raise typer.Exit(code=1)

    result = asyncio.run(run_backup(config))
    _format_result(result)
    raise typer.Exit(code=result.exit_code)


@app.command()
def search(
    ctx: typer.Context,
    query: Optional[str] = typer.Option(None, "--query", help="Only list pages whose title matches"),
    token: Optional[str] = typer.Option(None, help="Notion integration token"),
) -> None:
    """List the pages shared with the integration."""

    try:
        source = resolve_config(ctx.obj.get("config_path"))
    except ConfigError as exc:
        console.print(f"[red]Fatal error: {exc}[/red]")
        raise typer.Exit(code=1)

    resolved_token = token or source.data.get("credentials", {}).get("token")
    if not resolved_token:
        console.print("[red]Fatal error: NOTION_TOKEN environment variable not set![/red]")
        raise typer.Exit(code=1)

    table = Table(title="Notion Pages")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Last edited")

    async def _collect() -> None:
        credentials = source.data.get("credentials", {})
        notion_version = credentials.get("notion_version", DEFAULT_NOTION_VERSION)
        async with create_client(token=resolved_token, notion_version=notion_version) as client:
            async for page in client.search_pages(query=query):
                table.add_row(page.id, page.title, page.last_edited_time or "")

    try:
        asyncio.run(_collect())
    except (NotionAPIError, httpx.HTTPError) as exc:
        console.print(f"[red]Search failed: {exc}[/red]")
        raise typer.Exit(code=1)
    console.print(table)


def run() -> None:
    """Entry point for console scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    run()
