"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import shutil

import typer
from rich.console import Console
from rich.table import Table

from adapters.cdsctl import CdsCtl
from adapters.http_client import build_async_client, ping_api
from core.config import AppSettings
from core.domain.context import ExplorerSession
from core.errors import ExplorerError
from core.services.discovery import discover_contexts

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_contexts(settings: AppSettings, table: Table) -> bool:
    session = ExplorerSession()
    ok = True
    try:
        contexts = await discover_contexts(
            settings.config_files(), session=session, client_factory=CdsCtl.factory(settings)
        )
    except ExplorerError as exc:
        table.add_row("Config files", "FAIL", str(exc))
        return False

    table.add_row("Config files", "OK", f"{len(contexts)} context(s)")
    if not contexts:
        return ok

    async with build_async_client(settings) as http:
        for ctx in contexts:
            try:
                api = await ctx.client.api_url()
            except ExplorerError as exc:
                table.add_row(f"Context {ctx.name}", "FAIL", str(exc))
                ok = False
                continue
            reachable, detail = await ping_api(api, http)
            marker = " (current)" if session.is_active(ctx.name) else ""
            table.add_row(f"Context {ctx.name}{marker}", "OK" if reachable else "FAIL", f"{api} -> {detail}")
            ok = ok and reachable
    return ok


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="CDS Explorer Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    binary = shutil.which(settings.cdsctl_path)
    if binary:
        table.add_row("cdsctl", "OK", binary)
    else:
        table.add_row("cdsctl", "FAIL", f"{settings.cdsctl_path} not found on PATH")

    for path in settings.config_files():
        table.add_row("cdsrc", "OK" if path.is_file() else "MISSING", str(path))

    ok_contexts = bool(binary) and asyncio.run(_check_contexts(settings, table))

    _console.print(table)

    if not binary:
        _console.print(
            "\n[yellow]Note:[/yellow] install cdsctl or set CDS_EXPLORER_CDSCTL_PATH to its location."
        )
    if not (binary and ok_contexts):
        raise typer.Exit(code=1)
