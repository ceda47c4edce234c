"""Main CLI (Typer).

Commands:
- `tree`: expand the context tree down to a given depth.
- `contexts`: list the contexts found in the configured cdsrc files.
- `url`: print the web UI link of a project, resource or run.
- `doctor`: environment diagnostics.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from adapters.cdsctl import CdsCtl
from adapters.json_exporter import export_snapshot_json
from cli import doctor
from cli.ui_components import build_contexts_table, build_tree, print_error
from core.config import AppSettings
from core.domain.models import Application, Pipeline, Project, Workflow, WorkflowRun
from core.domain.nodes import ApplicationNode, PipelineNode, ProjectNode, RunNode, WorkflowResourceNode
from core.errors import ExplorerError, UnknownNodeError
from core.log import configure_logging
from core.services.explorer import TreeDataProvider, locate, resolve_path
from core.services.snapshot import expand, expand_roots

app = typer.Typer(no_args_is_help=True, help="Browse CDS workflows, runs and jobs from the terminal.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def build_provider(settings: AppSettings) -> TreeDataProvider:
    return TreeDataProvider(settings.config_files(), CdsCtl.factory(settings))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


def _split_path(path: str | None) -> list[str]:
    if not path:
        return []
    return [part for part in path.split("/") if part.strip()]


@app.command()
def tree(
    depth: int | None = typer.Option(None, "--depth", "-d", min=1, help="Levels to expand."),
    path: str | None = typer.Option(
        None, "--path", "-p", help="Start at a label path, e.g. 'prod/all projects/MYPROJ'."
    ),
    json_out: Path | None = typer.Option(None, "--json", help="Also write the snapshot as JSON."),
) -> None:
    """Render the tree (contexts → projects → workflows → runs → ...)."""

    settings = AppSettings()
    provider = build_provider(settings)
    levels = depth or settings.tree_depth
    labels = _split_path(path)

    async def _run():
        if not labels:
            return await expand_roots(provider, levels)
        start = await resolve_path(provider, labels)
        return [await expand(provider, start, levels)]

    try:
        roots = asyncio.run(_run())
    except ExplorerError as exc:
        print_error(_console, str(exc))
        raise typer.Exit(code=1) from exc

    if not roots:
        _console.print("[yellow]No CDS context configured.[/yellow] Set CDS_EXPLORER_CDSRCS or create ~/.cdsrc.")
        return

    _console.print(build_tree(path or "CDS", roots))
    if json_out is not None:
        out = export_snapshot_json(roots=roots, output_path=json_out)
        _console.print(f"[green]Snapshot saved to:[/green] {out}")


@app.command()
def contexts() -> None:
    """List configured contexts; the current one is initialised eagerly."""

    settings = AppSettings()
    provider = build_provider(settings)
    try:
        found = asyncio.run(provider.contexts())
    except ExplorerError as exc:
        print_error(_console, str(exc))
        raise typer.Exit(code=1) from exc
    _console.print(build_contexts_table(found, provider.session))


@app.command()
def url(
    context: str = typer.Argument(..., help="Context name (section of the cdsrc)."),
    project: str = typer.Argument(..., help="Project key."),
    workflow: str | None = typer.Option(None, "--workflow", "-w"),
    run_number: int | None = typer.Option(None, "--run", "-r", min=0, help="Run number (needs --workflow)."),
    application: str | None = typer.Option(None, "--application", "-a"),
    pipeline: str | None = typer.Option(None, "--pipeline"),
) -> None:
    """Print the CDS web UI link of a project, application, pipeline, workflow or run."""

    if sum(x is not None for x in (workflow, application, pipeline)) > 1:
        raise typer.BadParameter("use only one of --workflow, --application, --pipeline")
    if run_number is not None and workflow is None:
        raise typer.BadParameter("--run requires --workflow")

    settings = AppSettings()
    provider = build_provider(settings)

    async def _run() -> str:
        ctx = next((c for c in await provider.contexts() if c.name == context), None)
        if ctx is None:
            raise UnknownNodeError(f"unknown context {context!r}")
        if workflow is not None:
            wf = Workflow(name=workflow, project_key=project)
            if run_number is not None:
                return await locate(RunNode(f"run {run_number}", ctx, WorkflowRun(num=run_number), wf))
            return await locate(WorkflowResourceNode(workflow, ctx, wf))
        if application is not None:
            return await locate(
                ApplicationNode(application, ctx, Application(name=application, project_key=project))
            )
        if pipeline is not None:
            return await locate(PipelineNode(pipeline, ctx, Pipeline(name=pipeline, project_key=project)))
        return await locate(ProjectNode(project, ctx, Project(key=project, name=project)))

    try:
        link = asyncio.run(_run())
    except ExplorerError as exc:
        print_error(_console, str(exc))
        raise typer.Exit(code=1) from exc
    _console.print(link, soft_wrap=True)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
