"""Lazy tree over CDS state.

`render`, `children` and `locate` dispatch on the node variant. Nothing is
cached: every call to `children` issues its cdsctl query again, and
`TreeDataProvider.refresh` is the only invalidation (full tree).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Sequence

from core.domain.context import Context, ExplorerSession
from core.domain.models import Application, Pipeline, Project, Workflow, WorkflowRun, parse_list
from core.domain.nodes import (
    ALL_PROJECTS,
    FAV_PROJECTS,
    FAV_WORKFLOWS,
    ApplicationNode,
    ApplicationsFolder,
    CollapsibleState,
    ContextNode,
    JobNode,
    Node,
    NodeTag,
    PipelineNode,
    PipelinesFolder,
    ProjectNode,
    ProjectsFolder,
    ResourceNode,
    RunGraphNode,
    RunNode,
    StageNode,
    StagesNode,
    StepNode,
    TreeItem,
    WorkflowResourceNode,
    WorkflowsFolder,
)
from core.domain.run_detail import decode_run_detail
from core.domain.status import decorate, status_glyph
from core.errors import UnknownNodeError
from core.interfaces.cds_client import ClientFactory
from core.services.discovery import discover_contexts

logger = logging.getLogger(__name__)

ACTIVE_CONTEXT_ICON = "cds"


def _collapsed(label: str, tag: NodeTag | None = None, tooltip: str | None = None) -> TreeItem:
    return TreeItem(label, CollapsibleState.COLLAPSED, tooltip=tooltip, context_value=tag)


def _run_tooltip(run: WorkflowRun) -> str:
    head = " ".join(p for p in (run.status, status_glyph(run.status), f"run {run.num}") if p)
    lines = [
        head,
        f"start: {run.start or ''}",
        f"lastExecution: {run.last_execution or ''}",
    ]
    lines.extend(f"{t.tag}: {t.value}" for t in run.tags)
    return "\n".join(lines)


def render(node: Node, session: ExplorerSession | None = None) -> TreeItem:
    """Display representation of a node. Leaves are NONE, the rest COLLAPSED."""

    match node:
        case ContextNode(label=label):
            icon = ACTIVE_CONTEXT_ICON if session is not None and session.is_active(label) else None
            return TreeItem(label, CollapsibleState.COLLAPSED, context_value=NodeTag.CONTEXT, icon=icon)
        case WorkflowsFolder() | ProjectsFolder() | ApplicationsFolder() | PipelinesFolder():
            return _collapsed(node.label)
        case ProjectNode():
            return _collapsed(node.label, NodeTag.PROJECT)
        case WorkflowResourceNode(workflow=workflow):
            return _collapsed(node.label, NodeTag.WORKFLOW_EDIT, tooltip=workflow.name or None)
        case RunNode(run=run):
            label = decorate(f"run {run.num}", run.status)
            return _collapsed(label, NodeTag.WORKFLOW_RUN, tooltip=_run_tooltip(run))
        case RunGraphNode():
            return _collapsed(node.label, NodeTag.WORKFLOW_NODE_RUN)
        case StagesNode() | StageNode():
            return _collapsed(node.label, NodeTag.WORKFLOW_STAGE)
        case JobNode():
            return _collapsed(node.label, NodeTag.WORKFLOW_JOB)
        case StepNode(action=action):
            return TreeItem(
                node.label,
                CollapsibleState.NONE,
                tooltip=node.label if action.name else None,
                context_value=NodeTag.WORKFLOW_STEP,
            )
        case ApplicationNode(application=app):
            return TreeItem(node.label, CollapsibleState.NONE, tooltip=app.name, context_value=NodeTag.APPLICATION)
        case PipelineNode(pipeline=pipeline):
            return TreeItem(node.label, CollapsibleState.NONE, tooltip=pipeline.name, context_value=NodeTag.PIPELINE)
    raise TypeError(f"unknown node type: {type(node).__name__}")


async def _fetch_list(ctx: Context, model, command: str) -> list:
    data = await ctx.client.run_cds_command(command)
    return parse_list(model, data, source=command)


async def children(node: Node) -> list[Node]:
    """Fetch the children of a node; external failures propagate unchanged."""

    ctx = node.context
    match node:
        case ContextNode():
            return [
                WorkflowsFolder(FAV_WORKFLOWS, ctx, favorites=True),
                ProjectsFolder(FAV_PROJECTS, ctx, favorites=True),
                ProjectsFolder(ALL_PROJECTS, ctx),
            ]
        case WorkflowsFolder(favorites=True):
            workflows = await _fetch_list(ctx, Workflow, "workflow favorites list")
            return [WorkflowResourceNode(wf.name, ctx, wf) for wf in workflows]
        case WorkflowsFolder(project_key=key):
            workflows = await _fetch_list(ctx, Workflow, f"workflow list {key}")
            return [WorkflowResourceNode(wf.name, ctx, wf) for wf in workflows]
        case ProjectsFolder(favorites=favorites):
            command = "project favorites list" if favorites else "project list"
            projects = await _fetch_list(ctx, Project, command)
            return [ProjectNode(p.name or p.key, ctx, p) for p in projects]
        case ApplicationsFolder(project_key=key):
            apps = await _fetch_list(ctx, Application, f"application list {key}")
            return [ApplicationNode(a.name, ctx, a) for a in apps]
        case PipelinesFolder(project_key=key):
            pipelines = await _fetch_list(ctx, Pipeline, f"pipeline list {key}")
            return [PipelineNode(p.name, ctx, p) for p in pipelines]
        case ProjectNode(project=project):
            return [
                WorkflowsFolder("Workflows", ctx, project_key=project.key),
                ApplicationsFolder("Applications", ctx, project.key),
                PipelinesFolder("Pipelines", ctx, project.key),
            ]
        case WorkflowResourceNode(workflow=wf):
            runs = await _fetch_list(ctx, WorkflowRun, f"workflow history {wf.project_key} {wf.name}")
            return [RunNode(f"run {r.num} - {r.status}", ctx, r, wf) for r in runs]
        case RunNode(run=run, workflow=wf):
            raw = await ctx.client.run_raw(
                f"admin curl /project/{wf.project_key}/workflows/{wf.name}/runs/{run.num}"
            )
            detail = decode_run_detail(raw)
            root_run = detail.node_run(detail.root.id)
            label = decorate(detail.root.name, root_run.status if root_run else None)
            return [RunGraphNode(label, ctx, detail, detail.root)]
        case RunGraphNode():
            return _run_graph_children(node)
        case StagesNode(node_run=node_run):
            return [
                StageNode(decorate(stage.display_name(), stage.status), ctx, stage)
                for stage in node_run.stages
            ]
        case StageNode(stage=stage):
            return [JobNode(decorate(job.job.action.name, job.status), ctx, job) for job in stage.run_jobs]
        case JobNode():
            return _job_steps(node)
        case StepNode() | ApplicationNode() | PipelineNode():
            return []
    raise TypeError(f"unknown node type: {type(node).__name__}")


def _run_graph_children(node: RunGraphNode) -> list[Node]:
    ctx, detail, wnode = node.context, node.detail, node.node
    result: list[Node] = []

    node_run = detail.node_run(wnode.id)
    if node_run is not None:
        result.append(StagesNode("Stages", ctx, node_run))

    for trigger in wnode.triggers:
        child = trigger.child_node
        child_run = detail.node_run(child.id)
        label = decorate(child.name, child_run.status if child_run else None)
        result.append(RunGraphNode(label, ctx, detail, child))

    # A join reachable through several parents is listed once, at its first parent.
    seen_joins: set[int] = set()
    for join in detail.joins:
        if join.id in seen_joins:
            continue
        if any(parent.parent_id == wnode.id for parent in join.parents):
            seen_joins.add(join.id)
            result.append(RunGraphNode(join.name, ctx, detail, join))
    return result


def _job_steps(node: JobNode) -> list[Node]:
    executed = node.job.job
    statuses = executed.step_status
    steps: list[Node] = []
    for index, action in enumerate(executed.action.actions):
        status = statuses[index] if index < len(statuses) else None
        label = action.display_name()
        if status is not None:
            label = decorate(label, status.status)
        steps.append(StepNode(label, node.context, action, status))
    return steps


async def locate(node: ResourceNode) -> str:
    """Deep link into the CDS web UI for a resource node."""

    ui = (await node.context.client.ui_url()).rstrip("/")
    match node:
        case ProjectNode(project=project):
            return f"{ui}/project/{project.key}"
        case ApplicationNode(application=app):
            return f"{ui}/project/{app.project_key}/application/{app.name}"
        case PipelineNode(pipeline=pipeline):
            return f"{ui}/project/{pipeline.project_key}/pipeline/{pipeline.name}"
        case WorkflowResourceNode(workflow=wf):
            return f"{ui}/project/{wf.project_key}/workflow/{wf.name}"
        case RunNode(run=run, workflow=wf):
            return f"{ui}/project/{wf.project_key}/workflow/{wf.name}/run/{run.num}"
    raise TypeError(f"{type(node).__name__} has no web location")


ChangeListener = Callable[[], None]


class TreeDataProvider:
    """Host-facing tree contract: root contexts, child fetches and refresh.

    Discovery runs lazily on the first root fetch and is shared by concurrent
    callers. Each pass claims the current context in its own session; `session`
    is replaced when a pass of the latest generation completes, so the last
    completed discovery decides the active context. `refresh` starts a new
    generation and notifies listeners; passes from older generations are
    never adopted.
    """

    def __init__(self, config_files: Sequence[Path], client_factory: ClientFactory) -> None:
        self._config_files = list(config_files)
        self._client_factory = client_factory
        self.session = ExplorerSession()
        self._generation = 0
        self._discovery: asyncio.Future[list[Context]] | None = None
        self._listeners: list[ChangeListener] = []

    def on_did_change(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def contexts(self) -> list[Context]:
        if self._discovery is None:
            self._discovery = asyncio.ensure_future(self._discover(self._generation))
        return list(await self._discovery)

    async def _discover(self, generation: int) -> list[Context]:
        session = ExplorerSession()
        found = await discover_contexts(
            self._config_files,
            session=session,
            client_factory=self._client_factory,
        )
        if generation == self._generation:
            self.session = session
        else:
            logger.debug("discarding discovery of generation %d", generation)
        return found

    async def get_children(self, node: Node | None = None) -> list[Node]:
        if node is not None:
            return await children(node)
        return [ContextNode(ctx.name, ctx) for ctx in await self.contexts()]

    def get_tree_item(self, node: Node) -> TreeItem:
        return render(node, self.session)

    def refresh(self) -> None:
        logger.debug("refresh requested; discarding discovered contexts")
        self._generation += 1
        self._discovery = None
        for listener in list(self._listeners):
            listener()


async def resolve_path(provider: TreeDataProvider, labels: Sequence[str]) -> Node | None:
    """Walk the tree by labels; an empty path is the (virtual) root."""

    node: Node | None = None
    for depth, wanted in enumerate(labels):
        candidates = await provider.get_children(node)
        for candidate in candidates:
            if wanted in (candidate.label, provider.get_tree_item(candidate).label):
                node = candidate
                break
        else:
            trail = "/".join(labels[: depth + 1])
            raise UnknownNodeError(f"no node named {wanted!r} at {trail!r}")
    return node
