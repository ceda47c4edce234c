"""Tree nodes (closed set of variants) and their display representation.

Each variant carries only what its own `children`/`render`/`locate` needs:
a context plus the payload returned by the fetch that produced it. Nodes
never keep their children; dispatch lives in `core.services.explorer`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from core.domain.context import Context
from core.domain.models import (
    Action,
    Application,
    Pipeline,
    Project,
    Stage,
    StepStatus,
    Workflow,
    WorkflowNode,
    WorkflowNodeJobRun,
    WorkflowNodeRun,
    WorkflowRun,
    WorkflowRunDetail,
)

FAV_WORKFLOWS = "⭐ workflows"
FAV_PROJECTS = "⭐ projects"
ALL_PROJECTS = "all projects"


class CollapsibleState(str, Enum):
    NONE = "none"
    COLLAPSED = "collapsed"


class NodeTag(str, Enum):
    """Type tag used by hosts to pick context-menu actions."""

    CONTEXT = "context"
    PROJECT = "project"
    WORKFLOW_EDIT = "workflowEdit"
    WORKFLOW_RUN = "workflowRun"
    WORKFLOW_NODE_RUN = "workflowNodeRun"
    WORKFLOW_STAGE = "workflowStage"
    WORKFLOW_JOB = "workflowJob"
    WORKFLOW_STEP = "workflowStep"
    APPLICATION = "application"
    PIPELINE = "pipeline"


@dataclass(frozen=True)
class TreeItem:
    label: str
    collapsible_state: CollapsibleState
    tooltip: str | None = None
    context_value: NodeTag | None = None
    icon: str | None = None

    @property
    def is_leaf(self) -> bool:
        return self.collapsible_state is CollapsibleState.NONE


@dataclass(frozen=True, eq=False)
class ContextNode:
    label: str
    context: Context


@dataclass(frozen=True, eq=False)
class WorkflowsFolder:
    label: str
    context: Context
    favorites: bool = False
    project_key: str | None = None


@dataclass(frozen=True, eq=False)
class ProjectsFolder:
    label: str
    context: Context
    favorites: bool = False


@dataclass(frozen=True, eq=False)
class ApplicationsFolder:
    label: str
    context: Context
    project_key: str


@dataclass(frozen=True, eq=False)
class PipelinesFolder:
    label: str
    context: Context
    project_key: str


@dataclass(frozen=True, eq=False)
class ProjectNode:
    label: str
    context: Context
    project: Project


@dataclass(frozen=True, eq=False)
class ApplicationNode:
    label: str
    context: Context
    application: Application


@dataclass(frozen=True, eq=False)
class PipelineNode:
    label: str
    context: Context
    pipeline: Pipeline


@dataclass(frozen=True, eq=False)
class WorkflowResourceNode:
    label: str
    context: Context
    workflow: Workflow


@dataclass(frozen=True, eq=False)
class RunNode:
    label: str
    context: Context
    run: WorkflowRun
    workflow: Workflow


@dataclass(frozen=True, eq=False)
class RunGraphNode:
    """One node of a run's DAG; `detail` is shared by the whole run subtree."""

    label: str
    context: Context
    detail: WorkflowRunDetail
    node: WorkflowNode


@dataclass(frozen=True, eq=False)
class StagesNode:
    label: str
    context: Context
    node_run: WorkflowNodeRun


@dataclass(frozen=True, eq=False)
class StageNode:
    label: str
    context: Context
    stage: Stage


@dataclass(frozen=True, eq=False)
class JobNode:
    label: str
    context: Context
    job: WorkflowNodeJobRun


@dataclass(frozen=True, eq=False)
class StepNode:
    label: str
    context: Context
    action: Action
    status: StepStatus | None = field(default=None)


Node = Union[
    ContextNode,
    WorkflowsFolder,
    ProjectsFolder,
    ApplicationsFolder,
    PipelinesFolder,
    ProjectNode,
    ApplicationNode,
    PipelineNode,
    WorkflowResourceNode,
    RunNode,
    RunGraphNode,
    StagesNode,
    StageNode,
    JobNode,
    StepNode,
]

ResourceNode = Union[ProjectNode, ApplicationNode, PipelineNode, WorkflowResourceNode, RunNode]
