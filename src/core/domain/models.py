"""CDS domain models (Pydantic v2).

Why Pydantic in the domain:
- The JSON printed by `cdsctl` is validated at the edge instead of trusting
  its shape at every access.
- `extra="ignore"`: cdsctl returns far more fields than the tree uses.
- cdsctl prints Go nil slices as `null`; `NullableList` reads them as `[]`.

Note:
- These models describe *what* the server returns, not *how* it is fetched.
"""

from __future__ import annotations

from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, Field, TypeAdapter, ValidationError
from pydantic.config import ConfigDict

from core.errors import PayloadDecodeError

T = TypeVar("T")


def _null_as_empty_list(value: Any) -> Any:
    return [] if value is None else value


def _null_as_empty_dict(value: Any) -> Any:
    return {} if value is None else value


NullableList = Annotated[list[T], BeforeValidator(_null_as_empty_list)]


class CdsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Project(CdsModel):
    """A CDS project, identified by its key."""

    key: str = Field(..., min_length=1, description="Project key (e.g. 'MYPROJ').")
    name: str = Field(default="", description="Display name.")


class Application(CdsModel):
    name: str = Field(..., min_length=1)
    project_key: str = Field(default="")


class Pipeline(CdsModel):
    name: str = Field(..., min_length=1)
    project_key: str = Field(default="")


class Workflow(CdsModel):
    name: str = Field(..., min_length=1)
    project_key: str = Field(default="")


class Tag(CdsModel):
    tag: str = ""
    value: str = ""


class WorkflowRun(CdsModel):
    """One entry of `workflow history`."""

    num: int = Field(..., ge=0, description="Run number.")
    status: str = Field(default="", description="Server status string.")
    start: str | None = None
    last_execution: str | None = None
    tags: NullableList[Tag] = Field(default_factory=list)


# Run detail (raw `admin curl` payload).


class Action(CdsModel):
    """A job action; its `actions` are the ordered steps of the job."""

    name: str = ""
    step_name: str | None = None
    actions: NullableList[Action] = Field(default_factory=list)

    def display_name(self) -> str:
        return self.step_name or self.name


class StepStatus(CdsModel):
    status: str = ""


class ExecutedJob(CdsModel):
    action: Action = Field(default_factory=Action)
    step_status: NullableList[StepStatus] = Field(default_factory=list)


class WorkflowNodeJobRun(CdsModel):
    status: str = ""
    job: ExecutedJob = Field(default_factory=ExecutedJob)


class Stage(CdsModel):
    name: str = ""
    build_order: int = 0
    status: str = ""
    run_jobs: NullableList[WorkflowNodeJobRun] = Field(default_factory=list)

    def display_name(self) -> str:
        return self.name or f"stage {self.build_order}"


class WorkflowNodeRun(CdsModel):
    """Execution record of one workflow node within a run."""

    status: str = ""
    stages: NullableList[Stage] = Field(default_factory=list)


class NodeJoinParent(CdsModel):
    parent_id: int


class NodeTrigger(CdsModel):
    child_node_id: int
    child_node: WorkflowNode


class WorkflowNode(CdsModel):
    """A node of the workflow DAG (pipeline node, fork or join)."""

    id: int
    name: str = ""
    triggers: NullableList[NodeTrigger] = Field(default_factory=list)
    parents: NullableList[NodeJoinParent] = Field(default_factory=list)


class WorkflowData(CdsModel):
    node: WorkflowNode
    joins: NullableList[WorkflowNode] = Field(default_factory=list)


class RunWorkflow(CdsModel):
    name: str = ""
    project_key: str = ""
    workflow_data: WorkflowData


class WorkflowRunDetail(CdsModel):
    """Full run: the workflow graph plus execution records per node id."""

    num: int = 0
    status: str = ""
    workflow: RunWorkflow
    nodes: Annotated[
        dict[int, NullableList[WorkflowNodeRun]], BeforeValidator(_null_as_empty_dict)
    ] = Field(default_factory=dict)

    @property
    def root(self) -> WorkflowNode:
        return self.workflow.workflow_data.node

    @property
    def joins(self) -> list[WorkflowNode]:
        return self.workflow.workflow_data.joins

    def node_run(self, node_id: int) -> WorkflowNodeRun | None:
        """First execution record of a node, or None if it never ran."""

        runs = self.nodes.get(node_id)
        if not runs:
            return None
        return runs[0]


NodeTrigger.model_rebuild()
WorkflowNode.model_rebuild()

_LIST_ADAPTERS: dict[type, TypeAdapter[Any]] = {}


def parse_list(model: type[CdsModel], data: Any, *, source: str = "cdsctl") -> list[Any]:
    """Validate a JSON list from `cdsctl` into a list of `model`.

    `cdsctl` prints `null` for empty lists; that maps to `[]`. A payload that
    does not match raises `PayloadDecodeError` naming `source`.
    """

    if data is None:
        return []
    adapter = _LIST_ADAPTERS.get(model)
    if adapter is None:
        adapter = TypeAdapter(list[model])  # type: ignore[valid-type]
        _LIST_ADAPTERS[model] = adapter
    try:
        return adapter.validate_python(data)
    except ValidationError as exc:
        raise PayloadDecodeError(f"unexpected output from `{source}`: {exc}") from exc
