"""Tests for decoding structured cdsctl output."""

import pytest

from core.domain.models import Pipeline, Project, WorkflowRun, parse_list
from core.errors import ExplorerError, PayloadDecodeError


def test_parse_list_null_is_empty() -> None:
    assert parse_list(Project, None) == []


def test_parse_list_ignores_unknown_fields() -> None:
    (project,) = parse_list(Project, [{"key": "PROJ", "name": "Project", "vcs_servers": []}])

    assert project.key == "PROJ"


def test_run_with_null_tags() -> None:
    (run,) = parse_list(WorkflowRun, [{"num": 3, "status": "Success", "tags": None}])

    assert run.num == 3
    assert run.tags == []


def test_malformed_entry_names_the_command() -> None:
    with pytest.raises(PayloadDecodeError, match="pipeline list PROJ") as info:
        parse_list(Pipeline, [{"project_key": "PROJ"}], source="pipeline list PROJ")

    assert isinstance(info.value, ExplorerError)


def test_non_list_payload_is_rejected() -> None:
    with pytest.raises(PayloadDecodeError, match="workflow history PROJ deploy"):
        parse_list(WorkflowRun, {"num": 1}, source="workflow history PROJ deploy")
