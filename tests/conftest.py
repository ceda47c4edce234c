"""Shared fixtures: a scripted CdsClient and cdsrc files on disk."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from core.domain.context import Context
from core.errors import CdsCtlError


class FakeCdsClient:
    """In-memory `CdsClient`: answers from dicts, records every call."""

    def __init__(
        self,
        config_file: Path,
        context_name: str,
        *,
        commands: dict[str, Any] | None = None,
        raw: dict[str, str] | None = None,
        ui: str = "https://cds.example.com",
        api: str = "https://cds-api.example.com",
        init_gate: asyncio.Event | None = None,
        init_error: Exception | None = None,
    ) -> None:
        self._config_file = config_file
        self._context_name = context_name
        self.commands = commands or {}
        self.raw = raw or {}
        self.ui = ui
        self.api = api
        self.init_gate = init_gate
        self.init_error = init_error
        self.init_calls = 0
        self.calls: list[str] = []

    @property
    def context_name(self) -> str:
        return self._context_name

    @property
    def config_file(self) -> Path:
        return self._config_file

    async def init(self) -> None:
        self.init_calls += 1
        if self.init_gate is not None:
            await self.init_gate.wait()
        if self.init_error is not None:
            raise self.init_error

    async def run_cds_command(self, command: str) -> Any:
        self.calls.append(command)
        if command not in self.commands:
            raise CdsCtlError(f"cdsctl exited with 1: unknown command {command}", returncode=1)
        return self.commands[command]

    async def run_raw(self, command: str) -> str:
        self.calls.append(command)
        if command not in self.raw:
            raise CdsCtlError(f"cdsctl exited with 1: {command}", returncode=1)
        return self.raw[command]

    async def ui_url(self) -> str:
        return self.ui

    async def api_url(self) -> str:
        return self.api


class FakeFactory:
    """ClientFactory that builds FakeCdsClients and remembers them by context name."""

    def __init__(self, **client_kwargs: Any) -> None:
        self.client_kwargs = client_kwargs
        self.built: list[FakeCdsClient] = []

    def __call__(self, config_file: Path, context_name: str) -> FakeCdsClient:
        client = FakeCdsClient(config_file, context_name, **self.client_kwargs)
        self.built.append(client)
        return client

    def by_name(self, name: str) -> list[FakeCdsClient]:
        return [c for c in self.built if c.context_name == name]


@pytest.fixture
def write_cdsrc(tmp_path: Path):
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_context() -> Context:
    def _make(**kwargs: Any) -> Context:
        client = FakeCdsClient(Path("/tmp/cdsrc"), "prod", **kwargs)
        return Context(name="prod", client=client)

    return _make


def run_payload(**overrides: Any) -> dict[str, Any]:
    """A run with root 'build' (id 1) -> 'test' (id 2) and 'lint' (id 3), join 10 after both."""

    payload: dict[str, Any] = {
        "num": 42,
        "status": "Success",
        "workflow": {
            "name": "deploy",
            "project_key": "PROJ",
            "workflow_data": {
                "node": {
                    "id": 1,
                    "name": "build",
                    "triggers": [
                        {"child_node_id": 2, "child_node": {"id": 2, "name": "test"}},
                        {"child_node_id": 3, "child_node": {"id": 3, "name": "lint"}},
                    ],
                },
                "joins": [
                    {"id": 10, "name": "join-all", "parents": [{"parent_id": 2}, {"parent_id": 3}]},
                    {"id": 11, "name": "join-again", "parents": [{"parent_id": 2}, {"parent_id": 2}]},
                ],
            },
        },
        "nodes": {
            "1": [
                {
                    "status": "Success",
                    "stages": [
                        {
                            "name": "",
                            "build_order": 3,
                            "status": "Success",
                            "run_jobs": [
                                {
                                    "status": "Fail",
                                    "job": {
                                        "action": {
                                            "name": "compile",
                                            "actions": [
                                                {"name": "CheckoutApplication", "step_name": ""},
                                                {"name": "Script", "step_name": "make build"},
                                                {"name": "Artifact Upload"},
                                            ],
                                        },
                                        "step_status": [
                                            {"status": "Success"},
                                            {"status": "Fail"},
                                            {"status": "Skipped"},
                                        ],
                                    },
                                }
                            ],
                        },
                        {"name": "Package", "build_order": 4, "status": "Never Built"},
                    ],
                }
            ],
            "2": [{"status": "Building", "stages": []}],
        },
    }
    payload.update(overrides)
    return payload


def run_payload_json(**overrides: Any) -> str:
    return json.dumps(run_payload(**overrides))
