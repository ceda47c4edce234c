"""Tests for the cdsctl subprocess adapter (no real binary is executed)."""

import asyncio
import json
from pathlib import Path

import pytest

from adapters import cdsctl as cdsctl_module
from adapters.cdsctl import CdsCtl
from core.config import AppSettings
from core.errors import CdsCtlError


class FakeProcess:
    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0, delay: float = 0.0) -> None:
        self._stdout = stdout.encode()
        self._stderr = stderr.encode()
        self.returncode = returncode
        self._delay = delay
        self.killed = False

    async def communicate(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


@pytest.fixture
def spawn(monkeypatch):
    """Queue FakeProcess results and capture the argv of each spawn."""

    calls: list[list[str]] = []
    queue: list[object] = []

    async def fake_exec(*args, **kwargs):
        calls.append(list(args))
        result = queue.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    monkeypatch.setattr(cdsctl_module.asyncio, "create_subprocess_exec", fake_exec)
    return calls, queue


def client(**kwargs) -> CdsCtl:
    return CdsCtl(Path("/home/me/.cdsrc"), "prod", **kwargs)


@pytest.mark.asyncio
async def test_structured_command_argv_and_json(spawn) -> None:
    calls, queue = spawn
    queue.append(FakeProcess(stdout=json.dumps([{"name": "deploy", "project_key": "PROJ"}])))

    result = await client().run_cds_command("workflow list PROJ")

    assert result == [{"name": "deploy", "project_key": "PROJ"}]
    assert calls == [
        ["cdsctl", "-f", "/home/me/.cdsrc", "-c", "prod", "workflow", "list", "PROJ", "--format", "json"]
    ]


@pytest.mark.asyncio
async def test_empty_output_is_none(spawn) -> None:
    _, queue = spawn
    queue.append(FakeProcess(stdout="\n"))

    assert await client().run_cds_command("workflow favorites list") is None


@pytest.mark.asyncio
async def test_raw_command_has_no_format_flag(spawn) -> None:
    calls, queue = spawn
    queue.append(FakeProcess(stdout='{"num": 1}'))

    out = await client(binary="/opt/cdsctl").run_raw("admin curl /project/P/workflows/w/runs/1")

    assert out == '{"num": 1}'
    assert calls[0][0] == "/opt/cdsctl"
    assert calls[0][-3:] == ["admin", "curl", "/project/P/workflows/w/runs/1"]


@pytest.mark.asyncio
async def test_non_zero_exit(spawn) -> None:
    _, queue = spawn
    queue.append(FakeProcess(stderr="403 forbidden\n", returncode=1))

    with pytest.raises(CdsCtlError, match="403 forbidden") as excinfo:
        await client().run_cds_command("project list")
    assert excinfo.value.returncode == 1
    assert excinfo.value.stderr == "403 forbidden"


@pytest.mark.asyncio
async def test_invalid_json(spawn) -> None:
    _, queue = spawn
    queue.append(FakeProcess(stdout="NAME  KEY\nfoo   FOO\n"))

    with pytest.raises(CdsCtlError, match="invalid JSON"):
        await client().run_cds_command("project list")


@pytest.mark.asyncio
async def test_missing_binary(spawn) -> None:
    _, queue = spawn
    queue.append(FileNotFoundError("cdsctl"))

    with pytest.raises(CdsCtlError, match="not found"):
        await client().run_cds_command("project list")


@pytest.mark.asyncio
async def test_timeout_kills_process(spawn) -> None:
    _, queue = spawn
    proc = FakeProcess(stdout="[]", delay=1.0)
    queue.append(proc)

    with pytest.raises(CdsCtlError, match="timed out"):
        await client(timeout=0.01).run_cds_command("project list")
    assert proc.killed


@pytest.mark.asyncio
async def test_init_resolves_urls_once(spawn) -> None:
    calls, queue = spawn
    queue.append(FakeProcess(stdout=json.dumps({"url.ui": "https://ui.cds/", "url.api": "https://api.cds"})))
    cds = client()

    await cds.init()
    await cds.init()

    assert len(calls) == 1
    assert calls[0][-2:] == ["curl", "/config/user"]
    assert await cds.ui_url() == "https://ui.cds"
    assert await cds.api_url() == "https://api.cds"
    assert cds.initialized


@pytest.mark.asyncio
async def test_ui_url_initialises_lazily(spawn) -> None:
    _, queue = spawn
    queue.append(FakeProcess(stdout=json.dumps({"url.ui": "https://ui.cds"})))
    cds = client()

    assert not cds.initialized
    assert await cds.ui_url() == "https://ui.cds"
    with pytest.raises(CdsCtlError, match="no API URL"):
        await cds.api_url()


@pytest.mark.asyncio
async def test_init_without_ui_url(spawn) -> None:
    _, queue = spawn
    queue.append(FakeProcess(stdout="{}"))

    with pytest.raises(CdsCtlError, match="url.ui"):
        await client().init()


@pytest.mark.asyncio
async def test_ui_url_missing_after_init_raises(monkeypatch) -> None:
    cds = client()

    async def no_init() -> None:
        return None

    monkeypatch.setattr(cds, "init", no_init)

    with pytest.raises(CdsCtlError, match="context prod has no UI URL"):
        await cds.ui_url()


def test_factory_uses_settings() -> None:
    settings = AppSettings(cdsctl_path="/usr/local/bin/cdsctl", command_timeout_seconds=5)
    built = CdsCtl.factory(settings)(Path("/etc/cdsrc"), "staging")

    assert built.context_name == "staging"
    assert built.config_file == Path("/etc/cdsrc")
    assert built.build_args("project list", json_output=False)[:5] == [
        "/usr/local/bin/cdsctl",
        "-f",
        "/etc/cdsrc",
        "-c",
        "staging",
    ]
