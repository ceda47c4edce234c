"""CDS client contract.

Why a Protocol:
- The tree only needs "run a command, get JSON back"; the real adapter
  (`adapters.cdsctl.CdsCtl`) spawns a subprocess, tests use a fake.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CdsClient(Protocol):
    """Minimal client bound to one (config file, context) pair.

    Rules:
    - Every call is async because it waits on an external process.
    - Failures raise `core.errors.CdsCtlError`; nothing is retried here.
    """

    @property
    def context_name(self) -> str: ...

    @property
    def config_file(self) -> Path: ...

    async def init(self) -> None:
        """Resolve the session (API and UI base URLs). Idempotent."""

        ...

    async def run_cds_command(self, command: str) -> Any:
        """Run a structured verb (e.g. `workflow list KEY`) and decode its JSON."""

        ...

    async def run_raw(self, command: str) -> str:
        """Run a passthrough command (e.g. `admin curl /path`) and return stdout."""

        ...

    async def ui_url(self) -> str: ...

    async def api_url(self) -> str: ...


class ClientFactory(Protocol):
    def __call__(self, config_file: Path, context_name: str) -> CdsClient: ...
