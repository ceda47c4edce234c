"""Adapter over the `cdsctl` binary.

Why a subprocess:
- `cdsctl` already handles authentication, tokens and HTTP against the CDS API;
  this module only builds argv and decodes the output.
- One client per (config file, context), like `cdsctl -f -c`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shlex
from pathlib import Path
from typing import Any

from core.config import AppSettings
from core.errors import CdsCtlError

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = "/config/user"


class CdsCtl:
    """`CdsClient` implementation backed by the cdsctl executable."""

    def __init__(
        self,
        config_file: Path,
        context_name: str,
        *,
        binary: str = "cdsctl",
        timeout: float | None = None,
    ) -> None:
        self._config_file = Path(config_file)
        self._context_name = context_name
        self._binary = binary
        self._timeout = timeout
        self._api_url: str | None = None
        self._ui_url: str | None = None
        self._init_lock = asyncio.Lock()

    @classmethod
    def factory(cls, settings: AppSettings | None = None):
        """Return a `ClientFactory` bound to the cdsctl settings."""

        settings = settings or AppSettings()

        def build(config_file: Path, context_name: str) -> CdsCtl:
            return cls(
                config_file,
                context_name,
                binary=settings.cdsctl_path,
                timeout=settings.command_timeout_seconds,
            )

        return build

    @property
    def context_name(self) -> str:
        return self._context_name

    @property
    def config_file(self) -> Path:
        return self._config_file

    @property
    def initialized(self) -> bool:
        return self._ui_url is not None

    def build_args(self, command: str, *, json_output: bool) -> list[str]:
        args = [self._binary, "-f", str(self._config_file), "-c", self._context_name]
        args.extend(shlex.split(command))
        if json_output:
            args.extend(["--format", "json"])
        return args

    async def _exec(self, args: list[str]) -> str:
        logger.debug("exec %s", shlex.join(args))
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise CdsCtlError(f"cdsctl not found: {self._binary}", command=args) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise CdsCtlError(
                f"cdsctl timed out after {self._timeout}s: {shlex.join(args[5:])}",
                command=args,
            ) from exc

        err_text = stderr.decode("utf-8", errors="replace").strip()
        if proc.returncode != 0:
            raise CdsCtlError(
                f"cdsctl exited with {proc.returncode}: {err_text or shlex.join(args[5:])}",
                command=args,
                returncode=proc.returncode,
                stderr=err_text,
            )
        return stdout.decode("utf-8", errors="replace")

    async def run_cds_command(self, command: str) -> Any:
        args = self.build_args(command, json_output=True)
        out = await self._exec(args)
        if not out.strip():
            return None
        try:
            return json.loads(out)
        except json.JSONDecodeError as exc:
            raise CdsCtlError(f"invalid JSON from `{command}`: {exc}", command=args) from exc

    async def run_raw(self, command: str) -> str:
        return await self._exec(self.build_args(command, json_output=False))

    async def init(self) -> None:
        """Resolve API/UI URLs from the server's user config (once)."""

        async with self._init_lock:
            if self._ui_url is not None:
                return
            raw = await self.run_raw(f"admin curl {USER_CONFIG_PATH}")
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise CdsCtlError(f"invalid JSON from {USER_CONFIG_PATH}: {exc}") from exc
            if not isinstance(data, dict) or not data.get("url.ui"):
                raise CdsCtlError(f"{USER_CONFIG_PATH} did not return `url.ui`")
            self._ui_url = str(data["url.ui"]).rstrip("/")
            self._api_url = str(data.get("url.api") or "").rstrip("/") or None
            logger.info("context %s: ui=%s api=%s", self._context_name, self._ui_url, self._api_url)

    async def ui_url(self) -> str:
        await self.init()
        if self._ui_url is None:
            raise CdsCtlError(f"context {self._context_name} has no UI URL")
        return self._ui_url

    async def api_url(self) -> str:
        await self.init()
        if self._api_url is None:
            raise CdsCtlError(f"context {self._context_name} has no API URL")
        return self._api_url

    def __repr__(self) -> str:
        return f"CdsCtl(config_file={str(self._config_file)!r}, context={self._context_name!r})"
