"""Explorer errors.

Every error of the project derives from `ExplorerError`, so the CLI can turn
them into a message and an exit code without catching `Exception`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ExplorerError(Exception):
    """Base class for every error raised by the explorer."""


class ConfigError(ExplorerError):
    """A cdsctl configuration file could not be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class CdsCtlError(ExplorerError):
    """A cdsctl invocation failed (exit code, timeout, or unreadable output)."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


class PayloadDecodeError(ExplorerError):
    """cdsctl output was valid JSON but not the expected shape."""


class RunDecodeError(PayloadDecodeError):
    """The raw workflow run payload does not have the expected shape."""


class UnknownNodeError(ExplorerError):
    """A label path does not match any node of the tree."""
