"""Logging setup.

Modules use `logging.getLogger(__name__)`; only the CLI installs a handler,
a `RichHandler` on stderr so tree output on stdout stays clean.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_CONFIGURED = False


def configure_logging(level: str = "WARNING") -> None:
    """Install a single RichHandler on the root logger (idempotent)."""

    global _CONFIGURED
    root = logging.getLogger()
    root.setLevel(level)
    if _CONFIGURED:
        return
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    _CONFIGURED = True
