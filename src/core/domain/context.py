"""Contexts and the explicit explorer session.

A context is one named section of a cdsctl config file together with a client
bound to it. The session replaces a process-wide "current context" singleton:
it is created per discovery pass and passed to discovery and rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.interfaces.cds_client import CdsClient


@dataclass(frozen=True)
class Context:
    name: str
    client: CdsClient = field(compare=False, repr=False)


@dataclass
class ExplorerSession:
    """Mutable session state shared by discovery passes.

    `active` is claimed at most once (first writer wins). The tree provider
    uses one session per discovery pass and keeps the one of the last
    completed pass; `release` is only used when the eager init of the claimed
    context fails.
    """

    active: Context | None = None

    def claim(self, context: Context) -> bool:
        if self.active is not None:
            return False
        self.active = context
        return True

    def release(self, context: Context) -> None:
        if self.active is context:
            self.active = None

    def is_active(self, name: str) -> bool:
        return self.active is not None and self.active.name == name
