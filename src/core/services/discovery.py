"""Context discovery from cdsctl TOML configuration files.

Each configured file looks like::

    current = "prod"

    [prod]
    host = "https://cds-api.example.com"
    ...

    [staging]
    ...

Every table becomes a `Context`; the `current` key selects the one that is
claimed by the session and initialised eagerly.
"""

from __future__ import annotations

import asyncio
import logging
import tomllib
from pathlib import Path
from typing import Any, Iterable

from core.domain.context import Context, ExplorerSession
from core.errors import ConfigError
from core.interfaces.cds_client import ClientFactory

logger = logging.getLogger(__name__)

CURRENT_KEY = "current"


async def _read_config(path: Path) -> dict[str, Any] | None:
    try:
        raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError:
        logger.warning("cdsctl config not found: %s", path)
        return None
    except OSError as exc:
        raise ConfigError(path, f"unreadable: {exc}") from exc
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, f"invalid TOML: {exc}") from exc


async def _discover_file(
    path: Path,
    *,
    session: ExplorerSession,
    client_factory: ClientFactory,
) -> list[Context]:
    config = await _read_config(path)
    if config is None:
        return []

    current = config.get(CURRENT_KEY)
    contexts: list[Context] = []
    for name, section in config.items():
        if name == CURRENT_KEY:
            continue
        if not isinstance(section, dict):
            logger.debug("%s: ignoring top-level key %r", path, name)
            continue
        context = Context(name=name, client=client_factory(path, name))
        contexts.append(context)
        # Claim before awaiting so an overlapping pass cannot init twice.
        if name == current and session.claim(context):
            logger.info("initialising current context %s (%s)", name, path)
            try:
                await context.client.init()
            except BaseException:
                session.release(context)
                raise
    return contexts


async def discover_contexts(
    paths: Iterable[Path],
    *,
    session: ExplorerSession,
    client_factory: ClientFactory,
) -> list[Context]:
    """Read every config file concurrently and return contexts in file-then-section order."""

    paths = list(paths)
    if not paths:
        return []
    per_file = await asyncio.gather(
        *(_discover_file(p, session=session, client_factory=client_factory) for p in paths)
    )
    contexts = [ctx for ctxs in per_file for ctx in ctxs]
    logger.debug("discovered %d context(s) from %d file(s)", len(contexts), len(paths))
    return contexts
