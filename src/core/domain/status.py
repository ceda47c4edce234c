"""Status glyphs shown in front of runs, nodes, stages, jobs and steps."""

from __future__ import annotations

IN_PROGRESS = "↻"
OK = "✓"
FAILED = "✗"

STATUS_GLYPHS: dict[str, str] = {
    "Pending": IN_PROGRESS,
    "Waiting": IN_PROGRESS,
    "Building": IN_PROGRESS,
    "Success": OK,
    "Fail": FAILED,
    "Disabled": OK,
    "Never Built": OK,
    "Unknown": OK,
    "Skipped": OK,
    "Stopped": FAILED,
    "Stopping": FAILED,
}


def status_glyph(status: str | None) -> str | None:
    """Return the glyph for a server status, or None when it is not mapped."""

    if status is None:
        return None
    return STATUS_GLYPHS.get(status)


def decorate(label: str, status: str | None) -> str:
    glyph = status_glyph(status)
    if glyph is None:
        return label
    return f"{glyph} {label}"
