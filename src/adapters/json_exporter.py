"""JSON export of a tree snapshot.

Why JSON:
- Two expansions can be diffed, and other tools can consume the result.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from core.services.snapshot import SnapshotNode


def export_snapshot_json(*, roots: Sequence[SnapshotNode], output_path: Path) -> Path:
    """Write the snapshot as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [root.to_dict() for root in roots]
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return output_path
