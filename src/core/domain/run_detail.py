"""Decoding boundary for the raw run query.

The run detail is not available as a structured cdsctl verb, so it is read
through `admin curl`. This is the only place that turns that text into a
typed `WorkflowRunDetail`.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from core.domain.models import WorkflowRunDetail
from core.errors import RunDecodeError


def decode_run_detail(raw: str | bytes) -> WorkflowRunDetail:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RunDecodeError(f"run payload is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise RunDecodeError(f"run payload must be an object, got {type(data).__name__}")
    try:
        return WorkflowRunDetail.model_validate(data)
    except ValidationError as exc:
        raise RunDecodeError(f"unexpected run payload: {exc}") from exc
