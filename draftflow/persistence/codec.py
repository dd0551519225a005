"""JSON encoding of drafts and history rows for the SQL backends.

A draft row keeps ``id`` and ``status`` in their own columns so that the
conditional update can match on them; every other field lives in ``body``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Tuple

from pydantic_core import to_jsonable_python

from ..contracts import Draft, DraftStatus

_COLUMNS = {"id", "status"}


def encode_draft(draft: Draft) -> Tuple[str, str, str]:
    """Return ``(id, status, body)`` for a draft row."""
    body = draft.model_dump(mode="json", exclude=_COLUMNS)
    return draft.id, draft.status.value, json.dumps(body)


def split_patch(patch: Dict[str, Any]) -> Tuple[DraftStatus | None, Dict[str, Any]]:
    """Separate the status column from the JSON fields of a patch."""
    fields = dict(patch)
    status = fields.pop("status", None)
    fields.pop("id", None)
    return (DraftStatus(status) if status is not None else None), to_jsonable_python(fields)


def decode_json(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (bytes, str)):
        return json.loads(value)
    return value


def decode_draft(draft_id: str, status: str, body: Any) -> Draft:
    data = decode_json(body) or {}
    return Draft.model_validate({**data, "id": draft_id, "status": status})
