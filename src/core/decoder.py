"""Submission payload decoding (core domain)."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from core.errors import DecodeError
from core.models import SubmissionRecord

REQUIRED_FIELDS = ("submitter", "remote_addr")


def _optional_str(payload: dict[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    return str(value)


def decode_submission(key: str, timestamp: datetime, body: bytes) -> SubmissionRecord:
    """Parse a stored submission body into a SubmissionRecord.

    The body must be a JSON object carrying non-empty `submitter` and
    `remote_addr` strings. The other fields the delegation backend stores
    are kept when present. Values are kept verbatim since they feed the
    identity hash.
    """

    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise DecodeError(key, "body is not UTF-8") from exc
    except json.JSONDecodeError as exc:
        raise DecodeError(key, f"body is not JSON ({exc.msg})") from exc

    if not isinstance(payload, dict):
        raise DecodeError(key, f"expected a JSON object, got {type(payload).__name__}")

    for field in REQUIRED_FIELDS:
        value = payload.get(field)
        if not isinstance(value, str) or not value.strip():
            raise DecodeError(key, f"missing or empty {field!r}")

    return SubmissionRecord(
        key=key,
        timestamp=timestamp,
        submitter=payload["submitter"],
        remote_addr=payload["remote_addr"],
        peer_id=_optional_str(payload, "peer_id"),
        block_hash=_optional_str(payload, "block_hash"),
        created_at=_optional_str(payload, "created_at"),
    )
