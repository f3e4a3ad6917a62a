"""
PendingRecord — one buffered attendance event awaiting remote confirmation.

The JSON form written to local storage is::

    {"id": "...", "payload": {"event_id": ..., "member_id": ..., "zone_id": ...,
     "type": "in", "method": "QR", "timestamp": "2024-05-01T09:30:00.000Z"},
     "attempts": 0}
"""

import json
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .config import log

_OPTIONAL_KEYS = ("session_id", "metadata")


def utc_timestamp(now=None) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _json_safe(payload):
    try:
        return json.loads(json.dumps(dict(payload), default=str))
    except (TypeError, ValueError) as e:
        # Non-string keys or circular values: flatten each field to a string.
        log.warning("Attendance payload not JSON-safe, storing values as text: %s", e)
        return {
            str(key): value if isinstance(value, (str, int, float, bool, type(None))) else str(value)
            for key, value in payload.items()
        }


@dataclass
class AttendancePayload:
    event_id: Optional[str]
    type: Optional[str]
    method: Optional[str]
    timestamp: Optional[str]
    member_id: Optional[str] = None
    zone_id: Optional[str] = None
    session_id: Optional[str] = None
    metadata: Any = None

    def to_dict(self) -> dict:
        data = {
            "event_id": self.event_id,
            "member_id": self.member_id,
            "zone_id": self.zone_id,
            "type": self.type,
            "method": self.method,
            "timestamp": self.timestamp,
        }
        for key in _OPTIONAL_KEYS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AttendancePayload":
        # No validation here: the remote API decides what is acceptable.
        return cls(
            event_id=data.get("event_id"),
            type=data.get("type"),
            method=data.get("method"),
            timestamp=data.get("timestamp"),
            member_id=data.get("member_id"),
            zone_id=data.get("zone_id"),
            session_id=data.get("session_id"),
            metadata=data.get("metadata"),
        )


@dataclass
class PendingRecord:
    payload: AttendancePayload
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    attempts: int = 0

    @classmethod
    def create(cls, payload: dict) -> "PendingRecord":
        """
        Stamp a caller payload with a fresh id and the current time.

        The payload is forced into JSON-safe form (unknown types become
        strings) so one odd value cannot stop the buffer from being saved.
        A non-mapping payload is queued empty; the server will reject it.
        """
        if isinstance(payload, Mapping):
            fields = _json_safe(payload)
        else:
            log.warning("Attendance payload is not a mapping: %r", payload)
            fields = {}
        fields["timestamp"] = utc_timestamp()
        return cls(payload=AttendancePayload.from_dict(fields))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payload": self.payload.to_dict(),
            "attempts": self.attempts,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingRecord":
        return cls(
            id=data["id"],
            payload=AttendancePayload.from_dict(data["payload"]),
            attempts=int(data.get("attempts", 0)),
        )
