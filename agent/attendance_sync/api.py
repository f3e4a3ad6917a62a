"""
Remote attendance-recording API — the hosted backend's REST table.

record_attendance() is blocking. Two failure shapes reach the caller:
  - transport failure → requests.RequestException is raised
  - API rejection     → ApiResult with `error` set
The sync buffer treats both the same way.
"""

import json
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .config import log
from .constants import API_TIMEOUT, ATTENDANCE_TABLE
from . import http_client


@dataclass
class ApiResult:
    data: Any = None
    error: Optional[dict] = None

    @property
    def ok(self):
        return self.error is None


def _is_uuid(value):
    if not value:
        return False
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False


def _error_from(resp):
    return {"status": resp.status_code, "message": resp.text[:200]}


class AttendanceApi:
    """Writes check-ins/check-outs into the `event_attendance` table."""

    def __init__(self, config, session=None):
        self._base_url = f"{config['serverUrl'].rstrip('/')}/rest/v1/{ATTENDANCE_TABLE}"
        self._api_key = config.get("apiKey", "")
        self._access_token = config.get("accessToken") or self._api_key
        self._operator_id = config.get("operatorId")
        self.session = session or http_client.create_session()

    def _headers(self):
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def _request(self, method, params=None, body=None):
        try:
            return self.session.request(
                method,
                self._base_url,
                params=params,
                json=body,
                headers=self._headers(),
                timeout=API_TIMEOUT,
            )
        except requests.ConnectionError:
            self.session = http_client.reset_session(self.session)
            raise

    # ─── Public ──────────────────────────────────────────────

    def record_attendance(self, payload):
        """Deliver one attendance payload (dict). Returns ApiResult."""
        member_id = payload.get("member_id") if _is_uuid(payload.get("member_id")) else None
        zone_id = payload.get("zone_id") if _is_uuid(payload.get("zone_id")) else None
        timestamp = payload.get("timestamp")
        notes = json.dumps({
            "method": payload.get("method"),
            "session_id": payload.get("session_id"),
            "zone_label": payload.get("zone_id"),
            "metadata": payload.get("metadata"),
        })
        row = {
            "event_id": payload.get("event_id"),
            "member_id": member_id,
            "zone_id": zone_id,
            "checked_in_by": self._operator_id,
            "notes": notes,
        }

        if payload.get("type") == "in":
            return self._insert({**row, "status": "checked_in", "checked_in_at": timestamp})

        latest = self._find_open_checkin(payload.get("event_id"), member_id)
        if not latest.ok:
            return latest
        if latest.data:
            return self._update(latest.data["id"], {
                "status": "checked_out",
                "checked_out_at": timestamp,
                "notes": notes,
            })

        # No open check-in: record a closed visit.
        return self._insert({
            **row,
            "status": "checked_out",
            "checked_in_at": timestamp,
            "checked_out_at": timestamp,
        })

    # ─── Table operations ────────────────────────────────────

    def _insert(self, row):
        resp = self._request("POST", body=row)
        if resp.status_code in (200, 201):
            data = resp.json()
            log.info("Attendance %s recorded for event %s", row["status"], row["event_id"])
            return ApiResult(data=data[0] if isinstance(data, list) and data else data)
        log.warning("Attendance insert failed: HTTP %d — %s", resp.status_code, resp.text[:200])
        return ApiResult(error=_error_from(resp))

    def _update(self, row_id, changes):
        resp = self._request("PATCH", params={"id": f"eq.{row_id}"}, body=changes)
        if resp.status_code in (200, 204):
            data = resp.json() if resp.status_code == 200 else None
            log.info("Attendance row %s checked out", row_id)
            return ApiResult(data=data[0] if isinstance(data, list) and data else data)
        log.warning("Attendance update failed: HTTP %d — %s", resp.status_code, resp.text[:200])
        return ApiResult(error=_error_from(resp))

    def _find_open_checkin(self, event_id, member_id):
        params = {
            "select": "id",
            "event_id": f"eq.{event_id}",
            "checked_out_at": "is.null",
            "member_id": f"eq.{member_id}" if member_id else "is.null",
            "order": "checked_in_at.desc",
            "limit": "1",
        }
        resp = self._request("GET", params=params)
        if resp.status_code != 200:
            log.warning("Open check-in lookup failed: HTTP %d", resp.status_code)
            return ApiResult(error=_error_from(resp))
        rows = resp.json()
        return ApiResult(data=rows[0] if rows else None)
