"""
attendance_sync — Offline Attendance Sync Agent v1.0
====================================================
Check-ins are buffered on disk and delivered to the backend when online.

  constants.py    → Version, storage key, sync timings, vocabularies
  config.py       → Paths, logging, config load/save, helpers
  http_client.py  → HTTP session with retry/pooling
  records.py      → PendingRecord / AttendancePayload (JSON form on disk)
  storage.py      → Key-value stores + buffer (de)serialization
  network.py      → Connectivity oracles (pushed + socket-polled)
  api.py          → Remote attendance table (check-in / check-out)
  notify.py       → Operator notices
  sync.py         → AttendanceSyncBuffer (queue, delivery, retry)
  enrollment.py   → First-run console setup
  runner.py       → main() check-in console
"""

from .api import ApiResult, AttendanceApi
from .network import ConnectivityMonitor, ManualConnectivity
from .records import AttendancePayload, PendingRecord
from .storage import JsonFileStore, MemoryStore
from .sync import AttendanceSyncBuffer

__all__ = [
    "ApiResult",
    "AttendanceApi",
    "AttendancePayload",
    "AttendanceSyncBuffer",
    "ConnectivityMonitor",
    "JsonFileStore",
    "ManualConnectivity",
    "MemoryStore",
    "PendingRecord",
]
