"""
Constants: version, storage key, sync timings, attendance vocabularies.
"""

AGENT_VERSION = "1.0.0"

# ─── Local buffer ────────────────────────────────────────────────
STORAGE_KEY = "attendance_sync_buffer"   # Device-wide, shared by all events

# ─── Sync timings ────────────────────────────────────────────────
SYNC_DEBOUNCE_SEC = 2          # Let the connection settle before syncing
RETRY_BACKOFF_MAX_SEC = 120    # Ceiling for the delay between failing passes
CONNECTIVITY_CHECK_SEC = 15    # How often the monitor probes the server

# ─── Network ─────────────────────────────────────────────────────
API_TIMEOUT = 30               # Seconds — generous for backend cold starts
PROBE_TIMEOUT = 4              # Socket connect timeout for connectivity probe
ATTENDANCE_TABLE = "event_attendance"

# ─── Attendance vocabularies ─────────────────────────────────────
ATTENDANCE_TYPES = ("in", "out")

CHECKIN_METHODS = (
    "QR",
    "NFC",
    "MANUAL",
    "ID-SCAN",
)

DEFAULT_METHOD = "QR"
