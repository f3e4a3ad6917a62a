"""
Entry point: check-in console on top of the sync buffer.

Reads one scan per line from stdin:
    <member> [in|out]   record attendance ("-" for an anonymous scan)
    sync                force a sync pass now
    status              show online / pending / syncing
    quit                exit (pending records stay on disk)
"""

import sys

from .constants import (
    AGENT_VERSION, ATTENDANCE_TYPES, CONNECTIVITY_CHECK_SEC, SYNC_DEBOUNCE_SEC, DEFAULT_METHOD,
)
from .config import BASE_DIR, log, safe_print, load_config, setup_logging
from .api import AttendanceApi
from .enrollment import console_enroll
from .network import ConnectivityMonitor
from .notify import ConsoleNotifier
from .storage import JsonFileStore
from .sync import AttendanceSyncBuffer


def parse_scan(line, config):
    """Turn a console line into an attendance payload, or None if malformed."""
    parts = line.split()
    if not parts or len(parts) > 2:
        return None
    member = None if parts[0] == "-" else parts[0]
    kind = parts[1].lower() if len(parts) == 2 else "in"
    if kind not in ATTENDANCE_TYPES:
        return None
    return {
        "event_id": config["eventId"],
        "member_id": member,
        "zone_id": config.get("zoneId"),
        "type": kind,
        "method": config.get("method", DEFAULT_METHOD),
    }


def build_buffer(config, monitor, store=None, notifier=None):
    api = AttendanceApi(config)
    return AttendanceSyncBuffer(
        api,
        store or JsonFileStore(BASE_DIR),
        monitor,
        notifier=notifier or ConsoleNotifier(),
        debounce_sec=config.get("syncDebounceSec", SYNC_DEBOUNCE_SEC),
    )


def console_loop(buffer, config, lines):
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        command = line.lower()
        if command == "quit":
            break
        if command == "sync":
            synced = buffer.sync_now()
            safe_print(f"Synced {synced} records, {buffer.buffer_size} pending")
            continue
        if command == "status":
            st = buffer.status()
            safe_print(
                f"{'online' if st['isOnline'] else 'OFFLINE'} | "
                f"pending={st['bufferSize']} | syncing={st['isSyncing']}"
            )
            continue

        payload = parse_scan(line, config)
        if payload is None:
            safe_print("Usage: <member|-> [in|out] | sync | status | quit")
            continue
        result = buffer.record_attendance(payload)
        if result.get("offline"):
            safe_print("Offline check-in saved.")
        else:
            safe_print("Check-in successful. Welcome!" if payload["type"] == "in" else "Check-out recorded.")


def main(lines=None):
    """Primary console entry point."""
    setup_logging()
    safe_print("Attendance Sync Agent v" + AGENT_VERSION)
    safe_print()

    config = load_config()
    if not config:
        try:
            config = console_enroll()
        except (EOFError, KeyboardInterrupt):
            safe_print("\nSetup cancelled.")
            sys.exit(1)
    else:
        log.info("Loaded config for event %s (%s)", config.get("eventId"), config.get("serverUrl"))

    if not config.get("serverUrl") or not config.get("eventId"):
        safe_print("Config is missing serverUrl or eventId.")
        sys.exit(1)

    monitor = ConnectivityMonitor(
        config["serverUrl"],
        interval=config.get("connectivityCheckSec", CONNECTIVITY_CHECK_SEC),
    )
    buffer = build_buffer(config, monitor)
    monitor.start()
    log.info("Started (online=%s, pending=%d)", buffer.is_online, buffer.buffer_size)

    try:
        console_loop(buffer, config, lines if lines is not None else sys.stdin)
    except KeyboardInterrupt:
        safe_print("\nStopped by operator.")
    finally:
        buffer.close()
        monitor.stop()
        log.info("Shut down with %d records pending", buffer.buffer_size)
