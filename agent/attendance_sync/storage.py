"""
Durable key-value storage for the offline buffer.

JsonFileStore keeps one file per key inside the agent data directory.
Writes go through a temp file + os.replace so a crash mid-write leaves
the previous buffer intact.
"""

import json
import os
from pathlib import Path

from .config import log
from .records import PendingRecord


class KeyValueStore:
    """String-keyed get/set of serialized values."""

    def get(self, key):
        raise NotImplementedError

    def set(self, key, value):
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, key):
        return self.directory / f"{key}.json"

    def get(self, key):
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key, value):
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(value)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)


# ─── Buffer (de)serialization ────────────────────────────────────

def dump_buffer(records):
    return json.dumps([r.to_dict() for r in records])


def parse_buffer(raw):
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    return [PendingRecord.from_dict(item) for item in data]


def load_buffer(store, key):
    """
    Read the buffer once at startup. Corrupt or unreadable data yields an
    empty buffer; unsynced records in it are lost.
    """
    try:
        raw = store.get(key)
    except (OSError, ValueError) as e:
        # ValueError covers bytes that are not valid UTF-8.
        log.error("Failed to read attendance buffer %r — starting empty: %s", key, e)
        return []
    if not raw:
        return []
    try:
        records = parse_buffer(raw)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        log.error("Failed to parse attendance buffer %r — starting empty: %s", key, e)
        return []
    log.info("Loaded %d pending attendance records", len(records))
    return records


def save_buffer(store, key, records):
    """Persist the whole buffer. Returns True on success, never raises."""
    try:
        store.set(key, dump_buffer(records))
        return True
    except Exception as e:
        log.warning("Failed to persist attendance buffer (%d records): %s", len(records), e)
        return False
