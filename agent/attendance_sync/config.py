"""
Paths, logging setup, config load/save, safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path


# ─── Paths ───────────────────────────────────────────────────────
# One data directory per device. All events share the same buffer file.
_FOLDER_NAME = ".attendance_sync"

BASE_DIR = Path(os.environ.get("ATTENDANCE_SYNC_HOME") or Path.home() / _FOLDER_NAME)

CONFIG_FILE = BASE_DIR / "config.json"
LOG_FILE = BASE_DIR / "sync.log"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_LOG_MAX_BYTES = 1_000_000

log = logging.getLogger("attendance_sync")


def ensure_base_dir():
    BASE_DIR.mkdir(parents=True, exist_ok=True)
    return BASE_DIR


# ─── Safe print (no crash without a console) ─────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

def setup_logging(level=logging.INFO):
    """Attach file + console handlers to the agent logger.

    The log file is truncated once it grows past 1 MB so a long-running
    kiosk never fills the disk.
    """
    ensure_base_dir()
    try:
        if LOG_FILE.exists() and LOG_FILE.stat().st_size > _LOG_MAX_BYTES:
            LOG_FILE.write_text("")
    except OSError:
        pass

    log.setLevel(level)
    if log.handlers:
        return log

    formatter = logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = logging.FileHandler(str(LOG_FILE), encoding="utf-8")
    file_handler.setFormatter(formatter)
    log.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)
    return log


# ─── Config Management ──────────────────────────────────────────

def load_config():
    """Load config from disk. Returns dict or None."""
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return None
    return None


def save_config(config):
    """Save config dict to disk."""
    ensure_base_dir()
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    log.info("Config saved to %s", CONFIG_FILE)
