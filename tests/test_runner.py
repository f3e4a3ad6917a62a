from __future__ import annotations

import json

import pytest

from attendance_sync import config as config_module
from attendance_sync import runner
from attendance_sync.enrollment import console_enroll
from attendance_sync.network import ManualConnectivity

CONFIG = {
    "serverUrl": "https://church.example.co",
    "apiKey": "anon",
    "eventId": "E1",
    "zoneId": "zone-main",
    "method": "NFC",
}


class StubBuffer:
    def __init__(self, offline=False):
        self.offline = offline
        self.recorded = []
        self.synced = 0

    @property
    def buffer_size(self):
        return len(self.recorded) if self.offline else 0

    def record_attendance(self, payload):
        self.recorded.append(payload)
        return {"success": True, "offline": True} if self.offline else {"success": True}

    def sync_now(self):
        self.synced += 1
        return 0

    def status(self):
        return {"isOnline": not self.offline, "bufferSize": self.buffer_size, "isSyncing": False}


def test_parse_scan():
    assert runner.parse_scan("M-12", CONFIG) == {
        "event_id": "E1",
        "member_id": "M-12",
        "zone_id": "zone-main",
        "type": "in",
        "method": "NFC",
    }
    assert runner.parse_scan("- OUT", CONFIG)["member_id"] is None
    assert runner.parse_scan("- OUT", CONFIG)["type"] == "out"
    assert runner.parse_scan("M-12 sideways", CONFIG) is None
    assert runner.parse_scan("a b c", CONFIG) is None


def test_console_loop_dispatches_commands(capsys):
    buffer = StubBuffer(offline=True)

    runner.console_loop(buffer, CONFIG, ["M-1\n", "\n", "bogus line here\n", "status\n", "sync\n", "quit\n", "M-2\n"])

    out = capsys.readouterr().out
    assert [p["member_id"] for p in buffer.recorded] == ["M-1"]
    assert buffer.synced == 1
    assert "Offline check-in saved." in out
    assert "OFFLINE | pending=1" in out
    assert "Usage:" in out


def test_main_records_scans_into_file_buffer(tmp_path, monkeypatch):
    conn = ManualConnectivity(online=False)
    conn.start = lambda: None
    conn.stop = lambda: None
    monkeypatch.setattr(runner, "setup_logging", lambda: None)
    monkeypatch.setattr(runner, "load_config", lambda: dict(CONFIG))
    monkeypatch.setattr(runner, "ConnectivityMonitor", lambda url, interval: conn)
    monkeypatch.setattr(runner, "BASE_DIR", tmp_path)

    runner.main(lines=["M-1 in\n", "M-1 out\n", "quit\n"])

    saved = json.loads((tmp_path / "attendance_sync_buffer.json").read_text(encoding="utf-8"))
    assert [r["payload"]["type"] for r in saved] == ["in", "out"]
    assert all(r["payload"]["method"] == "NFC" for r in saved)


def test_main_exits_on_incomplete_config(monkeypatch):
    monkeypatch.setattr(runner, "setup_logging", lambda: None)
    monkeypatch.setattr(runner, "load_config", lambda: {"serverUrl": "https://x.example.co"})

    with pytest.raises(SystemExit):
        runner.main(lines=[])


def test_console_enroll_saves_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "BASE_DIR", tmp_path)
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.json")
    answers = iter(["", "https://church.example.co/", "anon", "E1", "", "bogus", "id-scan"])

    config = console_enroll(input_fn=lambda prompt: next(answers))

    assert config == {
        "serverUrl": "https://church.example.co",
        "apiKey": "anon",
        "eventId": "E1",
        "zoneId": None,
        "method": "ID-SCAN",
    }
    assert config_module.load_config() == config
