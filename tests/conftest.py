from __future__ import annotations

import pytest
import requests

from attendance_sync.api import ApiResult
from attendance_sync.network import ManualConnectivity
from attendance_sync.storage import MemoryStore


class FakeApi:
    """Scripted remote API.

    Outcomes are "ok", "reject" or "raise". `outcomes` is consumed one per
    call; `by_event` pins an outcome for every call with that event_id.
    """

    def __init__(self, outcomes=None, by_event=None, default="ok"):
        self.outcomes = list(outcomes or [])
        self.by_event = dict(by_event or {})
        self.default = default
        self.calls: list[dict] = []

    def record_attendance(self, payload):
        self.calls.append(payload)
        if payload.get("event_id") in self.by_event:
            outcome = self.by_event[payload["event_id"]]
        elif self.outcomes:
            outcome = self.outcomes.pop(0)
        else:
            outcome = self.default

        if outcome == "raise":
            raise requests.ConnectionError("network unreachable")
        if outcome == "reject":
            return ApiResult(error={"status": 400, "message": "invalid event"})
        return ApiResult(data={"id": f"row-{len(self.calls)}"})


class RecordingNotifier:
    def __init__(self):
        self.infos: list[tuple[str, str | None]] = []
        self.successes: list[str] = []

    def info(self, message, description=None):
        self.infos.append((message, description))

    def success(self, message):
        self.successes.append(message)


class FakeTimer:
    def __init__(self, delay, function):
        self.delay = delay
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        assert self.started and not self.cancelled
        self.function()


class TimerFactory:
    def __init__(self):
        self.created: list[FakeTimer] = []

    def __call__(self, delay, function):
        timer = FakeTimer(delay, function)
        self.created.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.created if t.started and not t.cancelled]

    def fire_pending(self):
        pending = self.active
        assert len(pending) == 1, f"expected one pending timer, got {len(pending)}"
        pending[0].cancelled = True
        pending[0].function()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def timers():
    return TimerFactory()


@pytest.fixture
def offline():
    return ManualConnectivity(online=False)


@pytest.fixture
def online():
    return ManualConnectivity(online=True)
