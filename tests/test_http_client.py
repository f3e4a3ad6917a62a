from __future__ import annotations

from attendance_sync.http_client import create_session, reset_session


def test_inserts_are_not_retried_by_the_transport():
    session = create_session()
    retry = session.get_adapter("https://church.example.co/rest/v1").max_retries

    assert "POST" not in retry.allowed_methods
    assert {"GET", "PATCH"} <= set(retry.allowed_methods)
    assert set(retry.status_forcelist) == {502, 503, 504}
    assert retry.total == 3


def test_reset_session_returns_fresh_session():
    old = create_session()
    new = reset_session(old)

    assert new is not old
    assert new.headers["User-Agent"].startswith("attendance-sync/")
