"""
HTTP session for the attendance backend: pooled connections, transport
retry for idempotent calls, CA bundle lookup.

POST is deliberately absent from the retried methods. A 502 on an insert
may still have written the row, and the sync buffer already retries the
whole record, so a second transport-level POST could create a duplicate
check-in. GET lookups and PATCH check-outs are safe to repeat.
"""

import os

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import log
from .constants import AGENT_VERSION

RETRY_METHODS = frozenset({"HEAD", "GET", "PATCH"})
RETRY_STATUSES = (502, 503, 504)


def build_retry():
    """3 retries at 2s, 4s, 8s; the last 5xx response is returned, not raised."""
    return Retry(
        total=3,
        backoff_factor=2,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=RETRY_METHODS,
        raise_on_status=False,
    )


def _ca_bundle():
    env_ca = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    return certifi.where()


def create_session():
    """New requests.Session for the backend REST API."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=2, max_retries=build_retry())
    for prefix in ("http://", "https://"):
        session.mount(prefix, adapter)
    session.verify = _ca_bundle()
    session.headers["User-Agent"] = f"attendance-sync/{AGENT_VERSION}"
    return session


def reset_session(session):
    """Drop a session whose pooled connections went stale; return a fresh one."""
    try:
        session.close()
    except requests.RequestException as e:
        log.warning("Closing stale HTTP session failed: %s", e)
    return create_session()