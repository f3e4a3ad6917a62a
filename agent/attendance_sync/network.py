"""
Connectivity oracles — who tells the sync buffer whether we are online.

ManualConnectivity: the host pushes online/offline events itself.
ConnectivityMonitor: a daemon thread polls the server with a socket-level
check (network-interface agnostic: WiFi, LAN, hotspot all look the same).

Listeners are called only on transitions, from whichever thread noticed it.
"""

import socket
import threading
from urllib.parse import urlsplit

from .config import log
from .constants import CONNECTIVITY_CHECK_SEC, PROBE_TIMEOUT


# ─── Connectivity check ──────────────────────────────────────────

def is_online(server_url):
    """
    Quick connectivity check via socket connect to the server's host.
    Only tests whether a TCP connection to the server can be established.
    """
    parts = urlsplit(server_url if "://" in server_url else f"http://{server_url}")
    host = parts.hostname
    if not host:
        return False
    port = parts.port or (443 if parts.scheme == "https" else 80)
    try:
        sock = socket.create_connection((host, port), timeout=PROBE_TIMEOUT)
        sock.close()
        return True
    except OSError:
        return False


# ─── Oracles ─────────────────────────────────────────────────────

class Connectivity:
    """Base oracle: current state + transition listeners."""

    def __init__(self, online=True):
        self._online = bool(online)
        self._listeners = []
        self._lock = threading.Lock()

    @property
    def online(self):
        return self._online

    def subscribe(self, callback):
        with self._lock:
            self._listeners.append(callback)

    def unsubscribe(self, callback):
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def _publish(self, online):
        online = bool(online)
        with self._lock:
            if online == self._online:
                return
            self._online = online
            listeners = list(self._listeners)

        log.info("Network %s", "ONLINE" if online else "OFFLINE")
        for callback in listeners:
            try:
                callback(online)
            except Exception as e:
                log.error("Connectivity listener error: %s", e, exc_info=True)


class ManualConnectivity(Connectivity):
    """Pushed oracle: the host forwards its own online/offline events."""

    def set_online(self, online):
        self._publish(online)


class ConnectivityMonitor(Connectivity):
    """Polled oracle: probes the server every `interval` seconds."""

    def __init__(self, server_url, interval=CONNECTIVITY_CHECK_SEC, probe=is_online):
        self._server_url = server_url
        self._interval = interval
        self._probe = probe
        self._stop = threading.Event()
        self._thread = None
        super().__init__(online=probe(server_url))

    def check(self):
        """Run one probe and publish any transition. Returns the new state."""
        try:
            online = self._probe(self._server_url)
        except Exception as e:
            log.warning("Connectivity probe failed: %s", e)
            online = False
        self._publish(online)
        return online

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="connectivity", daemon=True)
        self._thread.start()
        log.info("Connectivity monitor started (every %ds)", self._interval)

    def stop(self):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self._interval + 1)
            self._thread = None

    def _run(self):
        while not self._stop.wait(self._interval):
            self.check()
