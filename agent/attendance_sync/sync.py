"""
AttendanceSyncBuffer — durable offline queue for check-in/check-out records.

A record lives in the buffer until the remote API acknowledges it, and the
buffer is written to local storage on every mutation (append, removal,
attempts bump). Nothing here raises to the caller: the worst case is that
data sits in the queue.

Threads: the host calls record_attendance()/sync_now() from its own
thread; debounce timers and the connectivity monitor call in from daemon
threads. Buffer mutation + persistence happen under `_lock`; remote calls
are made outside it.
"""

import threading

from .config import log
from .constants import STORAGE_KEY, SYNC_DEBOUNCE_SEC, RETRY_BACKOFF_MAX_SEC
from .notify import ConsoleNotifier
from .records import PendingRecord
from .storage import load_buffer, save_buffer

QUEUED_MESSAGE = "Record saved to offline buffer"
QUEUED_DESCRIPTION = "Data will sync automatically when connection is restored."


class AttendanceSyncBuffer:
    """
    Owns the pending-record buffer. Sync passes are triggered by:
      - an offline → online transition          (after the debounce)
      - a record left queued while online       (after the debounce)
      - a pass that left records behind         (debounce, doubling while
                                                 nothing gets through)
      - sync_now()                              (immediately)
    """

    def __init__(
        self,
        api,
        store,
        connectivity,
        notifier=None,
        storage_key=STORAGE_KEY,
        debounce_sec=SYNC_DEBOUNCE_SEC,
        timer_factory=threading.Timer,
    ):
        self._api = api
        self._store = store
        self._connectivity = connectivity
        self._notifier = notifier or ConsoleNotifier()
        self._key = storage_key
        self._debounce_sec = debounce_sec
        self._retry_delay = debounce_sec
        self._timer_factory = timer_factory
        self._timer = None
        self._timer_generation = 0
        self._closed = False

        self._lock = threading.RLock()
        self._sync_guard = threading.Lock()
        self._syncing = False
        self._in_flight = set()

        self._online = connectivity.online
        self._buffer = load_buffer(store, storage_key)

        connectivity.subscribe(self._on_connectivity_change)
        if self._online and self._buffer:
            log.info("Found %d records from a previous session", len(self._buffer))
            self._schedule_sync(self._debounce_sec)

    # ─── Exposed state ───────────────────────────────────────

    @property
    def is_online(self):
        return self._online

    @property
    def is_syncing(self):
        return self._syncing

    @property
    def buffer_size(self):
        with self._lock:
            return len(self._buffer)

    def pending(self):
        """Snapshot of the buffer as plain dicts, oldest first."""
        with self._lock:
            return [r.to_dict() for r in self._buffer]

    def status(self):
        return {
            "isOnline": self.is_online,
            "bufferSize": self.buffer_size,
            "isSyncing": self.is_syncing,
        }

    # ─── Recording ───────────────────────────────────────────

    def record_attendance(self, payload):
        """
        Queue one attendance event (dict without timestamp) and try to
        deliver it right away when online.

        Returns {"success": True} when delivered, otherwise
        {"success": True, "offline": True}. The record is on disk before
        any delivery is attempted.
        """
        record = PendingRecord.create(payload)
        with self._lock:
            self._buffer.append(record)
            self._in_flight.add(record.id)
            self._persist()

        delivered = False
        try:
            if self._online:
                delivered = self._deliver(record)
                if not delivered:
                    self._mark_failed(record)
        finally:
            with self._lock:
                self._in_flight.discard(record.id)
                if delivered:
                    self._remove({record.id})

        if delivered:
            return {"success": True}

        self._notifier.info(QUEUED_MESSAGE, description=QUEUED_DESCRIPTION)
        if self._online:
            # A pending retry keeps its backoff delay.
            self._schedule_sync(self._debounce_sec, keep_pending=True)
        return {"success": True, "offline": True}

    # ─── Syncing ─────────────────────────────────────────────

    def sync_records(self):
        """
        One pass over the buffer, oldest first. Returns how many records
        were delivered. A call while another pass is running is a no-op.
        """
        if not self._online or not self.buffer_size:
            return 0
        if not self._sync_guard.acquire(blocking=False):
            log.info("Sync already in progress — skipping")
            return 0

        try:
            self._syncing = True
            with self._lock:
                snapshot = [r for r in self._buffer if r.id not in self._in_flight]

            synced_ids = set()
            for record in snapshot:
                if self._deliver(record):
                    synced_ids.add(record.id)
                else:
                    self._mark_failed(record)

            with self._lock:
                self._remove(synced_ids)
                remaining = len(self._buffer)
        finally:
            self._syncing = False
            self._sync_guard.release()

        synced = len(synced_ids)
        if synced:
            log.info("Synced %d attendance records (%d still pending)", synced, remaining)
            self._notifier.success(f"Synchronized {synced} attendance records")
        elif snapshot:
            log.warning("Sync pass delivered nothing (%d pending)", remaining)

        self._after_pass(synced, remaining)
        return synced

    sync_now = sync_records

    def close(self):
        """Stop scheduling passes. Buffered records stay on disk."""
        with self._lock:
            self._closed = True
            self._cancel_timer()
        self._connectivity.unsubscribe(self._on_connectivity_change)

    # ─── Internals ───────────────────────────────────────────

    def _deliver(self, record):
        try:
            result = self._api.record_attendance(record.payload.to_dict())
        except Exception as e:
            log.warning("Delivery error for record %s: %s", record.id, e)
            return False
        if not result.ok:
            log.warning("Delivery rejected for record %s: %s", record.id, result.error)
            return False
        return True

    def _mark_failed(self, record):
        with self._lock:
            record.attempts += 1
            self._persist()

    def _remove(self, ids):
        if not ids:
            return
        self._buffer = [r for r in self._buffer if r.id not in ids]
        self._persist()

    def _persist(self):
        save_buffer(self._store, self._key, self._buffer)

    def _after_pass(self, synced, remaining):
        if synced:
            self._retry_delay = self._debounce_sec
            delay = self._debounce_sec
        else:
            delay = self._retry_delay
            self._retry_delay = min(self._retry_delay * 2, RETRY_BACKOFF_MAX_SEC)
        if remaining and self._online:
            self._schedule_sync(delay)

    def _on_connectivity_change(self, online):
        was_online = self._online
        self._online = online
        if online and not was_online:
            self._retry_delay = self._debounce_sec
            if self.buffer_size:
                log.info("Back online — syncing %d records in %ss", self.buffer_size, self._debounce_sec)
                self._schedule_sync(self._debounce_sec)
        elif not online:
            with self._lock:
                self._cancel_timer()

    def _schedule_sync(self, delay, keep_pending=False):
        with self._lock:
            if self._closed:
                return
            if keep_pending and self._timer is not None:
                return
            self._cancel_timer()
            self._timer_generation += 1
            generation = self._timer_generation
            timer = self._timer_factory(delay, lambda: self._run_scheduled_sync(generation))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _run_scheduled_sync(self, generation):
        with self._lock:
            if generation == self._timer_generation:
                self._timer = None
        try:
            self.sync_records()
        except Exception as e:
            log.error("Scheduled sync error: %s", e, exc_info=True)
