"""Background refresh of the documentation snapshot.

Long-running mode: a single daemon thread fetches the specification,
installs it in the :class:`~botapidocs.store.SnapshotStore`, then waits
for the refresh interval.  Fetch errors are logged and the previous
snapshot stays authoritative.  The wait is on a ``threading.Event`` so
:meth:`RefreshScheduler.stop` wakes the worker immediately; an in-flight
fetch is bounded by its HTTP deadline.

On-demand mode (ephemeral hosts that kill background work between
requests): no thread.  :meth:`RefreshScheduler.read_or_refresh` fetches
and installs synchronously and lets errors propagate to the caller.

The mode is fixed at construction.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from botapidocs.errors import BotApiDocsError
from botapidocs.fetcher import REQUEST_TIMEOUT, fetch_snapshot
from botapidocs.models import Snapshot
from botapidocs.store import SnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3600.0  # seconds

# Extra seconds granted to the worker on shutdown beyond one fetch deadline
_JOIN_SLACK = 2.0


class RefreshScheduler:
    """Keeps a :class:`SnapshotStore` fresh, in the background or on demand."""

    def __init__(
        self,
        store: SnapshotStore,
        *,
        interval: float = DEFAULT_INTERVAL,
        on_demand: bool = False,
        fetch: Callable[[], Snapshot] = fetch_snapshot,
    ) -> None:
        self.store = store
        self.interval = interval
        self.on_demand = on_demand
        self._fetch = fetch
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the worker thread (idempotent; no-op in on-demand mode)."""
        if self.on_demand:
            logger.info("On-demand refresh mode: documentation fetched per query")
            return
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._worker_loop, name="botapidocs-refresh", daemon=True
            )
            self._thread.start()
        logger.info("Refresh worker started (interval %.0fs)", self.interval)

    def stop(self, timeout: float = REQUEST_TIMEOUT + _JOIN_SLACK) -> None:
        """Signal the worker to exit and wait for it."""
        self._stop.set()
        with self._lock:
            thread, self._thread = self._thread, None
        if thread is not None and thread.is_alive():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Refresh worker did not exit within %.1fs", timeout)
            else:
                logger.info("Refresh worker stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Refreshing
    # ------------------------------------------------------------------

    def refresh(self) -> Snapshot:
        """Fetch and install a new snapshot.  Errors propagate."""
        t0 = time.monotonic()
        snapshot = self.store.replace(self._fetch())
        logger.info(
            "Documentation refreshed: %d methods, %d types in %.2fs (generation %d)",
            len(snapshot.methods),
            len(snapshot.types),
            time.monotonic() - t0,
            snapshot.generation,
        )
        return snapshot

    def refresh_once(self) -> bool:
        """Refresh, logging instead of raising.  Returns True on success."""
        try:
            self.refresh()
        except BotApiDocsError as exc:
            logger.warning("Error updating API documentation: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error updating API documentation")
            return False
        return True

    def read_or_refresh(self) -> Snapshot:
        """Return the snapshot to search.

        In on-demand mode this fetches first and raises
        :class:`~botapidocs.errors.TransportError` /
        :class:`~botapidocs.errors.DecodeError` on failure.
        """
        if self.on_demand:
            return self.refresh()
        return self.store.read()

    def _worker_loop(self) -> None:
        while not self._stop.is_set():
            self.refresh_once()
            if self._stop.wait(self.interval):
                break
        logger.debug("Refresh worker received stop signal")
