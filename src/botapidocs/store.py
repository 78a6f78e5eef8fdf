"""In-memory store holding the current documentation snapshot.

Readers-preferred shared/exclusive discipline built on a
``threading.Condition``:

- any number of readers hold the lock together;
- a writer waits until no reader holds it, then swaps the reference;
- readers arriving while a writer holds it wait for the swap to finish.

Readers only copy a reference to an immutable :class:`Snapshot`, so the
shared section is tiny and writer starvation is not a practical concern
at an hourly refresh cadence.  The lock is never held across an ``await``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from botapidocs.models import Snapshot

logger = logging.getLogger(__name__)


class SharedLock:
    """Readers-preferred reader/writer lock."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def shared(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers


class SnapshotStore:
    """Holds the current ``(methods, types)`` pair.

    Starts with an empty snapshot (generation 0) so searches before the
    first successful fetch return nothing instead of failing.
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._lock = SharedLock()
        self._generation = 0
        self._current = (initial or Snapshot.build()).with_generation(0)

    def read(self) -> Snapshot:
        """Return the current snapshot.  Never blocks on other readers."""
        with self._lock.shared():
            return self._current

    @contextmanager
    def reading(self) -> Iterator[Snapshot]:
        """Hold shared access for the duration of the block."""
        with self._lock.shared():
            yield self._current

    def replace(self, snapshot: Snapshot) -> Snapshot:
        """Atomically install ``snapshot``; returns it stamped with its generation."""
        with self._lock.exclusive():
            self._generation += 1
            self._current = snapshot.with_generation(self._generation)
            installed = self._current
        logger.debug(
            "Installed snapshot generation %d (%d methods, %d types)",
            installed.generation,
            len(installed.methods),
            len(installed.types),
        )
        return installed

    @property
    def generation(self) -> int:
        return self._generation
