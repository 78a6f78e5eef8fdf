"""Tests for botapidocs.store — atomic replace and shared reads."""

from __future__ import annotations

import threading
import time

from botapidocs.models import Method, Snapshot, Type
from botapidocs.search import search
from botapidocs.store import SharedLock, SnapshotStore


def _generation_snapshot(gen: int, size: int = 20) -> Snapshot:
    """Snapshot whose every method and type name is tagged with ``gen``."""
    return Snapshot.build(
        methods={f"m{gen}_{i}": Method(name=f"m{gen}_{i}") for i in range(size)},
        types={f"T{gen}_{i}": Type(name=f"T{gen}_{i}") for i in range(size)},
    )


class TestSnapshotStore:
    def test_starts_empty(self):
        store = SnapshotStore()
        snap = store.read()
        assert dict(snap.methods) == {}
        assert dict(snap.types) == {}
        assert snap.generation == 0

    def test_empty_store_search_returns_nothing(self):
        assert search("send", SnapshotStore().read()) == []

    def test_replace_installs_new_pair(self, sample_snapshot):
        store = SnapshotStore()
        installed = store.replace(sample_snapshot)
        assert installed.generation == 1
        assert store.read() is installed
        assert store.generation == 1

    def test_replace_increments_generation(self, sample_snapshot):
        store = SnapshotStore()
        store.replace(sample_snapshot)
        store.replace(sample_snapshot)
        assert store.read().generation == 2

    def test_reader_keeps_its_snapshot_across_replace(self, sample_snapshot):
        store = SnapshotStore()
        store.replace(sample_snapshot)
        held = store.read()
        store.replace(Snapshot.build())
        assert "sendMessage" in held.methods
        assert "sendMessage" not in store.read().methods

    def test_reading_context(self, store):
        with store.reading() as snap:
            assert "getMe" in snap.methods


class TestSharedLock:
    def test_readers_do_not_block_each_other(self):
        lock = SharedLock()
        inside = threading.Barrier(3, timeout=5)

        def reader():
            with lock.shared():
                inside.wait()  # all three must be inside together

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert not any(t.is_alive() for t in threads)
        assert lock.readers == 0

    def test_writer_waits_for_readers(self):
        lock = SharedLock()
        events: list[str] = []
        reader_in = threading.Event()

        def writer():
            reader_in.wait(5)
            with lock.exclusive():
                events.append("write")

        t = threading.Thread(target=writer)
        t.start()
        with lock.shared():
            reader_in.set()
            time.sleep(0.05)
            events.append("read-done")
        t.join(timeout=5)
        assert events == ["read-done", "write"]

    def test_reader_waits_for_writer(self):
        lock = SharedLock()
        events: list[str] = []
        writer_in = threading.Event()

        def reader():
            writer_in.wait(5)
            with lock.shared():
                events.append("read")

        t = threading.Thread(target=reader)
        t.start()
        with lock.exclusive():
            writer_in.set()
            time.sleep(0.05)
            events.append("write-done")
        t.join(timeout=5)
        assert events == ["write-done", "read"]


class TestConcurrentReplace:
    def test_readers_never_see_mixed_generations(self):
        store = SnapshotStore()
        store.replace(_generation_snapshot(1))
        stop = threading.Event()
        failures: list[str] = []

        def reader():
            while not stop.is_set():
                snap = store.read()
                gens = {name[1:].split("_")[0] for name in snap.methods}
                gens |= {name[1:].split("_")[0] for name in snap.types}
                if len(gens) != 1:
                    failures.append(f"mixed generations {gens}")
                hits = search("_1", snap)
                if any(h.name[1:].split("_")[0] not in gens for h in hits):
                    failures.append("hit from another generation")

        readers = [threading.Thread(target=reader) for _ in range(8)]
        for t in readers:
            t.start()
        for gen in range(2, 40):
            store.replace(_generation_snapshot(gen))
        stop.set()
        for t in readers:
            t.join(timeout=5)

        assert failures == []
        assert store.read().generation == 39
