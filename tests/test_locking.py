"""
Tests for the readers–writer lock.
"""

import threading
import time

import pytest

from confdoc.core.engine.locking import RWLock


class TestRWLock:
    def test_multiple_readers(self):
        lock = RWLock()
        lock.acquire_read()
        lock.acquire_read()
        assert lock.readers == 2
        lock.release_read()
        lock.release_read()
        assert lock.readers == 0

    def test_write_context(self):
        lock = RWLock()
        with lock.write_locked():
            assert lock.write_held
        assert not lock.write_held

    def test_release_without_acquire_raises(self):
        lock = RWLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()

    def test_writer_waits_for_readers(self):
        lock = RWLock()
        events: list[str] = []

        def writer():
            with lock.write_locked():
                events.append("write")

        lock.acquire_read()
        t = threading.Thread(target=writer)
        t.start()
        time.sleep(0.05)
        events.append("read-done")
        lock.release_read()
        t.join(timeout=2)

        assert events == ["read-done", "write"]

    def test_reader_waits_for_writer(self):
        lock = RWLock()
        events: list[str] = []

        def reader():
            with lock.read_locked():
                events.append("read")

        lock.acquire_write()
        t = threading.Thread(target=reader)
        t.start()
        time.sleep(0.05)
        events.append("write-done")
        lock.release_write()
        t.join(timeout=2)

        assert events == ["write-done", "read"]

    def test_lock_released_on_exception(self):
        lock = RWLock()
        with pytest.raises(ValueError):
            with lock.read_locked():
                raise ValueError("boom")
        assert lock.readers == 0
        with lock.write_locked():
            pass
