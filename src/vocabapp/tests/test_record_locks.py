"""Tests for per-record locks."""
import threading
import time

from vocabapp.services.record_locks import RecordLocks


def test_same_key_is_serialized() -> None:
    """Test that holders of one key never overlap."""
    locks = RecordLocks()
    active = []
    overlaps = []

    def work() -> None:
        with locks.hold(("progress", 1)):
            active.append(1)
            if len(active) > 1:
                overlaps.append(len(active))
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert overlaps == []
    assert len(locks) == 0


def test_different_keys_do_not_block() -> None:
    """Test that another key can be taken while one is held."""
    locks = RecordLocks()
    acquired = threading.Event()

    def other() -> None:
        with locks.hold(("progress", 2)):
            acquired.set()

    with locks.hold(("progress", 1)):
        thread = threading.Thread(target=other)
        thread.start()
        assert acquired.wait(timeout=5)
        thread.join(timeout=5)
        assert len(locks) == 1

    assert len(locks) == 0


def test_lock_released_on_error() -> None:
    """Test that an exception inside the block frees the key."""
    locks = RecordLocks()
    try:
        with locks.hold("key"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    with locks.hold("key"):
        assert len(locks) == 1
    assert len(locks) == 0
