"""Per-record locks serializing read-modify-write cycles inside one process."""
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List


class RecordLocks:
    """Hands out one mutex per key. Entries are dropped once nobody holds or waits for them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, List] = {}  # key -> [lock, holders + waiters]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Block until the lock for key is free, then hold it for the with-block."""
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every service instance in the process
record_locks = RecordLocks()
