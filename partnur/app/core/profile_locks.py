"""
Per-profile locks serializing the read-merge-write of one user's profile

Requests for different mobile numbers never contend. Locks are reference
counted and dropped once no request holds or waits for them.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Dict, List

logger = logging.getLogger(__name__)


class ProfileLockRegistry:
    """Advisory locks keyed by profile identifier"""

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks: Dict[str, List] = {}

    @contextmanager
    def hold(self, key: str):
        """Hold the lock for *key* for the duration of the with-block"""
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1

        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def active_keys(self) -> int:
        """Number of identifiers with a live lock"""
        with self._guard:
            return len(self._locks)
