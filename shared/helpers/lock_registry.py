import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Callable, Hashable, Iterable, Optional


class LockRegistry:
    """Process-wide locks keyed by record id.

    Keys are always acquired in sorted order so two callers holding
    overlapping sets can never deadlock each other.
    """

    def __init__(self, timeout: float, on_timeout: Optional[Callable[[Hashable], Exception]] = None):
        self.timeout = timeout
        self.on_timeout = on_timeout
        self._locks = defaultdict(threading.Lock)
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, keys: Iterable[Hashable]):
        ordered = sorted(set(keys), key=str)
        with self._guard:
            locks = [self._locks[key] for key in ordered]

        acquired = []
        try:
            for key, lock in zip(ordered, locks):
                if not lock.acquire(timeout=self.timeout):
                    if self.on_timeout:
                        raise self.on_timeout(key)
                    raise TimeoutError(f"Timed out waiting for lock on {key}")
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()
