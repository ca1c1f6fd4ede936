from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from .types import InvalidRunSpecError


class AdmissionGate:
    def __init__(self, capacity: int):
        if capacity < 1:
            raise InvalidRunSpecError(f"Gate capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self._slots = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self.in_use = 0
        self.peak = 0

    @contextmanager
    def slot(self) -> Iterator[None]:
        self._slots.acquire()
        with self._lock:
            self.in_use += 1
            self.peak = max(self.peak, self.in_use)

        try:
            yield
        finally:
            with self._lock:
                self.in_use -= 1
            self._slots.release()
