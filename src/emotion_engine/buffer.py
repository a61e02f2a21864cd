"""Thread-safe, time-bounded store of buffered samples.

The engine talks to the store only through :class:`SampleStore`, so the
concurrency primitive behind it can be swapped without touching the engine.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime
from typing import Deque

from emotion_engine.models import Sample


class SampleStore(ABC):
    """Ordered sample store with oldest-end eviction.

    Every operation is applied atomically: concurrent readers observe an
    append or an eviction either fully applied or not at all.
    """

    @abstractmethod
    def append(self, sample: Sample) -> None:
        """Add a sample at the newest end."""

    @abstractmethod
    def evict_before(self, cutoff: datetime) -> int:
        """Drop samples from the oldest end while their timestamp < *cutoff*.

        Returns the number of samples evicted.
        """

    @abstractmethod
    def snapshot(self) -> list[Sample]:
        """Return a consistent copy of the buffered samples, oldest first."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every sample."""

    @abstractmethod
    def __len__(self) -> int: ...


class LockedSampleStore(SampleStore):
    """:class:`collections.deque` guarded by a single :class:`threading.Lock`."""

    def __init__(self) -> None:
        self._samples: Deque[Sample] = deque()
        self._lock = threading.Lock()

    def append(self, sample: Sample) -> None:
        with self._lock:
            self._samples.append(sample)

    def evict_before(self, cutoff: datetime) -> int:
        evicted = 0
        with self._lock:
            while self._samples and self._samples[0].timestamp < cutoff:
                self._samples.popleft()
                evicted += 1
        return evicted

    def snapshot(self) -> list[Sample]:
        with self._lock:
            return list(self._samples)

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
