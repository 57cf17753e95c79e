"""
Snapshot cache for the analytics document.

Owned by the service container and shared by reporting (reads through
it) and ingestion (invalidates it after every successful write).

Invariants:
- invalidate() bumps the generation; put() with an older generation is
  dropped, so a read that raced a write never repopulates the cache
- get() only hits when the caller's store stamp matches the stamp the
  document was cached under, so writes from other processes are seen
"""

from __future__ import annotations

from collections.abc import Hashable
from threading import Lock

from .models import StoreDocument


class SnapshotCache:
    """Holds the last-read store document until invalidated."""

    def __init__(self) -> None:
        self._doc: StoreDocument | None = None
        self._stamp: Hashable | None = None
        self._generation = 0
        self._lock = Lock()
        self.hits = 0
        self.misses = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self, stamp: Hashable | None = None) -> StoreDocument | None:
        with self._lock:
            if self._doc is None or stamp != self._stamp:
                self.misses += 1
                return None
            self.hits += 1
            return self._doc

    def put(
        self, doc: StoreDocument, generation: int, stamp: Hashable | None = None
    ) -> bool:
        """Cache ``doc`` unless the cache was invalidated since ``generation``."""
        with self._lock:
            if generation != self._generation:
                return False
            self._doc = doc
            self._stamp = stamp
            return True

    def invalidate(self) -> None:
        with self._lock:
            self._doc = None
            self._stamp = None
            self._generation += 1
