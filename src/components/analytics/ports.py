"""
Analytics component port definitions.
"""

from __future__ import annotations

from collections.abc import Hashable
from datetime import datetime
from typing import Protocol

from .models import StoreDocument


class EventStorePort(Protocol):
    """Whole-document store for analytics records."""

    def read(self) -> StoreDocument:
        """
        Load the analytics document.

        A missing or undecodable document yields an empty one.

        Raises:
            StoreIOError: If the document cannot be read at all
        """
        ...

    def write(self, doc: StoreDocument) -> bool:
        """Persist the whole document atomically. Returns False on failure."""
        ...

    def stamp(self) -> Hashable | None:
        """Token that changes whenever the stored document changes (None if absent)."""
        ...


class SnapshotCachePort(Protocol):
    """Cache of the last-read analytics document."""

    @property
    def generation(self) -> int:
        """Counter bumped by every invalidate()."""
        ...

    def get(self, stamp: Hashable | None = None) -> StoreDocument | None:
        """Return the document cached under ``stamp``, if any."""
        ...

    def put(self, doc: StoreDocument, generation: int, stamp: Hashable | None = None) -> bool:
        """Cache ``doc`` unless invalidated since ``generation`` was taken."""
        ...

    def invalidate(self) -> None:
        """Drop the cached document."""
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

    def now_ms(self) -> int:
        """Get current time as epoch milliseconds."""
        ...

    def to_local(self, utc_dt: datetime) -> datetime:
        """Convert UTC to the display timezone."""
        ...
