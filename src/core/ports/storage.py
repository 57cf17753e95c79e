"""
Document Storage Interface.

Protocol-based interface for whole-document persistence. Used by the
analytics event store and the admin credential store.

Invariants:
- read() never exposes a half-written document
- write() persists the entire document, never a diff
- write() reports failure as False instead of raising
"""

from __future__ import annotations

from typing import Protocol, TypeVar

DocT = TypeVar("DocT")


class DocumentStorePort(Protocol[DocT]):
    """Single-document store."""

    def read(self) -> DocT:
        """
        Load the current document.

        Missing or undecodable documents are replaced by an empty default.

        Raises:
            StoreIOError: If the backing medium cannot be read at all
        """
        ...

    def write(self, doc: DocT) -> bool:
        """Persist the whole document. Returns False on failure."""
        ...


class StorageError(Exception):
    """Base class for storage errors."""


class StoreIOError(StorageError):
    """Raised when the persisted document cannot be read or written."""

    def __init__(self, message: str, code: str = "store_io_error") -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class DocumentNotFoundError(StorageError):
    """Raised internally when no document exists yet (always recovered)."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Document not found: {path}")
