# upnvj-dashboard-api: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.storage import (
    DocumentNotFoundError,
    DocumentStorePort,
    StorageError,
    StoreIOError,
)

__all__ = [
    "DocumentNotFoundError",
    "DocumentStorePort",
    "StorageError",
    "StoreIOError",
]
