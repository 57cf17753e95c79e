"""JSON-backed admin and session store.

Implements AdminRepoPort and SessionStorePort for the auth component over
the ``admin-data.json`` document (``{admins: [...], sessions: [...]}``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock

from src.adapters.json_store import ADMIN_FILENAME, JsonDocumentStore
from src.core.ports.storage import DocumentStorePort, StoreIOError
from src.domain.entities import Admin, AdminDocument, AdminSession

logger = logging.getLogger(__name__)


class AdminStore:
    """Admin accounts and login sessions in one document."""

    def __init__(self, store: DocumentStorePort[AdminDocument]) -> None:
        self._store = store
        self._lock = Lock()

    def _save_document(self, doc: AdminDocument) -> None:
        if not self._store.write(doc):
            raise StoreIOError("Failed to persist admin data")

    # --- AdminRepoPort ---

    def get_by_username(self, username: str) -> Admin | None:
        return next((a for a in self._store.read().admins if a.username == username), None)

    def get_by_id(self, admin_id: str) -> Admin | None:
        return next((a for a in self._store.read().admins if a.id == admin_id), None)

    def save(self, admin: Admin) -> Admin:
        """Insert or replace an admin by id."""
        with self._lock:
            doc = self._store.read()
            doc.admins = [a for a in doc.admins if a.id != admin.id]
            doc.admins.append(admin)
            self._save_document(doc)
        return admin

    def list_all(self) -> list[Admin]:
        return list(self._store.read().admins)

    # --- SessionStorePort ---

    def get(self, token: str) -> AdminSession | None:
        """Get session by token."""
        return next((s for s in self._store.read().sessions if s.token == token), None)

    def add(self, session: AdminSession) -> None:
        with self._lock:
            doc = self._store.read()
            doc.sessions.append(session)
            self._save_document(doc)

    def delete(self, token: str) -> None:
        """Delete session by token."""
        with self._lock:
            doc = self._store.read()
            remaining = [s for s in doc.sessions if s.token != token]
            if len(remaining) != len(doc.sessions):
                doc.sessions = remaining
                self._save_document(doc)

    def delete_by_admin(self, admin_id: str) -> int:
        """Delete all sessions for an admin. Returns count deleted."""
        with self._lock:
            doc = self._store.read()
            remaining = [s for s in doc.sessions if s.admin_id != admin_id]
            removed = len(doc.sessions) - len(remaining)
            if removed:
                doc.sessions = remaining
                self._save_document(doc)
        return removed


def create_admin_store(data_dir: str | Path) -> AdminStore:
    """Admin store at ``<data_dir>/admin-data.json``."""
    return AdminStore(JsonDocumentStore(Path(data_dir) / ADMIN_FILENAME, AdminDocument))
