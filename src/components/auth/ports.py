from datetime import datetime
from typing import Any, Protocol

from src.domain.entities import Admin, AdminSession


class AdminRepoPort(Protocol):
    def get_by_username(self, username: str) -> Admin | None: ...
    def get_by_id(self, admin_id: str) -> Admin | None: ...
    def save(self, admin: Admin) -> Admin: ...


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def create_token(self, admin: Admin, ttl_minutes: int, now_utc: datetime) -> str: ...
    def validate_token(self, token: str, now_utc: datetime) -> dict[str, Any] | None: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class SessionStorePort(Protocol):
    """Port for login session storage."""

    def get(self, token: str) -> AdminSession | None:
        """Get session by token."""
        ...

    def add(self, session: AdminSession) -> None:
        """Record a new session."""
        ...

    def delete(self, token: str) -> None:
        """Delete session by token."""
        ...
