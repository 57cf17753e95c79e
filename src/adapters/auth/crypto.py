from datetime import datetime, timedelta
from typing import Any

from src.api.auth_utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from src.domain.entities import Admin


class JWTAuthAdapter:
    """Auth adapter that uses JWT tokens and passlib (argon2) for password hashing."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._secret_key = secret_key

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def create_token(self, admin: Admin, ttl_minutes: int, now_utc: datetime) -> str:
        claims = {"sub": admin.id, "id": admin.id, "username": admin.username, "role": admin.role}
        return create_access_token(
            claims,
            timedelta(minutes=ttl_minutes),
            now_utc=now_utc,
            secret_key=self._secret_key,
        )

    def validate_token(self, token: str, now_utc: datetime) -> dict[str, Any] | None:
        return decode_access_token(token, now_utc=now_utc, secret_key=self._secret_key)
