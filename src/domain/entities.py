from datetime import datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# --- Enums / Literals ---
AdminRole = Literal["admin", "superadmin"]


class _Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Admin & Auth ---


def new_admin_id() -> str:
    return f"admin_{uuid4().hex[:12]}"


def new_session_id() -> str:
    return f"session_{uuid4().hex}"


class Admin(_Document):
    id: str = Field(default_factory=new_admin_id)
    username: str
    password: str  # argon2 hash, never returned to clients
    name: str = ""
    role: AdminRole = "admin"
    last_login: datetime | None = None

    def public_dict(self) -> dict[str, Any]:
        """Client-facing view without the password hash."""
        return self.model_dump(by_alias=True, mode="json", exclude={"password"})


class AdminSession(_Document):
    id: str = Field(default_factory=new_session_id)
    admin_id: str
    token: str
    created_at: datetime
    expires_at: datetime


class AdminDocument(_Document):
    admins: list[Admin] = Field(default_factory=list)
    sessions: list[AdminSession] = Field(default_factory=list)
