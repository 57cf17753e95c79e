from dataclasses import dataclass

from src.domain.entities import Admin, AdminSession


@dataclass
class LoginInput:
    username: str
    password: str


@dataclass
class LogoutInput:
    token: str | None


@dataclass
class VerifySessionInput:
    token: str | None


@dataclass
class ProfileInput:
    admin_id: str


@dataclass
class CreateAdminInput:
    username: str
    password: str
    name: str | None = None
    role: str = "admin"


@dataclass
class AuthOutput:
    admin: Admin | None = None
    session: AdminSession | None = None
    token_raw: str | None = None
    success: bool = False
    message: str | None = None
    error: str | None = None
