import logging
from datetime import UTC, datetime, timedelta
from typing import cast

from src.domain.entities import Admin, AdminRole, AdminSession

from .models import (
    AuthOutput,
    CreateAdminInput,
    LoginInput,
    LogoutInput,
    ProfileInput,
    VerifySessionInput,
)
from .ports import AdminRepoPort, AuthAdapterPort, SessionStorePort, TimePort

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_MINUTES = 24 * 60
INVALID_CREDENTIALS = "Invalid username or password"


def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


def run_login(
    inp: LoginInput,
    admin_repo: AdminRepoPort,
    auth_adapter: AuthAdapterPort,
    session_store: SessionStorePort,
    time: TimePort,
    token_ttl_minutes: int = DEFAULT_TOKEN_TTL_MINUTES,
) -> AuthOutput:
    if not inp.username or not inp.password:
        return AuthOutput(success=False, error="Username and password are required")

    admin = admin_repo.get_by_username(inp.username)
    if not admin or not auth_adapter.verify_password(inp.password, admin.password):
        logger.warning("Failed login attempt for username=%s", inp.username)
        return AuthOutput(success=False, error=INVALID_CREDENTIALS)

    now = time.now_utc()
    token = auth_adapter.create_token(admin, token_ttl_minutes, now)
    session = AdminSession(
        admin_id=admin.id,
        token=token,
        created_at=now,
        expires_at=now + timedelta(minutes=token_ttl_minutes),
    )
    session_store.add(session)

    admin.last_login = now
    admin_repo.save(admin)

    logger.info("Admin %s logged in", admin.username)
    return AuthOutput(
        admin=admin,
        session=session,
        token_raw=token,
        success=True,
        message="Login successful",
    )


def run_logout(inp: LogoutInput, session_store: SessionStorePort) -> AuthOutput:
    if inp.token:
        session_store.delete(inp.token)
    return AuthOutput(success=True, message="Logout successful")


def run_verify_session(
    inp: VerifySessionInput,
    admin_repo: AdminRepoPort,
    auth_adapter: AuthAdapterPort,
    session_store: SessionStorePort,
    time: TimePort,
) -> AuthOutput:
    if not inp.token:
        return AuthOutput(success=False, error="Token not found")

    now = time.now_utc()
    session = session_store.get(inp.token)
    if session and _as_utc(session.expires_at) <= now:
        session_store.delete(inp.token)
        return AuthOutput(success=False, error="Session expired")

    if auth_adapter.validate_token(inp.token, now) is None:
        return AuthOutput(success=False, error="Invalid token")

    if not session:
        return AuthOutput(success=False, error="Session not found")

    admin = admin_repo.get_by_id(session.admin_id)
    if not admin:
        return AuthOutput(success=False, error="Admin not found")

    return AuthOutput(admin=admin, session=session, success=True)


def run_get_profile(inp: ProfileInput, admin_repo: AdminRepoPort) -> AuthOutput:
    admin = admin_repo.get_by_id(inp.admin_id)
    if not admin:
        return AuthOutput(success=False, error="Admin not found")
    return AuthOutput(admin=admin, success=True)


def run_create_admin(
    inp: CreateAdminInput,
    admin_repo: AdminRepoPort,
    auth_adapter: AuthAdapterPort,
) -> AuthOutput:
    if not inp.username or not inp.password:
        return AuthOutput(success=False, error="Username and password are required")

    if inp.role not in ("admin", "superadmin"):
        return AuthOutput(success=False, error=f"Unknown role: {inp.role}")

    if admin_repo.get_by_username(inp.username):
        return AuthOutput(success=False, error="Username already in use")

    admin = Admin(
        username=inp.username,
        password=auth_adapter.hash_password(inp.password),
        name=inp.name or inp.username,
        role=cast(AdminRole, inp.role),
    )
    admin_repo.save(admin)
    return AuthOutput(admin=admin, success=True, message="Admin created")


def run(
    inp: LoginInput | LogoutInput | VerifySessionInput | ProfileInput | CreateAdminInput,
    *,
    admin_repo: AdminRepoPort | None = None,
    auth_adapter: AuthAdapterPort | None = None,
    session_store: SessionStorePort | None = None,
    time: TimePort | None = None,
    token_ttl_minutes: int = DEFAULT_TOKEN_TTL_MINUTES,
) -> AuthOutput:
    if isinstance(inp, LoginInput):
        assert admin_repo and auth_adapter and session_store and time
        return run_login(inp, admin_repo, auth_adapter, session_store, time, token_ttl_minutes)

    elif isinstance(inp, LogoutInput):
        assert session_store
        return run_logout(inp, session_store)

    elif isinstance(inp, VerifySessionInput):
        assert admin_repo and auth_adapter and session_store and time
        return run_verify_session(inp, admin_repo, auth_adapter, session_store, time)

    elif isinstance(inp, ProfileInput):
        assert admin_repo
        return run_get_profile(inp, admin_repo)

    elif isinstance(inp, CreateAdminInput):
        assert admin_repo and auth_adapter
        return run_create_admin(inp, admin_repo, auth_adapter)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
