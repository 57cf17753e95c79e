import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.adapters.auth.admin_store import AdminStore
from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.time_local import LocalTimeAdapter
from src.api.deps import (
    extract_token,
    get_admin_store,
    get_auth_adapter,
    get_clock,
    get_current_admin,
    get_rules,
    oauth2_scheme,
)
from src.components.auth import (
    LoginInput,
    LogoutInput,
    VerifySessionInput,
    run_login,
    run_logout,
    run_verify_session,
)
from src.domain.entities import Admin
from src.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


@router.post("/login", response_model=None)
def login(
    body: LoginRequest,
    response: Response,
    admin_store: AdminStore = Depends(get_admin_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: LocalTimeAdapter = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any] | JSONResponse:
    """Authenticate an admin; sets the HttpOnly auth cookie on success."""
    if not body.username or not body.password:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Username and password are required"},
        )

    result = run_login(
        LoginInput(username=body.username, password=body.password),
        admin_store,
        auth_adapter,
        admin_store,
        clock,
        token_ttl_minutes=rules.auth.token_ttl_minutes,
    )
    if not result.success or result.admin is None or result.token_raw is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "message": result.error},
        )

    cookie = rules.auth.cookie
    max_age = rules.auth.token_ttl_minutes * 60
    response.set_cookie(
        key=cookie.name,
        value=result.token_raw,
        httponly=cookie.http_only,
        max_age=max_age,
        expires=max_age,
        samesite=cookie.same_site,
        secure=cookie.secure,
    )

    return {
        "success": True,
        "message": result.message,
        "admin": result.admin.public_dict(),
        "token": result.token_raw,
    }


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    admin_store: AdminStore = Depends(get_admin_store),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """Drop the session and clear the auth cookie."""
    result = run_logout(LogoutInput(token=extract_token(request, token)), admin_store)
    response.delete_cookie(key=rules.auth.cookie.name)
    return {"success": result.success, "message": result.message}


@router.get("/verify", response_model=None)
def verify(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    admin_store: AdminStore = Depends(get_admin_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: LocalTimeAdapter = Depends(get_clock),
) -> dict[str, Any] | JSONResponse:
    """Report whether the presented token maps to a live session."""
    result = run_verify_session(
        VerifySessionInput(token=extract_token(request, token)),
        admin_store,
        auth_adapter,
        admin_store,
        clock,
    )
    if not result.success or result.admin is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"valid": False, "message": result.error},
        )
    return {"valid": True, "admin": result.admin.public_dict()}


@router.get("/profile")
def profile(current_admin: Admin = Depends(get_current_admin)) -> dict[str, Any]:
    """Get the logged-in admin."""
    return {"success": True, "admin": current_admin.public_dict()}
