import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.auth.admin_store import AdminStore
from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.json_store import ADMIN_FILENAME, JsonDocumentStore, create_analytics_store
from src.adapters.time_local import LocalTimeAdapter, create_time_adapter
from src.components.analytics import (
    AnalyticsIngestionService,
    AnalyticsReportingService,
    IngestionConfig,
    ReportingConfig,
    SnapshotCache,
    create_analytics_ingestion_service,
    create_analytics_reporting_service,
)
from src.components.auth import VerifySessionInput, run_verify_session
from src.domain.entities import Admin, AdminDocument
from src.rules.loader import load_rules
from src.rules.models import Rules

APP_VERSION = "1.0.0"


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("DASHBOARD_DATA_DIR", "./data"))
        self.rules_path = Path(
            os.environ.get("DASHBOARD_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.secret_key = os.environ.get("DASHBOARD_SECRET_KEY", "dev-secret-unsafe")
        self.version = APP_VERSION


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Stores ---
@lru_cache
def get_analytics_store() -> JsonDocumentStore:
    return create_analytics_store(get_settings().data_dir)


@lru_cache
def get_admin_document_store() -> JsonDocumentStore:
    return JsonDocumentStore(get_settings().data_dir / ADMIN_FILENAME, AdminDocument)


@lru_cache
def get_admin_store() -> AdminStore:
    return AdminStore(get_admin_document_store())


# --- Analytics Services ---
@lru_cache
def get_clock() -> LocalTimeAdapter:
    return create_time_adapter(get_rules().analytics.timezone)


@lru_cache
def get_snapshot_cache() -> SnapshotCache:
    return SnapshotCache()


@lru_cache
def get_ingestion_service() -> AnalyticsIngestionService:
    """Long-lived ingestion service; owns the analytics write lock."""
    return create_analytics_ingestion_service(
        event_store=get_analytics_store(),
        time_port=get_clock(),
        config=IngestionConfig.from_rules(get_rules().analytics),
        cache=get_snapshot_cache(),
    )


@lru_cache
def get_reporting_service() -> AnalyticsReportingService:
    return create_analytics_reporting_service(
        event_store=get_analytics_store(),
        time_port=get_clock(),
        config=ReportingConfig.from_rules(get_rules().analytics),
        cache=get_snapshot_cache(),
    )


# --- Auth ---
@lru_cache
def get_auth_adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter(get_settings().secret_key)


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def extract_token(request: Request, bearer: str | None) -> str | None:
    """Bearer header first, then the auth cookie."""
    if bearer:
        return bearer
    return request.cookies.get(get_rules().auth.cookie.name)


async def get_current_admin(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    admin_store: AdminStore = Depends(get_admin_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: LocalTimeAdapter = Depends(get_clock),
) -> Admin:
    token = extract_token(request, token)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = run_verify_session(
        VerifySessionInput(token=token),
        admin_store,
        auth_adapter,
        admin_store,
        clock,
    )
    if not result.success or result.admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return result.admin


def reset_dependencies() -> None:
    """Drop every cached singleton (settings, rules, stores, services)."""
    for getter in (
        get_settings,
        get_rules,
        get_analytics_store,
        get_admin_document_store,
        get_admin_store,
        get_clock,
        get_snapshot_cache,
        get_ingestion_service,
        get_reporting_service,
        get_auth_adapter,
    ):
        getter.cache_clear()
