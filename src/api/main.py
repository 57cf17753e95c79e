import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.deps import (
    APP_VERSION,
    get_admin_document_store,
    get_analytics_store,
    get_rules,
    get_settings,
)
from src.api.routes import analytics_ingest, analytics_report, auth
from src.app_shell.config import validate_ops_rules
from src.rules.loader import load_rules
from src.rules.models import Rules
from src.shell.http.health import (
    HealthCheckRegistry,
    StartupCheck,
    StoreCheck,
    create_health_router,
    mark_startup_complete,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        get_analytics_store().initialize()
        get_admin_document_store().initialize()
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception:
        logger.critical("Startup failed", exc_info=True)
        sys.exit(1)

    mark_startup_complete()
    yield
    # Shutdown cleanup if needed


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> Response:
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": f"Route {request.method} {request.url.path} not found",
            },
        )
    return await http_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "message": "An unexpected error occurred"},
    )


def create_health_registry() -> HealthCheckRegistry:
    registry = HealthCheckRegistry()
    registry.register(StartupCheck())
    registry.register(StoreCheck("analytics_store", lambda: get_analytics_store().check()))
    registry.register(StoreCheck("admin_store", lambda: get_admin_document_store().check()))
    return registry


def create_app(rules: Rules | None = None) -> FastAPI:
    """Build the API application; CORS origins come from the rules file."""
    rules = rules or get_rules()

    app = FastAPI(
        title="UPNVJ Dashboard Analytics API",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # --- Routers ---
    app.include_router(analytics_ingest.router, prefix="/api/track", tags=["Tracking"])
    app.include_router(analytics_report.router, prefix="/api", tags=["Analytics"])
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(create_health_router(version=APP_VERSION, registry=create_health_registry()))

    # CORS (Allow Frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=rules.cors.allowed_origins,
        allow_credentials=rules.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=os.environ.get("DASHBOARD_HOST", "127.0.0.1"),
        port=int(os.environ.get("DASHBOARD_PORT", "3001")),
        log_level="info",
    )
