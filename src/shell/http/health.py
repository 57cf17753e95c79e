"""
Health endpoints.

Key behaviors:
- /health: status banner, 200 whenever the process can answer
- /health/ready: 503 until startup finished and every store is readable
- /health/live: process liveness with uptime
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Protocol

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.adapters.time_local import iso_utc

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Outcome of one readiness check."""

    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is HealthStatus.HEALTHY


class HealthCheck(Protocol):
    name: str

    def check(self) -> CheckResult: ...


# --- Uptime ---


class _Uptime:
    def __init__(self) -> None:
        self.started_at: float | None = None

    def seconds(self) -> float:
        return 0.0 if self.started_at is None else time.monotonic() - self.started_at


class StartupTracker:
    """Process-wide record of when the lifespan finished starting up."""

    _uptime = _Uptime()

    @classmethod
    def mark_started(cls) -> None:
        cls._uptime.started_at = time.monotonic()

    @classmethod
    def is_started(cls) -> bool:
        return cls._uptime.started_at is not None

    @classmethod
    def get_uptime_seconds(cls) -> float:
        return cls._uptime.seconds()

    @classmethod
    def reset(cls) -> None:
        cls._uptime.started_at = None


def mark_startup_complete() -> None:
    StartupTracker.mark_started()


# --- Checks ---


class HealthCheckRegistry:
    """Ordered readiness checks; each run is timed."""

    def __init__(self) -> None:
        self._checks: list[HealthCheck] = []

    def register(self, check: HealthCheck) -> None:
        self._checks.append(check)

    def run_all(self) -> list[CheckResult]:
        results = []
        for check in self._checks:
            started = time.perf_counter()
            result = check.check()
            if not result.latency_ms:
                result.latency_ms = (time.perf_counter() - started) * 1000
            results.append(result)
        return results


class StartupCheck:
    name = "startup"

    def check(self) -> CheckResult:
        if not StartupTracker.is_started():
            return CheckResult(self.name, HealthStatus.UNHEALTHY, "Startup not complete")
        return CheckResult(
            self.name,
            HealthStatus.HEALTHY,
            "Startup complete",
            details={"uptime_seconds": StartupTracker.get_uptime_seconds()},
        )


class StoreCheck:
    """Readiness of one JSON document store."""

    def __init__(self, name: str, check_fn: Callable[[], tuple[bool, str]]) -> None:
        """
        Args:
            name: Check name in the readiness payload (e.g. "analytics_store")
            check_fn: Returns (ok, message), usually JsonDocumentStore.check
        """
        self.name = name
        self._check_fn = check_fn

    def check(self) -> CheckResult:
        ok, message = self._check_fn()
        if not ok:
            logger.warning("Store %s not ready: %s", self.name, message)
        status = HealthStatus.HEALTHY if ok else HealthStatus.UNHEALTHY
        return CheckResult(self.name, status, message)


# --- Response Models ---


class HealthBanner(BaseModel):
    status: str = "OK"
    message: str
    timestamp: str
    version: str


class CheckReport(BaseModel):
    name: str
    status: HealthStatus
    message: str
    latency_ms: float


class ReadinessReport(BaseModel):
    ready: bool
    checks: list[CheckReport]


class LivenessReport(BaseModel):
    alive: bool = True
    uptime_seconds: float


# --- Router ---


def create_health_router(
    version: str = "0.0.0",
    registry: HealthCheckRegistry | None = None,
    message: str = "Analytics Server is running",
) -> APIRouter:
    """
    Build the health router.

    Args:
        version: Reported by /health
        registry: Readiness checks; none means always ready
        message: Banner text for /health
    """
    router = APIRouter(tags=["health"])
    checks = registry or HealthCheckRegistry()

    @router.get("/health", response_model=HealthBanner)
    def health() -> HealthBanner:
        return HealthBanner(message=message, timestamp=iso_utc(datetime.now(UTC)), version=version)

    @router.get(
        "/health/ready",
        response_model=ReadinessReport,
        responses={503: {"model": ReadinessReport, "description": "Not ready"}},
    )
    def ready() -> JSONResponse:
        results = checks.run_all()
        report = ReadinessReport(
            ready=all(r.ok for r in results),
            checks=[
                CheckReport(
                    name=r.name, status=r.status, message=r.message, latency_ms=r.latency_ms
                )
                for r in results
            ],
        )
        return JSONResponse(
            content=report.model_dump(mode="json"),
            status_code=200 if report.ready else 503,
        )

    @router.get("/health/live", response_model=LivenessReport)
    def live() -> LivenessReport:
        return LivenessReport(uptime_seconds=StartupTracker.get_uptime_seconds())

    return router
