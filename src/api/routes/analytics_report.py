"""
Analytics Reporting API Routes.

Read-only traffic summaries for the dashboard.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from src.api.deps import get_reporting_service, get_rules
from src.components.analytics import (
    AnalyticsReportingService,
    ReportQuery,
    run_get_analytics,
    run_get_stats,
)
from src.core.ports.storage import StoreIOError
from src.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()

RETRIEVAL_ERROR = {"error": "Failed to retrieve analytics"}


def get_report_query(
    days: int | None = Query(None, description="Trailing window in days", ge=1),
    rules: Rules = Depends(get_rules),
) -> ReportQuery:
    """Validate ``days`` against the configured maximum; omitted means default_days."""
    if days is None:
        days = rules.analytics.default_days
    max_days = rules.analytics.max_days
    if days > max_days:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"days must be between 1 and {max_days}",
        )
    return ReportQuery(days=days)


@router.get("/stats", response_model=None)
def get_stats(
    query: ReportQuery = Depends(get_report_query),
    service: AnalyticsReportingService = Depends(get_reporting_service),
) -> dict[str, Any] | JSONResponse:
    """Visitors, pageviews, bounce rate and daily series for the window."""
    try:
        report = run_get_stats(query, reporting=service)
    except StoreIOError:
        logger.exception("Error getting stats")
        return JSONResponse(status_code=500, content=RETRIEVAL_ERROR)
    return report.to_json_dict()


@router.get("/analytics", response_model=None)
def get_analytics(
    query: ReportQuery = Depends(get_report_query),
    service: AnalyticsReportingService = Depends(get_reporting_service),
) -> dict[str, Any] | JSONResponse:
    """Detailed analytics with device split, rollup and 7/30-day comparisons."""
    try:
        report = run_get_analytics(query, reporting=service)
    except StoreIOError:
        logger.exception("Error getting analytics")
        return JSONResponse(status_code=500, content=RETRIEVAL_ERROR)
    return report.to_json_dict()
