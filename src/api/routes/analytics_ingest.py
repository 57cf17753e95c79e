"""
Analytics Ingestion API Routes.

Public endpoints the dashboard frontend posts pageviews and custom
events to. Request bodies use camelCase field names.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.api.deps import get_ingestion_service
from src.components.analytics import (
    AnalyticsIngestionService,
    EventInput,
    IngestOutput,
    PageviewInput,
    run_record_event,
    run_record_pageview,
)
from src.core.ports.storage import StoreIOError

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Request/Response Models ---


class _TrackRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageviewRequest(_TrackRequest):
    """Pageview submission."""

    visitor_id: str | None = Field(None, description="Persistent browser visitor id")
    session_id: str | None = Field(None, description="Browser session id (defaults to visitorId)")
    page: str | None = Field(None, description="Page path (defaults to /)")
    referrer: str | None = Field(None, description="Referrer URL")
    device_type: str | None = Field(None, description="desktop, mobile or tablet")
    user_agent: str | None = Field(None, description="Browser user agent")
    screen_width: int | None = Field(None, description="Screen width in CSS pixels")
    screen_height: int | None = Field(None, description="Screen height in CSS pixels")
    language: str | None = Field(None, description="UI language")


class EventRequest(_TrackRequest):
    """Custom event submission."""

    visitor_id: str | None = Field(None, description="Persistent browser visitor id")
    session_id: str | None = Field(None, description="Browser session id (defaults to visitorId)")
    event_name: str | None = Field(None, description="Event name, e.g. click or section_view")
    event_data: dict[str, Any] | None = Field(None, description="Event payload")


class TrackResponse(BaseModel):
    """Success response."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Validation error response."""

    success: bool = False
    error: str
    errors: list[dict[str, Any]]


# --- Helpers ---


def validation_error_response(out: IngestOutput) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": out.message,
            "errors": [
                {"code": e.code, "message": e.message, "field": e.field_name} for e in out.errors
            ],
        },
    )


def store_error_response(error: StoreIOError) -> JSONResponse:
    if error.code == "store_busy":
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "Analytics store is busy, retry later"},
        )
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Failed to store analytics data"},
    )


def _user_agent(body_value: str | None, request: Request) -> str | None:
    return body_value or request.headers.get("user-agent")


# --- Routes ---


@router.post(
    "/pageview",
    response_model=TrackResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"description": "Store failure"},
        503: {"description": "Store busy"},
    },
)
def track_pageview(
    request: Request,
    body: PageviewRequest,
    service: AnalyticsIngestionService = Depends(get_ingestion_service),
) -> TrackResponse | JSONResponse:
    """Record a pageview; repeats within the dedupe window are skipped."""
    inp = PageviewInput(
        visitor_id=body.visitor_id,
        session_id=body.session_id,
        page=body.page,
        referrer=body.referrer,
        device_type=body.device_type,
        user_agent=_user_agent(body.user_agent, request),
        screen_width=body.screen_width,
        screen_height=body.screen_height,
        language=body.language,
    )

    try:
        out = run_record_pageview(inp, ingestion=service)
    except StoreIOError as e:
        logger.exception("Error tracking pageview")
        return store_error_response(e)

    if not out.success:
        return validation_error_response(out)
    return TrackResponse(message=out.message)


@router.post(
    "/event",
    response_model=TrackResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"description": "Store failure"},
        503: {"description": "Store busy"},
    },
)
def track_event(
    body: EventRequest,
    service: AnalyticsIngestionService = Depends(get_ingestion_service),
) -> TrackResponse | JSONResponse:
    """Record a custom event. Events are never deduplicated."""
    inp = EventInput(
        visitor_id=body.visitor_id,
        event_name=body.event_name,
        session_id=body.session_id,
        event_data=body.event_data,
    )

    try:
        out = run_record_event(inp, ingestion=service)
    except StoreIOError as e:
        logger.exception("Error tracking event")
        return store_error_response(e)

    if not out.success:
        return validation_error_response(out)
    return TrackResponse(message=out.message)
