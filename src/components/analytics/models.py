"""
Analytics component models.

Persisted records use camelCase keys on the wire and in the JSON store
document; Python code uses snake_case attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.core.services.analytics_device import DeviceType, normalize_device_type


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with wire (camelCase) keys."""
        return self.model_dump(by_alias=True, mode="json")


# --- Persisted Records ---


class VisitorRecord(_CamelModel):
    """First pageview of a browser session."""

    visitor_id: str
    session_id: str = ""
    timestamp: int
    page: str = "/"
    referrer: str = ""
    device_type: DeviceType = "desktop"
    user_agent: str = ""
    screen_width: int = 0
    screen_height: int = 0
    language: str = ""

    @field_validator("device_type", mode="before")
    @classmethod
    def _known_device(cls, v: Any) -> DeviceType:
        return normalize_device_type(v if isinstance(v, str) else None)

    @model_validator(mode="after")
    def _session_defaults_to_visitor(self) -> VisitorRecord:
        if not self.session_id:
            self.session_id = self.visitor_id
        return self


class PageviewRecord(_CamelModel):
    """One tracked navigation."""

    visitor_id: str
    session_id: str = ""
    timestamp: int
    page: str = "/"

    @model_validator(mode="after")
    def _session_defaults_to_visitor(self) -> PageviewRecord:
        if not self.session_id:
            self.session_id = self.visitor_id
        return self


class EventRecord(_CamelModel):
    """Arbitrary custom telemetry event."""

    visitor_id: str
    session_id: str = ""
    event_name: str
    event_data: dict[str, Any] = Field(default_factory=dict)
    timestamp: int

    @model_validator(mode="after")
    def _session_defaults_to_visitor(self) -> EventRecord:
        if not self.session_id:
            self.session_id = self.visitor_id
        return self


class RollupStats(_CamelModel):
    """Precomputed counters stored alongside raw records."""

    total_visitors: int = 0
    total_pageviews: int = 0
    today_visitors: int = 0
    today_pageviews: int = 0


class StoreDocument(_CamelModel):
    """The single persisted analytics document."""

    visitors: list[VisitorRecord] = Field(default_factory=list)
    pageviews: list[PageviewRecord] = Field(default_factory=list)
    events: list[EventRecord] = Field(default_factory=list)
    stats: RollupStats = Field(default_factory=RollupStats)

    @classmethod
    def empty(cls) -> StoreDocument:
        return cls()


# --- Report Models ---


class DailyStat(_CamelModel):
    """One calendar day of the daily series."""

    date: str
    visitors: int
    page_views: int


class DeviceStats(_CamelModel):
    """Integer percentage of in-window visitors per device type."""

    desktop: int = 0
    mobile: int = 0
    tablet: int = 0


class WindowTotals(_CamelModel):
    """Fixed comparison block (e.g. last 7 / last 30 days)."""

    visitors: int
    pageviews: int


class StatsReport(_CamelModel):
    """Payload of GET /api/stats."""

    visitors: int
    pageviews: int
    bounce_rate: float
    daily_stats: list[DailyStat]
    period: str
    timestamp: str


class AnalyticsReport(_CamelModel):
    """Payload of GET /api/analytics."""

    success: bool = True
    daily_stats: list[DailyStat]
    device_stats: DeviceStats
    total_visitors: int
    total_page_views: int
    bounce_rate: float
    summary: RollupStats
    last_7_days: WindowTotals = Field(alias="last7Days")
    last_30_days: WindowTotals = Field(alias="last30Days")


# --- Validation Error ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Analytics validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class PageviewInput:
    """Input for recording a pageview."""

    visitor_id: str | None
    session_id: str | None = None
    page: str | None = None
    referrer: str | None = None
    device_type: str | None = None
    user_agent: str | None = None
    screen_width: int | None = None
    screen_height: int | None = None
    language: str | None = None


@dataclass(frozen=True)
class EventInput:
    """Input for recording a custom event."""

    visitor_id: str | None
    event_name: str | None
    session_id: str | None = None
    event_data: dict[str, Any] | None = None


@dataclass(frozen=True)
class ReportQuery:
    """Input for the reporting operations."""

    days: int = 7


# --- Output Models ---


@dataclass(frozen=True)
class IngestOutput:
    """Output for an ingestion call."""

    success: bool
    message: str = ""
    stored: bool = False
    duplicate: bool = False
    errors: list[AnalyticsValidationError] = field(default_factory=list)
