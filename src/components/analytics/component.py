"""
Analytics component - pageview/event ingestion and reporting.

Collects pageview and custom-event telemetry from the dashboard frontend
and aggregates it into visitor statistics.

Invariants:
- I1: sessionId defaults to visitorId
- I2: Pageviews repeated within the dedupe window are skipped
- I3: One VisitorRecord per session (first pageview only)
- I4: Records older than the retention horizon are pruned on pageview ingest
- I5: Reporting never mutates the store
"""

from __future__ import annotations

from ._impl import AnalyticsIngestionService
from ._report import AnalyticsReportingService
from .models import (
    AnalyticsReport,
    EventInput,
    IngestOutput,
    PageviewInput,
    ReportQuery,
    StatsReport,
)

# --- Component Entry Points ---


def run_record_pageview(
    inp: PageviewInput,
    *,
    ingestion: AnalyticsIngestionService,
) -> IngestOutput:
    """
    Record a pageview.

    Args:
        inp: Pageview submission.
        ingestion: Long-lived ingestion service owning the write lock.

    Returns:
        IngestOutput with the tracked/duplicate message or validation errors.
    """
    return ingestion.record_pageview(inp)


def run_record_event(
    inp: EventInput,
    *,
    ingestion: AnalyticsIngestionService,
) -> IngestOutput:
    """Record a custom event."""
    return ingestion.record_event(inp)


def run_get_stats(
    inp: ReportQuery,
    *,
    reporting: AnalyticsReportingService,
) -> StatsReport:
    """Headline stats over ``inp.days``."""
    return reporting.get_stats(inp.days)


def run_get_analytics(
    inp: ReportQuery,
    *,
    reporting: AnalyticsReportingService,
) -> AnalyticsReport:
    """Detailed analytics over ``inp.days`` plus the comparison blocks."""
    return reporting.get_analytics(inp.days)


def run(
    inp: PageviewInput | EventInput | ReportQuery,
    *,
    ingestion: AnalyticsIngestionService | None = None,
    reporting: AnalyticsReportingService | None = None,
    detailed: bool = False,
) -> IngestOutput | StatsReport | AnalyticsReport:
    """
    Main entry point for the analytics component.

    Dispatches to appropriate handler based on input type.

    Args:
        inp: Input object determining the operation.
        ingestion: Ingestion service (required for pageviews and events).
        reporting: Reporting service (required for report queries).
        detailed: For ReportQuery, return the full analytics report.

    Returns:
        Appropriate output object based on input type.
    """
    if isinstance(inp, (PageviewInput, EventInput)):
        if ingestion is None:
            raise ValueError("AnalyticsIngestionService is required for ingest operations")
        if isinstance(inp, PageviewInput):
            return run_record_pageview(inp, ingestion=ingestion)
        return run_record_event(inp, ingestion=ingestion)
    elif isinstance(inp, ReportQuery):
        if reporting is None:
            raise ValueError("AnalyticsReportingService is required for report operations")
        if detailed:
            return run_get_analytics(inp, reporting=reporting)
        return run_get_stats(inp, reporting=reporting)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
