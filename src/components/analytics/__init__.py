"""
Analytics component - pageview/event ingestion and reporting.
"""

from src.core.services.analytics_dedupe import (
    DedupeConfig,
    find_recent_pageview,
    is_duplicate_pageview,
)
from src.core.services.analytics_device import (
    DeviceConfig,
    DeviceType,
    classify_device,
    normalize_device_type,
)

from ._aggregate import (
    DAY_MS,
    bounce_rate,
    compute_rollup,
    daily_series,
    device_distribution,
    pageview_count,
    prune_expired,
    unique_visitors,
    window_totals,
)
from ._cache import SnapshotCache
from ._impl import (
    AnalyticsIngestionService,
    IngestionConfig,
    InMemoryEventStore,
    create_analytics_ingestion_service,
    validate_event_name,
    validate_visitor_id,
)
from ._report import (
    AnalyticsReportingService,
    ReportingConfig,
    create_analytics_reporting_service,
)
from .component import (
    run,
    run_get_analytics,
    run_get_stats,
    run_record_event,
    run_record_pageview,
)
from .events import (
    EVENT_PAYLOADS,
    EventPayload,
    OpaquePayload,
    normalize_event_data,
    parse_event_payload,
)
from .models import (
    AnalyticsReport,
    AnalyticsValidationError,
    DailyStat,
    DeviceStats,
    EventInput,
    EventRecord,
    IngestOutput,
    PageviewInput,
    PageviewRecord,
    ReportQuery,
    RollupStats,
    StatsReport,
    StoreDocument,
    VisitorRecord,
    WindowTotals,
)
from .ports import EventStorePort, SnapshotCachePort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_record_pageview",
    "run_record_event",
    "run_get_stats",
    "run_get_analytics",
    # Services
    "AnalyticsIngestionService",
    "AnalyticsReportingService",
    "IngestionConfig",
    "ReportingConfig",
    "InMemoryEventStore",
    "SnapshotCache",
    "create_analytics_ingestion_service",
    "create_analytics_reporting_service",
    "validate_visitor_id",
    "validate_event_name",
    # Aggregation
    "DAY_MS",
    "unique_visitors",
    "pageview_count",
    "bounce_rate",
    "daily_series",
    "device_distribution",
    "window_totals",
    "compute_rollup",
    "prune_expired",
    # Dedupe / device
    "DedupeConfig",
    "find_recent_pageview",
    "is_duplicate_pageview",
    "DeviceConfig",
    "DeviceType",
    "classify_device",
    "normalize_device_type",
    # Event payloads
    "EVENT_PAYLOADS",
    "EventPayload",
    "OpaquePayload",
    "parse_event_payload",
    "normalize_event_data",
    # Models
    "AnalyticsReport",
    "AnalyticsValidationError",
    "DailyStat",
    "DeviceStats",
    "EventInput",
    "EventRecord",
    "IngestOutput",
    "PageviewInput",
    "PageviewRecord",
    "ReportQuery",
    "RollupStats",
    "StatsReport",
    "StoreDocument",
    "VisitorRecord",
    "WindowTotals",
    # Ports
    "EventStorePort",
    "SnapshotCachePort",
    "TimePort",
]
