"""
AnalyticsReportingService - read-only dashboard summaries.

Reads go through the snapshot cache when one is provided and never take
the ingestion write lock.
"""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from src.adapters.time_local import DEFAULT_TIMEZONE, LocalTimeAdapter, iso_utc
from src.rules.models import AnalyticsRules

from ._aggregate import (
    bounce_rate,
    daily_series,
    device_distribution,
    pageview_count,
    unique_visitors,
    window_totals,
)
from .models import AnalyticsReport, StatsReport, StoreDocument
from .ports import EventStorePort, SnapshotCachePort, TimePort


@dataclass(frozen=True)
class ReportingConfig:
    """Reporting configuration."""

    short_window_days: int = 7
    long_window_days: int = 30
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_rules(cls, rules: AnalyticsRules) -> ReportingConfig:
        short, long = sorted(rules.comparison_windows)
        return cls(short_window_days=short, long_window_days=long, timezone=rules.timezone)


DEFAULT_CONFIG = ReportingConfig()


class AnalyticsReportingService:
    """Computes stats and analytics reports from the store document."""

    def __init__(
        self,
        event_store: EventStorePort,
        time_port: TimePort | None = None,
        config: ReportingConfig | None = None,
        cache: SnapshotCachePort | None = None,
    ) -> None:
        self._store = event_store
        self._config = config or DEFAULT_CONFIG
        self._time = time_port or LocalTimeAdapter(self._config.timezone)
        self._cache = cache
        self._tz = ZoneInfo(self._config.timezone)

    def _snapshot(self) -> StoreDocument:
        if self._cache is None:
            return self._store.read()
        # Stamp and generation are taken before the read; a write landing
        # in between makes the cached copy miss on the next call.
        stamp = self._store.stamp()
        cached = self._cache.get(stamp)
        if cached is not None:
            return cached
        generation = self._cache.generation
        doc = self._store.read()
        self._cache.put(doc, generation, stamp)
        return doc

    def get_stats(self, days: int) -> StatsReport:
        """
        Headline stats for the last ``days`` days.

        Raises:
            StoreIOError: If the store cannot be read
        """
        doc = self._snapshot()
        now = self._time.now_utc()
        now_ms = self._time.now_ms()
        return StatsReport(
            visitors=unique_visitors(doc, days, now_ms),
            pageviews=pageview_count(doc, days, now_ms),
            bounce_rate=bounce_rate(doc, days, now_ms),
            daily_stats=daily_series(doc, days, now_ms, self._tz),
            period=f"Last {days} days",
            timestamp=iso_utc(now),
        )

    def get_analytics(self, days: int) -> AnalyticsReport:
        """
        Detailed analytics for the last ``days`` days plus comparison blocks.

        Raises:
            StoreIOError: If the store cannot be read
        """
        doc = self._snapshot()
        now_ms = self._time.now_ms()
        return AnalyticsReport(
            success=True,
            daily_stats=daily_series(doc, days, now_ms, self._tz),
            device_stats=device_distribution(doc, days, now_ms),
            total_visitors=unique_visitors(doc, days, now_ms),
            total_page_views=pageview_count(doc, days, now_ms),
            bounce_rate=bounce_rate(doc, days, now_ms),
            summary=doc.stats.model_copy(),
            last_7_days=window_totals(doc, self._config.short_window_days, now_ms),
            last_30_days=window_totals(doc, self._config.long_window_days, now_ms),
        )


def create_analytics_reporting_service(
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    config: ReportingConfig | None = None,
    cache: SnapshotCachePort | None = None,
) -> AnalyticsReportingService:
    """Create an AnalyticsReportingService."""
    return AnalyticsReportingService(
        event_store=event_store,
        time_port=time_port,
        config=config,
        cache=cache,
    )
