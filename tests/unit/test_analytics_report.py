"""
Tests for AnalyticsReportingService.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.json_store import create_analytics_store
from src.adapters.time_local import FrozenTimeAdapter, to_epoch_ms
from src.components.analytics import (
    DAY_MS,
    AnalyticsIngestionService,
    AnalyticsReportingService,
    InMemoryEventStore,
    PageviewInput,
    PageviewRecord,
    ReportingConfig,
    ReportQuery,
    RollupStats,
    SnapshotCache,
    StoreDocument,
    VisitorRecord,
    run,
)
from src.rules.models import AnalyticsRules

NOW_MS = to_epoch_ms(datetime(2024, 6, 15, 12, 0, tzinfo=UTC))


def _seeded_store() -> InMemoryEventStore:
    doc = StoreDocument(
        visitors=[
            VisitorRecord(visitor_id="recent", timestamp=NOW_MS - DAY_MS, device_type="mobile"),
            VisitorRecord(visitor_id="older", timestamp=NOW_MS - 20 * DAY_MS),
        ],
        pageviews=[
            PageviewRecord(visitor_id="recent", timestamp=NOW_MS - DAY_MS, page="/"),
            PageviewRecord(visitor_id="recent", timestamp=NOW_MS - DAY_MS + 5000, page="/news"),
            PageviewRecord(visitor_id="older", timestamp=NOW_MS - 20 * DAY_MS, page="/"),
        ],
        stats=RollupStats(total_visitors=2, total_pageviews=3),
    )
    return InMemoryEventStore(doc)


@pytest.fixture
def seeded_reporting(clock: FrozenTimeAdapter) -> AnalyticsReportingService:
    return AnalyticsReportingService(event_store=_seeded_store(), time_port=clock)


class TestGetStats:
    def test_counts_within_window(self, seeded_reporting: AnalyticsReportingService) -> None:
        report = seeded_reporting.get_stats(7)

        assert report.visitors == 1
        assert report.pageviews == 2
        assert report.bounce_rate == 0.0
        assert len(report.daily_stats) == 7

    def test_period_and_timestamp(self, seeded_reporting: AnalyticsReportingService) -> None:
        report = seeded_reporting.get_stats(30)

        assert report.period == "Last 30 days"
        assert report.timestamp == "2024-06-15T12:00:00.000Z"

    def test_wire_keys(self, seeded_reporting: AnalyticsReportingService) -> None:
        body = seeded_reporting.get_stats(7).to_json_dict()
        assert set(body) == {"visitors", "pageviews", "bounceRate", "dailyStats", "period", "timestamp"}

    def test_empty_store(self, reporting: AnalyticsReportingService) -> None:
        report = reporting.get_stats(7)
        assert (report.visitors, report.pageviews, report.bounce_rate) == (0, 0, 0)
        assert all(d.visitors == 0 for d in report.daily_stats)


class TestGetAnalytics:
    def test_comparison_blocks_are_fixed(
        self, seeded_reporting: AnalyticsReportingService
    ) -> None:
        report = seeded_reporting.get_analytics(1)

        assert report.total_visitors == 0
        assert report.last_7_days.visitors == 1
        assert report.last_30_days.visitors == 2
        assert report.last_30_days.pageviews == 3

    def test_device_stats_and_summary(self, seeded_reporting: AnalyticsReportingService) -> None:
        report = seeded_reporting.get_analytics(30)

        assert report.device_stats.mobile == 50
        assert report.device_stats.desktop == 50
        assert report.summary.total_pageviews == 3

    def test_wire_keys(self, seeded_reporting: AnalyticsReportingService) -> None:
        body = seeded_reporting.get_analytics(7).to_json_dict()

        assert body["success"] is True
        assert {"last7Days", "last30Days", "deviceStats", "totalPageViews"} <= set(body)
        assert set(body["summary"]) == {
            "totalVisitors",
            "totalPageviews",
            "todayVisitors",
            "todayPageviews",
        }

    def test_custom_comparison_windows(self, clock: FrozenTimeAdapter) -> None:
        config = ReportingConfig(short_window_days=1, long_window_days=14)
        service = AnalyticsReportingService(_seeded_store(), time_port=clock, config=config)

        report = service.get_analytics(7)
        assert report.last_7_days.pageviews == 1
        assert report.last_30_days.pageviews == 2


class TestConfig:
    def test_from_rules_sorts_windows(self) -> None:
        config = ReportingConfig.from_rules(AnalyticsRules(comparison_windows=[30, 7]))
        assert (config.short_window_days, config.long_window_days) == (7, 30)


class TestSnapshotCache:
    def test_reads_go_through_cache(
        self,
        reporting: AnalyticsReportingService,
        snapshot_cache: SnapshotCache,
    ) -> None:
        reporting.get_stats(7)
        reporting.get_analytics(7)

        assert snapshot_cache.misses == 1
        assert snapshot_cache.hits == 1

    def test_ingestion_invalidates_cache(
        self,
        ingestion: AnalyticsIngestionService,
        reporting: AnalyticsReportingService,
    ) -> None:
        assert reporting.get_stats(7).pageviews == 0

        ingestion.record_pageview(PageviewInput(visitor_id="v1", page="/"))

        assert reporting.get_stats(7).pageviews == 1

    def test_write_during_read_is_not_cached_stale(
        self, clock: FrozenTimeAdapter, snapshot_cache: SnapshotCache
    ) -> None:
        class RacingStore(InMemoryEventStore):
            ingestion: AnalyticsIngestionService | None = None

            def read(self) -> StoreDocument:
                doc = super().read()
                if self.ingestion is not None:
                    ingestion, self.ingestion = self.ingestion, None
                    ingestion.record_pageview(PageviewInput(visitor_id="v1", page="/"))
                return doc

        store = RacingStore()
        store.ingestion = AnalyticsIngestionService(
            event_store=store, time_port=clock, cache=snapshot_cache
        )
        reporting = AnalyticsReportingService(
            event_store=store, time_port=clock, cache=snapshot_cache
        )

        assert reporting.get_stats(7).pageviews == 0
        assert reporting.get_stats(7).pageviews == 1
        assert reporting.get_stats(7).pageviews == 1
        assert snapshot_cache.hits == 1

    def test_write_from_other_process_is_seen(
        self, tmp_path: Path, clock: FrozenTimeAdapter, snapshot_cache: SnapshotCache
    ) -> None:
        store = create_analytics_store(tmp_path)
        store.initialize()
        reporting = AnalyticsReportingService(
            event_store=store, time_port=clock, cache=snapshot_cache
        )
        assert reporting.get_stats(7).pageviews == 0

        # A separate store object stands in for the CLI rewriting the file
        other = create_analytics_store(tmp_path)
        assert other.write(_seeded_store().get_document())

        assert reporting.get_stats(7).pageviews == 2


class TestDispatch:
    def test_report_query_dispatch(self, seeded_reporting: AnalyticsReportingService) -> None:
        stats = run(ReportQuery(days=7), reporting=seeded_reporting)
        detailed = run(ReportQuery(days=7), reporting=seeded_reporting, detailed=True)

        assert stats.pageviews == 2
        assert detailed.success is True

    def test_missing_reporting_service(self) -> None:
        with pytest.raises(ValueError):
            run(ReportQuery(days=7))
