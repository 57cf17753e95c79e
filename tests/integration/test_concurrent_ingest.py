"""
Concurrent ingestion against the real JSON file store.

Every request performs a read-modify-write of the whole document, so
parallel writers must not lose each other's records.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from src.adapters.json_store import create_analytics_store
from src.adapters.time_local import FrozenTimeAdapter
from src.components.analytics import (
    AnalyticsIngestionService,
    AnalyticsReportingService,
    EventInput,
    PageviewInput,
    SnapshotCache,
)

WORKERS = 8
REQUESTS = 40


def test_parallel_pageviews_are_all_stored(tmp_path: Path, clock: FrozenTimeAdapter) -> None:
    store = create_analytics_store(tmp_path)
    store.initialize()
    cache = SnapshotCache()
    ingestion = AnalyticsIngestionService(event_store=store, time_port=clock, cache=cache)
    reporting = AnalyticsReportingService(event_store=store, time_port=clock, cache=cache)

    def track(i: int) -> bool:
        out = ingestion.record_pageview(PageviewInput(visitor_id=f"v{i}", page="/"))
        return out.stored

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(track, range(REQUESTS)))

    assert all(results)
    doc = store.read()
    assert len(doc.pageviews) == REQUESTS
    assert len(doc.visitors) == REQUESTS
    assert doc.stats.total_pageviews == REQUESTS
    assert reporting.get_stats(7).visitors == REQUESTS


def test_parallel_mixed_writes(tmp_path: Path, clock: FrozenTimeAdapter) -> None:
    store = create_analytics_store(tmp_path)
    ingestion = AnalyticsIngestionService(event_store=store, time_port=clock)

    def track(i: int) -> None:
        if i % 2:
            ingestion.record_event(EventInput(visitor_id=f"v{i}", event_name="click"))
        else:
            ingestion.record_pageview(PageviewInput(visitor_id=f"v{i}", page=f"/p{i}"))

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(track, range(REQUESTS)))

    doc = store.read()
    assert len(doc.events) == REQUESTS // 2
    assert len(doc.pageviews) == REQUESTS // 2
