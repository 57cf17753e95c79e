"""
Analytics aggregation - pure functions over the store document.

Every metric is computed over a trailing window of ``days`` ending at
``now_ms``. A record is in the window when its timestamp is strictly
greater than ``now_ms - days * DAY_MS``.

Key behaviors:
- Unique visitors count distinct visitorId, not sessions
- Bounce rate groups pageviews by session; a session bounces when it
  touched exactly one distinct page
- Daily series is anchored to local midnight, oldest day first
- Device percentages are rounded independently (may not sum to 100)
- Empty windows yield zeros and never raise
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from src.adapters.time_local import from_epoch_ms, to_epoch_ms
from src.core.services.analytics_device import DEVICE_TYPES, normalize_device_type

from .models import (
    DailyStat,
    DeviceStats,
    PageviewRecord,
    RollupStats,
    StoreDocument,
    VisitorRecord,
    WindowTotals,
)

DAY_MS = 86_400_000


def window_cutoff_ms(days: int, now_ms: int) -> int:
    """Exclusive lower bound of a trailing window."""
    return now_ms - days * DAY_MS


def _visitors_since(doc: StoreDocument, cutoff_ms: int) -> list[VisitorRecord]:
    return [v for v in doc.visitors if v.timestamp > cutoff_ms]


def _pageviews_since(doc: StoreDocument, cutoff_ms: int) -> list[PageviewRecord]:
    return [p for p in doc.pageviews if p.timestamp > cutoff_ms]


def _distinct_visitors(records: Iterable[VisitorRecord]) -> int:
    return len({r.visitor_id for r in records})


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


# --- Window Metrics ---


def unique_visitors(doc: StoreDocument, days: int, now_ms: int) -> int:
    """Distinct visitorIds among in-window VisitorRecords."""
    return _distinct_visitors(_visitors_since(doc, window_cutoff_ms(days, now_ms)))


def pageview_count(doc: StoreDocument, days: int, now_ms: int) -> int:
    """In-window PageviewRecords, no deduplication."""
    return len(_pageviews_since(doc, window_cutoff_ms(days, now_ms)))


def bounce_rate(doc: StoreDocument, days: int, now_ms: int) -> float:
    """
    Percentage of in-window sessions that viewed a single distinct page.

    Returns:
        Rate in [0, 100] rounded to one decimal; 0 with no pageviews.
    """
    pages_by_session: dict[str, set[str]] = {}
    for pv in _pageviews_since(doc, window_cutoff_ms(days, now_ms)):
        session = pv.session_id or pv.visitor_id
        pages_by_session.setdefault(session, set()).add(pv.page)

    if not pages_by_session:
        return 0.0

    bounces = sum(1 for pages in pages_by_session.values() if len(pages) == 1)
    return round(bounces / len(pages_by_session) * 100, 1)


def window_totals(doc: StoreDocument, days: int, now_ms: int) -> WindowTotals:
    """Visitors/pageviews block for a fixed comparison window."""
    return WindowTotals(
        visitors=unique_visitors(doc, days, now_ms),
        pageviews=pageview_count(doc, days, now_ms),
    )


# --- Daily Series ---


def local_day_starts(days: int, now_ms: int, tz: ZoneInfo) -> list[datetime]:
    """Local midnights of the last ``days`` calendar days, oldest first."""
    if days <= 0:
        return []
    today = from_epoch_ms(now_ms, tz).date()
    return [
        datetime.combine(today - timedelta(days=offset), time.min, tzinfo=tz)
        for offset in range(days - 1, -1, -1)
    ]


def daily_series(
    doc: StoreDocument,
    days: int,
    now_ms: int,
    tz: ZoneInfo,
) -> list[DailyStat]:
    """
    Per-day visitors and pageviews for the last ``days`` local days.

    Each day covers ``[start, start + DAY_MS)``; a record exactly at a
    day's start belongs to that day.
    """
    series: list[DailyStat] = []
    for day_start in local_day_starts(days, now_ms, tz):
        start_ms = to_epoch_ms(day_start)
        end_ms = start_ms + DAY_MS
        visitors = {v.visitor_id for v in doc.visitors if start_ms <= v.timestamp < end_ms}
        pageviews = sum(1 for p in doc.pageviews if start_ms <= p.timestamp < end_ms)
        series.append(
            DailyStat(
                date=day_start.strftime("%Y-%m-%d"),
                visitors=len(visitors),
                page_views=pageviews,
            )
        )
    return series


# --- Device Distribution ---


def device_distribution(doc: StoreDocument, days: int, now_ms: int) -> DeviceStats:
    """Integer percentage of in-window VisitorRecords per device type."""
    visitors = _visitors_since(doc, window_cutoff_ms(days, now_ms))
    if not visitors:
        return DeviceStats()

    counts = Counter(normalize_device_type(v.device_type) for v in visitors)
    total = len(visitors)
    percentages = {
        device: _round_half_up(counts.get(device, 0) / total * 100) for device in DEVICE_TYPES
    }
    return DeviceStats(**percentages)


# --- Rollup / Retention ---


def compute_rollup(doc: StoreDocument, now_ms: int, tz: ZoneInfo) -> RollupStats:
    """Totals across the whole document plus the current local day."""
    today_start = to_epoch_ms(local_day_starts(1, now_ms, tz)[0])
    today_visitors = [v for v in doc.visitors if v.timestamp >= today_start]
    today_pageviews = [p for p in doc.pageviews if p.timestamp >= today_start]
    return RollupStats(
        total_visitors=_distinct_visitors(doc.visitors),
        total_pageviews=len(doc.pageviews),
        today_visitors=_distinct_visitors(today_visitors),
        today_pageviews=len(today_pageviews),
    )


def prune_expired(doc: StoreDocument, now_ms: int, retention_days: int) -> int:
    """
    Drop records of all kinds at or before the retention horizon.

    Returns:
        Number of records removed.
    """
    cutoff = window_cutoff_ms(retention_days, now_ms)
    before = len(doc.visitors) + len(doc.pageviews) + len(doc.events)
    doc.visitors = [v for v in doc.visitors if v.timestamp > cutoff]
    doc.pageviews = [p for p in doc.pageviews if p.timestamp > cutoff]
    doc.events = [e for e in doc.events if e.timestamp > cutoff]
    return before - (len(doc.visitors) + len(doc.pageviews) + len(doc.events))


def has_session_visitor(visitors: Sequence[VisitorRecord], session_id: str) -> bool:
    """Whether the session already has its first-visit record."""
    return any(v.session_id == session_id for v in visitors)
