"""
Pageview duplicate suppression.

Guards against rapid double-fires of the same navigation (e.g. effects
invoked twice by the frontend framework). A pageview is a duplicate when
the same (session, page) pair was recorded within the dedupe window.

Key behaviors:
- Window is inclusive: a gap of exactly window_ms is still a duplicate
- Only pageviews are deduplicated; custom events never are
- Lookup scans newest-first and stops once past the window
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

# --- Configuration ---


@dataclass(frozen=True)
class DedupeConfig:
    """Deduplication configuration."""

    enabled: bool = True
    window_ms: int = 2000


DEFAULT_CONFIG = DedupeConfig()


class PageviewLike(Protocol):
    """Minimal view of a stored pageview."""

    session_id: str
    page: str
    timestamp: int


def find_recent_pageview(
    pageviews: Sequence[PageviewLike],
    session_id: str,
    page: str,
    now_ms: int,
    config: DedupeConfig = DEFAULT_CONFIG,
) -> PageviewLike | None:
    """
    Find a pageview for (session_id, page) recorded within the window.

    Pageviews are appended in ingestion order, so the scan walks backwards
    and stops at the first record older than the window.
    """
    for pv in reversed(pageviews):
        age = now_ms - pv.timestamp
        if age > config.window_ms:
            break
        if age < 0:
            continue
        if pv.session_id == session_id and pv.page == page:
            return pv
    return None


def is_duplicate_pageview(
    pageviews: Sequence[PageviewLike],
    session_id: str,
    page: str,
    now_ms: int,
    config: DedupeConfig = DEFAULT_CONFIG,
) -> bool:
    """Check whether a new pageview should be skipped as a duplicate."""
    if not config.enabled:
        return False
    return find_recent_pageview(pageviews, session_id, page, now_ms, config) is not None
