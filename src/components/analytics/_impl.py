"""
AnalyticsIngestionService - pageview and event ingestion.

Handles validation, duplicate suppression, first-visit tracking,
retention pruning and persistence of the analytics document.

Key behaviors:
- visitorId is required for every submission; eventName for events
- sessionId defaults to visitorId
- Pageviews for the same (session, page) within the dedupe window are skipped
- One VisitorRecord per session, written on its first pageview
- Every read-modify-write runs under a per-service lock with a bounded wait
- A failed write raises StoreIOError and discards the in-memory document
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from zoneinfo import ZoneInfo

from src.adapters.time_local import DEFAULT_TIMEZONE, LocalTimeAdapter
from src.core.ports.storage import StoreIOError
from src.core.services.analytics_dedupe import DedupeConfig, is_duplicate_pageview
from src.core.services.analytics_device import DeviceConfig, classify_device
from src.rules.models import AnalyticsRules

from ._aggregate import compute_rollup, has_session_visitor, prune_expired
from .events import normalize_event_data
from .models import (
    AnalyticsValidationError,
    EventInput,
    EventRecord,
    IngestOutput,
    PageviewInput,
    PageviewRecord,
    StoreDocument,
    VisitorRecord,
)
from .ports import EventStorePort, SnapshotCachePort, TimePort

logger = logging.getLogger(__name__)

MSG_DUPLICATE = "Duplicate skipped"
MSG_PAGEVIEW = "Pageview tracked"
MSG_EVENT = "Event tracked"


# --- Configuration ---


@dataclass(frozen=True)
class IngestionConfig:
    """Analytics ingestion configuration."""

    retention_days: int = 30
    dedupe: DedupeConfig = field(default_factory=DedupeConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    write_lock_timeout_seconds: float = 5.0
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_rules(cls, rules: AnalyticsRules) -> IngestionConfig:
        return cls(
            retention_days=rules.retention_days,
            dedupe=DedupeConfig(window_ms=rules.dedupe_window_ms),
            write_lock_timeout_seconds=rules.write_lock_timeout_seconds,
            timezone=rules.timezone,
        )


DEFAULT_CONFIG = IngestionConfig()


# --- Default Implementations ---


class InMemoryEventStore:
    """In-memory event store for testing/dev."""

    def __init__(self, doc: StoreDocument | None = None, *, fail_writes: bool = False) -> None:
        self._doc = doc.model_copy(deep=True) if doc is not None else StoreDocument.empty()
        self.fail_writes = fail_writes
        self.write_count = 0

    def read(self) -> StoreDocument:
        return self._doc.model_copy(deep=True)

    def write(self, doc: StoreDocument) -> bool:
        if self.fail_writes:
            return False
        self._doc = doc.model_copy(deep=True)
        self.write_count += 1
        return True

    def stamp(self) -> int:
        return self.write_count

    def get_document(self) -> StoreDocument:
        """Get the stored document (for testing)."""
        return self._doc


# --- Validation Functions ---


def validate_visitor_id(visitor_id: str | None) -> list[AnalyticsValidationError]:
    """Validate the visitor identifier is present."""
    if not visitor_id or not visitor_id.strip():
        return [
            AnalyticsValidationError(
                code="visitor_id_required",
                message="visitorId is required",
                field_name="visitorId",
            )
        ]
    return []


def validate_event_name(event_name: str | None) -> list[AnalyticsValidationError]:
    """Validate the event name is present."""
    if not event_name or not event_name.strip():
        return [
            AnalyticsValidationError(
                code="event_name_required",
                message="eventName is required",
                field_name="eventName",
            )
        ]
    return []


def _rejected(errors: list[AnalyticsValidationError]) -> IngestOutput:
    return IngestOutput(
        success=False,
        message="; ".join(e.message for e in errors),
        errors=errors,
    )


# --- Analytics Ingestion Service ---


class AnalyticsIngestionService:
    """
    Analytics ingestion service.

    Long-lived: the write lock it owns serializes every
    read-modify-write cycle against its store.
    """

    def __init__(
        self,
        event_store: EventStorePort,
        time_port: TimePort | None = None,
        config: IngestionConfig | None = None,
        cache: SnapshotCachePort | None = None,
    ) -> None:
        """Initialize service."""
        self._store = event_store
        self._config = config or DEFAULT_CONFIG
        self._time = time_port or LocalTimeAdapter(self._config.timezone)
        self._cache = cache
        self._tz = ZoneInfo(self._config.timezone)
        self._lock = Lock()

    @property
    def config(self) -> IngestionConfig:
        return self._config

    @contextmanager
    def _write_lock(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._config.write_lock_timeout_seconds):
            raise StoreIOError("Analytics store is busy", code="store_busy")
        try:
            yield
        finally:
            self._lock.release()

    def _persist(self, doc: StoreDocument) -> None:
        if not self._store.write(doc):
            logger.error("Analytics document write failed; changes discarded")
            raise StoreIOError("Failed to persist analytics data")
        if self._cache is not None:
            self._cache.invalidate()

    def record_pageview(self, inp: PageviewInput) -> IngestOutput:
        """
        Record a pageview.

        Returns:
            IngestOutput; ``duplicate`` is set when the pageview was skipped.

        Raises:
            StoreIOError: If the store is busy or cannot be read or written
        """
        errors = validate_visitor_id(inp.visitor_id)
        if errors:
            return _rejected(errors)

        visitor_id = inp.visitor_id or ""
        session_id = inp.session_id or visitor_id
        page = inp.page or "/"

        with self._write_lock():
            now_ms = self._time.now_ms()
            doc = self._store.read()

            if is_duplicate_pageview(doc.pageviews, session_id, page, now_ms, self._config.dedupe):
                logger.debug("Duplicate pageview skipped: session=%s page=%s", session_id, page)
                return IngestOutput(success=True, message=MSG_DUPLICATE, duplicate=True)

            if not has_session_visitor(doc.visitors, session_id):
                doc.visitors.append(
                    VisitorRecord(
                        visitor_id=visitor_id,
                        session_id=session_id,
                        timestamp=now_ms,
                        page=page,
                        referrer=inp.referrer or "",
                        device_type=classify_device(
                            inp.user_agent,
                            screen_width=inp.screen_width,
                            declared=inp.device_type,
                            config=self._config.device,
                        ),
                        user_agent=inp.user_agent or "",
                        screen_width=inp.screen_width or 0,
                        screen_height=inp.screen_height or 0,
                        language=inp.language or "",
                    )
                )

            doc.pageviews.append(
                PageviewRecord(
                    visitor_id=visitor_id,
                    session_id=session_id,
                    timestamp=now_ms,
                    page=page,
                )
            )

            doc.stats = compute_rollup(doc, now_ms, self._tz)

            pruned = prune_expired(doc, now_ms, self._config.retention_days)
            if pruned:
                logger.info("Pruned %d expired analytics records", pruned)

            self._persist(doc)

        return IngestOutput(success=True, message=MSG_PAGEVIEW, stored=True)

    def record_event(self, inp: EventInput) -> IngestOutput:
        """
        Record a custom event. Events are never deduplicated.

        Raises:
            StoreIOError: If the store is busy or cannot be read or written
        """
        errors = validate_visitor_id(inp.visitor_id) + validate_event_name(inp.event_name)
        if errors:
            return _rejected(errors)

        visitor_id = inp.visitor_id or ""
        event_name = inp.event_name or ""

        with self._write_lock():
            now_ms = self._time.now_ms()
            doc = self._store.read()
            doc.events.append(
                EventRecord(
                    visitor_id=visitor_id,
                    session_id=inp.session_id or visitor_id,
                    event_name=event_name,
                    event_data=normalize_event_data(event_name, inp.event_data),
                    timestamp=now_ms,
                )
            )
            self._persist(doc)

        return IngestOutput(success=True, message=MSG_EVENT, stored=True)

    def prune(self) -> int:
        """
        Drop expired records and refresh the rollup.

        Returns:
            Number of records removed.
        """
        with self._write_lock():
            now_ms = self._time.now_ms()
            doc = self._store.read()
            pruned = prune_expired(doc, now_ms, self._config.retention_days)
            doc.stats = compute_rollup(doc, now_ms, self._tz)
            self._persist(doc)

        logger.info("Pruned %d expired analytics records", pruned)
        return pruned


# --- Factory ---


def create_analytics_ingestion_service(
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    config: IngestionConfig | None = None,
    cache: SnapshotCachePort | None = None,
) -> AnalyticsIngestionService:
    """Create an AnalyticsIngestionService."""
    return AnalyticsIngestionService(
        event_store=event_store,
        time_port=time_port,
        config=config,
        cache=cache,
    )
