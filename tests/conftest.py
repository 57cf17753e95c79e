from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.time_local import FrozenTimeAdapter
from src.api import deps
from src.components.analytics import (
    AnalyticsIngestionService,
    AnalyticsReportingService,
    InMemoryEventStore,
    SnapshotCache,
)
from src.rules.loader import load_rules
from src.rules.models import Rules

RULES_PATH = Path("rules.yaml").resolve()

# 2024-06-15 12:00 UTC is 19:00 in Asia/Jakarta
FROZEN_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def rules() -> Rules:
    return load_rules(RULES_PATH)


@pytest.fixture
def clock() -> FrozenTimeAdapter:
    return FrozenTimeAdapter(FROZEN_NOW)


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def snapshot_cache() -> SnapshotCache:
    return SnapshotCache()


@pytest.fixture
def ingestion(
    event_store: InMemoryEventStore,
    clock: FrozenTimeAdapter,
    snapshot_cache: SnapshotCache,
) -> AnalyticsIngestionService:
    return AnalyticsIngestionService(event_store=event_store, time_port=clock, cache=snapshot_cache)


@pytest.fixture
def reporting(
    event_store: InMemoryEventStore,
    clock: FrozenTimeAdapter,
    snapshot_cache: SnapshotCache,
) -> AnalyticsReportingService:
    return AnalyticsReportingService(event_store=event_store, time_port=clock, cache=snapshot_cache)


@pytest.fixture
def app_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """
    Point the API at a temporary data dir and reset cached singletons.

    Yields the data dir.
    """
    data_dir = tmp_path / "data"
    monkeypatch.setenv("DASHBOARD_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DASHBOARD_RULES_PATH", str(RULES_PATH))
    monkeypatch.setenv("DASHBOARD_SECRET_KEY", "test-secret")
    deps.reset_dependencies()
    yield data_dir
    deps.reset_dependencies()
