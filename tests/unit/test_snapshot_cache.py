from src.components.analytics import SnapshotCache, StoreDocument


def test_empty_cache_misses() -> None:
    cache = SnapshotCache()
    assert cache.get() is None
    assert cache.misses == 1


def test_put_then_get_hits() -> None:
    cache = SnapshotCache()
    doc = StoreDocument()
    assert cache.put(doc, cache.generation)

    assert cache.get() is doc
    assert cache.hits == 1


def test_invalidate_drops_snapshot() -> None:
    cache = SnapshotCache()
    cache.put(StoreDocument(), cache.generation)
    cache.invalidate()
    assert cache.get() is None


def test_put_after_invalidate_is_dropped() -> None:
    cache = SnapshotCache()
    generation = cache.generation
    cache.invalidate()

    assert cache.put(StoreDocument(), generation) is False
    assert cache.get() is None


def test_stamp_mismatch_misses() -> None:
    cache = SnapshotCache()
    doc = StoreDocument()
    cache.put(doc, cache.generation, stamp=1)

    assert cache.get(2) is None
    assert cache.get(1) is doc
    assert (cache.hits, cache.misses) == (1, 1)
