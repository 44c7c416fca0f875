import pytest

from portfolio_site.shared.cache import TTLCache
from portfolio_site.shared.errors import DataAccessError
from portfolio_site.shared.result import FetchResult, FetchStatus


def test_success_and_empty_results():
    result = FetchResult.success([1, 2], source="projects")
    assert result.status is FetchStatus.OK
    assert result.items == [1, 2]
    assert result.first == 1
    assert result.unwrap() == [1, 2]

    empty = FetchResult.success([], source="projects")
    assert empty.status is FetchStatus.EMPTY
    assert empty.ok
    assert empty.items == []
    assert empty.first is None
    assert empty.unwrap_first() is None


def test_failure_items_are_empty_and_unwrap_raises():
    error = RuntimeError("connection reset")
    result = FetchResult.failure(error, source="certificates")

    assert not result.ok
    assert result.items == []
    assert result.first is None
    with pytest.raises(DataAccessError) as exc_info:
        result.unwrap()
    assert exc_info.value.__cause__ is error


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_ttl_cache_expires_entries():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("about", "row")

    clock.now = 9.9
    assert cache.get("about") == "row"
    clock.now = 10.0
    assert cache.get("about") is None
    assert "about" not in cache


def test_ttl_cache_without_expiry():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=0, clock=clock)
    cache.set("about", "row")
    clock.now = 10_000
    assert cache.get("about") == "row"
    cache.invalidate("about")
    assert cache.get("about") is None
