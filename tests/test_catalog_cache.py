"""
Tests for the catalog cache (token + ranked results)
"""
import threading
import time

import pytest

from questlog.services.catalog_cache import CatalogCache, make_cache_key

from igdb_fakes import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CatalogCache(ttl=300, token_expiry_margin=60, clock=clock)


class TestMakeCacheKey:

    def test_keyword_order_does_not_matter(self):
        assert make_cache_key("catalog", mode="top-games", q="") == make_cache_key("catalog", q="", mode="top-games")

    def test_values_distinguish_keys(self):
        assert make_cache_key("catalog", tagFilters=["RPG"]) != make_cache_key("catalog", tagFilters=["Indie"])
        assert make_cache_key("catalog", hideMature=True) != make_cache_key("catalog", hideMature=False)


class TestToken:

    def test_empty(self, cache):
        assert cache.get_token() is None

    def test_reused_while_margin_remains(self, cache, clock):
        cache.store_token("abc", 3600)
        clock.advance(3539)
        assert cache.get_token() == "abc"

    def test_expires_within_margin(self, cache, clock):
        cache.store_token("abc", 3600)
        clock.advance(3540)
        assert cache.get_token() is None

    def test_clear_keeps_token(self, cache):
        cache.store_token("abc", 3600)
        cache.get_or_fetch("k", lambda: {"gamesAll": []})
        assert cache.clear() == 1
        assert cache.get_token() == "abc"
        assert cache.get("k") is None


class TestGetOrFetch:

    def test_hit_and_miss_counts(self, cache):
        calls = []
        fetcher = lambda: calls.append(1) or {"n": len(calls)}  # noqa: E731

        assert cache.get_or_fetch("k", fetcher) == {"n": 1}
        assert cache.get_or_fetch("k", fetcher) == {"n": 1}
        stats = cache.stats()
        assert stats["misses"] == 1
        assert stats["hits"] == 1
        assert stats["entries"] == 1
        assert len(calls) == 1

    def test_ttl(self, cache, clock):
        cache.get_or_fetch("k", lambda: "old")
        clock.advance(300)
        assert cache.get("k") is None
        assert cache.get_or_fetch("k", lambda: "new") == "new"

    def test_expired_entries_are_dropped_on_store(self, cache, clock):
        for i in range(1000):
            cache.get_or_fetch(f"search-{i}", lambda: {"gamesAll": []})
        assert cache.stats()["entries"] == 1000

        clock.advance(10_000)
        cache.get_or_fetch("fresh", lambda: {"gamesAll": []})
        assert cache.stats()["entries"] == 1

    def test_unexpired_entries_survive_a_store(self, cache, clock):
        cache.get_or_fetch("a", lambda: "a")
        clock.advance(200)
        cache.get_or_fetch("b", lambda: "b")
        assert cache.stats()["entries"] == 2
        assert cache.get("a") == "a"

    def test_error_is_raised_and_not_cached(self, cache):
        def boom():
            raise RuntimeError("upstream down")

        with pytest.raises(RuntimeError):
            cache.get_or_fetch("k", boom)
        stats = cache.stats()
        assert stats["fetch_errors"] == 1
        assert stats["entries"] == 0
        assert stats["in_flight"] == 0
        assert cache.get_or_fetch("k", lambda: "ok") == "ok"

    def test_waiters_receive_the_leader_error(self, cache):
        started = threading.Event()
        release = threading.Event()
        errors = []

        def failing():
            started.set()
            release.wait(timeout=5)
            raise RuntimeError("boom")

        def call():
            try:
                cache.get_or_fetch("k", failing)
            except RuntimeError as e:
                errors.append(str(e))

        leader = threading.Thread(target=call)
        leader.start()
        started.wait(timeout=5)
        followers = [threading.Thread(target=call) for _ in range(3)]
        for t in followers:
            t.start()

        deadline = time.time() + 5
        while cache.stats()["shared"] < 3 and time.time() < deadline:
            time.sleep(0.01)
        release.set()
        for t in [leader] + followers:
            t.join(timeout=5)

        assert errors == ["boom"] * 4
        assert cache.stats()["fetch_errors"] == 1

    def test_single_flight(self, cache):
        release = threading.Event()
        calls = []
        results = []

        def slow():
            calls.append(1)
            release.wait(timeout=5)
            return "payload"

        threads = [threading.Thread(target=lambda: results.append(cache.get_or_fetch("k", slow)))
                   for _ in range(6)]
        for t in threads:
            t.start()

        deadline = time.time() + 5
        while cache.stats()["shared"] < 5 and time.time() < deadline:
            time.sleep(0.01)
        release.set()
        for t in threads:
            t.join(timeout=5)

        assert results == ["payload"] * 6
        assert len(calls) == 1
