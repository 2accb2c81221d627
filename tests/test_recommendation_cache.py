"""
Tests for Recommendation Cache
"""

import pytest
from unittest.mock import Mock

from builders import build_recommendation
from vpa_updater.recommendation_cache import RecommendationCache


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recommender():
    recommender = Mock()
    recommender.get_recommendation.return_value = build_recommendation(cpu="1")
    return recommender


@pytest.fixture
def cache(recommender, clock):
    return RecommendationCache(recommender, ttl=120.0, clock=clock)


class TestRecommendationCache:
    """Test RecommendationCache functionality"""

    def test_miss_fetches_from_recommender(self, cache, recommender):
        result = cache.get("default/app")

        assert result == recommender.get_recommendation.return_value
        recommender.get_recommendation.assert_called_once_with("default/app")

    def test_fresh_hit_does_not_fetch(self, cache, recommender, clock):
        first = cache.get("default/app")
        clock.advance(119)
        second = cache.get("default/app")

        assert second is first
        assert recommender.get_recommendation.call_count == 1

    def test_stale_entry_is_refetched(self, cache, recommender, clock):
        cache.get("default/app")
        refreshed = build_recommendation(cpu="2")
        recommender.get_recommendation.return_value = refreshed

        clock.advance(120)

        assert cache.get("default/app") is refreshed
        assert recommender.get_recommendation.call_count == 2

    def test_entries_are_per_workload(self, cache, recommender):
        cache.get("default/a")
        cache.get("default/b")
        cache.get("default/a")

        assert recommender.get_recommendation.call_count == 2

    def test_fetch_error_propagates(self, cache, recommender):
        recommender.get_recommendation.side_effect = LookupError("not found")

        with pytest.raises(LookupError, match="not found"):
            cache.get("default/app")

        assert cache.stats['size'] == 0

    def test_fetch_error_on_refresh_keeps_nothing_stale(self, cache, recommender, clock):
        cache.get("default/app")
        clock.advance(300)
        recommender.get_recommendation.side_effect = ConnectionError("timeout")

        with pytest.raises(ConnectionError):
            cache.get("default/app")

        # Next access retries the recommender rather than serving the stale value
        recommender.get_recommendation.side_effect = None
        cache.get("default/app")
        assert recommender.get_recommendation.call_count == 3

    def test_zero_ttl_always_fetches(self, recommender, clock):
        cache = RecommendationCache(recommender, ttl=0, clock=clock)

        cache.get("default/app")
        cache.get("default/app")

        assert recommender.get_recommendation.call_count == 2

    def test_invalidate(self, cache, recommender):
        cache.get("default/app")

        assert cache.invalidate("default/app") is True
        assert cache.invalidate("default/app") is False

        cache.get("default/app")
        assert recommender.get_recommendation.call_count == 2

    def test_clear(self, cache):
        cache.get("default/a")
        cache.get("default/b")

        cache.clear()

        assert cache.stats['size'] == 0

    def test_age(self, cache, clock):
        assert cache.age("default/app") is None

        cache.get("default/app")
        clock.advance(30)

        assert cache.age("default/app") == 30

    def test_stats(self, cache):
        cache.get("default/app")
        cache.get("default/app")
        cache.get("default/app")

        stats = cache.stats
        assert stats['size'] == 1
        assert stats['hits'] == 2
        assert stats['misses'] == 1
        assert stats['hit_rate'] == pytest.approx(66.67)
        assert stats['ttl'] == 120.0
