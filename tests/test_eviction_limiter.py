"""
Tests for Eviction Limiter
"""

import math

import pytest

from builders import build_workload
from vpa_updater.eviction_limiter import EvictionLimiter


class TestMaxEvictions:
    """Test disruption budget computation"""

    def test_tolerance_binds(self):
        """10 replicas, floor 2, tolerance 0.5 -> min(5, 8)"""
        limiter = EvictionLimiter(min_replicas=2, eviction_tolerance=0.5)

        assert limiter.max_evictions(build_workload(replicas=10)) == 5

    def test_floor_binds(self):
        """4 replicas, floor 3, tolerance 0.75 -> min(3, 1)"""
        limiter = EvictionLimiter(min_replicas=3, eviction_tolerance=0.75)

        assert limiter.max_evictions(build_workload(replicas=4)) == 1

    def test_budget_rounds_down(self):
        limiter = EvictionLimiter(min_replicas=0, eviction_tolerance=0.5)

        assert limiter.max_evictions(build_workload(replicas=3)) == 1
        assert limiter.max_evictions(build_workload(replicas=1)) == 0

    @pytest.mark.parametrize("replicas", [0, 1, 2])
    def test_at_or_below_floor(self, replicas):
        limiter = EvictionLimiter(min_replicas=2, eviction_tolerance=1.0)

        assert limiter.max_evictions(build_workload(replicas=replicas)) == 0

    def test_never_exceeds_either_ceiling(self):
        for min_replicas in range(0, 6):
            for tolerance in (0.0, 0.1, 0.25, 0.5, 0.9, 1.0):
                limiter = EvictionLimiter(min_replicas=min_replicas, eviction_tolerance=tolerance)
                for replicas in range(0, 25):
                    allowed = limiter.max_evictions(build_workload(replicas=replicas))

                    assert allowed >= 0
                    assert allowed <= max(replicas - min_replicas, 0)
                    assert allowed <= math.floor(replicas * tolerance)

    def test_workload_overrides_defaults(self):
        limiter = EvictionLimiter(min_replicas=2, eviction_tolerance=0.5)
        workload = build_workload(replicas=10, min_replicas=9, eviction_tolerance=1.0)

        assert limiter.max_evictions(workload) == 1

    def test_zero_tolerance_override(self):
        limiter = EvictionLimiter(min_replicas=0, eviction_tolerance=0.5)

        assert limiter.max_evictions(build_workload(replicas=10, eviction_tolerance=0.0)) == 0


class TestLimiterValidation:
    """Test construction errors"""

    def test_negative_min_replicas(self):
        with pytest.raises(ValueError):
            EvictionLimiter(min_replicas=-1)

    @pytest.mark.parametrize("tolerance", [-0.1, 1.5])
    def test_tolerance_out_of_range(self, tolerance):
        with pytest.raises(ValueError):
            EvictionLimiter(eviction_tolerance=tolerance)
