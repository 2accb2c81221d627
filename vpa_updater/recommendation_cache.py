"""
Recommendation Cache
Memoizes recommender output per workload with a TTL
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from vpa_updater.interfaces import RecommenderSource
from vpa_updater.models import Recommendation

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached recommendation with the time it was fetched"""
    value: Recommendation
    fetched_at: float


class RecommendationCache:
    """
    TTL cache in front of a recommender.

    Features:
    - Staleness is checked lazily on access, there is no cleanup thread
    - Fetch errors propagate to the caller and nothing is cached for them
    - Injected clock for deterministic tests
    - Hit/miss statistics
    """

    def __init__(self, recommender: RecommenderSource, ttl: float = 120.0,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            recommender: Source queried on miss or stale entry
            ttl: Time-to-live in seconds
            clock: Returns the current time in seconds
        """
        self.recommender = recommender
        self.ttl = ttl
        self.clock = clock

        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0

        logger.info(f"RecommendationCache initialized: ttl={ttl}s")

    def get(self, workload_id: str) -> Recommendation:
        """
        Get the recommendation for a workload.

        Args:
            workload_id: Workload key (namespace/name)

        Returns:
            Cached recommendation if younger than the TTL, otherwise a fresh one

        Raises:
            Whatever the recommender raises on a failed fetch
        """
        entry = self._cache.get(workload_id)
        if entry is not None and self.clock() - entry.fetched_at < self.ttl:
            with self._lock:
                self._hits += 1
            return entry.value

        with self._lock:
            self._misses += 1

        recommendation = self.recommender.get_recommendation(workload_id)
        fetched_at = self.clock()

        with self._lock:
            self._cache[workload_id] = CacheEntry(value=recommendation, fetched_at=fetched_at)

        logger.debug(f"{workload_id} - Recommendation fetched and cached")
        return recommendation

    def invalidate(self, workload_id: str) -> bool:
        """Drop a workload's cached recommendation."""
        with self._lock:
            if workload_id in self._cache:
                del self._cache[workload_id]
                return True
            return False

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
            logger.info("Recommendation cache cleared")

    def age(self, workload_id: str) -> Optional[float]:
        """Seconds since the workload's recommendation was fetched, None if not cached"""
        entry = self._cache.get(workload_id)
        if entry is None:
            return None
        return self.clock() - entry.fetched_at

    @property
    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0

            return {
                'size': len(self._cache),
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': round(hit_rate, 2),
                'ttl': self.ttl
            }
