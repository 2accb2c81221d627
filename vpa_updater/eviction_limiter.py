"""
Eviction Limiter
Caps how many pods of a workload may be evicted in one updater pass
"""

import logging
import math

from vpa_updater.models import Workload

logger = logging.getLogger(__name__)


class EvictionLimiter:
    """
    Disruption budget per workload.

    Two ceilings apply at once: a fraction of the current replicas
    (eviction tolerance) and the replica floor (min replicas). The smaller
    one wins, and a workload at or below its floor gets no evictions.
    """

    def __init__(self, min_replicas: int = 2, eviction_tolerance: float = 0.5):
        if min_replicas < 0:
            raise ValueError(f"min_replicas must be non-negative, got {min_replicas}")
        if not 0.0 <= eviction_tolerance <= 1.0:
            raise ValueError(f"eviction_tolerance must be between 0 and 1, got {eviction_tolerance}")

        self.min_replicas = min_replicas
        self.eviction_tolerance = eviction_tolerance

    def max_evictions(self, workload: Workload) -> int:
        min_replicas = self.min_replicas if workload.min_replicas is None else workload.min_replicas
        tolerance = self.eviction_tolerance if workload.eviction_tolerance is None else workload.eviction_tolerance
        replicas = workload.replicas

        budget = math.floor(replicas * tolerance)
        allowed = max(min(budget, replicas - min_replicas), 0)

        logger.debug(
            f"{workload.key} - Eviction budget {allowed} "
            f"(replicas={replicas}, min_replicas={min_replicas}, tolerance={tolerance})"
        )
        return allowed
