"""
VPA Updater - Control Loop
Evicts pods with stale resource requests, most urgent first, within a disruption budget
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from vpa_updater.eviction_limiter import EvictionLimiter
from vpa_updater.interfaces import EvictionController, InstanceLister, WorkloadLister
from vpa_updater.models import Workload
from vpa_updater.prometheus_exporter import UpdaterMetrics
from vpa_updater.recommendation_cache import RecommendationCache
from vpa_updater.update_priority import UpdatePriorityCalculator

logger = logging.getLogger(__name__)


@dataclass
class WorkloadUpdateResult:
    """Outcome of one updater pass over a single workload"""
    workload: str
    candidates: int = 0
    budget: int = 0
    evicted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    vetoed: List[str] = field(default_factory=list)
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


class Updater:
    """
    Runs updater passes over all autoscaled workloads.

    Each pass re-reads pods and recommendations from scratch, so a read
    failure only costs the affected workload one interval. The recommendation
    cache is the only state kept between passes.
    """

    def __init__(
        self,
        workload_lister: WorkloadLister,
        instance_lister: InstanceLister,
        recommendation_cache: RecommendationCache,
        eviction_controller: EvictionController,
        eviction_limiter: EvictionLimiter,
        metrics: Optional[UpdaterMetrics] = None
    ):
        self.workload_lister = workload_lister
        self.instance_lister = instance_lister
        self.recommendation_cache = recommendation_cache
        self.eviction_controller = eviction_controller
        self.eviction_limiter = eviction_limiter
        self.metrics = metrics

        self.shutdown_event = threading.Event()
        self.iteration = 0

    def run_once(self) -> List[WorkloadUpdateResult]:
        """Run a single updater pass over every workload"""
        started = time.monotonic()

        try:
            workloads = self.workload_lister.list_workloads()
        except Exception as e:
            logger.error(f"Failed to list workloads: {e}")
            self._record_fetch_error('list_workloads')
            return []

        results = []
        for workload in workloads:
            if self.shutdown_event.is_set():
                break
            results.append(self.update_workload(workload))

        duration = time.monotonic() - started
        if self.metrics:
            self.metrics.record_tick_duration(duration)
            self.metrics.update_cache_metrics(self.recommendation_cache.stats)

        evicted = sum(len(result.evicted) for result in results)
        skipped = sum(1 for result in results if result.skipped)
        logger.info(
            f"Updater pass done in {duration:.2f}s: {len(results)} workloads, "
            f"{evicted} pods evicted, {skipped} workloads skipped"
        )
        return results

    def update_workload(self, workload: Workload) -> WorkloadUpdateResult:
        """Rank a workload's pods and evict the most urgent ones within budget"""
        result = WorkloadUpdateResult(workload=workload.key)

        try:
            instances = self.instance_lister.list_instances(workload)
        except Exception as e:
            logger.error(f"{workload.key} - Failed to list pods: {e}")
            self._record_fetch_error('list_instances')
            result.skipped_reason = f"list pods failed: {e}"
            return result

        try:
            recommendation = self.recommendation_cache.get(workload.key)
        except Exception as e:
            logger.warning(f"{workload.key} - No recommendation: {e}")
            self._record_fetch_error('recommendation')
            result.skipped_reason = f"recommendation unavailable: {e}"
            return result

        calculator = UpdatePriorityCalculator(workload.resources_policy, workload.update_config)
        for instance in instances:
            calculator.add_instance(instance, recommendation)

        ranked = calculator.get_sorted_instances()
        budget = self.eviction_limiter.max_evictions(workload)
        result.candidates = len(ranked)
        result.budget = budget

        if self.metrics:
            self.metrics.update_workload_metrics(workload.namespace, workload.name, len(ranked), budget)

        logger.info(
            f"{workload.key} - {len(instances)} pods, {len(ranked)} need update, "
            f"eviction budget {budget}"
        )

        for instance in ranked:
            if len(result.evicted) >= budget:
                break

            if not self.eviction_controller.can_evict(instance):
                logger.debug(f"{instance.key} - Eviction not allowed, skipping")
                result.vetoed.append(instance.key)
                self._record_eviction(workload, 'vetoed')
                continue

            try:
                self.eviction_controller.evict(instance)
            except Exception as e:
                logger.error(f"{instance.key} - Eviction failed: {e}")
                result.failed.append(instance.key)
                self._record_eviction(workload, 'failed')
                continue

            logger.info(f"{instance.key} - Evicted for update")
            result.evicted.append(instance.key)
            self._record_eviction(workload, 'evicted')

        return result

    def run(self, interval: float):
        """Run passes every interval seconds until shutdown_event is set"""
        logger.info(f"VPA Updater started, interval {interval}s")

        while not self.shutdown_event.is_set():
            self.iteration += 1
            logger.info(f"Iteration {self.iteration}")

            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Error in updater loop: {e}", exc_info=True)

            if self.shutdown_event.wait(timeout=interval):
                break

        logger.info("VPA Updater stopped")

    def stop(self):
        self.shutdown_event.set()

    def _record_fetch_error(self, stage: str):
        if self.metrics:
            self.metrics.record_fetch_error(stage)

    def _record_eviction(self, workload: Workload, result: str):
        if self.metrics:
            self.metrics.record_eviction(workload.namespace, workload.name, result)
