"""
Prometheus Metrics Exporter
Exposes updater metrics for monitoring and alerting
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info, REGISTRY, start_http_server
from typing import Optional
import logging

from vpa_updater import __version__

logger = logging.getLogger(__name__)


class UpdaterMetrics:
    """Export updater metrics to Prometheus"""

    def __init__(self, port: int = 8000, registry: Optional[CollectorRegistry] = None):
        self.port = port
        self.registry = registry or REGISTRY

        self.updater_info = Info(
            'vpa_updater',
            'VPA updater information',
            registry=self.registry
        )

        # Per-workload state
        self.candidates = Gauge(
            'vpa_updater_candidates',
            'Pods needing an update in the last pass',
            ['namespace', 'workload'],
            registry=self.registry
        )

        self.eviction_budget = Gauge(
            'vpa_updater_eviction_budget',
            'Evictions allowed in the last pass',
            ['namespace', 'workload'],
            registry=self.registry
        )

        # Action counters
        self.evictions_total = Counter(
            'vpa_updater_evictions_total',
            'Eviction attempts by result',
            ['namespace', 'workload', 'result'],
            registry=self.registry
        )

        self.fetch_errors_total = Counter(
            'vpa_updater_fetch_errors_total',
            'Failed reads of workloads, pods or recommendations',
            ['stage'],
            registry=self.registry
        )

        # Cache
        self.cache_hits = Counter(
            'vpa_updater_recommendation_cache_hits_total',
            'Recommendation cache hits',
            registry=self.registry
        )
        self.cache_misses = Counter(
            'vpa_updater_recommendation_cache_misses_total',
            'Recommendation cache misses',
            registry=self.registry
        )

        # Performance
        self.tick_duration = Histogram(
            'vpa_updater_tick_duration_seconds',
            'Time to run one updater pass',
            registry=self.registry
        )

        self._last_cache_hits = 0
        self._last_cache_misses = 0

    def start(self):
        """Start Prometheus metrics server"""
        try:
            start_http_server(self.port, registry=self.registry)
            logger.info(f"Prometheus metrics server started on port {self.port}")

            self.updater_info.info({'version': __version__})
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")

    def update_workload_metrics(self, namespace: str, workload: str, candidates: int, budget: int):
        """Update per-workload state after ranking"""
        labels = {'namespace': namespace, 'workload': workload}

        self.candidates.labels(**labels).set(candidates)
        self.eviction_budget.labels(**labels).set(budget)

    def record_eviction(self, namespace: str, workload: str, result: str):
        """Record an eviction attempt (evicted, failed or vetoed)"""
        self.evictions_total.labels(
            namespace=namespace,
            workload=workload,
            result=result
        ).inc()

    def record_fetch_error(self, stage: str):
        """Record a failed read (list_workloads, list_instances or recommendation)"""
        self.fetch_errors_total.labels(stage=stage).inc()

    def record_tick_duration(self, duration: float):
        self.tick_duration.observe(duration)

    def update_cache_metrics(self, stats: dict):
        """Advance cache counters from RecommendationCache.stats totals"""
        hits = stats.get('hits', 0)
        misses = stats.get('misses', 0)

        if hits > self._last_cache_hits:
            self.cache_hits.inc(hits - self._last_cache_hits)
        if misses > self._last_cache_misses:
            self.cache_misses.inc(misses - self._last_cache_misses)

        self._last_cache_hits = hits
        self._last_cache_misses = misses
