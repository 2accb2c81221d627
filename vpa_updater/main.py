"""
VPA Updater - Main Entry Point
Wires the Kubernetes collaborators into the updater loop
"""

import signal
import sys

from kubernetes import client

from vpa_updater import __version__
from vpa_updater.config_loader import UpdaterConfig, load_config
from vpa_updater.eviction_limiter import EvictionLimiter
from vpa_updater.kube_client import (
    KubeEvictionController, KubeInstanceLister, KubeRecommenderSource,
    KubeWorkloadLister, load_kube_config
)
from vpa_updater.logging_config import get_logger, setup_structured_logging
from vpa_updater.prometheus_exporter import UpdaterMetrics
from vpa_updater.recommendation_cache import RecommendationCache
from vpa_updater.updater import Updater


def build_updater(config: UpdaterConfig, metrics: UpdaterMetrics = None) -> Updater:
    """Create an Updater backed by the Kubernetes API (config must already be loaded)"""
    core_v1 = client.CoreV1Api()
    apps_v1 = client.AppsV1Api()
    custom_api = client.CustomObjectsApi()

    return Updater(
        workload_lister=KubeWorkloadLister(custom_api, apps_v1, namespace=config.watch_namespace),
        instance_lister=KubeInstanceLister(core_v1),
        recommendation_cache=RecommendationCache(
            KubeRecommenderSource(custom_api),
            ttl=config.recommendation_cache_ttl
        ),
        eviction_controller=KubeEvictionController(core_v1, dry_run=config.dry_run),
        eviction_limiter=EvictionLimiter(
            min_replicas=config.min_replicas,
            eviction_tolerance=config.eviction_tolerance
        ),
        metrics=metrics
    )


def main():
    """Main entry point"""
    setup_structured_logging(extra_fields={'component': 'vpa-updater', 'version': __version__})
    logger = get_logger(__name__)

    try:
        config = load_config()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    # Re-apply the configured level and format
    setup_structured_logging(
        log_level=config.log_level,
        json_format=config.log_format.lower() == 'json',
        extra_fields={'component': 'vpa-updater', 'version': __version__}
    )

    try:
        load_kube_config()
    except Exception as e:
        logger.error(f"Failed to build Kubernetes client: {e}")
        sys.exit(1)

    metrics = UpdaterMetrics(port=config.metrics_port)
    metrics.start()

    updater = build_updater(config, metrics)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        updater.stop()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    logger.info(
        f"Running VPA Updater {__version__}"
        f"{' [DRY RUN]' if config.dry_run else ''}"
    )
    updater.run(config.updater_interval)


if __name__ == "__main__":
    main()
