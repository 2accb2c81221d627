"""
Configuration Loader
Reads updater settings from environment variables
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from vpa_updater.config_validator import ConfigValidator

logger = logging.getLogger(__name__)


@dataclass
class UpdaterConfig:
    """Updater configuration"""
    updater_interval: int = 60
    recommendation_cache_ttl: float = 120.0
    min_replicas: int = 2
    eviction_tolerance: float = 0.5
    dry_run: bool = False
    watch_namespace: str = ""
    metrics_port: int = 8000
    log_level: str = "INFO"
    log_format: str = "json"


def load_config(environ: Optional[Mapping[str, str]] = None) -> UpdaterConfig:
    """
    Load configuration from environment variables.

    Raises:
        ValueError: if any value fails validation
    """
    env = os.environ if environ is None else environ
    logger.info("Loading configuration...")

    updater_interval = ConfigValidator.validate_updater_interval(
        env.get("UPDATER_INTERVAL", "60")
    )
    recommendation_cache_ttl = ConfigValidator.validate_cache_ttl(
        env.get("RECOMMENDATION_CACHE_TTL", "120")
    )
    min_replicas = ConfigValidator.validate_min_replicas(
        env.get("MIN_REPLICAS", "2")
    )
    eviction_tolerance = ConfigValidator.validate_eviction_tolerance(
        env.get("EVICTION_TOLERANCE", "0.5")
    )
    metrics_port = ConfigValidator.validate_port(
        env.get("METRICS_PORT", "8000"), name="METRICS_PORT"
    )

    config = UpdaterConfig(
        updater_interval=updater_interval,
        recommendation_cache_ttl=recommendation_cache_ttl,
        min_replicas=min_replicas,
        eviction_tolerance=eviction_tolerance,
        dry_run=env.get("DRY_RUN", "false").lower() == "true",
        watch_namespace=env.get("WATCH_NAMESPACE", "").strip(),
        metrics_port=metrics_port,
        log_level=env.get("LOG_LEVEL", "INFO"),
        log_format=env.get("LOG_FORMAT", "json"),
    )

    logger.info(
        f"Configuration loaded: interval={config.updater_interval}s, "
        f"cache_ttl={config.recommendation_cache_ttl}s, "
        f"min_replicas={config.min_replicas}, "
        f"eviction_tolerance={config.eviction_tolerance}, "
        f"dry_run={config.dry_run}"
    )
    return config
