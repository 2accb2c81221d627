"""
Configuration Validator
Validates environment variables and configuration values
"""

import logging

logger = logging.getLogger(__name__)


class ConfigValidator:
    """Validate configuration values"""

    @staticmethod
    def validate_updater_interval(interval: str) -> int:
        """Validate updater interval"""
        try:
            value = int(interval)
            if value < 1:
                raise ValueError(f"UPDATER_INTERVAL must be at least 1 second, got {value}")
            if value > 3600:
                raise ValueError(f"UPDATER_INTERVAL must be at most 3600 seconds (1 hour), got {value}")
            return value
        except ValueError as e:
            if "invalid literal" in str(e):
                raise ValueError(f"Invalid UPDATER_INTERVAL: {interval}. Must be an integer") from e
            raise

    @staticmethod
    def validate_cache_ttl(ttl: str) -> float:
        """Validate recommendation cache TTL"""
        try:
            value = float(ttl)
            if value < 0:
                raise ValueError(f"RECOMMENDATION_CACHE_TTL must be non-negative, got {value}")
            return value
        except ValueError as e:
            if "could not convert" in str(e):
                raise ValueError(f"Invalid RECOMMENDATION_CACHE_TTL: {ttl}. Must be a number") from e
            raise

    @staticmethod
    def validate_min_replicas(value: str) -> int:
        """Validate minimum replica floor"""
        try:
            val = int(value)
            if val < 0:
                raise ValueError(f"MIN_REPLICAS must be non-negative, got {val}")
            return val
        except ValueError as e:
            if "invalid literal" in str(e):
                raise ValueError(f"Invalid MIN_REPLICAS: {value}. Must be an integer") from e
            raise

    @staticmethod
    def validate_eviction_tolerance(value: str) -> float:
        """Validate eviction tolerance fraction"""
        try:
            val = float(value)
            if val < 0.0 or val > 1.0:
                raise ValueError(f"EVICTION_TOLERANCE must be between 0 and 1, got {val}")
            return val
        except ValueError as e:
            if "could not convert" in str(e):
                raise ValueError(f"Invalid EVICTION_TOLERANCE: {value}. Must be a number") from e
            raise

    @staticmethod
    def validate_port(port: str, name: str = "PORT") -> int:
        """Validate port number"""
        try:
            val = int(port)
            if val < 1 or val > 65535:
                raise ValueError(f"{name} must be between 1 and 65535, got {val}")
            return val
        except ValueError as e:
            if "invalid literal" in str(e):
                raise ValueError(f"Invalid {name}: {port}. Must be an integer") from e
            raise
