"""
Structured Logging Configuration
JSON logging for better log aggregation and analysis
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger


def setup_structured_logging(
    log_level: str = "INFO",
    json_format: bool = None,
    extra_fields: Optional[dict] = None
) -> logging.Logger:
    """
    Setup structured logging

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Force JSON format (None = auto-detect from LOG_FORMAT env)
        extra_fields: Static fields added to every log record

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format is None:
        log_format = os.getenv('LOG_FORMAT', 'json').lower()
        use_json = log_format in ('json', 'structured')
    else:
        use_json = json_format

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if use_json:
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'asctime': 'timestamp', 'levelname': 'level'},
            static_fields=extra_fields or {}
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    handler.setFormatter(formatter)

    root_logger.addHandler(handler)
    root_logger.propagate = False

    return root_logger


class ContextAdapter(logging.LoggerAdapter):
    """Adds fixed context to every record"""

    def process(self, msg, kwargs):
        kwargs.setdefault('extra', {}).update(self.extra)
        return msg, kwargs


def get_logger(name: str, extra_context: Optional[dict] = None):
    """
    Get a logger with optional extra context

    Args:
        name: Logger name (usually __name__)
        extra_context: Additional context to include in all log messages
    """
    logger = logging.getLogger(name)
    if extra_context:
        return ContextAdapter(logger, extra_context)
    return logger
