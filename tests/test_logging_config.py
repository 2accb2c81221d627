"""
Tests for logging configuration
"""
import json
import logging

import pytest

from vpa_updater.logging_config import ContextAdapter, get_logger, setup_structured_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    root.propagate = True


def test_json_format(capsys):
    setup_structured_logging("INFO", json_format=True, extra_fields={'component': 'vpa-updater'})

    logging.getLogger("vpa_updater.test").info("evicted pod")

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record['message'] == "evicted pod"
    assert record['level'] == "INFO"
    assert record['name'] == "vpa_updater.test"
    assert record['component'] == "vpa-updater"


def test_text_format(capsys):
    setup_structured_logging("DEBUG", json_format=False)

    logging.getLogger("vpa_updater.test").debug("ranked pods")

    out = capsys.readouterr().out
    assert "vpa_updater.test - DEBUG - ranked pods" in out


def test_level_applied():
    root = setup_structured_logging("WARNING", json_format=False)

    assert root.level == logging.WARNING
    assert len(root.handlers) == 1


def test_get_logger_plain():
    assert isinstance(get_logger("vpa_updater.x"), logging.Logger)


def test_get_logger_with_context(capsys):
    setup_structured_logging("INFO", json_format=True)

    logger = get_logger("vpa_updater.x", {'workload': 'default/app'})
    assert isinstance(logger, ContextAdapter)

    logger.info("pass done")

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record['workload'] == "default/app"
