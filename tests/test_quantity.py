"""
Tests for quantity parsing
"""

import pytest

from vpa_updater.quantity import parse_quantity, parse_resource_list


@pytest.mark.parametrize("value,expected", [
    ("2", 2.0),
    ("500m", 0.5),
    ("0.25", 0.25),
    ("10M", 10e6),
    ("1k", 1e3),
    ("1Ki", 1024.0),
    ("128Mi", 128 * 1024 ** 2),
    ("2Gi", 2 * 1024 ** 3),
    ("1e3", 1000.0),
    ("1.5G", 1.5e9),
    (" 4 ", 4.0),
    (3, 3.0),
    (0.5, 0.5),
])
def test_parse_quantity(value, expected):
    assert parse_quantity(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["", "abc", "10Xi", "1.2.3", "-1", "-500m", -2, True])
def test_parse_invalid_quantity(value):
    with pytest.raises(ValueError):
        parse_quantity(value)


def test_parse_resource_list():
    assert parse_resource_list({"cpu": "250m", "memory": "64Mi"}) == {
        "cpu": pytest.approx(0.25),
        "memory": 64 * 1024 ** 2,
    }


def test_parse_empty_resource_list():
    assert parse_resource_list(None) == {}
    assert parse_resource_list({}) == {}
