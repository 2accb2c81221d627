"""
Kubernetes Quantity Parsing
Converts resource quantity strings (500m, 1Gi, 10M) into floats in base units
"""

import re
from typing import Dict, Mapping, Union

BINARY_SUFFIXES = {
    'Ki': 1024,
    'Mi': 1024 ** 2,
    'Gi': 1024 ** 3,
    'Ti': 1024 ** 4,
    'Pi': 1024 ** 5,
    'Ei': 1024 ** 6,
}

DECIMAL_SUFFIXES = {
    'n': 1e-9,
    'u': 1e-6,
    'm': 1e-3,
    'k': 1e3,
    'K': 1e3,
    'M': 1e6,
    'G': 1e9,
    'T': 1e12,
    'P': 1e15,
    'E': 1e18,
}

_QUANTITY_RE = re.compile(r'^([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)([a-zA-Z]*)$')


def parse_quantity(value: Union[str, int, float]) -> float:
    """
    Parse a Kubernetes quantity into base units.

    CPU comes back in cores ("500m" -> 0.5), memory in bytes ("1Ki" -> 1024).

    Raises:
        ValueError: if the value is not a valid non-negative quantity
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid quantity: {value!r}")

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        match = _QUANTITY_RE.match(text)
        if not match:
            raise ValueError(f"Invalid quantity: {value!r}")

        number_str, suffix = match.groups()
        number = float(number_str)

        if suffix in BINARY_SUFFIXES:
            number *= BINARY_SUFFIXES[suffix]
        elif suffix in DECIMAL_SUFFIXES:
            number *= DECIMAL_SUFFIXES[suffix]
        elif suffix:
            raise ValueError(f"Invalid quantity suffix '{suffix}' in {value!r}")

    if number < 0:
        raise ValueError(f"Quantity must be non-negative, got {value!r}")
    return number


def parse_resource_list(resources: Mapping[str, Union[str, int, float]]) -> Dict[str, float]:
    """Parse a resource name -> quantity mapping (e.g. a container's requests)"""
    if not resources:
        return {}
    return {name: parse_quantity(quantity) for name, quantity in resources.items()}
