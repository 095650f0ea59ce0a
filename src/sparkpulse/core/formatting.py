"""Byte and percentage formatting helpers.

Display sizes use binary (1024-based) units. Spark configuration values
use the suffixes Spark accepts for memory settings (k, m, g, t).
"""

from __future__ import annotations

import math
import re

_KIB = 1024
_MIB = 1024 * _KIB
_GIB = 1024 * _MIB

_DISPLAY_UNITS = ("KB", "MB", "GB", "TB", "PB", "EB")

_SPARK_MEMORY_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$", re.IGNORECASE)
_SPARK_MEMORY_FACTORS = {
    "": _MIB,
    "b": 1,
    "k": _KIB,
    "kb": _KIB,
    "m": _MIB,
    "mb": _MIB,
    "g": _GIB,
    "gb": _GIB,
    "t": 1024 * _GIB,
    "tb": 1024 * _GIB,
}


def human_file_size(num_bytes: int | float) -> str:
    """
    Render a byte count for display, e.g. ``1024 -> "1.00 KB"``.

    Values below one kibibyte are rendered as a whole number of bytes.
    """
    if abs(num_bytes) < _KIB:
        return f"{int(num_bytes)} B"

    value = float(num_bytes)
    unit = -1
    while abs(value) >= _KIB and unit < len(_DISPLAY_UNITS) - 1:
        value /= _KIB
        unit += 1
    return f"{value:.2f} {_DISPLAY_UNITS[unit]}"


def human_file_size_spark_config_format(num_bytes: int | float) -> str:
    """
    Render a byte count as a Spark memory setting.

    Whole gibibytes render as ``"<n>g"``. Anything else is rounded up to
    whole mebibytes (``"<n>m"``), or kibibytes below one mebibyte.
    """
    if num_bytes < _MIB:
        return f"{math.ceil(num_bytes / _KIB)}k"

    mebibytes = math.ceil(num_bytes / _MIB)
    if mebibytes % 1024 == 0:
        return f"{mebibytes // 1024}g"
    return f"{mebibytes}m"


def parse_spark_memory(value: str) -> int:
    """
    Parse a Spark memory setting such as ``"4g"`` or ``"512m"`` into bytes.

    A bare number is read as mebibytes, the unit Spark assumes for
    ``spark.executor.memory`` and ``spark.driver.memory``.
    """
    match = _SPARK_MEMORY_RE.match(value or "")
    if not match or match.group(2).lower() not in _SPARK_MEMORY_FACTORS:
        raise ValueError(f"Invalid Spark memory value: {value!r}")
    amount, suffix = match.groups()
    return int(float(amount) * _SPARK_MEMORY_FACTORS[suffix.lower()])


def calculate_percentage(value: float, total: float) -> float:
    """Return ``value`` as a percentage of ``total`` (0 when total is 0)."""
    if total == 0:
        return 0.0
    return value / total * 100
