"""
Distribution bucketing for load times and bid prices.

Buckets are left-closed, right-open: a boundary value belongs to the
bucket that starts at it.
"""

import math
from typing import Any

from ..utils.constants import CPM_BUCKETS, LOAD_TIME_BUCKETS


def _bucket(value: Any, buckets: list[tuple[float, str]]) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or value < buckets[0][0]:
        return None

    label = None
    for lower, bucket_label in buckets:
        if value >= lower:
            label = bucket_label
        else:
            break
    return label


def get_load_time_distribution(time_ms: Any) -> str | None:
    """Map a response time in milliseconds to its bucket label."""
    return _bucket(time_ms, LOAD_TIME_BUCKETS)


def get_cpm_distribution(cpm: Any) -> str | None:
    """Map a CPM to its price bucket label."""
    return _bucket(cpm, CPM_BUCKETS)


def convert_to_cents(price: Any) -> int:
    """
    Convert a price to integer minor currency units.

    Falsy, missing, NaN or non-numeric prices report as 0.
    """
    if not price:
        return 0
    try:
        value = float(price)
    except (TypeError, ValueError):
        return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    return math.floor(value * 100)
