"""WDC Utilities."""

from .constants import (
    CPM_BUCKETS,
    DEFAULT_SINK_NAME,
    LOAD_TIME_BUCKETS,
    REPO_AND_VERSION,
)

__all__ = [
    'CPM_BUCKETS',
    'DEFAULT_SINK_NAME',
    'LOAD_TIME_BUCKETS',
    'REPO_AND_VERSION',
]
