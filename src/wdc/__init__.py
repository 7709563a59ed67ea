"""
WDC Prebid instrumentation.

Reports auction lifecycle metrics to a web analytics global, with a
per-auction rollup of the best bid per placement, and ships the Sovrn bid
adapter used alongside it.
"""

from .analytics import (
    AnalyticsSession,
    DispatchQueue,
    GoogleAnalyticsAdapter,
    ReportCommand,
    RollupAggregator,
    SinkRegistry,
)
from .config import AnalyticsConfig, AnalyticsOptions, MetricFlags
from .events import EventType, InMemoryEventBus

__version__ = '1.0.0'

__all__ = [
    'GoogleAnalyticsAdapter',
    'AnalyticsSession',
    'DispatchQueue',
    'ReportCommand',
    'RollupAggregator',
    'SinkRegistry',
    'AnalyticsConfig',
    'AnalyticsOptions',
    'MetricFlags',
    'EventType',
    'InMemoryEventBus',
]
