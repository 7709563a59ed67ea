"""
Analytics Adapter Module

Components:
- distribution.py: load time / CPM bucketing and cent conversion
- sink.py: registry of reporting globals
- dispatch.py: deferred FIFO dispatch of report commands
- rollup.py: per-auction best-bid rollup
- adapter.py: event routing and enablement
"""

from .adapter import AnalyticsEventRouter, AnalyticsSession, GoogleAnalyticsAdapter
from .dispatch import NON_INTERACTION, DispatchQueue, DispatchStats, QueueMode, ReportCommand
from .distribution import convert_to_cents, get_cpm_distribution, get_load_time_distribution
from .rollup import (
    LogDiagnosticSink,
    RollupAggregator,
    RollupLogRow,
    RollupState,
    pattern_placement_filter,
)
from .sink import LoggingSink, SinkRegistry

__all__ = [
    "GoogleAnalyticsAdapter",
    "AnalyticsSession",
    "AnalyticsEventRouter",
    "DispatchQueue",
    "DispatchStats",
    "QueueMode",
    "ReportCommand",
    "NON_INTERACTION",
    "convert_to_cents",
    "get_cpm_distribution",
    "get_load_time_distribution",
    "RollupAggregator",
    "RollupState",
    "RollupLogRow",
    "LogDiagnosticSink",
    "pattern_placement_filter",
    "SinkRegistry",
    "LoggingSink",
]
