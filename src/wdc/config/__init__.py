"""
WDC Configuration Module

Key components:
    - AnalyticsOptions: raw options accepted by enable_analytics
    - AnalyticsConfig: effective, immutable configuration of one session
    - AnalyticsConfigManager: loads options from YAML
"""

from .analytics_config import (
    AnalyticsConfig,
    AnalyticsConfigManager,
    AnalyticsOptions,
    ConfigLoadError,
    MetricFlags,
    MetricKind,
    get_analytics_config_manager,
    parse_sampling,
)

__all__ = [
    "AnalyticsConfig",
    "AnalyticsConfigManager",
    "AnalyticsOptions",
    "ConfigLoadError",
    "MetricFlags",
    "MetricKind",
    "get_analytics_config_manager",
    "parse_sampling",
]
