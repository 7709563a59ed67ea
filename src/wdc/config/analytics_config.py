"""
Analytics Adapter Configuration

Parses the options passed to ``enable_analytics`` into an immutable
configuration, and loads those options from YAML files for deployments
that keep them on disk.

Parsing is lenient: unknown keys are ignored and malformed values fall back
to their defaults with a warning instead of raising.
"""

import math
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from ..logging import get_logger
from ..utils.constants import DEFAULT_ROLLUP_PLACEMENT_PATTERN, DEFAULT_SINK_NAME

logger = get_logger(__name__)


class MetricKind(str, Enum):
    """Per-metric reporting switches recognised under ``wdc_options``."""

    BID_REQUEST = "bid_request"
    BID_TIMEOUT = "bid_timeout"
    BID_RESPONSE = "bid_response"
    BID_WON = "bid_won"
    BID_TIMING = "bid_timing"
    BID_ROLLUP = "bid_rollup"
    ROLLUP_LOG = "rollup_log"


class ConfigLoadError(Exception):
    """Raised when an explicitly requested config file cannot be loaded."""


@dataclass(frozen=True)
class MetricFlags:
    """
    Metric enable flags.

    Every flag is off unless the options turn it on.
    """

    bid_request: bool = False
    bid_timeout: bool = False
    bid_response: bool = False
    bid_won: bool = False
    bid_timing: bool = False
    bid_rollup: bool = False
    rollup_log: bool = False

    # Appended to the rollup action label when set
    experiment: str = ""

    def is_enabled(self, kind: MetricKind) -> bool:
        """Check whether reporting for a metric kind is switched on."""
        return bool(getattr(self, kind.value))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {kind.value: self.is_enabled(kind) for kind in MetricKind}
        result["experiment"] = self.experiment
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "MetricFlags":
        """Create from dictionary, ignoring unknown keys."""
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Ignoring malformed wdc_options", value=repr(data))
            return cls()

        experiment = data.get("experiment") or ""
        return cls(
            bid_request=bool(data.get("bid_request", False)),
            bid_timeout=bool(data.get("bid_timeout", False)),
            bid_response=bool(data.get("bid_response", False)),
            bid_won=bool(data.get("bid_won", False)),
            bid_timing=bool(data.get("bid_timing", False)),
            bid_rollup=bool(data.get("bid_rollup", False)),
            rollup_log=bool(data.get("rollup_log", False)),
            experiment=str(experiment),
        )


def parse_sampling(value: Any) -> float | None:
    """
    Parse a sampling rate.

    Accepts floats or stringified floats. Returns None (always active)
    when the value is missing or cannot be parsed.
    """
    if value is None:
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed sampling rate", value=repr(value))
        return None
    if math.isnan(rate):
        logger.warning("Ignoring malformed sampling rate", value=repr(value))
        return None
    return rate


@dataclass
class AnalyticsOptions:
    """Raw options accepted by ``enable_analytics``."""

    tracker_name: str | None = None
    sampling: float | None = None
    global_name: str | None = None
    enable_distribution: bool = False
    wdc_options: MetricFlags = field(default_factory=MetricFlags)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase option structure."""
        result: dict[str, Any] = {
            "enableDistribution": self.enable_distribution,
            "wdc_options": self.wdc_options.to_dict(),
        }
        if self.tracker_name:
            result["trackerName"] = self.tracker_name
        if self.sampling is not None:
            result["sampling"] = str(self.sampling)
        if self.global_name:
            result["global"] = self.global_name
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AnalyticsOptions":
        """Create from the camelCase option structure."""
        if not data:
            return cls()

        tracker_name = data.get("trackerName")
        global_name = data.get("global")
        return cls(
            tracker_name=str(tracker_name) if tracker_name else None,
            sampling=parse_sampling(data.get("sampling")),
            global_name=str(global_name) if global_name is not None else None,
            enable_distribution=bool(data.get("enableDistribution", False)),
            wdc_options=MetricFlags.from_dict(data.get("wdc_options")),
        )


@dataclass(frozen=True)
class AnalyticsConfig:
    """
    Effective analytics configuration.

    Created once at enable time and read-only afterwards.
    """

    sink_name: str = DEFAULT_SINK_NAME
    tracker_send: str = "send"
    sampling_rate: float | None = None
    enable_distribution: bool = False
    flags: MetricFlags = field(default_factory=MetricFlags)
    rollup_placement_pattern: str = DEFAULT_ROLLUP_PLACEMENT_PATTERN

    @classmethod
    def from_options(
        cls,
        provider: str | None = None,
        options: "AnalyticsOptions | dict[str, Any] | None" = None,
    ) -> "AnalyticsConfig":
        """
        Build the configuration from an enable call.

        Args:
            provider: Name of the reporting global (defaults to "ga")
            options: Options structure or an already parsed AnalyticsOptions
        """
        if not isinstance(options, AnalyticsOptions):
            options = AnalyticsOptions.from_dict(options)

        sink_name = provider or DEFAULT_SINK_NAME
        if options.global_name is not None:
            sink_name = options.global_name

        tracker_send = f"{options.tracker_name}.send" if options.tracker_name else "send"

        return cls(
            sink_name=sink_name,
            tracker_send=tracker_send,
            sampling_rate=options.sampling,
            enable_distribution=options.enable_distribution,
            flags=options.wdc_options,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "sink_name": self.sink_name,
            "tracker_send": self.tracker_send,
            "sampling_rate": self.sampling_rate,
            "enable_distribution": self.enable_distribution,
            "flags": self.flags.to_dict(),
            "rollup_placement_pattern": self.rollup_placement_pattern,
        }


class AnalyticsConfigManager:
    """
    Loads analytics options from a YAML file.

    File layout::

        provider: ga
        options:
          trackerName: wdc
          sampling: "0.5"
          enableDistribution: true
          wdc_options:
            bid_won: true

    ``WDC_ANALYTICS_SAMPLING`` overrides the sampling value from the file.
    """

    def __init__(self, config_path: str | None = None):
        """
        Initialize the config manager.

        Args:
            config_path: Path to the YAML file.
                         Defaults to config/analytics.yaml
        """
        self._explicit = config_path is not None
        if config_path is None:
            config_path = os.environ.get(
                "WDC_ANALYTICS_CONFIG",
                str(Path(__file__).parent.parent.parent.parent / "config" / "analytics.yaml"),
            )
        self.config_path = Path(config_path)
        self._provider: str | None = None
        self._options: AnalyticsOptions | None = None

    @property
    def provider(self) -> str | None:
        """Provider name from the loaded file."""
        if self._options is None:
            self.load()
        return self._provider

    @property
    def options(self) -> AnalyticsOptions:
        """Options from the loaded file (defaults if none)."""
        if self._options is None:
            self.load()
        return self._options

    def load(self) -> AnalyticsOptions:
        """(Re)load the options from disk."""
        data = self._read()
        options_data = dict(data.get("options") or {})

        sampling_override = os.environ.get("WDC_ANALYTICS_SAMPLING")
        if sampling_override:
            options_data["sampling"] = sampling_override

        provider = data.get("provider")
        self._provider = str(provider) if provider else None
        self._options = AnalyticsOptions.from_dict(options_data)
        return self._options

    def to_config(self) -> AnalyticsConfig:
        """Build the effective configuration from the loaded file."""
        return AnalyticsConfig.from_options(self.provider, self.options)

    def _read(self) -> dict[str, Any]:
        if not self.config_path.exists():
            if self._explicit:
                raise ConfigLoadError(f"Config file not found: {self.config_path}")
            return {}

        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            if self._explicit:
                raise ConfigLoadError(f"YAML error in {self.config_path}: {e}") from e
            logger.warning("Ignoring unreadable analytics config", path=str(self.config_path), error=str(e))
            return {}

        if not isinstance(data, dict):
            return {}
        return data


# Global instance for easy access
_manager: AnalyticsConfigManager | None = None


def get_analytics_config_manager() -> AnalyticsConfigManager:
    """Get the global analytics config manager instance."""
    global _manager
    if _manager is None:
        _manager = AnalyticsConfigManager()
        _manager.load()
    return _manager
