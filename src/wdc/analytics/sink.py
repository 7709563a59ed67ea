"""
Reporting sinks.

A sink is any callable accepting the positional reporting call
``(tracker_send, "event", category, action, label[, value], options)``.
Sinks live in a SinkRegistry under a global name and may be registered
after instrumentation has started.
"""

from collections.abc import Callable
from typing import Any

from ..logging import get_logger

Sink = Callable[..., Any]


class SinkRegistry:
    """Named reporting globals that can appear at any time."""

    def __init__(self, sinks: dict[str, Any] | None = None):
        self._sinks: dict[str, Any] = dict(sinks or {})

    def register(self, name: str, sink: Any) -> None:
        """Install (or replace) the global under a name."""
        self._sinks[name] = sink

    def unregister(self, name: str) -> None:
        """Remove a global if present."""
        self._sinks.pop(name, None)

    def resolve(self, name: str) -> Any:
        """Return whatever is installed under the name, or None."""
        return self._sinks.get(name)

    def is_ready(self, name: str) -> bool:
        """A sink is ready once something callable is installed under its name."""
        return callable(self._sinks.get(name))


class LoggingSink:
    """Sink that writes every reporting call to the structured log."""

    def __init__(self, name: str = "wdc.sink"):
        self._logger = get_logger(name)
        self.calls = 0

    def __call__(self, tracker_send: str, hit_type: str, category: str, action: str, label: Any, *rest: Any) -> None:
        self.calls += 1
        value = rest[0] if len(rest) > 1 else None
        self._logger.info(
            "Analytics hit",
            tracker=tracker_send,
            hit_type=hit_type,
            category=category,
            action=action,
            label=label,
            value=value,
        )
