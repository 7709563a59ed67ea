"""
Deferred dispatch of report commands.

Commands are buffered until the reporting sink is installed. The first
readiness check that finds the sink drains the buffer in FIFO order and
switches the queue to pass-through, where every later command executes
as soon as it is enqueued. The switch happens once and is never undone.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..logging import dispatch_logger
from ..utils.constants import HIT_TYPE
from .sink import SinkRegistry

# Keeps these hits out of engagement and bounce metrics on the sink side
NON_INTERACTION: dict[str, bool] = {"nonInteraction": True}

_MISSING = object()


class QueueMode(Enum):
    """Dispatch queue modes."""

    BUFFERING = "buffering"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class ReportCommand:
    """One deferred reporting call."""

    category: str
    action: str
    label: Any
    value: Any = _MISSING

    @property
    def has_value(self) -> bool:
        return self.value is not _MISSING

    def to_args(self, tracker_send: str) -> tuple:
        """Positional arguments for the sink call."""
        if self.has_value:
            return (
                tracker_send,
                HIT_TYPE,
                self.category,
                self.action,
                self.label,
                self.value,
                dict(NON_INTERACTION),
            )
        return (tracker_send, HIT_TYPE, self.category, self.action, self.label, dict(NON_INTERACTION))


@dataclass
class DispatchStats:
    """Statistics for queue monitoring."""

    commands_enqueued: int = 0
    commands_dispatched: int = 0
    commands_failed: int = 0
    queue_depth: int = 0
    mode: QueueMode = QueueMode.BUFFERING


class DispatchQueue:
    """
    Ordered buffer of report commands for one analytics session.

    Single-threaded: commands are enqueued and drained from the event
    handlers' call chain only.
    """

    def __init__(self, sink_registry: SinkRegistry, sink_name: str, tracker_send: str):
        self.sink_registry = sink_registry
        self.sink_name = sink_name
        self.tracker_send = tracker_send

        self._buffer: list[ReportCommand] = []
        self._mode = QueueMode.BUFFERING
        self._stats = DispatchStats()
        self._logger = dispatch_logger()

    @property
    def mode(self) -> QueueMode:
        return self._mode

    @property
    def pending(self) -> list[ReportCommand]:
        """Commands still waiting for the sink."""
        return list(self._buffer)

    def enqueue(self, command: ReportCommand) -> None:
        """Buffer a command, or execute it directly once in pass-through."""
        self._stats.commands_enqueued += 1
        if self._mode is QueueMode.PASS_THROUGH:
            self._execute(command)
        else:
            self._buffer.append(command)

    def drain_if_ready(self) -> bool:
        """
        Flush buffered commands if the sink has been installed.

        Returns True when the queue is (now) in pass-through mode.
        """
        if self._mode is QueueMode.BUFFERING and self.sink_registry.is_ready(self.sink_name):
            # Switch first so nothing enqueued from inside a sink call is buffered again
            self._mode = QueueMode.PASS_THROUGH
            buffered, self._buffer = self._buffer, []
            for command in buffered:
                self._execute(command)
            self._logger.info("Sink ready, switched to pass-through", sink=self.sink_name, drained=len(buffered))

        self._logger.debug("Event count sent to sink", count=self._stats.commands_dispatched)
        return self._mode is QueueMode.PASS_THROUGH

    def get_stats(self) -> DispatchStats:
        """Get current queue statistics."""
        return DispatchStats(
            commands_enqueued=self._stats.commands_enqueued,
            commands_dispatched=self._stats.commands_dispatched,
            commands_failed=self._stats.commands_failed,
            queue_depth=len(self._buffer),
            mode=self._mode,
        )

    def _execute(self, command: ReportCommand) -> None:
        self._stats.commands_dispatched += 1
        try:
            sink = self.sink_registry.resolve(self.sink_name)
            sink(*command.to_args(self.tracker_send))
        except Exception as e:
            self._stats.commands_failed += 1
            self._logger.warning(
                "Sink call failed",
                sink=self.sink_name,
                category=command.category,
                action=command.action,
                error=str(e),
                exc_info=True,
            )
