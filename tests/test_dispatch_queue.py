"""Tests for the deferred dispatch queue."""

from src.wdc.analytics.dispatch import (
    NON_INTERACTION,
    DispatchQueue,
    QueueMode,
    ReportCommand,
)
from src.wdc.analytics.sink import SinkRegistry


class RecordingSink:
    """Sink that remembers every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)


class FailingSink:
    """Sink that raises on a chosen action."""

    def __init__(self, fail_action):
        self.fail_action = fail_action
        self.calls = []

    def __call__(self, *args):
        if args[3] == self.fail_action:
            raise RuntimeError("sink exploded")
        self.calls.append(args)


def make_queue(registry=None):
    registry = registry or SinkRegistry()
    return registry, DispatchQueue(registry, "ga", "send")


class TestReportCommand:
    """Test report command argument shapes."""

    def test_args_with_value(self):
        """Commands with a value carry it before the options."""
        command = ReportCommand("Prebid.js Bids", "Wins", "acme", 250)
        assert command.to_args("send") == (
            "send", "event", "Prebid.js Bids", "Wins", "acme", 250, {"nonInteraction": True},
        )

    def test_args_without_value(self):
        """Commands without a value have no value slot."""
        command = ReportCommand("Prebid.js Bids", "Timeouts", "acme")
        assert command.to_args("wdc.send") == (
            "wdc.send", "event", "Prebid.js Bids", "Timeouts", "acme", {"nonInteraction": True},
        )

    def test_none_value_is_kept(self):
        """An explicit None value still occupies the value slot."""
        command = ReportCommand("Prebid.js Bids", "Bid Load Time", "acme", None)
        assert command.has_value is True
        assert len(command.to_args("send")) == 7

    def test_options_not_shared(self):
        """Each call gets its own options mapping."""
        args = ReportCommand("c", "a", "l", 1).to_args("send")
        args[-1]["nonInteraction"] = False
        assert NON_INTERACTION == {"nonInteraction": True}

    def test_value_semantics(self):
        """Commands compare by value."""
        assert ReportCommand("c", "a", "l", 1) == ReportCommand("c", "a", "l", 1)


class TestDispatchQueue:
    """Test buffering and pass-through behavior."""

    def test_buffers_until_sink_ready(self):
        """Commands wait while no sink is installed."""
        _, queue = make_queue()
        queue.enqueue(ReportCommand("c", "a", "l", 1))

        assert queue.drain_if_ready() is False
        assert queue.mode is QueueMode.BUFFERING
        assert len(queue.pending) == 1

    def test_non_callable_global_is_not_ready(self):
        """A global that is not callable does not count as ready."""
        registry, queue = make_queue()
        registry.register("ga", "not a function")
        queue.enqueue(ReportCommand("c", "a", "l", 1))

        assert queue.drain_if_ready() is False
        assert len(queue.pending) == 1

    def test_drains_in_fifo_order(self):
        """Buffered commands execute in enqueue order once."""
        registry, queue = make_queue()
        sink = RecordingSink()
        for action in ("first", "second", "third"):
            queue.enqueue(ReportCommand("c", action, "l", 1))

        registry.register("ga", sink)
        assert queue.drain_if_ready() is True

        assert [call[3] for call in sink.calls] == ["first", "second", "third"]
        assert queue.pending == []

    def test_pass_through_after_drain(self):
        """After the first drain, commands execute immediately."""
        registry, queue = make_queue()
        sink = RecordingSink()
        registry.register("ga", sink)
        queue.drain_if_ready()

        queue.enqueue(ReportCommand("c", "live", "l", 1))

        assert len(sink.calls) == 1
        assert queue.mode is QueueMode.PASS_THROUGH

    def test_drain_never_repeats(self):
        """Repeated readiness checks do not re-execute commands."""
        registry, queue = make_queue()
        sink = RecordingSink()
        queue.enqueue(ReportCommand("c", "a", "l", 1))
        registry.register("ga", sink)

        queue.drain_if_ready()
        queue.drain_if_ready()
        queue.drain_if_ready()

        assert len(sink.calls) == 1

    def test_pass_through_is_one_way(self):
        """Removing the sink later does not bring buffering back."""
        registry, queue = make_queue()
        registry.register("ga", RecordingSink())
        queue.drain_if_ready()

        registry.unregister("ga")
        queue.enqueue(ReportCommand("c", "a", "l", 1))
        queue.drain_if_ready()

        assert queue.mode is QueueMode.PASS_THROUGH
        assert queue.pending == []
        assert queue.get_stats().commands_failed == 1

    def test_sink_failure_does_not_stop_later_commands(self):
        """A failing call is counted and the rest still run."""
        registry, queue = make_queue()
        sink = FailingSink(fail_action="bad")
        queue.enqueue(ReportCommand("c", "good1", "l", 1))
        queue.enqueue(ReportCommand("c", "bad", "l", 1))
        queue.enqueue(ReportCommand("c", "good2", "l", 1))

        registry.register("ga", sink)
        queue.drain_if_ready()

        assert [call[3] for call in sink.calls] == ["good1", "good2"]
        stats = queue.get_stats()
        assert stats.commands_dispatched == 3
        assert stats.commands_failed == 1

    def test_stats(self):
        """Stats reflect enqueued, dispatched and pending commands."""
        registry, queue = make_queue()
        queue.enqueue(ReportCommand("c", "a", "l", 1))
        queue.enqueue(ReportCommand("c", "b", "l", 1))

        stats = queue.get_stats()
        assert stats.commands_enqueued == 2
        assert stats.commands_dispatched == 0
        assert stats.queue_depth == 2
        assert stats.mode is QueueMode.BUFFERING

        registry.register("ga", RecordingSink())
        queue.drain_if_ready()

        stats = queue.get_stats()
        assert stats.commands_dispatched == 2
        assert stats.queue_depth == 0

    def test_uses_configured_sink_name(self):
        """Only the configured global is checked."""
        registry = SinkRegistry()
        queue = DispatchQueue(registry, "myGa", "send")
        registry.register("ga", RecordingSink())
        queue.enqueue(ReportCommand("c", "a", "l", 1))

        assert queue.drain_if_ready() is False

        registry.register("myGa", RecordingSink())
        assert queue.drain_if_ready() is True
