"""
Analytics adapter for a call-based web analytics global.

Observes the auction event bus, turns bid lifecycle events into report
commands and hands them to a DispatchQueue that holds them until the
reporting global has been installed.

Usage:
    bus = InMemoryEventBus()
    sinks = SinkRegistry()
    adapter = GoogleAnalyticsAdapter(bus, sinks)
    adapter.enable_analytics("ga", {"sampling": "1", "wdc_options": {"bid_won": True}})
"""

import random
from dataclasses import dataclass
from typing import Any

from ..config.analytics_config import AnalyticsConfig, AnalyticsOptions
from ..events.bus import EventBus
from ..events.models import (
    REPLAYED_EVENT_TYPES,
    BidResponse,
    EventType,
    RecordedEvent,
    parse_event,
)
from ..logging import analytics_logger, set_auction_id
from ..utils.constants import (
    ACTION_BID_LOAD_TIME,
    ACTION_BIDS,
    ACTION_REQUESTS,
    ACTION_TIMEOUTS,
    ACTION_WINS,
    BIDS_CATEGORY,
    CPM_DISTRIBUTION_CATEGORY,
    LOAD_TIME_DISTRIBUTION_CATEGORY,
)
from .dispatch import DispatchQueue, ReportCommand
from .distribution import convert_to_cents, get_cpm_distribution, get_load_time_distribution
from .rollup import AuctionResults, DiagnosticSink, PlacementFilter, RollupAggregator, pattern_placement_filter
from .sink import SinkRegistry

logger = analytics_logger()


def _has_positive_cpm(bid: Any) -> bool:
    cpm = getattr(bid, "cpm", None)
    return isinstance(cpm, (int, float)) and not isinstance(cpm, bool) and cpm > 0


@dataclass
class AnalyticsSession:
    """Everything one enabled adapter instance owns."""

    config: AnalyticsConfig
    queue: DispatchQueue
    rollup: RollupAggregator
    sampled: bool = True


class AnalyticsEventRouter:
    """
    Routes auction events of one session to report commands.

    Each handler enqueues the commands for its event, then runs exactly one
    readiness check on the dispatch queue.
    """

    def __init__(self, session: AnalyticsSession):
        self.session = session

    @property
    def config(self) -> AnalyticsConfig:
        return self.session.config

    @property
    def queue(self) -> DispatchQueue:
        return self.session.queue

    def route(self, event: RecordedEvent) -> None:
        """Deliver a recorded event to the handler for its type."""
        handler = {
            EventType.BID_REQUESTED: self.on_bid_requested,
            EventType.BID_RESPONSE: self.on_bid_response,
            EventType.BID_TIMEOUT: self.on_bid_timeout,
            EventType.BID_WON: self.on_bid_won,
            EventType.AUCTION_INIT: self.on_auction_init,
            EventType.AUCTION_END: self.on_auction_end,
        }[EventType(event.event_type)]
        handler(parse_event(event.event_type, event.args))

    def on_bid_requested(self, bid: Any) -> None:
        bidder = getattr(bid, "bidder_code", None)
        if self.config.flags.bid_request and bidder:
            self.queue.enqueue(ReportCommand(BIDS_CATEGORY, ACTION_REQUESTS, bidder, 1))
        self.queue.drain_if_ready()

    def on_bid_response(self, bid: BidResponse | None) -> None:
        bidder = getattr(bid, "bidder_code", None)
        if bidder:
            self._report_bid_response(bid)
            self.session.rollup.record_response(bid)
        self.queue.drain_if_ready()

    def on_bid_timeout(self, timeout: Any) -> None:
        if self.config.flags.bid_timeout and timeout is not None:
            for bidder in timeout.bidder_codes:
                self.queue.enqueue(ReportCommand(BIDS_CATEGORY, ACTION_TIMEOUTS, bidder))
        self.queue.drain_if_ready()

    def on_bid_won(self, bid: Any) -> None:
        if bid is not None:
            if self.config.flags.bid_won:
                self.queue.enqueue(
                    ReportCommand(BIDS_CATEGORY, ACTION_WINS, bid.bidder_code, convert_to_cents(bid.cpm))
                )
            self.session.rollup.record_win(bid)
        self.queue.drain_if_ready()

    def on_auction_init(self, auction: Any = None) -> None:
        auction_id = getattr(auction, "auction_id", None)
        if auction_id:
            set_auction_id(auction_id)
        self.session.rollup.on_auction_init()
        self.queue.drain_if_ready()

    def on_auction_end(self, auction: Any = None) -> None:
        command = self.session.rollup.on_auction_end()
        if command is not None:
            self.queue.enqueue(command)
        self.queue.drain_if_ready()

    def _report_bid_response(self, bid: BidResponse) -> None:
        flags = self.config.flags
        distribution = self.config.enable_distribution
        bidder = bid.bidder_code

        if flags.bid_response:
            if flags.bid_timing and bid.time_to_respond is not None and distribution:
                label = get_load_time_distribution(bid.time_to_respond)
                if label is not None:
                    self.queue.enqueue(ReportCommand(LOAD_TIME_DISTRIBUTION_CATEGORY, label, bidder, 1))

            if _has_positive_cpm(bid):
                if distribution:
                    label = get_cpm_distribution(bid.cpm)
                    if label is not None:
                        self.queue.enqueue(ReportCommand(CPM_DISTRIBUTION_CATEGORY, label, bidder, 1))
                self.queue.enqueue(ReportCommand(BIDS_CATEGORY, ACTION_BIDS, bidder, convert_to_cents(bid.cpm)))

        if flags.bid_timing:
            self.queue.enqueue(ReportCommand(BIDS_CATEGORY, ACTION_BID_LOAD_TIME, bidder, bid.time_to_respond))


class GoogleAnalyticsAdapter:
    """
    Analytics adapter bound to one event bus.

    ``enable_analytics`` only has an effect the first time it is called;
    later calls log and return the existing session.
    """

    def __init__(
        self,
        event_bus: EventBus,
        sink_registry: SinkRegistry,
        rng: random.Random | None = None,
        placement_filter: PlacementFilter | None = None,
        diagnostic_sink: DiagnosticSink | None = None,
        auction_results: AuctionResults | None = None,
    ):
        self.event_bus = event_bus
        self.sink_registry = sink_registry
        self.placement_filter = placement_filter
        self.diagnostic_sink = diagnostic_sink
        self.auction_results = auction_results
        self._rng = rng or random.Random()

        self._enabled = False
        self._session: AnalyticsSession | None = None
        self._router: AnalyticsEventRouter | None = None

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def is_sampled(self) -> bool:
        return self._session is not None and self._session.sampled

    @property
    def session(self) -> AnalyticsSession | None:
        return self._session

    def get_tracker_send(self) -> str | None:
        """Tracker send method in use, e.g. "send" or "wdc.send"."""
        if self._session is None:
            return None
        return self._session.config.tracker_send

    def enable_analytics(
        self,
        provider: str | None = None,
        options: AnalyticsOptions | dict[str, Any] | None = None,
    ) -> AnalyticsSession | None:
        """
        Start reporting.

        Replays the bid events already fired on the bus, then subscribes to
        live events. A single draw against the sampling rate decides whether
        this instance reports at all.

        Args:
            provider: Name of the reporting global (defaults to "ga")
            options: trackerName, sampling, global, enableDistribution
                     and the per-metric wdc_options flags

        Returns:
            The active session, or None if sampling switched reporting off
        """
        if self._enabled:
            logger.info("Analytics adapter already enabled, unnecessary call to enable_analytics")
            return self._session if self.is_sampled else None
        self._enabled = True

        config = AnalyticsConfig.from_options(provider, options)
        sampled = config.sampling_rate is None or self._rng.random() < config.sampling_rate

        self._session = AnalyticsSession(
            config=config,
            queue=DispatchQueue(self.sink_registry, config.sink_name, config.tracker_send),
            rollup=RollupAggregator(
                flags=config.flags,
                placement_filter=self.placement_filter
                or pattern_placement_filter(config.rollup_placement_pattern),
                diagnostic_sink=self.diagnostic_sink,
                auction_results=self.auction_results,
            ),
            sampled=sampled,
        )

        if not sampled:
            logger.info("Analytics disabled by sampling", sampling_rate=config.sampling_rate)
            return None

        self._router = AnalyticsEventRouter(self._session)
        self._replay_history()
        self._subscribe()

        logger.info("Analytics enabled", **config.to_dict())
        return self._session

    def _replay_history(self) -> None:
        replayed = 0
        for event in self.event_bus.get_events():
            if not isinstance(event, RecordedEvent) or event.event_type not in REPLAYED_EVENT_TYPES:
                continue
            self._router.route(event)
            replayed += 1
        logger.debug("Replayed recorded events", count=replayed)

    def _subscribe(self) -> None:
        router = self._router
        handlers = {
            EventType.BID_REQUESTED: router.on_bid_requested,
            EventType.BID_RESPONSE: router.on_bid_response,
            EventType.BID_TIMEOUT: router.on_bid_timeout,
            EventType.BID_WON: router.on_bid_won,
            EventType.AUCTION_INIT: router.on_auction_init,
            EventType.AUCTION_END: router.on_auction_end,
        }
        for event_type, handler in handlers.items():
            self.event_bus.on(event_type, self._parsing(event_type, handler))

    @staticmethod
    def _parsing(event_type: EventType, handler):
        def _handle(args: Any) -> None:
            handler(parse_event(event_type, args))

        return _handle
