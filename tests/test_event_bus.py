"""Tests for the in-memory event bus and event models."""

import pytest

from src.wdc.events.bus import InMemoryEventBus
from src.wdc.events.models import (
    BidResponse,
    BidTimeout,
    BidWon,
    EventType,
    parse_event,
)


class TestInMemoryEventBus:
    """Test history and subscription."""

    def test_history_in_firing_order(self):
        """Fired events are kept in order."""
        bus = InMemoryEventBus()
        bus.emit(EventType.AUCTION_INIT, {})
        bus.emit("bidWon", {"bidderCode": "a"})

        events = bus.get_events()
        assert [e.event_type for e in events] == [EventType.AUCTION_INIT, EventType.BID_WON]
        assert events[1].args == {"bidderCode": "a"}

    def test_handlers_receive_payload(self):
        """Subscribers are called synchronously with the payload."""
        bus = InMemoryEventBus()
        received = []
        bus.on(EventType.BID_WON, received.append)

        bus.emit(EventType.BID_WON, {"bidderCode": "a"})
        bus.emit(EventType.BID_REQUESTED, {"bidderCode": "b"})

        assert received == [{"bidderCode": "a"}]

    def test_late_subscriber_gets_only_new_events(self):
        """Subscribing does not deliver history."""
        bus = InMemoryEventBus()
        bus.emit(EventType.BID_WON, {"bidderCode": "early"})
        received = []
        bus.on(EventType.BID_WON, received.append)

        assert received == []

    def test_off(self):
        """Unsubscribed handlers stop receiving events."""
        bus = InMemoryEventBus()
        received = []
        bus.on(EventType.BID_WON, received.append)
        bus.off(EventType.BID_WON, received.append)

        bus.emit(EventType.BID_WON, {})

        assert received == []
        assert bus.handler_count() == 0

    def test_handler_errors_propagate(self):
        """A failing handler raises to the emitter."""
        bus = InMemoryEventBus()

        def boom(_):
            raise ValueError("handler failed")

        bus.on(EventType.AUCTION_END, boom)
        with pytest.raises(ValueError):
            bus.emit(EventType.AUCTION_END, {})

    def test_unknown_event_type_rejected(self):
        bus = InMemoryEventBus()
        with pytest.raises(ValueError):
            bus.emit("adRenderFailed", {})


class TestParseEvent:
    """Test payload normalisation."""

    def test_bid_response_from_dict(self):
        bid = parse_event(EventType.BID_RESPONSE, {
            "bidderCode": "acme",
            "cpm": 1.5,
            "timeToRespond": 300,
            "adUnitCode": "div-gpt-ad-1",
            "adId": "x1",
        })
        assert bid == BidResponse(
            bidder_code="acme", cpm=1.5, time_to_respond=300, ad_unit_code="div-gpt-ad-1", ad_id="x1",
        )

    def test_timeout_from_list(self):
        """Timeouts arrive as an ordered list of bidder codes."""
        assert parse_event(EventType.BID_TIMEOUT, ["b", "a"]) == BidTimeout(bidder_codes=["b", "a"])

    def test_model_passes_through(self):
        won = BidWon(bidder_code="a", cpm=1.0)
        assert parse_event(EventType.BID_WON, won) is won

    def test_none_passes_through(self):
        assert parse_event(EventType.BID_WON, None) is None
