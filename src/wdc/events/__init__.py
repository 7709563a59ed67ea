"""Auction lifecycle events and the bus that carries them."""

from .bus import EventBus, InMemoryEventBus
from .models import (
    REPLAYED_EVENT_TYPES,
    AuctionEnd,
    AuctionInit,
    BidRequest,
    BidResponse,
    BidTimeout,
    BidWon,
    EventType,
    RecordedEvent,
    parse_event,
)

__all__ = [
    "EventBus",
    "InMemoryEventBus",
    "EventType",
    "RecordedEvent",
    "REPLAYED_EVENT_TYPES",
    "AuctionInit",
    "AuctionEnd",
    "BidRequest",
    "BidResponse",
    "BidTimeout",
    "BidWon",
    "parse_event",
]
