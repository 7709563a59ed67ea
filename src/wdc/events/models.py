"""
Auction lifecycle event models.

Payloads arrive either as these dataclasses or as the plain dictionaries a
header-bidding wrapper publishes (camelCase keys); ``from_dict`` accepts
the latter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Auction lifecycle events observed by the analytics adapter."""

    AUCTION_INIT = "auctionInit"
    AUCTION_END = "auctionEnd"
    BID_REQUESTED = "bidRequested"
    BID_RESPONSE = "bidResponse"
    BID_TIMEOUT = "bidTimeout"
    BID_WON = "bidWon"


# Events replayed to a late subscriber at enable time
REPLAYED_EVENT_TYPES: tuple[EventType, ...] = (
    EventType.BID_REQUESTED,
    EventType.BID_RESPONSE,
    EventType.BID_TIMEOUT,
    EventType.BID_WON,
)


@dataclass
class BidRequest:
    """A bidder was asked to bid."""

    bidder_code: str | None = None
    auction_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BidRequest":
        return cls(
            bidder_code=data.get("bidderCode"),
            auction_id=data.get("auctionId"),
        )


@dataclass
class BidResponse:
    """
    A bid came back from a bidder.

    Attributes:
        bidder_code: Code of the responding bidder
        cpm: Bid price per thousand impressions
        time_to_respond: Response latency in milliseconds
        ad_unit_code: Placement the bid is for
        ad_id: Identifier of the rendered creative
        status_message: Bidder status text
    """

    bidder_code: str | None = None
    cpm: float | None = None
    time_to_respond: int | None = None
    ad_unit_code: str | None = None
    ad_id: str | None = None
    status_message: str | None = None
    auction_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BidResponse":
        return cls(
            bidder_code=data.get("bidderCode"),
            cpm=data.get("cpm"),
            time_to_respond=data.get("timeToRespond"),
            ad_unit_code=data.get("adUnitCode"),
            ad_id=data.get("adId"),
            status_message=data.get("statusMessage"),
            auction_id=data.get("auctionId"),
        )


@dataclass
class BidTimeout:
    """Bidders that did not answer before the auction timeout, in order."""

    bidder_codes: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "BidTimeout":
        if isinstance(data, dict):
            codes = data.get("bidderCodes", [])
        else:
            codes = data or []
        return cls(bidder_codes=[code for code in codes])


@dataclass
class BidWon:
    """A bid won its placement and was rendered."""

    bidder_code: str | None = None
    cpm: float | None = None
    ad_unit_code: str | None = None
    ad_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BidWon":
        return cls(
            bidder_code=data.get("bidderCode"),
            cpm=data.get("cpm"),
            ad_unit_code=data.get("adUnitCode"),
            ad_id=data.get("adId"),
        )


@dataclass
class AuctionInit:
    auction_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AuctionInit":
        return cls(auction_id=(data or {}).get("auctionId"))


@dataclass
class AuctionEnd:
    auction_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AuctionEnd":
        return cls(auction_id=(data or {}).get("auctionId"))


EVENT_MODELS: dict[EventType, type] = {
    EventType.AUCTION_INIT: AuctionInit,
    EventType.AUCTION_END: AuctionEnd,
    EventType.BID_REQUESTED: BidRequest,
    EventType.BID_RESPONSE: BidResponse,
    EventType.BID_TIMEOUT: BidTimeout,
    EventType.BID_WON: BidWon,
}


def parse_event(event_type: EventType | str, args: Any) -> Any:
    """
    Normalise an event payload to its model.

    Model instances and None pass through untouched.
    """
    model = EVENT_MODELS[EventType(event_type)]
    if args is None or isinstance(args, model):
        return args
    if event_type == EventType.BID_TIMEOUT or isinstance(args, dict):
        return model.from_dict(args)
    return args


@dataclass
class RecordedEvent:
    """An event as kept in the bus history."""

    event_type: EventType
    args: Any = None
