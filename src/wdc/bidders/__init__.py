"""
Bid Adapter Module

Bid adapters build requests for a bidder's endpoint and interpret its
responses. Each adapter module exposes ``BIDDER_CODE``,
``is_bid_request_valid``, ``build_requests`` and ``interpret_response``.
"""

from . import sovrn
from .sovrn import GdprConsent, InterpretedBid, ServerRequest

BID_ADAPTERS = {
    sovrn.BIDDER_CODE: sovrn,
}

__all__ = [
    "BID_ADAPTERS",
    "GdprConsent",
    "InterpretedBid",
    "ServerRequest",
    "sovrn",
]
