"""
Sovrn bid adapter.

Builds OpenRTB bid requests for the Sovrn endpoint and turns its responses
into bids. Prices stay in plain currency units here; only the analytics
side converts to cents.
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from ..logging import bidder_logger
from ..utils.constants import REPO_AND_VERSION

BIDDER_CODE = "sovrn"
ENDPOINT = f"//ap.lijit.com/rtb/bid?src={REPO_AND_VERSION}"

DEFAULT_CURRENCY = "USD"
DEFAULT_TTL = 60000
MEDIA_TYPE_BANNER = "banner"

logger = bidder_logger(BIDDER_CODE)


@dataclass
class GdprConsent:
    """GDPR signals attached to a bidder request."""

    consent_string: str | None = None
    gdpr_applies: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GdprConsent":
        return cls(
            consent_string=data.get("consentString"),
            gdpr_applies=bool(data.get("gdprApplies", False)),
        )


@dataclass
class ServerRequest:
    """An HTTP request to send to the bid endpoint."""

    method: str
    url: str
    data: str
    options: dict[str, Any] = field(default_factory=lambda: {"contentType": "text/plain"})

    @property
    def payload(self) -> dict[str, Any]:
        return json.loads(self.data)


@dataclass
class InterpretedBid:
    """A bid parsed from the endpoint response."""

    request_id: str
    cpm: float
    width: int
    height: int
    creative_id: str
    deal_id: str | None
    ad: str
    currency: str = DEFAULT_CURRENCY
    net_revenue: bool = True
    media_type: str = MEDIA_TYPE_BANNER
    ttl: int = DEFAULT_TTL

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wrapper's bid response structure."""
        return {
            "requestId": self.request_id,
            "cpm": self.cpm,
            "width": self.width,
            "height": self.height,
            "creativeId": self.creative_id,
            "dealId": self.deal_id,
            "currency": self.currency,
            "netRevenue": self.net_revenue,
            "mediaType": self.media_type,
            "ad": self.ad,
            "ttl": self.ttl,
        }


def _is_numeric(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number)


def is_bid_request_valid(bid: dict[str, Any]) -> bool:
    """A bid request needs a numeric tagid."""
    params = bid.get("params") or {}
    tagid = params.get("tagid")
    return bool(tagid) and _is_numeric(tagid)


def build_requests(
    bid_requests: list[dict[str, Any]],
    bidder_request: dict[str, Any] | None = None,
    page: dict[str, str] | None = None,
) -> ServerRequest:
    """
    Build one POST request covering every bid request.

    Args:
        bid_requests: Valid bid requests for this bidder
        bidder_request: Bidder-level request carrying gdprConsent, if any
        page: Optional page location with "domain" and "page" keys
    """
    imps = []
    iv = None
    for bid in bid_requests:
        params = bid.get("params") or {}
        iv = iv or params.get("iv")
        imp: dict[str, Any] = {
            "id": bid.get("bidId"),
            "banner": {"w": 1, "h": 1},
            "tagid": str(params.get("tagid", "")),
        }
        if params.get("bidfloor"):
            imp["bidfloor"] = params["bidfloor"]
        imps.append(imp)

    payload: dict[str, Any] = {
        "id": bid_requests[0].get("bidderRequestId") if bid_requests else None,
        "imp": imps,
    }
    if page:
        payload["site"] = {"domain": page.get("domain", ""), "page": page.get("page", "")}

    gdpr_data = (bidder_request or {}).get("gdprConsent")
    if gdpr_data:
        consent = gdpr_data if isinstance(gdpr_data, GdprConsent) else GdprConsent.from_dict(gdpr_data)
        payload["regs"] = {"ext": {"gdpr": int(consent.gdpr_applies)}}
        payload["user"] = {"ext": {"consent": consent.consent_string}}

    url = ENDPOINT
    if iv:
        url += f"&iv={iv}"

    logger.debug("Built bid request", imps=len(imps), gdpr="regs" in payload)
    return ServerRequest(method="POST", url=url, data=json.dumps(payload, separators=(",", ":")))


def interpret_response(server_response: dict[str, Any]) -> list[InterpretedBid]:
    """Parse the endpoint response; anything malformed yields no bids."""
    body = server_response.get("body") or {}
    seatbid = body.get("seatbid") or []
    if not body.get("id") or not seatbid or not seatbid[0].get("bid"):
        return []

    bids = []
    for sovrn_bid in seatbid[0]["bid"]:
        try:
            cpm = float(sovrn_bid.get("price"))
            width = int(sovrn_bid.get("w"))
            height = int(sovrn_bid.get("h"))
        except (TypeError, ValueError):
            logger.warning("Skipping malformed bid", bid_id=sovrn_bid.get("id"))
            continue
        bids.append(
            InterpretedBid(
                request_id=sovrn_bid.get("impid"),
                cpm=cpm,
                width=width,
                height=height,
                creative_id=sovrn_bid.get("crid") or sovrn_bid.get("id"),
                deal_id=sovrn_bid.get("dealid") or body.get("dealid") or None,
                ad=unquote(f"{sovrn_bid.get('adm', '')}<img src={sovrn_bid.get('nurl', '')}>"),
            )
        )
    return bids
