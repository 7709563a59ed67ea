"""
Per-auction rollup of the best bid per placement.

Between auction init and auction end the aggregator keeps the highest CPM
seen for each placement. At auction end the best prices of the counted
placements are summed into one report command, and the state is reset for
the next auction.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..config.analytics_config import MetricFlags
from ..events.models import BidResponse, BidWon
from ..logging import rollup_logger
from ..utils.constants import ACTION_ROLLUP, DEFAULT_ROLLUP_PLACEMENT_PATTERN, ROLLUP_CATEGORY
from .dispatch import ReportCommand
from .distribution import convert_to_cents

PlacementFilter = Callable[[str], bool]


def pattern_placement_filter(pattern: str = DEFAULT_ROLLUP_PLACEMENT_PATTERN) -> PlacementFilter:
    """Count placements whose code contains a match for the pattern."""
    compiled = re.compile(pattern)

    def _matches(ad_unit_code: str) -> bool:
        return compiled.search(str(ad_unit_code)) is not None

    return _matches


@dataclass
class RollupLogRow:
    """One line of the end-of-auction diagnostic table."""

    bid: Any
    adunit: str
    ad_id: str | None
    bidder: str | None
    time: int | None
    cpm: float | None
    msg: str | None
    rendered: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "adunit": self.adunit,
            "adId": self.ad_id,
            "bidder": self.bidder,
            "time": self.time,
            "cpm": self.cpm,
            "msg": self.msg,
            "rendered": self.rendered,
        }


class DiagnosticSink(Protocol):
    """Receives the end-of-auction diagnostic table."""

    def table(self, rows: list[RollupLogRow]) -> None:
        ...


class AuctionResults(Protocol):
    """Source of the bids and winners shown in the diagnostic table."""

    def get_bid_responses(self) -> dict[str, list[Any]]:
        """Bids of the latest auction keyed by placement code."""
        ...

    def get_all_winning_bids(self) -> list[Any]:
        ...


class LogDiagnosticSink:
    """Writes the diagnostic table to the structured log."""

    def __init__(self) -> None:
        self._logger = rollup_logger()

    def table(self, rows: list[RollupLogRow]) -> None:
        self._logger.debug("Auction summary", rows=[row.to_dict() for row in rows])


class ObservedAuctionResults:
    """
    AuctionResults built from the events the adapter itself observed.

    Bids are kept for the current auction only, winners for the session.
    """

    def __init__(self) -> None:
        self._responses: dict[str, list[BidResponse]] = {}
        self._winners: list[BidWon] = []

    def start_auction(self) -> None:
        self._responses = {}

    def add_response(self, bid: BidResponse) -> None:
        self._responses.setdefault(bid.ad_unit_code or "", []).append(bid)

    def add_winner(self, bid: BidWon) -> None:
        self._winners.append(bid)

    def get_bid_responses(self) -> dict[str, list[BidResponse]]:
        return {code: list(bids) for code, bids in self._responses.items()}

    def get_all_winning_bids(self) -> list[BidWon]:
        return list(self._winners)


@dataclass
class RollupState:
    """Accumulated state of the auction in progress."""

    best_cpm_by_placement: dict[str, float] = field(default_factory=dict)
    auction_sequence_number: int = 0


class RollupAggregator:
    """Tracks the best CPM per placement across one auction."""

    def __init__(
        self,
        flags: MetricFlags,
        placement_filter: PlacementFilter | None = None,
        diagnostic_sink: DiagnosticSink | None = None,
        auction_results: AuctionResults | None = None,
    ):
        self.flags = flags
        self.placement_filter = placement_filter or pattern_placement_filter()
        self.diagnostic_sink = diagnostic_sink or LogDiagnosticSink()

        self._observed: ObservedAuctionResults | None = None
        if auction_results is None:
            self._observed = ObservedAuctionResults()
            auction_results = self._observed
        self.auction_results = auction_results

        self.state = RollupState()
        self._logger = rollup_logger()

    def on_auction_init(self) -> None:
        """Start a new auction with an empty placement map."""
        self.state.best_cpm_by_placement.clear()
        if self._observed is not None:
            self._observed.start_auction()
        self._logger.debug(
            "Auction init",
            best_cpm_by_placement=dict(self.state.best_cpm_by_placement),
            auction_sequence_number=self.state.auction_sequence_number,
            options=self.flags.to_dict(),
        )

    def record_response(self, bid: BidResponse) -> None:
        """Fold a bid response into the running maximum of its placement."""
        if self._observed is not None and self.flags.rollup_log:
            self._observed.add_response(bid)

        if not self.flags.bid_rollup:
            return
        cpm = bid.cpm
        if not isinstance(cpm, (int, float)) or cpm <= 0:
            return

        placement = bid.ad_unit_code or ""
        current = self.state.best_cpm_by_placement.get(placement)
        if current is None or current < cpm:
            self.state.best_cpm_by_placement[placement] = cpm

    def record_win(self, bid: BidWon) -> None:
        if self._observed is not None and self.flags.rollup_log:
            self._observed.add_winner(bid)

    def on_auction_end(self) -> ReportCommand | None:
        """
        Close the auction.

        Returns the rollup command when rollup reporting is enabled.
        """
        best = self.state.best_cpm_by_placement
        total = sum(cpm for placement, cpm in best.items() if self.placement_filter(placement))

        self.state.auction_sequence_number += 1
        self._logger.debug(
            "Auction ended",
            best_cpm_by_placement=dict(best),
            total=total,
            auction_sequence_number=self.state.auction_sequence_number,
        )
        best.clear()

        command = None
        if self.flags.bid_rollup:
            action = ACTION_ROLLUP
            if self.flags.experiment:
                action = f"{action} {self.flags.experiment}"
            command = ReportCommand(
                category=ROLLUP_CATEGORY,
                action=action,
                label=self.state.auction_sequence_number,
                value=convert_to_cents(total),
            )

        if self.flags.rollup_log:
            self._emit_rollup_log()

        return command

    def build_rollup_log(self) -> list[RollupLogRow]:
        """Every bid of the latest auction, flagged if it won."""
        winners = self.auction_results.get_all_winning_bids()
        winning_ad_ids = {
            getattr(winner, "ad_id", None) for winner in winners
        } - {None}

        rows = []
        for ad_unit_code, bids in self.auction_results.get_bid_responses().items():
            for bid in bids:
                ad_id = getattr(bid, "ad_id", None)
                rows.append(
                    RollupLogRow(
                        bid=bid,
                        adunit=ad_unit_code,
                        ad_id=ad_id,
                        bidder=getattr(bid, "bidder_code", None),
                        time=getattr(bid, "time_to_respond", None),
                        cpm=getattr(bid, "cpm", None),
                        msg=getattr(bid, "status_message", None),
                        rendered=ad_id in winning_ad_ids,
                    )
                )
        return rows

    def _emit_rollup_log(self) -> None:
        rows = self.build_rollup_log()
        if rows:
            self.diagnostic_sink.table(rows)
        else:
            self._logger.warning("Auction had no responses")
