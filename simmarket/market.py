"""
Market orchestrator for the discrete-round double auction.

Each call to Market.trade() is one round:

1. COLLECT: Poll every participant once for its asks and bids and group
   the orders into one OrderBook per resource
2. CLEAR: For each resource, shuffle/sort the book, walk the curves and
   compute the clearing price
3. SETTLE: Dispatch Buy/Deliver for every match, in match order
4. RECORD: Remember the clearing price of every resource that cleared

The market never reads participant state beyond the orders it is handed
and never writes it except through the Carrier callbacks. Books are built
fresh every round; nothing carries over except the last-price map.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from simmarket.event_logger import EventLogger
from simmarket.orderbook import Clearing, OrderBook
from simmarket.orders import Side
from simmarket.resources import Resource, Resources
from simmarket.settlement import Match, settle
from traders.base import Trader


@dataclass
class MarketRound:
    """Everything that happened in one call to Market.trade()."""

    round: int
    clearings: list[Clearing] = field(default_factory=list)

    @property
    def matches(self) -> list[Match]:
        """All matches of the round, grouped by resource in clearing order."""
        return [m for c in self.clearings for m in c.matches]

    @property
    def volume(self) -> float:
        return float(sum(c.volume for c in self.clearings))

    def clearing(self, resource: Resource) -> Clearing | None:
        """Clearing of one resource, or None if it had no volume this round."""
        for c in self.clearings:
            if c.resource == resource:
                return c
        return None

    @property
    def prices(self) -> dict[Resource, float]:
        return {c.resource: c.price for c in self.clearings}


class Market:
    """
    A single market where resources are traded in discrete rounds.

    Attributes:
        rng: Generator used for tie-breaking shuffles; seed it for replays
        round: Number of rounds traded so far
        event_logger: Optional JSONL logger for rounds, clearings and trades
    """

    def __init__(
        self,
        seed: int | None = None,
        event_logger: EventLogger | None = None,
    ) -> None:
        """
        Initialize an empty market.

        Args:
            seed: Random seed for reproducible tie-breaking (default: None)
            event_logger: Optional EventLogger
        """
        # Insertion-ordered set; the market does not own the participants
        self._traders: dict[Trader, None] = {}
        self._prices = Resources()
        self._trading = False

        self.rng = np.random.default_rng(seed)
        self.round = 0
        self.event_logger = event_logger
        self.logger = logging.getLogger(__name__)

    # =========================================================================
    # PARTICIPANTS
    # =========================================================================

    def add(self, trader: Trader) -> None:
        """Register a participant. Adding it twice has no effect."""
        self._check_idle("add")
        self._traders[trader] = None

    def remove(self, trader: Trader) -> None:
        """Unregister a participant. Removing an absent one has no effect."""
        self._check_idle("remove")
        self._traders.pop(trader, None)

    def _check_idle(self, action: str) -> None:
        if self._trading:
            raise RuntimeError(f"Cannot {action} a trader while a round is in progress")

    @property
    def traders(self) -> tuple[Trader, ...]:
        return tuple(self._traders)

    def __len__(self) -> int:
        return len(self._traders)

    def __contains__(self, trader: object) -> bool:
        return trader in self._traders

    def __iter__(self) -> Iterator[Trader]:
        return iter(self.traders)

    # =========================================================================
    # PRICES
    # =========================================================================

    def price(self, resource: Resource) -> tuple[float, bool]:
        """
        Return the most recent clearing price of a resource.

        Returns:
            (price, True) if the resource has cleared before, else (0.0, False)
        """
        if resource in self._prices:
            return self._prices[resource], True
        return 0.0, False

    @property
    def prices(self) -> Resources:
        """Copy of the last-price map."""
        return self._prices.clone()

    def value(self, inventory: dict[Resource, float]) -> float:
        """
        Value a bag of resources at the last known prices.

        Resources that never cleared count one per unit.
        """
        total = 0.0
        for resource, units in inventory.items():
            price, ok = self.price(resource)
            total += price * units if ok else units
        return total

    # =========================================================================
    # THE ROUND
    # =========================================================================

    def collect(self) -> dict[Resource, OrderBook]:
        """
        Poll every participant once and build this round's order books.

        Returns:
            One OrderBook per resource that received any order, in the
            order resources were first seen

        Raises:
            ValueError: If a participant returns a bid from asks() or an
                ask from bids()
        """
        books: dict[Resource, OrderBook] = {}
        for trader in self._traders:
            for side, orders in ((Side.ASK, trader.asks()), (Side.BID, trader.bids())):
                for order in orders:
                    if order.side is not side:
                        raise ValueError(
                            f"{trader!r} returned a {order.side.value} among its "
                            f"{side.value}s: {order}"
                        )
                    book = books.get(order.resource)
                    if book is None:
                        book = books[order.resource] = OrderBook(order.resource)
                    book.add(order)
        return books

    def trade(self) -> MarketRound:
        """
        Advance the market by one round.

        Returns:
            MarketRound with one Clearing per resource that had volume
        """
        self._check_idle("trade")
        self._trading = True
        try:
            self.round += 1
            books = self.collect()
            result = MarketRound(round=self.round)

            if self.event_logger:
                self.event_logger.log_round(self.round, len(self._traders), len(books))

            for resource, book in books.items():
                clearing = book.clear(self.rng)
                if clearing is None:
                    continue

                for match in clearing.matches:
                    settle(match)
                    self._log_trade(match)

                self._prices[resource] = clearing.price
                result.clearings.append(clearing)
                self._log_clearing(clearing)
        finally:
            self._trading = False

        self.logger.debug(
            f"Round {self.round}: {len(result.clearings)} resources cleared, "
            f"{len(result.matches)} matches, volume {result.volume:g}"
        )
        return result

    # =========================================================================
    # LOGGING
    # =========================================================================

    def _log_trade(self, match: Match) -> None:
        self.logger.debug(
            f"Round {self.round}: {match.bid} bought from {match.ask} at {match.price:g}"
        )
        if self.event_logger:
            self.event_logger.log_trade(
                round=self.round,
                resource=match.resource,
                buyer=match.bid.carrier,
                seller=match.ask.carrier,
                units=match.units,
                price=match.price,
            )

    def _log_clearing(self, clearing: Clearing) -> None:
        self.logger.debug(
            f"Round {self.round}: {clearing.resource} cleared at {clearing.price:g} "
            f"(asks {clearing.ask_volume:g}, bids {clearing.bid_volume:g}, "
            f"traded {clearing.volume:g})"
        )
        if self.event_logger:
            self.event_logger.log_clearing(
                round=self.round,
                resource=clearing.resource,
                price=clearing.price,
                volume=clearing.volume,
                num_matches=len(clearing.matches),
                ask_volume=clearing.ask_volume,
                bid_volume=clearing.bid_volume,
            )
