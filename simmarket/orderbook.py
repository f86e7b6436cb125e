"""
simmarket/orderbook.py - Per-resource order book and cross matching

One OrderBook is built per resource per round and discarded afterwards.
Clearing a book runs in four steps:

1. Shuffle asks and bids independently with the market's generator
2. Stable-sort asks ascending and bids descending by price, so orders with
   equal prices end up in a fresh random order every round
3. Walk the two curves towards each other (cross), splitting partial fills
4. Derive one clearing price from the last crossing quotes

Zero-unit orders keep a resource active for the round but never trade.
"""

from dataclasses import dataclass, field
from typing import Sequence

from numpy.random import Generator

from simmarket.orders import Order, Side
from simmarket.resources import Resource
from simmarket.settlement import Match


@dataclass
class CrossResult:
    """
    Outcome of the matching walk over one resource.

    Attributes:
        fills: (bid fragment, ask fragment) pairs in match order
        last_ask_price: Ask price of the last crossing pair (0.0 if no fill)
        last_bid_price: Bid price of the last crossing pair (0.0 if no fill)
        asks_left: True if some ask received no fill at all
        bids_left: True if some bid received no fill at all
    """

    fills: list[tuple[Order, Order]] = field(default_factory=list)
    last_ask_price: float = 0.0
    last_bid_price: float = 0.0
    asks_left: bool = False
    bids_left: bool = False


@dataclass
class Clearing:
    """Result of clearing one resource for one round."""

    resource: Resource
    price: float
    matches: list[Match]
    ask_volume: float
    bid_volume: float

    @property
    def volume(self) -> float:
        """Units traded."""
        return float(sum(m.units for m in self.matches))

    @property
    def turnover(self) -> float:
        """Cash traded."""
        return float(sum(m.notional for m in self.matches))


def cross(asks: Sequence[Order], bids: Sequence[Order]) -> CrossResult:
    """
    Match sorted asks against sorted bids.

    Two cursors start at the lowest ask and the highest bid. While both are
    valid and the bid covers the ask, the smaller of the two remaining
    quantities is filled, the larger side keeps its remainder and the
    exhausted cursor moves on (both cursors on a simultaneous exhaustion).
    The crossing pair of each fill becomes the last ask/bid price.

    Args:
        asks: Ask orders sorted by price ascending, all with units > 0
        bids: Bid orders sorted by price descending, all with units > 0

    Returns:
        CrossResult with the fills and the residual state of both books
    """
    result = CrossResult()
    i = j = 0
    ask_left = asks[0].units if asks else 0.0
    bid_left = bids[0].units if bids else 0.0

    while i < len(asks) and j < len(bids):
        ask, bid = asks[i], bids[j]
        if bid.price < ask.price:
            break

        units = min(ask_left, bid_left)
        result.fills.append((bid.fragment(units), ask.fragment(units)))
        result.last_ask_price = ask.price
        result.last_bid_price = bid.price

        ask_left -= units
        bid_left -= units
        if ask_left <= 0:
            i += 1
            ask_left = asks[i].units if i < len(asks) else 0.0
        if bid_left <= 0:
            j += 1
            bid_left = bids[j].units if j < len(bids) else 0.0

    result.asks_left = _has_unfilled(asks, i, ask_left)
    result.bids_left = _has_unfilled(bids, j, bid_left)
    return result


def _has_unfilled(orders: Sequence[Order], cursor: int, left: float) -> bool:
    # The remainder of a partially filled order does not count as residual
    if cursor >= len(orders):
        return False
    if left < orders[cursor].units:
        return cursor + 1 < len(orders)
    return True


def clearing_price(result: CrossResult, best_ask: float, best_bid: float) -> float:
    """
    Pick the clearing price for a two-sided book.

    With fills:
        - both books consumed, or both with unfilled orders: mid of the last
          crossing ask and bid
        - only unfilled bids left over: the last crossing bid
        - only unfilled asks left over: the last crossing ask
    The remainder of a partially filled order is not an unfilled order.
    Without fills the mid of the best quotes is used as an indicative price.

    Args:
        result: Output of cross()
        best_ask: Lowest ask price in the book
        best_bid: Highest bid price in the book
    """
    if not result.fills:
        return (best_ask + best_bid) / 2.0
    if result.asks_left == result.bids_left:
        return (result.last_ask_price + result.last_bid_price) / 2.0
    if result.bids_left:
        return result.last_bid_price
    return result.last_ask_price


class OrderBook:
    """
    Asks and bids for a single resource during a single round.

    Attributes:
        resource: The resource every order in this book refers to
        asks: Ask orders (sorted ascending after prepare())
        bids: Bid orders (sorted descending after prepare())
    """

    def __init__(self, resource: Resource) -> None:
        self.resource = resource
        self.asks: list[Order] = []
        self.bids: list[Order] = []

    def add(self, order: Order) -> None:
        """
        Insert an order into its side of the book.

        Raises:
            ValueError: If the order is for a different resource
        """
        if order.resource != self.resource:
            raise ValueError(
                f"Order for {order.resource!r} added to book for {self.resource!r}"
            )
        if order.side is Side.ASK:
            self.asks.append(order)
        else:
            self.bids.append(order)

    @property
    def ask_volume(self) -> float:
        return float(sum(o.units for o in self.asks))

    @property
    def bid_volume(self) -> float:
        return float(sum(o.units for o in self.bids))

    @property
    def has_orders(self) -> bool:
        return bool(self.asks or self.bids)

    def prepare(self, rng: Generator) -> tuple[list[Order], list[Order]]:
        """
        Shuffle then sort both sides in place.

        Python's sort is stable, so the shuffle alone decides the order
        within a run of equal prices.

        Args:
            rng: Generator used for the tie-breaking permutation

        Returns:
            (asks, bids) restricted to orders with units > 0
        """
        rng.shuffle(self.asks)
        rng.shuffle(self.bids)
        self.asks.sort(key=lambda o: o.price)
        self.bids.sort(key=lambda o: o.price, reverse=True)
        return (
            [o for o in self.asks if o.units > 0],
            [o for o in self.bids if o.units > 0],
        )

    def clear(self, rng: Generator) -> Clearing | None:
        """
        Clear the book.

        One-sided books produce no matches and are priced at their best
        quote (lowest ask or highest bid).

        Args:
            rng: Generator used for tie-breaking

        Returns:
            Clearing for this resource, or None if neither side has volume
        """
        asks, bids = self.prepare(rng)
        matches: list[Match] = []

        if not asks and not bids:
            return None
        if not bids:
            price = asks[0].price
        elif not asks:
            price = bids[0].price
        else:
            result = cross(asks, bids)
            price = clearing_price(result, asks[0].price, bids[0].price)
            matches = [Match(bid, ask, price) for bid, ask in result.fills]

        return Clearing(
            resource=self.resource,
            price=price,
            matches=matches,
            ask_volume=self.ask_volume,
            bid_volume=self.bid_volume,
        )

    def __repr__(self) -> str:
        return (
            f"OrderBook({self.resource!r}, asks={len(self.asks)}, bids={len(self.bids)})"
        )
