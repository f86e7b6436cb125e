"""
Bid and ask orders.

An order expresses "carrier is willing to buy/sell up to ``units`` of
``resource`` at ``price`` per unit". Orders are immutable: the matcher
never edits an order, it derives smaller fragments from it with
Order.fragment() so that settlement sees exact fill sizes on both sides.

Orders compare by identity, not by value. Two traders asking the same
quantity at the same price are two distinct orders.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from simmarket.resources import Resource

if TYPE_CHECKING:
    from traders.base import Carrier


class InvalidOrderError(ValueError):
    """Raised when an order is constructed with negative or non-finite values."""


class Side(Enum):
    """Which side of the book an order belongs to."""

    BID = "bid"
    ASK = "ask"


@dataclass(frozen=True, eq=False)
class Order:
    """
    A single bid or ask.

    Attributes:
        carrier: Participant that settles this order (receives Buy or Deliver)
        resource: Resource to trade
        units: Number of units offered or wanted (>= 0)
        price: Price per unit (>= 0)
        side: Side.BID or Side.ASK
        origin: For fragments, the order they were split from
    """

    carrier: "Carrier"
    resource: Resource
    units: float
    price: float
    side: Side
    origin: "Order | None" = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.side, Side):
            raise InvalidOrderError(f"side must be a Side, got {self.side!r}")
        if not math.isfinite(self.units) or self.units < 0:
            raise InvalidOrderError(f"units must be a finite value >= 0, got {self.units}")
        if not math.isfinite(self.price) or self.price < 0:
            raise InvalidOrderError(f"price must be a finite value >= 0, got {self.price}")

    @property
    def is_bid(self) -> bool:
        return self.side is Side.BID

    @property
    def is_ask(self) -> bool:
        return self.side is Side.ASK

    @property
    def notional(self) -> float:
        """Cash value of the order at its own price."""
        return self.units * self.price

    def fragment(self, units: float) -> "Order":
        """
        Derive a partial order of ``units`` from this one.

        The fragment keeps carrier, resource, price and side, and points
        back to the order originally emitted by the trader through
        ``origin``. This order is left untouched.

        Raises:
            InvalidOrderError: If units exceeds this order's units
        """
        if units > self.units:
            raise InvalidOrderError(
                f"fragment of {units} units exceeds order size {self.units}"
            )
        return replace(self, units=units, origin=self.source)

    @property
    def source(self) -> "Order":
        """The order as emitted by its trader (itself unless a fragment)."""
        return self.origin if self.origin is not None else self

    def __str__(self) -> str:
        carrier = getattr(self.carrier, "name", self.carrier)
        return f"{carrier}:{self.resource}:{self.units:g}*{self.price:g}"


def ask(carrier: "Carrier", resource: Resource, units: float, price: float) -> Order:
    """Build a sell order."""
    return Order(carrier, resource, units, price, Side.ASK)


def bid(carrier: "Carrier", resource: Resource, units: float, price: float) -> Order:
    """Build a buy order."""
    return Order(carrier, resource, units, price, Side.BID)
