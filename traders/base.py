"""
Participant contracts for the discrete-round market.

The market talks to a participant through two separate roles:

1. Trader (query role): polled once per round for its current asks and
   bids. Must not touch the market while answering.
2. Carrier (settlement role): receives Buy when one of its bids fills and
   Deliver when one of its asks fills, and does its own accounting.

Orders carry their carrier, so settlement is routed by order rather than
by participant. Most participants play both roles, but the interfaces are
kept apart.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from simmarket.resources import Resources

if TYPE_CHECKING:
    from simmarket.orders import Order


class Carrier(ABC):
    """
    Settlement role of a participant.

    Both callbacks receive the matched (bid, ask) fragments, which always
    have equal units, and the clearing price of the round. Neither callback
    may fail or renege: an order emitted during a round must be honoured.
    """

    @abstractmethod
    def buy(self, bid: "Order", ask: "Order", price: float) -> None:
        """
        Take delivery of a filled bid.

        Must debit cash by ``bid.units * price`` and credit the inventory of
        ``bid.resource`` by ``bid.units``. The market dispatches the matching
        Deliver to the asker itself; do not call it from here.
        """

    @abstractmethod
    def deliver(self, bid: "Order", ask: "Order", price: float) -> None:
        """
        Hand over the goods of a filled ask.

        Must credit cash by ``ask.units * price`` and debit the inventory of
        ``ask.resource`` by ``ask.units``.
        """


class Trader(ABC):
    """Query role of a participant."""

    @abstractmethod
    def asks(self) -> list["Order"]:
        """Return the current sell orders. Called at most once per round."""

    @abstractmethod
    def bids(self) -> list["Order"]:
        """Return the current buy orders. Called at most once per round."""


class Account(Carrier):
    """
    Cash and inventory bookkeeping that carriers can embed.

    Attributes:
        cash: Money held
        inventory: Units held per resource
        num_buys: Buy callbacks received
        num_deliveries: Deliver callbacks received
        units_bought: Units received through Buy, per resource
        units_sold: Units handed over through Deliver, per resource
    """

    def __init__(self, cash: float = 0.0, inventory: dict | None = None) -> None:
        self.cash = float(cash)
        self.inventory = Resources(inventory or {})
        self.num_buys = 0
        self.num_deliveries = 0
        self.units_bought = Resources()
        self.units_sold = Resources()

    def buy(self, bid: "Order", ask: "Order", price: float) -> None:
        self.cash -= bid.units * price
        self.inventory.merge_in({bid.resource: bid.units})
        self.units_bought.merge_in({bid.resource: bid.units})
        self.num_buys += 1

    def deliver(self, bid: "Order", ask: "Order", price: float) -> None:
        self.cash += ask.units * price
        self.inventory.merge_in({ask.resource: -ask.units})
        self.units_sold.merge_in({ask.resource: ask.units})
        self.num_deliveries += 1

    def holding(self, resource) -> float:
        """Units held of a resource (0.0 if never held)."""
        return self.inventory.get(resource, 0.0)

    def __repr__(self) -> str:
        return f"Account(cash={self.cash:.2f}, inventory={dict(self.inventory)})"
