"""
Settlement of matched orders.

A match pairs a bid fragment with an ask fragment of equal size and the
clearing price of its resource. Settling a match produces two events:

1. BuyEvent, dispatched to the bidder's carrier (Carrier.buy)
2. DeliverEvent, dispatched to the asker's carrier (Carrier.deliver)

The dispatcher owns the hop from Buy to Deliver, so every Buy is followed
by exactly one Deliver on the counterparty with identical arguments.
Carriers only do their own accounting and never call each other.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from simmarket.orders import Order

if TYPE_CHECKING:
    from traders.base import Carrier


@dataclass(frozen=True)
class Match:
    """
    A fill produced by the matcher.

    Attributes:
        bid: Bid fragment (units equal to the fill size)
        ask: Ask fragment (units equal to the fill size)
        price: Clearing price of the resource for this round
    """

    bid: Order
    ask: Order
    price: float

    def __post_init__(self) -> None:
        assert self.bid.is_bid and self.ask.is_ask, "match sides are swapped"
        assert self.bid.resource == self.ask.resource, "match spans two resources"
        assert self.bid.units == self.ask.units, (
            f"unequal fill: bid {self.bid.units} vs ask {self.ask.units}"
        )
        assert self.ask.price <= self.price <= self.bid.price, (
            f"clearing price {self.price} outside [{self.ask.price}, {self.bid.price}]"
        )

    @property
    def resource(self):
        return self.bid.resource

    @property
    def units(self) -> float:
        return self.bid.units

    @property
    def notional(self) -> float:
        """Cash that changes hands when this match settles."""
        return self.units * self.price


@dataclass(frozen=True)
class BuyEvent:
    """Instructs the bidder's carrier to pay and take the goods."""

    bid: Order
    ask: Order
    price: float

    @property
    def carrier(self) -> "Carrier":
        return self.bid.carrier


@dataclass(frozen=True)
class DeliverEvent:
    """Instructs the asker's carrier to hand over the goods and collect."""

    bid: Order
    ask: Order
    price: float

    @property
    def carrier(self) -> "Carrier":
        return self.ask.carrier


SettlementEvent = Union[BuyEvent, DeliverEvent]


def settlement_events(match: Match) -> tuple[BuyEvent, DeliverEvent]:
    """Return the ordered (buy, deliver) event pair for a match."""
    return (
        BuyEvent(match.bid, match.ask, match.price),
        DeliverEvent(match.bid, match.ask, match.price),
    )


def dispatch(event: SettlementEvent) -> None:
    """Invoke the carrier callback named by the event."""
    if isinstance(event, BuyEvent):
        event.carrier.buy(event.bid, event.ask, event.price)
    elif isinstance(event, DeliverEvent):
        event.carrier.deliver(event.bid, event.ask, event.price)
    else:
        raise TypeError(f"Unknown settlement event: {event!r}")


def settle(match: Match) -> tuple[BuyEvent, DeliverEvent]:
    """
    Settle one match synchronously.

    Returns:
        The dispatched events, in dispatch order
    """
    events = settlement_events(match)
    for event in events:
        dispatch(event)
    return events
