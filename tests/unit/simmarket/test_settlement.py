# tests/unit/simmarket/test_settlement.py
"""Tests for Match invariants and the Buy/Deliver dispatch."""

import pytest

from simmarket.orders import ask, bid
from simmarket.settlement import (
    BuyEvent,
    DeliverEvent,
    Match,
    dispatch,
    settle,
    settlement_events,
)
from traders.base import Account, Carrier


class SpyCarrier(Carrier):
    def __init__(self, log: list, name: str):
        self.log = log
        self.name = name

    def buy(self, bid, ask, price):
        self.log.append(("buy", self.name, bid, ask, price))

    def deliver(self, bid, ask, price):
        self.log.append(("deliver", self.name, bid, ask, price))


@pytest.fixture
def log():
    return []


@pytest.fixture
def pair(log):
    buyer = SpyCarrier(log, "buyer")
    seller = SpyCarrier(log, "seller")
    return bid(buyer, "wheat", 4, 3.0), ask(seller, "wheat", 4, 2.0)


class TestMatch:
    def test_units_and_notional(self, pair):
        b, a = pair
        match = Match(b, a, 2.5)
        assert match.units == 4
        assert match.notional == 10.0
        assert match.resource == "wheat"

    def test_unequal_units_is_a_matcher_defect(self, pair):
        b, a = pair
        with pytest.raises(AssertionError, match="unequal fill"):
            Match(b.fragment(3), a, 2.5)

    def test_price_outside_quotes_is_a_matcher_defect(self, pair):
        b, a = pair
        with pytest.raises(AssertionError, match="outside"):
            Match(b, a, 3.5)

    def test_swapped_sides_rejected(self, pair):
        b, a = pair
        with pytest.raises(AssertionError):
            Match(a, b, 2.5)


class TestDispatch:
    def test_events_target_each_side(self, pair):
        b, a = pair
        buy_event, deliver_event = settlement_events(Match(b, a, 2.5))

        assert isinstance(buy_event, BuyEvent) and buy_event.carrier is b.carrier
        assert isinstance(deliver_event, DeliverEvent) and deliver_event.carrier is a.carrier

    def test_settle_calls_buy_then_deliver_with_same_arguments(self, pair, log):
        b, a = pair
        settle(Match(b, a, 2.5))

        assert log == [
            ("buy", "buyer", b, a, 2.5),
            ("deliver", "seller", b, a, 2.5),
        ]

    def test_dispatch_rejects_unknown_events(self):
        with pytest.raises(TypeError, match="Unknown settlement event"):
            dispatch(object())


class TestAccountSettlement:
    def test_accounts_conserve_cash_and_units(self):
        buyer = Account(cash=100.0)
        seller = Account(cash=0.0, inventory={"wheat": 10})
        match = Match(bid(buyer, "wheat", 6, 3.0), ask(seller, "wheat", 6, 2.0), 2.5)

        settle(match)

        assert buyer.cash == pytest.approx(85.0)
        assert seller.cash == pytest.approx(15.0)
        assert buyer.holding("wheat") == 6
        assert seller.holding("wheat") == 4
        assert buyer.cash + seller.cash == pytest.approx(100.0)
        assert buyer.num_buys == 1 and seller.num_deliveries == 1
        assert buyer.units_bought == {"wheat": 6} and seller.units_sold == {"wheat": 6}
