# tests/unit/traders/test_standard_trader.py
"""Tests for StandardTrader and the Account it embeds."""

import pytest

from simmarket.orders import Side
from traders.base import Account, Carrier, Trader
from traders.standard import StandardTrader


class TestContracts:
    def test_is_trader_and_carrier(self):
        trader = StandardTrader("A")
        assert isinstance(trader, Trader)
        assert isinstance(trader, Carrier)

    def test_contracts_are_abstract(self):
        with pytest.raises(TypeError):
            Trader()
        with pytest.raises(TypeError):
            Carrier()


class TestOrders:
    def test_ask_and_bid_accumulate(self):
        trader = StandardTrader("A")
        trader.ask(10, "wheat", 2.0)
        trader.ask(1, "bread", 1.0)
        trader.bid(5, "iron", 3.0)

        assert [(o.units, o.resource, o.price) for o in trader.asks()] == [
            (10, "wheat", 2.0),
            (1, "bread", 1.0),
        ]
        assert [o.side for o in trader.bids()] == [Side.BID]

    def test_trader_is_its_own_carrier(self):
        trader = StandardTrader("A")
        order = trader.ask(1, "wheat", 1.0)
        assert order.carrier is trader

    def test_returned_lists_are_copies(self):
        trader = StandardTrader("A")
        trader.ask(1, "wheat", 1.0)
        trader.asks().clear()
        assert len(trader.asks()) == 1

    def test_clear(self):
        trader = StandardTrader("A")
        trader.ask(1, "wheat", 1.0)
        trader.bid(1, "wheat", 1.0)
        trader.clear()
        assert trader.asks() == [] and trader.bids() == []

    def test_invalid_order_not_recorded(self):
        trader = StandardTrader("A")
        with pytest.raises(ValueError):
            trader.bid(-1, "wheat", 1.0)
        assert trader.bids() == []


class TestAccounting:
    def test_buy_and_deliver_delegate_to_account(self):
        buyer = StandardTrader("B", cash=50.0)
        seller = StandardTrader("S", inventory={"wheat": 5})
        bid = buyer.bid(5, "wheat", 3.0)
        ask = seller.ask(5, "wheat", 1.0)

        buyer.buy(bid, ask, 2.0)
        seller.deliver(bid, ask, 2.0)

        assert buyer.cash == pytest.approx(40.0)
        assert buyer.inventory == {"wheat": 5}
        assert seller.cash == pytest.approx(10.0)
        assert seller.inventory == {"wheat": 0}

    def test_shared_account(self):
        account = Account(cash=10.0)
        first = StandardTrader("first", account=account)
        second = StandardTrader("second", account=account)
        assert first.account is second.account
        assert second.cash == 10.0
