# tests/property/test_market_properties.py
"""
Property-based tests for market round invariants using Hypothesis.

For any finite set of participants and orders, a single round must:
- conserve the units of every resource and the total cash
- pair every Buy with exactly one Deliver carrying the same arguments
- size every match as the smaller remaining quantity of its two orders
- settle every match at a price inside its own ask/bid quotes
- produce no match when the best bid is below the best ask
- be fully reproducible for a fixed seed
"""

from hypothesis import given, settings
from hypothesis import strategies as st

import pytest

from simmarket.market import Market
from simmarket.metrics import total_cash, total_units
from traders.standard import StandardTrader

RESOURCES = ["wheat", "bread", "iron"]

# =============================================================================
# Strategies for generating test data
# =============================================================================


@st.composite
def order_specs(draw):
    """One (side, resource, units, price) tuple with exact binary prices."""
    side = draw(st.sampled_from(["ask", "bid"]))
    resource = draw(st.sampled_from(RESOURCES))
    units = draw(st.integers(min_value=0, max_value=20))
    price = draw(st.integers(min_value=0, max_value=40)) / 4
    return side, resource, units, price


@st.composite
def market_setups(draw):
    """A list of traders, each a list of order specs."""
    num_traders = draw(st.integers(min_value=1, max_value=5))
    return [
        draw(st.lists(order_specs(), min_size=0, max_size=6))
        for _ in range(num_traders)
    ]


class LoggingTrader(StandardTrader):
    """Standard trader that appends every callback to a shared log."""

    def __init__(self, name, log, **kwargs):
        super().__init__(name=name, **kwargs)
        self.log = log

    def buy(self, bid, ask, price):
        self.log.append(("buy", self, bid, ask, price))
        super().buy(bid, ask, price)

    def deliver(self, bid, ask, price):
        self.log.append(("deliver", self, bid, ask, price))
        super().deliver(bid, ask, price)


def build_market(setup, seed=0, log=None):
    log = [] if log is None else log
    market = Market(seed=seed)
    traders = []
    for i, specs in enumerate(setup):
        trader = LoggingTrader(
            f"T{i}", log, cash=1000.0, inventory={r: 100.0 for r in RESOURCES}
        )
        for side, resource, units, price in specs:
            if side == "ask":
                trader.ask(units, resource, price)
            else:
                trader.bid(units, resource, price)
        market.add(trader)
        traders.append(trader)
    return market, traders, log


# =============================================================================
# Property Tests: Round Invariants
# =============================================================================


class TestRoundInvariants:
    @given(market_setups())
    @settings(max_examples=100)
    def test_units_and_cash_conserved(self, setup):
        market, traders, _ = build_market(setup)
        units_before = {r: total_units(traders, r) for r in RESOURCES}
        cash_before = total_cash(traders)

        market.trade()

        for r in RESOURCES:
            assert total_units(traders, r) == pytest.approx(units_before[r])
        assert total_cash(traders) == pytest.approx(cash_before)

    @given(market_setups())
    @settings(max_examples=100)
    def test_buy_and_deliver_are_paired(self, setup):
        market, _, log = build_market(setup)

        result = market.trade()

        assert len(log) == 2 * len(result.matches)
        for buy, deliver, match in zip(log[::2], log[1::2], result.matches):
            assert buy[0] == "buy" and deliver[0] == "deliver"
            assert buy[1] is match.bid.carrier
            assert deliver[1] is match.ask.carrier
            assert buy[2:] == deliver[2:] == (match.bid, match.ask, match.price)

    @given(market_setups())
    @settings(max_examples=100)
    def test_match_size_is_min_of_remaining(self, setup):
        market, _, _ = build_market(setup)

        result = market.trade()

        remaining = {}
        for match in result.matches:
            bid_src, ask_src = match.bid.source, match.ask.source
            bid_left = remaining.get(id(bid_src), bid_src.units)
            ask_left = remaining.get(id(ask_src), ask_src.units)

            assert match.bid.units == match.ask.units
            assert match.units == min(bid_left, ask_left)

            remaining[id(bid_src)] = bid_left - match.units
            remaining[id(ask_src)] = ask_left - match.units

    @given(market_setups())
    @settings(max_examples=100)
    def test_price_bounds(self, setup):
        market, _, _ = build_market(setup)

        result = market.trade()

        for clearing in result.clearings:
            for match in clearing.matches:
                assert match.ask.price <= clearing.price <= match.bid.price

    @given(market_setups())
    @settings(max_examples=100)
    def test_no_impossible_crosses(self, setup):
        market, traders, _ = build_market(setup)
        books = {}
        for trader in traders:
            for order in trader.asks() + trader.bids():
                if order.units > 0:
                    books.setdefault(order.resource, []).append(order)

        result = market.trade()

        for resource, orders in books.items():
            asks = [o.price for o in orders if o.is_ask]
            bids = [o.price for o in orders if o.is_bid]
            if asks and bids and max(bids) < min(asks):
                clearing = result.clearing(resource)
                assert clearing.matches == []
                assert clearing.price == (max(bids) + min(asks)) / 2

    @given(market_setups(), st.integers(min_value=0, max_value=10_000))
    @settings(max_examples=50)
    def test_deterministic_with_fixed_seed(self, setup, seed):
        def run():
            market, _, _ = build_market(setup, seed=seed)
            trace = []
            for _ in range(3):
                for m in market.trade().matches:
                    trace.append((m.resource, m.bid.carrier.name, m.ask.carrier.name, m.units, m.price))
            return trace, dict(market.prices)

        assert run() == run()

    @given(market_setups())
    @settings(max_examples=50)
    def test_last_price_only_for_traded_resources(self, setup):
        market, traders, _ = build_market(setup)
        active = {
            o.resource
            for t in traders
            for o in t.asks() + t.bids()
            if o.units > 0
        }

        market.trade()

        assert set(market.prices) == active
