"""
StandardTrader - a participant driven by external logic.

Callers place orders with ask() and bid(); the market sees them when it
polls. Settlement is delegated to an embedded Account, so the trader is
its own carrier without inheriting any bookkeeping.
"""

from simmarket.orders import Order, Side
from simmarket.resources import Resource, Resources
from traders.base import Account, Carrier, Trader


class StandardTrader(Trader, Carrier):
    """
    Reference participant that keeps a list of asks and bids.

    Orders persist across rounds until clear() is called; the market never
    edits them.

    Attributes:
        name: Label used in logs and order strings
        account: Embedded cash/inventory bookkeeping
    """

    def __init__(
        self,
        name: str = "trader",
        cash: float = 0.0,
        inventory: dict | None = None,
        account: Account | None = None,
    ) -> None:
        self.name = name
        self.account = account if account is not None else Account(cash, inventory)
        self._asks: list[Order] = []
        self._bids: list[Order] = []

    def ask(self, units: float, resource: Resource, price: float) -> Order:
        """Offer ``units`` of ``resource`` for at least ``price`` each."""
        order = Order(self, resource, units, price, Side.ASK)
        self._asks.append(order)
        return order

    def bid(self, units: float, resource: Resource, price: float) -> Order:
        """Request ``units`` of ``resource`` for at most ``price`` each."""
        order = Order(self, resource, units, price, Side.BID)
        self._bids.append(order)
        return order

    def asks(self) -> list[Order]:
        return list(self._asks)

    def bids(self) -> list[Order]:
        return list(self._bids)

    def clear(self) -> None:
        """Withdraw all accumulated orders."""
        self._asks.clear()
        self._bids.clear()

    # Carrier role, delegated

    def buy(self, bid: Order, ask: Order, price: float) -> None:
        self.account.buy(bid, ask, price)

    def deliver(self, bid: Order, ask: Order, price: float) -> None:
        self.account.deliver(bid, ask, price)

    @property
    def cash(self) -> float:
        return self.account.cash

    @property
    def inventory(self) -> Resources:
        return self.account.inventory

    def __repr__(self) -> str:
        return (
            f"StandardTrader(name={self.name!r}, asks={len(self._asks)}, "
            f"bids={len(self._bids)}, cash={self.cash:.2f})"
        )
