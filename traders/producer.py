"""
ProducerTrader - a price-discovering producer for the economy.

Every turn a producer tries to run its recipe. Between turns it trades on
the market:
- Bids for the shortfall of each recipe input at its believed buy price,
  scaled down when it cannot afford all of them
- Asks for everything it holds that is not a recipe input, at its believed
  sell price

Price beliefs move halfway towards every clearing price it trades at, and
the sell price of its outputs is reset each turn to their input cost plus
a small margin. Repeated failure to produce is handled by the Economy.
"""

import logging

from simmarket.orders import Order, Side
from simmarket.resources import Resource, Resources
from traders.base import Account, Carrier, Trader
from traders.recipes import ALL_RESOURCES, TOOLS, Recipe

DEFAULT_MONEY = 1000.0
DEFAULT_STOCK = 2.0
DEFAULT_BUY_PRICE = 3.0
DEFAULT_SELL_PRICE = 1.0
MARGIN = 0.1


def default_buy_prices() -> Resources:
    prices = Resources({r: DEFAULT_BUY_PRICE for r in ALL_RESOURCES})
    prices[TOOLS] = 6.0
    return prices


def default_sell_prices() -> Resources:
    prices = Resources({r: DEFAULT_SELL_PRICE for r in ALL_RESOURCES})
    prices[TOOLS] = 3.0
    return prices


class ProducerTrader(Trader, Carrier):
    """
    A producer that buys its recipe inputs and sells everything else.

    Attributes:
        trader_id: Identifier assigned by the economy
        recipe: Current recipe
        account: Cash and inventory bookkeeping
        money_prev: Money at the start of the previous turn
        buy_prices: Believed price per resource when buying
        sell_prices: Believed price per resource when selling
        failed_to_produce: Consecutive turns without production
    """

    def __init__(
        self,
        recipe: Recipe,
        trader_id: int = 0,
        money: float = DEFAULT_MONEY,
        inventory: dict | None = None,
        buy_prices: dict | None = None,
        sell_prices: dict | None = None,
    ) -> None:
        self.trader_id = trader_id
        self.recipe = recipe
        if inventory is None:
            inventory = {r: DEFAULT_STOCK for r in ALL_RESOURCES}
        self.account = Account(money, inventory)
        self.money_prev = float(money)
        self.buy_prices = Resources(buy_prices) if buy_prices else default_buy_prices()
        self.sell_prices = Resources(sell_prices) if sell_prices else default_sell_prices()
        self.failed_to_produce = 0
        self.logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return f"{self.recipe.name} ({self.trader_id})"

    @property
    def money(self) -> float:
        return self.account.cash

    @property
    def cash(self) -> float:
        return self.account.cash

    @property
    def inventory(self) -> Resources:
        return self.account.inventory

    # =========================================================================
    # TRADER ROLE
    # =========================================================================

    def asks(self) -> list[Order]:
        """Offer every positive holding that the recipe does not consume."""
        orders = []
        for resource, amount in self.inventory.items():
            if resource in self.recipe.inputs or amount <= 0:
                continue
            price = self.sell_prices.get(resource, DEFAULT_SELL_PRICE)
            orders.append(Order(self, resource, amount, price, Side.ASK))
        return orders

    def bids(self) -> list[Order]:
        """Bid for the shortfall of each input, within the money available."""
        need = Resources()
        need_money = 0.0
        for resource, amount in self.recipe.inputs.items():
            shortfall = amount - self.inventory.get(resource, 0.0)
            if shortfall > 0:
                need[resource] = shortfall
                need_money += shortfall * self.buy_prices.get(resource, DEFAULT_BUY_PRICE)

        multiplier = 1.0
        if need_money > 0 and self.money < need_money:
            multiplier = max(self.money, 0.0) / need_money

        return [
            Order(
                self,
                resource,
                amount,
                self.buy_prices.get(resource, DEFAULT_BUY_PRICE) * multiplier,
                Side.BID,
            )
            for resource, amount in need.items()
        ]

    # =========================================================================
    # CARRIER ROLE
    # =========================================================================

    def buy(self, bid: Order, ask: Order, price: float) -> None:
        self.logger.debug(f"Trader {self.name} bought {bid.units:.3f} {bid.resource} for {price:.2f}")
        self.account.buy(bid, ask, price)
        self.buy_prices[bid.resource] = (
            self.buy_prices.get(bid.resource, DEFAULT_BUY_PRICE) + price
        ) / 2

    def deliver(self, bid: Order, ask: Order, price: float) -> None:
        self.logger.debug(f"Trader {self.name} sold {ask.units:.3f} {ask.resource} for {price:.2f}")
        self.account.deliver(bid, ask, price)
        self.sell_prices[ask.resource] = (
            self.sell_prices.get(ask.resource, DEFAULT_SELL_PRICE) + price
        ) / 2

    # =========================================================================
    # PRODUCTION
    # =========================================================================

    def calculate_cost(self) -> float:
        """
        Reprice the outputs at input cost per output unit plus the margin.

        Returns:
            The new sell price per output unit
        """
        input_cost = sum(
            amount * self.buy_prices.get(resource, DEFAULT_BUY_PRICE)
            for resource, amount in self.recipe.inputs.items()
        )
        output_units = self.recipe.output_units
        if output_units <= 0:
            return 0.0

        price_per_unit = input_cost / output_units + MARGIN
        for resource in self.recipe.outputs:
            self.sell_prices[resource] = price_per_unit
        return price_per_unit

    def can_produce(self) -> bool:
        if not self.recipe.inputs:
            return False
        return all(
            self.inventory.get(resource, 0.0) >= amount
            for resource, amount in self.recipe.inputs.items()
        )

    def produce(self) -> bool:
        """
        Run the recipe once if every input is in stock.

        Returns:
            True if production happened
        """
        self.calculate_cost()

        if not self.can_produce():
            self.failed_to_produce += 1
            self.logger.debug(
                f"Trader {self.name} failed to produce {self.failed_to_produce} times"
            )
            return False

        self.inventory.merge_in({r: -amount for r, amount in self.recipe.inputs.items()})
        self.inventory.merge_in(self.recipe.outputs)
        for resource, amount in self.recipe.outputs.items():
            self.logger.debug(f"Trader {self.name} produced {amount:.2f} {resource}")
        self.failed_to_produce = 0
        return True

    def holding(self, resource: Resource) -> float:
        return self.account.holding(resource)

    def reset(self, recipe: Recipe, money: float = DEFAULT_MONEY) -> None:
        """Switch profession with fresh start capital; inventory is kept."""
        self.recipe = recipe
        self.account.cash = float(money)
        self.money_prev = float(money)
        self.failed_to_produce = 0

    def __str__(self) -> str:
        return f"{self.name} Money: {self.money:.2f}"

    def __repr__(self) -> str:
        return (
            f"ProducerTrader(id={self.trader_id}, recipe={self.recipe.name}, "
            f"money={self.money:.2f})"
        )
