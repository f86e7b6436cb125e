"""
Economy Engine.

Runs a production economy on top of the market: every step the market
trades one round, then every producer tries to run its recipe. Producers
that keep failing switch to a random new recipe with fresh capital.

Prices are not set by anyone; they emerge from the producers' bids and
asks and their belief updates after each trade.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd
from omegaconf import DictConfig

from simmarket.event_logger import EventLogger
from simmarket.market import Market, MarketRound
from simmarket.metrics import compute_inequality_metrics, price_summary
from simmarket.trader_factory import create_trader
from traders.producer import ProducerTrader
from traders.recipes import get_recipe, random_recipe


class Economy:
    """
    Manages the execution of a production economy.

    Attributes:
        config: Experiment and economy configuration
        market: The market the producers trade on
        traders: Producers in registration order
        rng: Generator for recipe draws
    """

    def __init__(self, config: DictConfig, market: Market | None = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.results: list[dict] = []
        self._price_rows: list[dict] = []
        self.traders: list[ProducerTrader] = []

        seed = config.experiment.get("seed", None)
        self.rng = np.random.default_rng(seed)

        # Event logger for price discovery analysis (optional)
        self.event_logger: EventLogger | None = None
        if config.get("log_events", False):
            log_dir = Path(config.get("log_dir", "logs"))
            exp_name = config.experiment.get("name", "economy")
            event_log_path = log_dir / f"{exp_name}_events.jsonl"
            self.event_logger = EventLogger(event_log_path)
            self.logger.info(f"Event logging enabled: {event_log_path}")

        if market is None:
            market = Market(
                seed=config.experiment.get("market_seed", seed),
                event_logger=self.event_logger,
            )
        elif market.event_logger is None:
            market.event_logger = self.event_logger
        self.market = market
        self.round = 0

    def add_trader(self, trader: ProducerTrader) -> None:
        """Assign the next id to a trader and register it with the market."""
        trader.trader_id = len(self.traders)
        self.traders.append(trader)
        self.market.add(trader)

    def populate(self) -> None:
        """Create the configured number of producers."""
        econ = self.config.economy
        recipes = econ.get("recipes", None)
        trader_type = econ.get("trader_type", "producer")
        if trader_type.lower() != "producer":
            raise ValueError(
                f"Economy needs producer traders, got trader_type={trader_type!r}"
            )

        for i in range(econ.num_traders):
            if recipes:
                recipe = get_recipe(recipes[i % len(recipes)])
            else:
                recipe = random_recipe(self.rng)
            self.add_trader(
                create_trader(
                    trader_type,
                    i,
                    recipe=recipe,
                    money=econ.get("start_money", 1000.0),
                )
            )

        self.logger.info(
            f"Initialized {len(self.traders)} traders: "
            f"{sorted(t.recipe.name for t in self.traders)}"
        )

    def step(self) -> MarketRound:
        """Trade one market round, then let every producer produce."""
        econ = self.config.economy
        max_failures = econ.get("max_failures", 10)
        restart_money = econ.get("restart_money", 1000.0)

        self.round += 1
        for trader in self.traders:
            trader.money_prev = trader.money

        market_round = self.market.trade()
        for clearing in market_round.clearings:
            self._price_rows.append({
                "round": self.round,
                "resource": str(clearing.resource),
                "price": clearing.price,
                "volume": clearing.volume,
                "num_matches": len(clearing.matches),
            })

        for trader in self.traders:
            produced = trader.produce()
            recipe_name = trader.recipe.name

            if trader.failed_to_produce > max_failures:
                self.logger.info(
                    f"Trader {trader.name} failed to produce for {max_failures} turns, "
                    f"changing recipe"
                )
                trader.reset(random_recipe(self.rng), restart_money)

            self.results.append({
                "round": self.round,
                "trader_id": trader.trader_id,
                "recipe": recipe_name,
                "money": trader.money,
                "income": trader.money - trader.money_prev,
                "inventory_value": self.market.value(trader.inventory),
                "produced": produced,
                "failed_to_produce": trader.failed_to_produce,
            })

        return market_round

    def run(self) -> pd.DataFrame:
        """Run the economy and return one row per trader per round."""
        if not self.traders:
            self.populate()

        num_rounds = self.config.experiment.num_rounds
        try:
            for r in range(1, num_rounds + 1):
                market_round = self.step()
                self.logger.debug(
                    f"Round {r}: {len(market_round.matches)} matches, "
                    f"volume {market_round.volume:.2f}"
                )
                if r % max(1, num_rounds // 10) == 0:
                    self.logger.info(f"Round {r}: prices {self.market.prices}")
        finally:
            # Close event logger if enabled
            if self.event_logger is not None:
                self.event_logger.close()
                self.logger.info("Event log saved")

        return pd.DataFrame(self.results)

    def price_history(self) -> pd.DataFrame:
        """One row per resource per round in which it cleared."""
        return pd.DataFrame(
            self._price_rows,
            columns=["round", "resource", "price", "volume", "num_matches"],
        )

    def summary(self) -> dict:
        """Wealth inequality of the current money holdings and price statistics."""
        history = self.price_history()
        return {
            "wealth": compute_inequality_metrics([t.money for t in self.traders]),
            "prices": {
                resource: price_summary(group["price"])
                for resource, group in history.groupby("resource")
            },
        }

    def __str__(self) -> str:
        return "\n".join(str(t) for t in self.traders)
