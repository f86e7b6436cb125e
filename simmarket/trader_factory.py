"""
Trader Factory.
"""

from typing import Any

from traders.producer import DEFAULT_MONEY, ProducerTrader
from traders.recipes import Recipe, get_recipe
from traders.standard import StandardTrader

TRADER_TYPES = ("producer", "standard")


def create_trader(
    trader_type: str,
    trader_id: int,
    recipe: Recipe | str | None = None,
    money: float = DEFAULT_MONEY,
    inventory: dict | None = None,
    **kwargs: Any,
) -> ProducerTrader | StandardTrader:
    """
    Build a market participant by type name.

    Args:
        trader_type: "producer" or "standard" (case-insensitive)
        trader_id: Identifier assigned by the caller
        recipe: Recipe or recipe name (producers only)
        money: Start capital
        inventory: Start inventory (producer default: 2 of every resource)
        **kwargs: Passed through to the trader constructor

    Raises:
        ValueError: If the type is unknown or a producer has no recipe
    """
    kind = trader_type.lower()

    if kind == "producer":
        if recipe is None:
            raise ValueError("A producer needs a recipe")
        if isinstance(recipe, str):
            recipe = get_recipe(recipe)
        return ProducerTrader(
            recipe,
            trader_id=trader_id,
            money=money,
            inventory=inventory,
            **kwargs,
        )
    elif kind == "standard":
        return StandardTrader(
            name=kwargs.pop("name", f"trader-{trader_id}"),
            cash=money,
            inventory=inventory,
            **kwargs,
        )
    else:
        raise ValueError(f"Unknown trader type: {trader_type}; known types: {TRADER_TYPES}")
