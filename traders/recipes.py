"""
Production recipes for the economy.

Each producer follows one recipe per turn: it consumes the recipe inputs
from its inventory and adds the outputs. Inputs are what a producer bids
for on the market; everything else it holds is for sale.
"""

from dataclasses import dataclass, field

from numpy.random import Generator

from simmarket.resources import Resources

FOOD = "food"
WOOD = "wood"
IRON = "iron"
GRAIN = "grain"
TOOLS = "tools"

ALL_RESOURCES = (FOOD, WOOD, IRON, GRAIN, TOOLS)


@dataclass(frozen=True, eq=False)
class Recipe:
    """A named transformation of input resources into output resources."""

    name: str
    inputs: Resources = field(default_factory=Resources)
    outputs: Resources = field(default_factory=Resources)

    @property
    def output_units(self) -> float:
        return self.outputs.total()

    def __str__(self) -> str:
        return self.name


FARMER = Recipe("Farmer", Resources({FOOD: 1, TOOLS: 0.1}), Resources({GRAIN: 5}))
MINER = Recipe("Miner", Resources({FOOD: 1, TOOLS: 0.1}), Resources({IRON: 1}))
BAKER = Recipe("Baker", Resources({GRAIN: 2}), Resources({FOOD: 3}))
BLACKSMITH = Recipe(
    "Blacksmith", Resources({FOOD: 1, IRON: 1, WOOD: 1}), Resources({TOOLS: 0.5})
)
WOODCUTTER = Recipe("Woodcutter", Resources({FOOD: 1, TOOLS: 0.1}), Resources({WOOD: 4}))

RECIPES: dict[str, Recipe] = {
    r.name.lower(): r for r in (FARMER, MINER, BAKER, BLACKSMITH, WOODCUTTER)
}


def get_recipe(name: str) -> Recipe:
    """
    Look up a recipe by (case-insensitive) name.

    Raises:
        KeyError: If no recipe has that name
    """
    try:
        return RECIPES[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown recipe {name!r}; known recipes: {sorted(RECIPES)}") from None


def random_recipe(rng: Generator) -> Recipe:
    """Draw one of the known recipes uniformly."""
    recipes = list(RECIPES.values())
    return recipes[int(rng.integers(0, len(recipes)))]
