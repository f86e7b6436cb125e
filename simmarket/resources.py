"""
Resource bags.

A resource is any hashable value compared by equality; the market never
orders or creates resources. A Resources bag maps each resource to an
amount, which is either a number of units (inventories) or a price
(last clearing prices).
"""

from typing import Hashable

Resource = Hashable


class Resources(dict):
    """Mapping of resource to amount with a few bag operations."""

    def merge_in(self, other: "dict[Resource, float]") -> None:
        """Add every amount in ``other`` into this bag."""
        for resource, units in other.items():
            self[resource] = self.get(resource, 0.0) + units

    def clone(self) -> "Resources":
        """Return an independent copy of the bag."""
        return Resources(self)

    def total(self) -> float:
        return float(sum(self.values()))

    def __repr__(self) -> str:
        return f"Resources({dict.__repr__(self)})"
