# tests/conftest.py
"""Minimal shared fixtures for test suite."""

import numpy as np
import pytest

from simmarket.market import Market
from traders.standard import StandardTrader


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(seed)


@pytest.fixture
def market(seed):
    """Empty market with a fixed tie-breaking seed."""
    return Market(seed=seed)


@pytest.fixture
def make_trader():
    """Factory for standard traders with some cash and stock."""

    def _make(name: str, cash: float = 100.0, **inventory: float) -> StandardTrader:
        return StandardTrader(name=name, cash=cash, inventory=inventory)

    return _make
