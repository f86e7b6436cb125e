"""
traders - Market Participants

This package contains the participant contracts and implementations:
- base: Trader and Carrier contracts, Account bookkeeping
- standard: StandardTrader, a participant driven by external logic
- recipes: Production recipes for the economy
- producer: ProducerTrader, a price-discovering producer

All participants implement base.Trader and base.Carrier.
"""

__version__ = "1.0.0"
