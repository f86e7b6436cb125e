"""
simmarket - Discrete-Round Double Auction Market

This package contains the market clearing engine. Each call to
Market.trade() polls every participant for orders, clears one order book
per resource and settles the matches through the participants' carriers.

Modules:
    resources: Resource bags (inventories, price maps)
    orders: Immutable bid/ask orders
    orderbook: Per-resource books, the cross-matching walk and clearing price
    settlement: Matches and the Buy/Deliver settlement events
    market: The round loop and last-price bookkeeping
    event_logger: JSONL event log of clearings and trades
    metrics: Conservation oracles and distribution summaries
    economy: Production economy runner on top of the market
    trader_factory: Participant construction by type name
"""

__version__ = "1.0.0"
