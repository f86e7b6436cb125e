"""
Event Logger for market rounds.

Logs round, clearing and trade events as JSON lines for post-hoc analysis
of price discovery and trading volume.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, TextIO


@dataclass
class RoundEvent:
    """Start of a market round."""

    round: int
    num_traders: int
    num_resources: int


@dataclass
class ClearingEvent:
    """Clearing result for one resource in one round."""

    round: int
    resource: str
    price: float
    volume: float
    num_matches: int
    ask_volume: float
    bid_volume: float


@dataclass
class TradeEvent:
    """A single settled match."""

    round: int
    resource: str
    buyer: str
    seller: str
    units: float
    price: float


def label(obj: Any) -> str:
    """Render a resource or carrier for the log."""
    return str(getattr(obj, "name", obj))


class EventLogger:
    """
    Logs market events to JSONL format.

    Usage:
        logger = EventLogger(Path("logs/economy_events.jsonl"))
        logger.log_clearing(round=1, resource="grain", price=2.5, volume=10,
                            num_matches=1, ask_volume=10, bid_volume=10)
        logger.close()
    """

    def __init__(self, output_path: Path):
        """
        Initialize the event logger.

        Args:
            output_path: Path to write JSONL file
        """
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = None
        self._open()

    def _open(self) -> None:
        """Open the output file for writing."""
        self._file = open(self.output_path, "w")

    def log_round(self, round: int, num_traders: int, num_resources: int) -> None:
        """Log the start of a round."""
        self._write_event(
            RoundEvent(round=round, num_traders=num_traders, num_resources=num_resources)
        )

    def log_clearing(
        self,
        round: int,
        resource: Any,
        price: float,
        volume: float,
        num_matches: int,
        ask_volume: float,
        bid_volume: float,
    ) -> None:
        """Log the clearing of one resource."""
        event = ClearingEvent(
            round=round,
            resource=label(resource),
            price=float(price),
            volume=float(volume),
            num_matches=num_matches,
            ask_volume=float(ask_volume),
            bid_volume=float(bid_volume),
        )
        self._write_event(event)

    def log_trade(
        self,
        round: int,
        resource: Any,
        buyer: Any,
        seller: Any,
        units: float,
        price: float,
    ) -> None:
        """Log a settled match."""
        event = TradeEvent(
            round=round,
            resource=label(resource),
            buyer=label(buyer),
            seller=label(seller),
            units=float(units),
            price=float(price),
        )
        self._write_event(event)

    def _write_event(self, event: RoundEvent | ClearingEvent | TradeEvent) -> None:
        """Write an event to the JSONL file."""
        if self._file is None:
            return

        data = asdict(event)
        if isinstance(event, RoundEvent):
            data["event_type"] = "round"
        elif isinstance(event, ClearingEvent):
            data["event_type"] = "clearing"
        else:
            data["event_type"] = "trade"
        self._file.write(json.dumps(data) + "\n")

    def flush(self) -> None:
        """Flush the output buffer."""
        if self._file:
            self._file.flush()

    def close(self) -> None:
        """Close the output file."""
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self) -> "EventLogger":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def load_events(log_path: Path) -> list[dict[str, object]]:
    """
    Load events from a JSONL file.

    Args:
        log_path: Path to the JSONL file

    Returns:
        List of event dictionaries
    """
    events = []
    with open(log_path) as f:
        for line in f:
            if line.strip():
                events.append(json.loads(line))
    return events
