"""Event records emitted by the factory, pairs and tokens.

Each contract owns an EventLog. Events are appended in emission order and
forwarded to subscribers, which is how tests and indexers observe them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

import structlog

if TYPE_CHECKING:
    from dex.pair import Pair

logger = structlog.get_logger()


class SwapDirection(Enum):
    """Which reserve receives the swap input."""

    ZERO_FOR_ONE = "zero_for_one"
    ONE_FOR_ZERO = "one_for_zero"


@dataclass(frozen=True)
class PairCreated:
    token0: str
    token1: str
    pair: Pair
    pair_count: int


@dataclass(frozen=True)
class Mint:
    sender: str
    amount0: int
    amount1: int
    liquidity: int


@dataclass(frozen=True)
class Burn:
    sender: str
    amount0: int
    amount1: int


@dataclass(frozen=True)
class Swap:
    sender: str
    amount_in: int
    amount_out: int
    direction: SwapDirection


@dataclass(frozen=True)
class Transfer:
    sender: str
    recipient: str
    amount: int


@dataclass(frozen=True)
class Approval:
    owner: str
    spender: str
    amount: int


Event = PairCreated | Mint | Burn | Swap | Transfer | Approval
E = TypeVar("E")


class EventLog:
    """Ordered, append-only log of the events one contract emitted."""

    def __init__(self, emitter: str) -> None:
        self.emitter = emitter
        self._events: list[Event] = []
        self._subscribers: list[Callable[[Event], None]] = []

    def emit(self, event: Event) -> None:
        self._events.append(event)
        logger.debug(
            "event_emitted",
            emitter=self.emitter,
            event_type=type(event).__name__,
            **_loggable(event),
        )
        for callback in self._subscribers:
            callback(event)

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        """Call callback with every event emitted from now on."""
        self._subscribers.append(callback)

    def checkpoint(self) -> int:
        """Position to roll back to if the current call fails."""
        return len(self._events)

    def rollback(self, checkpoint: int) -> None:
        """Drop events recorded after checkpoint; subscribers are not recalled."""
        del self._events[checkpoint:]

    def of_type(self, event_type: type[E]) -> list[E]:
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self, event_type: type[E] | None = None) -> E | Event | None:
        """Most recent event, optionally restricted to one type."""
        events = self._events if event_type is None else self.of_type(event_type)
        return events[-1] if events else None

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)


def _loggable(event: Event) -> dict[str, object]:
    if isinstance(event, PairCreated):
        # Pair is not a plain value; log its address instead
        return {
            "token0": event.token0,
            "token1": event.token1,
            "pair": event.pair.address,
            "pair_count": event.pair_count,
        }
    fields = asdict(event)
    if isinstance(event, Swap):
        fields["direction"] = event.direction.value
    return fields
