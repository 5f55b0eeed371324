"""Transaction-scoped state shared by the ledger, factory and pairs.

Every piece of mutable AMM state (token balances, allowances, reserves,
share balances, the pair registry) lives in one StateStore keyed by tuples.
Writes are staged in the innermost open transaction and only reach the
committed state when the outermost transaction exits without an error, so
a failing check anywhere in a call (including a later hop of a multi-hop
swap) leaves no partial effects behind.

Events follow the same staging: they are published to ``events`` and the
log only when the outermost transaction commits.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from amm.events import Event

logger = structlog.get_logger()

# Committed events retained for inspection; subscribers see every event
DEFAULT_EVENT_HISTORY = 10_000

# Returns the current time in whole seconds
Clock = Callable[[], int]


def system_clock() -> int:
    """Wall-clock time in whole seconds."""
    return int(time.time())


@dataclass
class _Layer:
    """Writes and events staged by one open transaction."""

    writes: dict[Hashable, Any] = field(default_factory=dict)
    events: list[Event] = field(default_factory=list)


class StateStore:
    """Key/value state with nested staging layers.

    Reads fall through the open layers (innermost first) to the committed
    state. Writes outside any transaction commit immediately.

    Args:
        max_events: Committed events kept in ``events`` (None keeps all)

    Usage:
        store = StateStore()
        with store.transaction():
            store.set(("balance", asset, holder), 10)
            ...  # any exception here discards the write
    """

    def __init__(self, max_events: int | None = DEFAULT_EVENT_HISTORY) -> None:
        self._committed: dict[Hashable, Any] = {}
        self._layers: list[_Layer] = []
        self._events: deque[Event] = deque(maxlen=max_events)
        self._subscribers: list[Callable[[Event], None]] = []

    def get(self, key: Hashable, default: Any = 0) -> Any:
        """Read the most recently staged value for key."""
        for layer in reversed(self._layers):
            if key in layer.writes:
                return layer.writes[key]
        return self._committed.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        """Stage a write in the innermost transaction."""
        if self._layers:
            self._layers[-1].writes[key] = value
        else:
            self._committed[key] = value

    def emit(self, event: Event) -> None:
        """Stage an event for publication on commit."""
        if self._layers:
            self._layers[-1].events.append(event)
        else:
            self._publish([event])

    @property
    def depth(self) -> int:
        """Number of currently open transactions."""
        return len(self._layers)

    @property
    def events(self) -> tuple[Event, ...]:
        """Most recent committed events in publication order.

        At most ``max_events`` are kept; older ones are dropped.
        """
        return tuple(self._events)

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        """Register a callback invoked for every committed event."""
        self._subscribers.append(callback)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Open a staging layer; commit it into the parent on success.

        On any exception the layer is discarded and the exception re-raised.
        """
        layer = _Layer()
        self._layers.append(layer)
        try:
            yield
        except BaseException:
            self._layers.pop()
            logger.debug(
                "transaction_discarded",
                depth=len(self._layers),
                staged_writes=len(layer.writes),
            )
            raise
        self._layers.pop()
        if self._layers:
            parent = self._layers[-1]
            parent.writes.update(layer.writes)
            parent.events.extend(layer.events)
        else:
            self._committed.update(layer.writes)
            self._publish(layer.events)

    def _publish(self, events: list[Event]) -> None:
        for event in events:
            self._events.append(event)
            logger.info(event.name, **event.log_fields())
            for callback in self._subscribers:
                callback(event)
