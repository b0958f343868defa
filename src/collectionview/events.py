"""Change feed: what a consumer sees when the view mutates.

Every view mutation is reported as one VectorChangedEvent, in the order the
mutations happen. Replaying them against a copy of the view keeps the copy
in sync; a RESET means the copy must be re-read in full.

Settable properties report PropertyChangedEvent with the property name.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Disposer = Callable[[], None]


class CollectionChange(enum.Enum):
    RESET = "reset"
    ITEM_INSERTED = "item_inserted"
    ITEM_REMOVED = "item_removed"


@dataclass(frozen=True)
class VectorChangedEvent:
    change: CollectionChange
    index: int = 0


@dataclass(frozen=True)
class PropertyChangedEvent:
    name: str


class EventStream(Generic[T]):
    """Synchronous push stream. Subscribers run in subscription order."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def emit(self, value: T) -> None:
        """Push a value to all subscribers."""
        if self._disposed:
            return
        # Snapshot: a subscriber may unsubscribe itself while being called.
        for cb in list(self._subscribers):
            cb(value)

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def dispose(self) -> None:
        """Drop all subscribers. Later emits are no-ops."""
        self._disposed = True
        self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)
