"""Observable source collections.

An ObservableList is an ordinary mutable list that tells its subscribers
exactly what changed: one ListChange per mutation, carrying the affected
items and indexes. A CollectionView subscribes to any source that has the
ObservableSequence capability and treats everything else as a snapshot.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, Protocol, TypeVar, runtime_checkable

from collectionview.events import Disposer, EventStream

T = TypeVar("T")


class ListChangeAction(enum.Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    RESET = "reset"


@dataclass(frozen=True)
class ListChange:
    """One structural change of a source list.

    ``new_index``/``old_index`` are -1 when not meaningful for the action.
    """

    action: ListChangeAction
    new_items: tuple = field(default=())
    new_index: int = -1
    old_items: tuple = field(default=())
    old_index: int = -1

    @classmethod
    def added(cls, index: int, *items) -> ListChange:
        return cls(ListChangeAction.ADD, new_items=items, new_index=index)

    @classmethod
    def removed(cls, index: int, *items) -> ListChange:
        return cls(ListChangeAction.REMOVE, old_items=items, old_index=index)

    @classmethod
    def replaced(cls, index: int, old, new) -> ListChange:
        return cls(
            ListChangeAction.REPLACE,
            new_items=(new,), new_index=index,
            old_items=(old,), old_index=index,
        )

    @classmethod
    def moved(cls, old_index: int, new_index: int, item) -> ListChange:
        return cls(
            ListChangeAction.MOVE,
            new_items=(item,), new_index=new_index,
            old_items=(item,), old_index=old_index,
        )

    @classmethod
    def reset(cls) -> ListChange:
        return cls(ListChangeAction.RESET)


@runtime_checkable
class ObservableSequence(Protocol):
    """Capability: an indexable sequence that reports its own changes."""

    def __len__(self) -> int: ...

    def __getitem__(self, index): ...

    def __iter__(self) -> Iterator: ...

    def subscribe(self, callback: Callable[[ListChange], None]) -> Disposer: ...


@runtime_checkable
class SupportsIncrementalLoading(Protocol):
    """Capability: a source that can fetch further pages on demand."""

    @property
    def has_more_items(self) -> bool: ...

    def load_more_items(self, count: int) -> Any: ...


class ObservableList(Generic[T]):
    """A list that reports every mutation as a ListChange.

    Single-item mutations report single-item changes. ``extend`` reports one
    multi-item ADD. ``clear``, ``reset`` and ``sort`` report RESET.
    """

    __slots__ = ("_items", "_changes")

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._items: list[T] = list(items) if items else []
        self._changes: EventStream[ListChange] = EventStream()

    def subscribe(self, callback: Callable[[ListChange], None]) -> Disposer:
        return self._changes.subscribe(callback)

    def _notify(self, change: ListChange) -> None:
        self._changes.emit(change)

    def _normalize(self, index: int) -> int:
        if index < 0:
            index += len(self._items)
        if not 0 <= index < len(self._items):
            raise IndexError("list index out of range")
        return index

    # --- Read operations ---

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObservableList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def index(self, item: T) -> int:
        return self._items.index(item)

    def count(self, item: T) -> int:
        return self._items.count(item)

    # --- Write operations (notify) ---

    def append(self, item: T) -> None:
        self._items.append(item)
        self._notify(ListChange.added(len(self._items) - 1, item))

    def extend(self, items: Iterable[T]) -> None:
        items = tuple(items)
        if not items:
            return
        start = len(self._items)
        self._items.extend(items)
        self._notify(ListChange.added(start, *items))

    def insert(self, index: int, item: T) -> None:
        size = len(self._items)
        if index < 0:
            index = max(0, index + size)
        index = min(index, size)
        self._items.insert(index, item)
        self._notify(ListChange.added(index, item))

    def pop(self, index: int = -1) -> T:
        index = self._normalize(index)
        item = self._items.pop(index)
        self._notify(ListChange.removed(index, item))
        return item

    def remove(self, item: T) -> None:
        self.pop(self._items.index(item))

    def move(self, old_index: int, new_index: int) -> None:
        """Move one item; ``new_index`` is its index after the move."""
        old_index = self._normalize(old_index)
        new_index = self._normalize(new_index)
        if old_index == new_index:
            return
        item = self._items.pop(old_index)
        self._items.insert(new_index, item)
        self._notify(ListChange.moved(old_index, new_index, item))

    def clear(self) -> None:
        self._items.clear()
        self._notify(ListChange.reset())

    def reset(self, items: Iterable[T]) -> None:
        """Replace the whole content with one RESET notification."""
        self._items = list(items)
        self._notify(ListChange.reset())

    def sort(self, *, key=None, reverse: bool = False) -> None:
        self._items.sort(key=key, reverse=reverse)
        self._notify(ListChange.reset())

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            self._items[index] = value
            self._notify(ListChange.reset())
            return
        index = self._normalize(index)
        old = self._items[index]
        self._items[index] = value
        self._notify(ListChange.replaced(index, old, value))

    def __delitem__(self, index) -> None:
        if isinstance(index, slice):
            del self._items[index]
            self._notify(ListChange.reset())
            return
        self.pop(index)

    def __repr__(self) -> str:
        return f"ObservableList({self._items!r})"
