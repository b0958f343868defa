"""CollectionView: a live filtered, sorted, grouped projection of a source.

The view subscribes to its source (when the source can report changes) and
to its own sort-rule list. Single-item source changes are applied as
single-item view changes: a binary search over the sorted view finds the
insertion point, an identity scan finds the item to remove. Anything the
view cannot apply item by item (multi-item changes, new rules, a new
source) falls back to a full rebuild reported as one RESET.

Items that tie under every rule keep their relative source order, both on
rebuild (stable sort) and on incremental insert.

Not thread safe: callers serialize access.
"""

from __future__ import annotations

import logging
from collections import Counter
from itertools import islice
from typing import Any, Callable, Generic, Iterable, Iterator, Sequence, TypeVar

from collectionview.defer import Deferral, DeferralController
from collectionview.events import (
    CollectionChange,
    Disposer,
    EventStream,
    PropertyChangedEvent,
    VectorChangedEvent,
)
from collectionview.groups import GroupIndex, identity_index
from collectionview.observable import (
    ListChange,
    ListChangeAction,
    ObservableList,
    ObservableSequence,
    SupportsIncrementalLoading,
)
from collectionview.sorting import CompositeComparator, SortDescription, insertion_point

T = TypeVar("T")

Predicate = Callable[[Any], bool]

logger = logging.getLogger("collectionview.view")


class CollectionView(Generic[T]):
    """Filtered, sorted and optionally grouped view over a source sequence.

    Usage:
        source = ObservableList([3, 1, 2])
        view = CollectionView(source, sort_descriptions=[SortDescription(lambda x: x)])
        list(view)  # [1, 2, 3]

        view.vector_changed.subscribe(print)
        source.insert(0, 0)
        # VectorChangedEvent(change=<CollectionChange.ITEM_INSERTED>, index=0)
    """

    def __init__(
        self,
        source: Sequence[T] | None = None,
        *,
        filter: Predicate | None = None,
        sort_descriptions: Iterable[SortDescription] = (),
        group_description: SortDescription | None = None,
    ) -> None:
        self._view: list[T] = []
        self._source: Sequence[T] = []
        self._source_disposer: Disposer | None = None
        self._filter = filter
        self._group_description = group_description

        self._sort_descriptions: ObservableList[SortDescription] = ObservableList(sort_descriptions)
        self._sort_disposer: Disposer | None = self._sort_descriptions.subscribe(
            self._on_sort_descriptions_changed
        )
        self._comparator = CompositeComparator(group_description, self._sort_descriptions)
        self._groups = GroupIndex()

        self._current: T | None = None
        self._deferral = DeferralController(self._on_deferral_released)
        self._stale = False
        self._disposed = False

        self.vector_changed: EventStream[VectorChangedEvent] = EventStream()
        self.property_changed: EventStream[PropertyChangedEvent] = EventStream()

        self._attach(source if source is not None else [])
        self._rebuild()

    @classmethod
    def create_deferred(
        cls,
        source: Sequence[T] | None = None,
        *,
        filter: Predicate | None = None,
        sort_descriptions: Iterable[SortDescription] = (),
        group_description: SortDescription | None = None,
    ) -> tuple[CollectionView[T], Deferral]:
        """Create an empty view that is already deferred.

        Configure it, then complete the deferral: the view is computed once.
        """
        view = cls()
        deferral = view.defer_refresh()
        if source is not None:
            view.source = source
        view.filter = filter
        sort_descriptions = tuple(sort_descriptions)
        if sort_descriptions:
            view.sort_by(*sort_descriptions)
        view.group_description = group_description
        return view, deferral

    # --- Read access ---

    def __len__(self) -> int:
        return len(self._view)

    def __getitem__(self, index):
        return self._view[index]

    def __iter__(self) -> Iterator[T]:
        return iter(self._view)

    def __contains__(self, item: object) -> bool:
        return identity_index(self._view, item) >= 0

    def index(self, item: T) -> int:
        """Index of ``item`` in the view, compared by identity."""
        index = identity_index(self._view, item)
        if index < 0:
            raise ValueError(f"{item!r} is not in the view")
        return index

    # --- Settable properties ---

    @property
    def source(self) -> Sequence[T]:
        return self._source

    @source.setter
    def source(self, value: Sequence[T] | None) -> None:
        if value is None:
            value = []
        if value is self._source:
            return
        self._detach()
        self._attach(value)
        self._refresh_or_mark_stale()
        self._on_property_changed("source")

    @property
    def filter(self) -> Predicate | None:
        return self._filter

    @filter.setter
    def filter(self, value: Predicate | None) -> None:
        if value is self._filter:
            return
        self._filter = value
        if self._deferral.active:
            self._stale = True
        else:
            self._reevaluate_filter()
        self._on_property_changed("filter")

    @property
    def group_description(self) -> SortDescription | None:
        return self._group_description

    @group_description.setter
    def group_description(self, value: SortDescription | None) -> None:
        if value == self._group_description:
            return
        was_grouped = self.is_grouped
        self._group_description = value
        self._comparator.group = value
        self._refresh_or_mark_stale()
        self._on_property_changed("group_description")
        if was_grouped != self.is_grouped:
            self._on_property_changed("is_grouped")

    @property
    def is_grouped(self) -> bool:
        return self._group_description is not None

    @property
    def sort_descriptions(self) -> ObservableList[SortDescription]:
        """The sort chain. Any structural edit re-sorts the view."""
        return self._sort_descriptions

    def sort_by(self, *descriptions: SortDescription) -> None:
        """Replace the whole sort chain as one change."""
        self._sort_descriptions.reset(descriptions)

    @property
    def collection_groups(self) -> GroupIndex:
        return self._groups

    @property
    def is_deferred(self) -> bool:
        return self._deferral.active

    # --- Ordering ---

    def compare(self, a: T, b: T) -> int:
        """Compare two items the way the view orders them."""
        return self._comparator.compare(a, b)

    @property
    def sort_key(self):
        return self._comparator.key

    # --- Refresh and deferral ---

    def refresh(self) -> None:
        """Recompute the whole view from the source."""
        self._refresh_or_mark_stale()

    def defer_refresh(self) -> Deferral:
        """Suspend recomputation until the returned handle is completed."""
        return self._deferral.begin()

    def _refresh_or_mark_stale(self) -> None:
        if self._deferral.active:
            self._stale = True
        else:
            self._rebuild()

    def _on_deferral_released(self) -> None:
        if self._stale:
            logger.debug("Deferral released, rebuilding view")
            self._rebuild()

    # --- Source and rule subscriptions ---

    def _attach(self, source: Sequence[T]) -> None:
        self._source = source
        if isinstance(source, ObservableSequence):
            self._source_disposer = source.subscribe(self._on_source_changed)

    def _detach(self) -> None:
        if self._source_disposer is not None:
            self._source_disposer()
            self._source_disposer = None

    def _on_sort_descriptions_changed(self, change: ListChange) -> None:
        self._refresh_or_mark_stale()

    def _on_source_changed(self, change: ListChange) -> None:
        if self._deferral.active:
            self._stale = True
            return

        action = change.action
        if action is ListChangeAction.ADD and len(change.new_items) == 1:
            self._on_item_added(change.new_index, change.new_items[0])
        elif action is ListChangeAction.REMOVE and len(change.old_items) == 1:
            self._on_item_removed(change.old_items[0])
        elif (
            action is ListChangeAction.REPLACE
            and len(change.old_items) == 1
            and len(change.new_items) == 1
        ):
            self._on_item_removed(change.old_items[0])
            self._on_item_added(change.new_index, change.new_items[0])
        elif action is ListChangeAction.MOVE and len(change.old_items) == 1:
            self._on_item_moved(change.new_index, change.old_items[0])
        else:
            if action is not ListChangeAction.RESET:
                logger.debug(
                    "%s of %d items cannot be applied incrementally, rebuilding",
                    action.value, max(len(change.new_items), len(change.old_items)),
                )
            self._rebuild()

    # --- View maintenance ---

    def _rebuild(self) -> None:
        current = self._current
        if self._filter is None:
            view = list(self._source)
        else:
            view = [item for item in self._source if self._filter(item)]
        # list.sort is stable: full ties keep source order
        view.sort(key=self._comparator.key)
        self._view = view
        self._groups.rebuild(view, self._group_description)
        self._stale = False
        logger.debug(
            "Rebuilt view: %d of %d source items, %d groups",
            len(view), len(self._source), len(self._groups),
        )
        self._emit(CollectionChange.RESET, 0)
        self._restore_current(current)

    def _on_item_added(
        self, source_index: int, item: T, position: dict[int, int] | None = None
    ) -> bool:
        if self._filter is not None and not self._filter(item):
            return False
        compare = self._comparator.compare
        precedes = self._tie_break(source_index, position)
        index = insertion_point(self._view, item, compare, precedes)
        self._view.insert(index, item)
        self._groups.add(item, self._view, compare, precedes)
        self._emit(CollectionChange.ITEM_INSERTED, index)
        return True

    def _on_item_removed(self, item: T) -> bool:
        index = identity_index(self._view, item)
        if index < 0:
            return False
        self._remove_at(index)
        return True

    def _on_item_moved(self, new_index: int, item: T) -> None:
        was_current = self._current is not None and self._current is item
        index = identity_index(self._view, item)
        if index >= 0:
            self._remove_at(index, keep_current=was_current)
        self._on_item_added(new_index, item)
        if was_current and identity_index(self._view, item) < 0:
            self._set_current(None)

    def _remove_at(self, index: int, keep_current: bool = False) -> None:
        item = self._view.pop(index)
        self._groups.discard(item, self._view)
        self._emit(CollectionChange.ITEM_REMOVED, index)
        if (
            not keep_current
            and self._current is item
            and identity_index(self._view, item) < 0
        ):
            self._set_current(None)

    def _tie_break(self, source_index: int, position: dict[int, int] | None = None):
        """Predicate: does a tied view item come before ``source_index`` in the source?"""
        if position is not None:
            return lambda other: position[id(other)] < source_index
        if source_index >= len(self._source) - 1:
            return lambda other: True
        if source_index <= 0:
            return lambda other: False

        prefix = None

        def precedes(other) -> bool:
            nonlocal prefix
            if prefix is None:
                prefix = {id(x) for x in islice(self._source, source_index)}
            return id(other) in prefix

        return precedes

    def _reevaluate_filter(self) -> None:
        # Shrink: drop what the new filter rejects.
        if self._filter is not None:
            index = 0
            while index < len(self._view):
                if self._filter(self._view[index]):
                    index += 1
                else:
                    self._remove_at(index)

        # Grow: admit source items that were missing and now pass.
        present = Counter(id(item) for item in self._view)
        position: dict[int, int] = {}
        for source_index, item in enumerate(self._source):
            position.setdefault(id(item), source_index)
        for source_index, item in enumerate(self._source):
            key = id(item)
            if present[key] > 0:
                present[key] -= 1
                continue
            self._on_item_added(source_index, item, position)

    # --- Current item ---

    @property
    def current_item(self) -> T | None:
        return self._current

    @property
    def current_position(self) -> int:
        if self._current is None:
            return -1
        return identity_index(self._view, self._current)

    def move_current_to(self, item: T | None) -> bool:
        """Point the cursor at ``item``; clears it when ``item`` is not in view."""
        if item is None or identity_index(self._view, item) < 0:
            self._set_current(None)
            return False
        self._set_current(item)
        return True

    def move_current_to_position(self, index: int) -> bool:
        if index == -1:
            self._set_current(None)
            return False
        if not 0 <= index < len(self._view):
            raise IndexError(f"position {index} is outside the view")
        self._set_current(self._view[index])
        return True

    def move_current_to_first(self) -> bool:
        return self._move_current_by_position(0)

    def move_current_to_last(self) -> bool:
        return self._move_current_by_position(len(self._view) - 1)

    def move_current_to_next(self) -> bool:
        return self._move_current_by_position(self.current_position + 1)

    def move_current_to_previous(self) -> bool:
        if self._current is None:
            return False
        return self._move_current_by_position(self.current_position - 1)

    def _move_current_by_position(self, index: int) -> bool:
        if 0 <= index < len(self._view):
            self._set_current(self._view[index])
            return True
        self._set_current(None)
        return False

    def _restore_current(self, item: T | None) -> None:
        if item is not None and identity_index(self._view, item) < 0:
            self._set_current(None)

    def _set_current(self, item: T | None) -> None:
        if item is self._current:
            return
        self._current = item
        self._on_property_changed("current_item")

    # --- Incremental loading pass-through ---

    @property
    def has_more_items(self) -> bool:
        source = self._source
        return isinstance(source, SupportsIncrementalLoading) and bool(source.has_more_items)

    def load_more_items(self, count: int) -> Any:
        """Ask the source for up to ``count`` more items."""
        source = self._source
        if not isinstance(source, SupportsIncrementalLoading):
            raise TypeError(f"{type(source).__name__} does not support incremental loading")
        return source.load_more_items(count)

    # --- Notifications ---

    def _emit(self, change: CollectionChange, index: int) -> None:
        self.vector_changed.emit(VectorChangedEvent(change, index))

    def _on_property_changed(self, name: str) -> None:
        self.property_changed.emit(PropertyChangedEvent(name))

    # --- Lifecycle ---

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Unsubscribe from the source and the sort rules. Terminal."""
        if self._disposed:
            return
        self._disposed = True
        self._filter = None
        if self._sort_disposer is not None:
            self._sort_disposer()
            self._sort_disposer = None
        self._detach()
        self.vector_changed.dispose()
        self.property_changed.dispose()

    def __enter__(self) -> CollectionView[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._view)} items"
        return f"CollectionView({state})"
