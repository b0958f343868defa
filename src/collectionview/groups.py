"""Group index: the view partitioned into buckets sharing a group key.

Groups are kept sorted by key (the group rule's comparer and direction),
members in view order. Groups whose keys tie under the comparer keep the
order in which their first members appear in the view.

Group keys must be hashable.
"""

from __future__ import annotations

import bisect
import functools
from typing import Any, Callable, Iterator, Sequence

from collectionview.sorting import Comparer, SortDescription, SortDirection, insertion_point


def identity_index(seq: Sequence, item: Any, start: int = 0) -> int:
    """Index of ``item`` in ``seq`` compared by identity, or -1."""
    for index in range(start, len(seq)):
        if seq[index] is item:
            return index
    return -1


class CollectionGroup:
    """One bucket of the view: a key and its members in view order."""

    __slots__ = ("key", "items")

    def __init__(self, key: Any, items: list | None = None) -> None:
        self.key = key
        self.items: list = items if items is not None else []

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator:
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def __repr__(self) -> str:
        return f"CollectionGroup({self.key!r}, {self.items!r})"


class GroupIndex:
    """Sorted sequence of CollectionGroup. Empty while no group rule is set."""

    __slots__ = ("_groups", "_by_key", "_description")

    def __init__(self) -> None:
        self._groups: list[CollectionGroup] = []
        self._by_key: dict[Any, CollectionGroup] = {}
        self._description: SortDescription | None = None

    @property
    def description(self) -> SortDescription | None:
        return self._description

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[CollectionGroup]:
        return iter(self._groups)

    def __getitem__(self, index) -> CollectionGroup:
        return self._groups[index]

    def keys(self) -> list:
        return [group.key for group in self._groups]

    def clear(self) -> None:
        self._groups.clear()
        self._by_key.clear()

    def rebuild(self, view: Sequence, description: SortDescription | None) -> None:
        """Partition an already-sorted view from scratch."""
        self.clear()
        self._description = description
        if description is None:
            return

        buckets: dict[Any, list] = {}
        for item in view:
            buckets.setdefault(description.key(item), []).append(item)

        for key, items in buckets.items():
            self._insert_group(CollectionGroup(key, items))

    def add(
        self,
        item: Any,
        view: Sequence,
        compare: Comparer,
        precedes: Callable[[Any], bool] | None = None,
    ) -> None:
        """Record ``item``, already inserted into ``view``.

        ``compare`` and ``precedes`` are the view's order and tie-break, so
        the item takes the same slot among its group's members as in the view.
        """
        if self._description is None:
            return
        key = self._description.key(item)
        group = self._by_key.get(key)
        if group is None:
            self._insert_group(CollectionGroup(key, [item]), view)
            return
        slot = insertion_point(group.items, item, compare, precedes)
        group.items.insert(slot, item)
        if slot == 0:
            self._reposition(group, view)

    def discard(self, item: Any, view: Sequence | None = None) -> None:
        """Forget ``item``; drops its group once the group is empty.

        ``view`` is the view after the removal, used to keep tied groups in
        order when the group's first member changes.
        """
        if self._description is None:
            return
        group = self.group_of(item)
        if group is None:
            return
        slot = identity_index(group.items, item)
        del group.items[slot]
        if not group.items:
            del self._groups[identity_index(self._groups, group)]
            del self._by_key[group.key]
        elif slot == 0 and view is not None:
            self._reposition(group, view)

    def group_of(self, item: Any) -> CollectionGroup | None:
        if self._description is None:
            return None
        group = self._by_key.get(self._description.key(item))
        if group is not None and identity_index(group.items, item) >= 0:
            return group
        # Key changed since the item was grouped
        for group in self._groups:
            if identity_index(group.items, item) >= 0:
                return group
        return None

    def _compare_groups(self, a: CollectionGroup, b: CollectionGroup) -> int:
        result = self._description.comparer(a.key, b.key)
        if self._description.direction is SortDirection.DESCENDING:
            return -result
        return result

    def _insert_group(self, group: CollectionGroup, view: Sequence | None = None) -> None:
        key = functools.cmp_to_key(self._compare_groups)
        target = key(group)
        lo = bisect.bisect_left(self._groups, target, key=key)
        index = bisect.bisect_right(self._groups, target, lo, key=key)
        if view is not None and lo < index:
            # Tied groups stay in order of their first member in the view
            first = identity_index(view, group.items[0])
            index = bisect.bisect_left(
                self._groups, True, lo, index,
                key=lambda g: identity_index(view, g.items[0]) > first,
            )
        self._groups.insert(index, group)
        self._by_key[group.key] = group

    def _reposition(self, group: CollectionGroup, view: Sequence) -> None:
        del self._groups[identity_index(self._groups, group)]
        self._insert_group(group, view)

    def __repr__(self) -> str:
        return f"GroupIndex({self._groups!r})"
