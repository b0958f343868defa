"""Sort rules and the composite comparator built from them.

A SortDescription is one ordering rule: pull a key out of an item, compare
two keys, flip the sign for descending order. The CompositeComparator chains
an optional group rule (always first) with any number of sort rules.
"""

from __future__ import annotations

import bisect
import enum
import functools
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

Comparer = Callable[[Any, Any], int]


class SortDirection(enum.Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


def natural_compare(a: Any, b: Any) -> int:
    """Three-way compare using ``<``. ``None`` sorts before everything."""
    if a is None or b is None:
        return (a is not None) - (b is not None)
    if a < b:
        return -1
    if b < a:
        return 1
    return 0


@dataclass(frozen=True)
class SortDescription:
    """A single ordering rule: key extractor + key comparer + direction."""

    key: Callable[[Any], Any]
    comparer: Comparer = natural_compare
    direction: SortDirection = SortDirection.ASCENDING

    def compare(self, a: Any, b: Any) -> int:
        result = self.comparer(self.key(a), self.key(b))
        if self.direction is SortDirection.DESCENDING:
            return -result
        return result

    def reversed(self) -> SortDescription:
        if self.direction is SortDirection.ASCENDING:
            direction = SortDirection.DESCENDING
        else:
            direction = SortDirection.ASCENDING
        return SortDescription(self.key, self.comparer, direction)


class CompositeComparator:
    """Total order: group rule first, then each sort rule in declared order.

    Holds references, not copies, so later edits to ``sorts`` are seen.
    """

    __slots__ = ("group", "sorts")

    def __init__(
        self,
        group: SortDescription | None = None,
        sorts: Iterable[SortDescription] = (),
    ) -> None:
        self.group = group
        self.sorts = sorts

    def compare(self, a: Any, b: Any) -> int:
        if self.group is not None:
            result = self.group.compare(a, b)
            if result != 0:
                return result
        for desc in self.sorts:
            result = desc.compare(a, b)
            if result != 0:
                return result
        return 0

    @property
    def key(self):
        return functools.cmp_to_key(self.compare)


def insertion_point(
    seq: Sequence,
    item: Any,
    compare: Comparer,
    precedes: Callable[[Any], bool] | None = None,
) -> int:
    """Index that keeps ``seq`` sorted by ``compare`` after inserting ``item``.

    Among items tying with ``item``, it goes after those for which
    ``precedes`` is true. ``precedes`` must hold for a prefix of the tied
    run; without it the item goes after every tie.
    """
    key = functools.cmp_to_key(compare)
    target = key(item)
    lo = bisect.bisect_left(seq, target, key=key)
    hi = bisect.bisect_right(seq, target, lo, key=key)
    if lo == hi or precedes is None:
        return hi
    return bisect.bisect_left(seq, True, lo, hi, key=lambda x: not precedes(x))
