"""Tests for SortDescription, CompositeComparator and insertion_point."""

import dataclasses

import pytest

from collectionview import CompositeComparator, SortDescription, SortDirection, natural_compare
from collectionview.sorting import insertion_point


class TestNaturalCompare:
    def test_three_way(self):
        assert natural_compare(1, 2) == -1
        assert natural_compare(2, 1) == 1
        assert natural_compare("a", "a") == 0

    def test_none_sorts_first(self):
        assert natural_compare(None, 0) == -1
        assert natural_compare(0, None) == 1
        assert natural_compare(None, None) == 0


class TestSortDescription:
    def test_ascending(self):
        desc = SortDescription(len)
        assert desc.compare("a", "bb") == -1
        assert desc.compare("bb", "a") == 1
        assert desc.compare("aa", "bb") == 0

    def test_descending_negates(self):
        desc = SortDescription(len, direction=SortDirection.DESCENDING)
        assert desc.compare("a", "bb") == 1

    def test_custom_comparer(self):
        by_abs = SortDescription(lambda x: x, comparer=lambda a, b: natural_compare(abs(a), abs(b)))
        assert by_abs.compare(-3, 2) == 1

    def test_reversed(self):
        desc = SortDescription(len)
        assert desc.reversed().direction is SortDirection.DESCENDING
        assert desc.reversed().reversed() == desc

    def test_immutable(self):
        desc = SortDescription(len)
        with pytest.raises(dataclasses.FrozenInstanceError):
            desc.direction = SortDirection.DESCENDING


class TestCompositeComparator:
    def test_no_rules_ties(self):
        assert CompositeComparator().compare(5, 1) == 0

    def test_first_rule_wins(self):
        cmp = CompositeComparator(sorts=[SortDescription(len), SortDescription(lambda s: s)])
        assert cmp.compare("zz", "a") == 1
        assert cmp.compare("b", "a") == 1
        assert cmp.compare("a", "a") == 0

    def test_group_takes_precedence(self):
        parity = SortDescription(lambda x: x % 2)
        cmp = CompositeComparator(parity, [SortDescription(lambda x: x)])
        # even before odd regardless of value
        assert cmp.compare(10, 1) == -1
        assert cmp.compare(1, 3) == -1

    def test_descending_group(self):
        parity = SortDescription(lambda x: x % 2, direction=SortDirection.DESCENDING)
        cmp = CompositeComparator(parity, [SortDescription(lambda x: x)])
        assert cmp.compare(10, 1) == 1

    def test_antisymmetric(self):
        cmp = CompositeComparator(sorts=[SortDescription(lambda x: x[0]), SortDescription(lambda x: x[1])])
        items = [(1, 2), (1, 3), (0, 9), (1, 2)]
        for a in items:
            for b in items:
                assert cmp.compare(a, b) == -cmp.compare(b, a)

    def test_sees_later_rule_edits(self):
        sorts = []
        cmp = CompositeComparator(sorts=sorts)
        assert cmp.compare(2, 1) == 0
        sorts.append(SortDescription(lambda x: x))
        assert cmp.compare(2, 1) == 1

    def test_key_sorts(self):
        cmp = CompositeComparator(sorts=[SortDescription(lambda x: x, direction=SortDirection.DESCENDING)])
        assert sorted([3, 1, 2], key=cmp.key) == [3, 2, 1]


class TestInsertionPoint:
    def test_after_ties_by_default(self):
        assert insertion_point([1, 2, 2, 2, 5], 2, natural_compare) == 4

    def test_tie_break_predicate(self):
        seq = [(2, "a"), (2, "b"), (2, "c")]
        by_first = lambda a, b: natural_compare(a[0], b[0])  # noqa: E731
        assert insertion_point(seq, (2, "x"), by_first, lambda r: r[1] < "b") == 1
        assert insertion_point(seq, (2, "x"), by_first, lambda r: False) == 0
        assert insertion_point(seq, (2, "x"), by_first, lambda r: True) == 3

    def test_missing_value(self):
        seq = [1, 3, 5]
        assert insertion_point(seq, 4, natural_compare) == 2
        assert insertion_point(seq, 0, natural_compare) == 0
        assert insertion_point(seq, 9, natural_compare) == 3

    def test_empty(self):
        assert insertion_point([], 1, natural_compare, lambda x: True) == 0

    def test_descending_rule(self):
        desc = CompositeComparator(sorts=[SortDescription(lambda x: x, direction=SortDirection.DESCENDING)])
        assert insertion_point([9, 5, 1], 6, desc.compare) == 1
