"""Tests for ObservableList change reporting and the source capabilities."""

import pytest

from collectionview import (
    ListChange,
    ListChangeAction,
    ObservableList,
    ObservableSequence,
    SupportsIncrementalLoading,
)


def _recorded(items=None):
    lst = ObservableList(items)
    log = []
    lst.subscribe(log.append)
    return lst, log


class TestReads:
    def test_basic_operations(self):
        lst = ObservableList([1, 2, 3])
        assert len(lst) == 3
        assert lst[0] == 1
        assert lst[-1] == 3
        assert list(lst) == [1, 2, 3]
        assert 2 in lst
        assert bool(lst) is True
        assert lst == [1, 2, 3]
        assert lst.index(3) == 2

    def test_empty(self):
        assert not ObservableList()


class TestSingleItemChanges:
    def test_append(self):
        lst, log = _recorded([1])
        lst.append(2)
        assert log == [ListChange.added(1, 2)]

    def test_insert(self):
        lst, log = _recorded([1, 3])
        lst.insert(1, 2)
        assert list(lst) == [1, 2, 3]
        assert log == [ListChange.added(1, 2)]

    def test_insert_negative_index(self):
        lst, log = _recorded([1, 3])
        lst.insert(-1, 2)
        assert list(lst) == [1, 2, 3]
        assert log[0].new_index == 1

    def test_pop(self):
        lst, log = _recorded([1, 2, 3])
        assert lst.pop() == 3
        assert lst.pop(0) == 1
        assert log == [ListChange.removed(2, 3), ListChange.removed(0, 1)]

    def test_remove_and_del(self):
        lst, log = _recorded([1, 2, 3])
        lst.remove(2)
        del lst[0]
        assert list(lst) == [3]
        assert log == [ListChange.removed(1, 2), ListChange.removed(0, 1)]

    def test_setitem(self):
        lst, log = _recorded([1, 2])
        lst[1] = 20
        assert log == [ListChange.replaced(1, 2, 20)]
        assert log[0].action is ListChangeAction.REPLACE

    def test_move(self):
        lst, log = _recorded(["a", "b", "c"])
        lst.move(0, 2)
        assert list(lst) == ["b", "c", "a"]
        assert log == [ListChange.moved(0, 2, "a")]

    def test_move_to_same_index_is_silent(self):
        lst, log = _recorded(["a", "b"])
        lst.move(1, 1)
        assert log == []

    def test_out_of_range(self):
        lst, log = _recorded([1])
        with pytest.raises(IndexError):
            lst.pop(5)
        with pytest.raises(IndexError):
            lst[3] = 0
        assert log == []


class TestBulkChanges:
    def test_extend_reports_one_multi_item_add(self):
        lst, log = _recorded([1])
        lst.extend([2, 3])
        assert log == [ListChange.added(1, 2, 3)]

    def test_extend_empty_is_silent(self):
        lst, log = _recorded([1])
        lst.extend([])
        assert log == []

    def test_clear_reset_sort(self):
        lst, log = _recorded([3, 1, 2])
        lst.sort()
        assert list(lst) == [1, 2, 3]
        lst.reset([9])
        assert list(lst) == [9]
        lst.clear()
        assert list(lst) == []
        assert [c.action for c in log] == [ListChangeAction.RESET] * 3

    def test_slice_assignment_resets(self):
        lst, log = _recorded([1, 2, 3])
        lst[0:2] = [7]
        del lst[:]
        assert [c.action for c in log] == [ListChangeAction.RESET] * 2

    def test_unsubscribe(self):
        lst = ObservableList()
        log = []
        unsub = lst.subscribe(log.append)
        unsub()
        lst.append(1)
        assert log == []


class TestCapabilities:
    def test_observable_list_is_observable(self):
        assert isinstance(ObservableList(), ObservableSequence)

    def test_plain_list_is_snapshot(self):
        assert not isinstance([1, 2], ObservableSequence)

    def test_incremental_loading(self):
        class Paged:
            has_more_items = True

            def load_more_items(self, count):
                return count

        assert isinstance(Paged(), SupportsIncrementalLoading)
        assert not isinstance(ObservableList(), SupportsIncrementalLoading)
