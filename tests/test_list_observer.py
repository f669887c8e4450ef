"""Tests for ListLikeObserver: uniform mutations over list and ObservableList sources."""

import pytest

from bindx.errors import ListAccessError
from bindx.list_observer import ListLikeObserver, get_diff, get_match_length
from bindx.observable import Mutation, ObservableList


def _observer():
    events = []
    return ListLikeObserver(events.append), events


def _replay(mirror, events):
    mirror = list(mirror)
    for m in events:
        mirror[m.start:m.start + m.delete_count] = m.items
    return mirror


class TestSource:
    def test_initial_list_reports_contents(self):
        observer, events = _observer()
        observer.source = [1, 2]
        assert events == [Mutation(0, 0, [1, 2])]

    def test_same_source_is_ignored(self):
        observer, events = _observer()
        source = [1]
        observer.source = source
        observer.source = source
        assert len(events) == 1

    def test_invalid_source(self):
        observer, _ = _observer()
        with pytest.raises(ListAccessError):
            observer.source = "abc"

    def test_forwards_observable_mutations(self):
        observer, events = _observer()
        lst = ObservableList([1])
        observer.source = lst
        lst.push(2)
        assert events == [Mutation(0, 0, [1]), Mutation(1, 0, [2])]

    def test_unsubscribes_previous_observable(self):
        observer, events = _observer()
        old = ObservableList([1])
        observer.source = old
        observer.source = [5]
        old.push(2)
        assert events[-1] == Mutation(0, 1, [5])
        assert len(events) == 2

    def test_none_source_clears(self):
        observer, events = _observer()
        observer.source = [1, 2]
        observer.source = None
        assert events[-1] == Mutation(0, 2, [])

    def test_dispose(self):
        observer, events = _observer()
        lst = ObservableList()
        observer.source = lst
        observer.dispose()
        lst.push(1)
        assert observer.source is None
        assert events == [Mutation(0, 0, [])]


class TestDiffLaw:
    """Replaying the reported mutations on a copy of A yields B."""

    CASES = [
        ([1, 2, 3], [1, 2, 3, 4]),
        ([1, 2, 3], [0, 1, 2, 3]),
        ([1, 2, 3], [1, 9, 8, 2, 3]),
        ([1, 2, 3, 4], [1, 4]),
        ([1, 2, 3], [2, 3]),
        ([1, 2, 3], [1, 5, 3]),
        ([1, 2, 3], [4, 5, 6]),
        ([1, 2, 3], [0, 1, 2, 3, 4]),
        ([1, 2, 3, 4], [2, 3]),
        ([], [1, 2]),
        ([1, 2], []),
        (["a", "b"], ["b", "a", "c"]),
    ]

    @pytest.mark.parametrize("old, new", CASES)
    def test_replay(self, old, new):
        observer, events = _observer()
        observer.source = old
        events.clear()
        observer.source = new
        assert _replay(old, events) == new

    def test_single_insertion_is_one_mutation(self):
        observer, events = _observer()
        observer.source = [1, 2, 3]
        events.clear()
        observer.source = [1, 9, 8, 2, 3]
        assert events == [Mutation(1, 0, [9, 8])]

    def test_single_removal_is_one_mutation(self):
        observer, events = _observer()
        observer.source = [1, 2, 3, 4]
        events.clear()
        observer.source = [1, 4]
        assert events == [Mutation(1, 2, [])]

    def test_equal_length_reports_changed_indices(self):
        observer, events = _observer()
        observer.source = [1, 2, 3]
        events.clear()
        observer.source = [1, 5, 6]
        assert events == [Mutation(1, 1, [5]), Mutation(2, 1, [6])]

    def test_two_insertions_fall_back_to_full_replacement(self):
        observer, events = _observer()
        observer.source = [1, 2, 3]
        events.clear()
        observer.source = [0, 1, 2, 3, 4]
        assert events == [Mutation(0, 3, [0, 1, 2, 3, 4])]

    def test_observable_to_list(self):
        observer, events = _observer()
        observer.source = ObservableList([1, 2])
        events.clear()
        observer.source = [3]
        assert events == [Mutation(0, 2, [3])]


class TestHelpers:
    def test_get_match_length(self):
        assert get_match_length([1, 2, 3], 0, [1, 2, 4], 0) == 2
        assert get_match_length([1, 2], 1, [0, 2], 1) == 1
        assert get_match_length([], 0, [1], 0) == 0

    def test_get_diff(self):
        assert get_diff([1, 2, 3], [1, 2]) == (2, 1)
        assert get_diff([1, 9, 2], [1, 2]) == (1, 1)
        assert get_diff([0, 1, 2, 3], [1, 3]) is None
