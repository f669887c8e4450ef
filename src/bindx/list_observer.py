"""Uniform mutation stream over a plain list or an ObservableList.

A ListLikeObserver forwards the Mutations of an ObservableList source to a
single callback. When the source is replaced, it first reports the
difference between the old and the new contents, so a consumer that mirrors
the source never has to re-read it.

Replacing one plain list with another is reported as a single contiguous
change when one exists (equal length: one replacement per changed index).
Anything else, such as two separate insertions, is reported as replacing
everything.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Sequence, TypeVar

from bindx.errors import ListAccessError
from bindx.observable import Mutation, ObservableList

T = TypeVar("T")

ListLike = ObservableList | list


class ListLikeObserver(Generic[T]):

    def __init__(self, callback: Callable[[Mutation[T]], Any]) -> None:
        self._callback = callback
        self._source: ListLike | None = None

    @property
    def source(self) -> ListLike | None:
        return self._source

    @source.setter
    def source(self, value: ListLike | None) -> None:
        if value is self._source:
            return
        if value is not None and not isinstance(value, (ObservableList, list)):
            raise ListAccessError(f"{value!r} is not an ObservableList or list")
        if isinstance(self._source, ObservableList):
            self._source.observers.remove_listener(self._callback)
        previous = self._source
        self._source = value
        self._auto_update(previous)
        if isinstance(value, ObservableList):
            value.observers.add_listener(self._callback)

    def dispose(self) -> None:
        """Detach from an ObservableList source without reporting anything."""
        if isinstance(self._source, ObservableList):
            self._source.observers.remove_listener(self._callback)
        self._source = None

    def _auto_update(self, previous: ListLike | None) -> None:
        source = self._source
        if not (isinstance(source, list) and isinstance(previous, list)):
            target = source if source is not None else []
            self._callback(Mutation(
                start=0,
                delete_count=len(previous) if previous is not None else 0,
                items=_contents(source),
                target=target,
            ))
            return
        if len(source) == len(previous):
            for index, value in enumerate(source):
                if not _same(value, previous[index]):
                    self._callback(Mutation(index, 1, [value], source))
            return
        if len(source) > len(previous):
            diff = get_diff(source, previous)
            if diff:
                start, count = diff
                self._callback(Mutation(start, 0, source[start:start + count], source))
                return
        if len(source) < len(previous):
            diff = get_diff(previous, source)
            if diff:
                start, count = diff
                self._callback(Mutation(start, count, [], source))
                return
        self._callback(Mutation(0, len(previous), list(source), source))


def get_diff(longer: Sequence, shorter: Sequence) -> tuple[int, int] | None:
    """The single range ``(start, count)`` present in ``longer`` but not ``shorter``.

    Returns None if the lists differ by more than one contiguous range.
    Assumes ``len(longer) > len(shorter)``.
    """
    start = get_match_length(shorter, 0, longer, 0)
    if start == len(shorter):
        return start, len(longer) - start
    next_match = _index_of(longer, shorter[start], start)
    if next_match < 0:
        return None
    count = next_match - start
    tail = get_match_length(shorter, start, longer, start + count)
    if start + count + tail == len(longer) and start + tail == len(shorter):
        return start, count
    return None


def get_match_length(items_a: Sequence, offset_a: int, items_b: Sequence, offset_b: int) -> int:
    """Number of equal items in both sequences from the given offsets on."""
    index_a, index_b = offset_a, offset_b
    while index_a < len(items_a) and index_b < len(items_b):
        if not _same(items_a[index_a], items_b[index_b]):
            break
        index_a += 1
        index_b += 1
    return index_a - offset_a


def _index_of(items: Sequence, value: Any, start: int) -> int:
    for index in range(start, len(items)):
        if _same(items[index], value):
            return index
    return -1


def _contents(source: ListLike | None) -> list:
    if source is None:
        return []
    if isinstance(source, ObservableList):
        return source.snapshot()
    return list(source)


def _same(a: Any, b: Any) -> bool:
    return a is b or a == b
