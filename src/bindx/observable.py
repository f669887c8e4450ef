"""Observable list, a sequence that reports every structural change.

Each mutating call emits exactly one Mutation (none for no-ops) describing a
single contiguous replace-range. Replaying the mutations as slice
assignments against a copy of the old contents reproduces the new contents:

    mirror[m.start:m.start + m.delete_count] = m.items

Slots may be empty ("holes"), e.g. after growing ``length`` or deleting an
index. Holes read as None but are reported as HOLE in mutations and
snapshot(), so a mirror stays exact.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, TypeVar

from bindx.errors import ListAccessError
from bindx.listeners import Listeners

T = TypeVar("T")
U = TypeVar("U")


class _Hole:
    __slots__ = ()

    def __repr__(self) -> str:
        return "HOLE"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return "HOLE"


HOLE: Any = _Hole()
_MISSING: Any = object()


@dataclass
class Mutation(Generic[T]):
    """Replace ``delete_count`` items at ``start`` with ``items``."""

    start: int
    delete_count: int
    items: list
    target: Any = field(default=None, compare=False, repr=False)


class ObservableList(Generic[T]):
    """A list that emits a Mutation for every structural change.

    Subscript access follows Python conventions for reads (negative indices
    count from the end, out of range raises IndexError). Assigning past the
    end grows the list, filling the gap with holes. ``del lst[i]`` leaves a
    hole instead of shifting the following items; use splice() to remove.
    """

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._data: list = list(items) if items is not None else []
        self._observers: Listeners[Mutation[T]] = Listeners(self, "mutate")

    @classmethod
    def from_iterable(
        cls, source: Iterable[Any], map_fn: Callable[[Any, int], U] | None = None
    ) -> ObservableList:
        if map_fn is None:
            return cls(source)
        return cls(map_fn(value, index) for index, value in enumerate(source))

    @classmethod
    def of(cls, *items: T) -> ObservableList[T]:
        return cls(items)

    @classmethod
    def with_length(cls, length: int) -> ObservableList:
        """A list of ``length`` holes."""
        result = cls()
        result._data = [HOLE] * _to_length(length)
        return result

    @property
    def observers(self) -> Listeners[Mutation[T]]:
        return self._observers

    def _notify(self, start: int, delete_count: int, items: list) -> None:
        self._observers.trigger(Mutation(start, delete_count, items, self))

    # --- Read operations ---

    @property
    def length(self) -> int:
        return len(self._data)

    @length.setter
    def length(self, value: Any) -> None:
        new_length = _to_length(value)
        old_length = len(self._data)
        if new_length == old_length:
            return
        if new_length < old_length:
            del self._data[new_length:]
        else:
            self._data.extend([HOLE] * (new_length - old_length))
        self._notify(
            min(old_length, new_length),
            max(old_length - new_length, 0),
            [HOLE] * max(new_length - old_length, 0),
        )

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, key):
        if isinstance(key, slice):
            return [_value(v) for v in self._data[key]]
        return _value(self._data[_index(key)])

    def get(self, index: int, default: Any = None) -> Any:
        """Item at ``index``, or ``default`` for holes and missing indices."""
        if not self.has(index):
            return default
        return self._data[index]

    def has(self, index: int) -> bool:
        """True if ``index`` holds a value, False for holes and out of range."""
        return (
            isinstance(index, int)
            and 0 <= index < len(self._data)
            and self._data[index] is not HOLE
        )

    def __iter__(self) -> Iterator[T]:
        return (_value(v) for v in list(self._data))

    def values(self) -> Iterator[T]:
        return iter(self)

    def keys(self) -> Iterator[int]:
        return iter(range(len(self._data)))

    def entries(self) -> Iterator[tuple[int, T]]:
        return enumerate(self)

    def __contains__(self, item: object) -> bool:
        return any(_same(value, item) for value in self)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObservableList):
            return self._data == other._data
        if isinstance(other, (list, tuple)):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def snapshot(self) -> list:
        """A plain copy of the contents, holes included."""
        return list(self._data)

    def index_of(self, item: Any, from_index: int = 0) -> int:
        start = from_index if from_index >= 0 else max(len(self._data) + from_index, 0)
        for index in range(start, len(self._data)):
            if self._data[index] is not HOLE and _same(self._data[index], item):
                return index
        return -1

    def last_index_of(self, item: Any, from_index: int | None = None) -> int:
        if from_index is None:
            from_index = len(self._data) - 1
        elif from_index < 0:
            from_index = len(self._data) + from_index
        for index in range(min(from_index, len(self._data) - 1), -1, -1):
            if self._data[index] is not HOLE and _same(self._data[index], item):
                return index
        return -1

    def find(self, predicate: Callable[[T], Any]) -> T | None:
        for value in self:
            if predicate(value):
                return value
        return None

    def find_index(self, predicate: Callable[[T], Any]) -> int:
        for index, value in enumerate(self):
            if predicate(value):
                return index
        return -1

    def for_each(self, callback: Callable[[T, int], Any]) -> None:
        for index, value in enumerate(self):
            callback(value, index)

    def join(self, separator: str = ",") -> str:
        return separator.join("" if v is None else str(v) for v in self)

    # --- Write operations (notify) ---

    def __setitem__(self, key, value: T) -> None:
        if isinstance(key, slice):
            start, stop, step = key.indices(len(self._data))
            if step != 1:
                raise ValueError("Extended slice assignment is not supported")
            stop = max(stop, start)
            items = list(value)
            if stop == start and not items:
                return
            self._data[start:stop] = items
            self._notify(start, stop - start, items)
            return
        self.set(self._normalized(key), value)

    def set(self, index: int, value: T) -> None:
        if not isinstance(index, int) or index < 0:
            raise IndexError(f"Invalid list index {index!r}")
        length = len(self._data)
        if index >= length:
            gap = [HOLE] * (index - length)
            self._data.extend(gap)
            self._data.append(value)
            self._notify(length, 0, gap + [value])
        else:
            self._data[index] = value
            self._notify(index, 1, [value])

    def __delitem__(self, key) -> None:
        if isinstance(key, slice):
            raise TypeError("Slice deletion is not supported, use splice()")
        index = self._normalized(key)
        if index >= len(self._data):
            raise IndexError("list index out of range")
        self.delete(index)

    def delete(self, index: int) -> bool:
        """Empty the slot at ``index``, leaving a hole. Out of range is a no-op."""
        if not isinstance(index, int) or not 0 <= index < len(self._data):
            return False
        self._data[index] = HOLE
        self._notify(index, 1, [HOLE])
        return True

    def push(self, *items: T) -> int:
        old_length = len(self._data)
        self._data.extend(items)
        if items:
            self._notify(old_length, 0, list(items))
        return len(self._data)

    append = push

    def extend(self, items: Iterable[T]) -> int:
        return self.push(*items)

    def pop(self) -> T | None:
        if not self._data:
            return None
        result = self._data.pop()
        self._notify(len(self._data), 1, [])
        return _value(result)

    def shift(self) -> T | None:
        if not self._data:
            return None
        result = self._data.pop(0)
        self._notify(0, 1, [])
        return _value(result)

    def unshift(self, *items: T) -> int:
        self._data[0:0] = items
        if items:
            self._notify(0, 0, list(items))
        return len(self._data)

    def splice(self, start: Any = _MISSING, delete_count: Any = _MISSING, *items: T) -> list:
        """Remove ``delete_count`` items at ``start`` and insert ``items`` there.

        Arguments are coerced like array indices: numeric strings are parsed,
        fractions round half up, None/NaN/non-numeric start counts as 0 and a
        negative start counts from the end. The call is a no-op when start is
        past the end, or when delete_count is passed explicitly as None or as
        a negative number. An omitted or infinite delete_count trims to the end.
        """
        if start is _MISSING:
            return []
        old_length = len(self._data)
        start_index = to_int(start)
        if start_index >= old_length:
            return []
        if delete_count is not _MISSING and (delete_count is None or to_int(delete_count) < 0):
            return []
        final_start = int(max(old_length + start_index, 0)) if start_index < 0 else int(start_index)
        available = old_length - final_start
        if delete_count is _MISSING:
            final_delete_count = available
        else:
            final_delete_count = int(min(to_int(delete_count), available))
        end = final_start + final_delete_count
        removed = self._data[final_start:end]
        self._data[final_start:end] = items
        if final_delete_count or items:
            self._notify(final_start, final_delete_count, list(items))
        return [_value(v) for v in removed]

    def clear(self) -> None:
        self.splice(0)

    def _normalized(self, key: Any) -> int:
        index = _index(key)
        if index < 0:
            index += len(self._data)
            if index < 0:
                raise IndexError("list index out of range")
        return index

    def __repr__(self) -> str:
        return f"ObservableList({self._data!r})"


def list_observers(target: ObservableList[T]) -> Listeners[Mutation[T]]:
    """The mutation listeners of an ObservableList."""
    return target.observers


def to_int(value: Any) -> int | float:
    """Coerce a splice argument to an integer (or ±inf)."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    elif isinstance(value, float):
        number = value
    else:
        return 0
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return number
    return math.floor(number + 0.5)


def _to_length(value: Any) -> int:
    if isinstance(value, str):
        try:
            number: Any = float(value.strip()) if value.strip() else 0
        except ValueError:
            raise ListAccessError(f"Invalid list length {value!r}") from None
    elif isinstance(value, (int, float)):
        number = value
    else:
        raise ListAccessError(f"Invalid list length {value!r}")
    if isinstance(number, float) and (not math.isfinite(number) or not number.is_integer()):
        raise ListAccessError(f"Invalid list length {value!r}")
    if number < 0:
        raise ListAccessError(f"Invalid list length {value!r}")
    return int(number)


def _index(key: Any) -> int:
    if not isinstance(key, int):
        raise TypeError(f"list indices must be integers or slices, not {type(key).__name__}")
    return key


def _value(item: Any) -> Any:
    return None if item is HOLE else item


def _same(a: Any, b: Any) -> bool:
    return a is b or a == b
