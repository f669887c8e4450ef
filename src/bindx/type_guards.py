"""Runtime type checks for bindable values.

Every binding path validates values against the declared type of the
property on the receiving side. Plain classes are checked with isinstance;
types that need more than that (protocols, value objects accepting several
representations) get a guard registered once at import time:

    type_guards.register(Color, lambda v: isinstance(v, (Color, str)))
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from bindx.errors import TypeMismatchError

logger = logging.getLogger("bindx.type_guards")

Guard = Callable[[Any], bool]


class TypeGuards:
    """Registry mapping a type to the predicate that accepts its values."""

    def __init__(self) -> None:
        self._guards: dict[type, Guard] = {}

    def register(self, type: type, guard: Guard, *, replace: bool = False) -> None:
        if not callable(guard):
            raise ValueError(f"Type guard for {type_name(type)} is not callable")
        if type in self._guards and not replace:
            raise ValueError(
                f"A type guard for {type_name(type)} is already registered. "
                "Pass replace=True to overwrite."
            )
        self._guards[type] = guard

    def unregister(self, type: type) -> None:
        self._guards.pop(type, None)

    def get(self, type: type) -> Guard | None:
        return self._guards.get(type)

    def __contains__(self, type: object) -> bool:
        return type in self._guards

    def is_valid(self, value: Any, type: Any, *, allow_none: bool = True) -> bool:
        if type is None or type is object or type is Any:
            return True
        if value is None:
            return allow_none
        if isinstance(type, tuple):
            return any(self.is_valid(value, t, allow_none=allow_none) for t in type)
        if _isinstance(value, type):
            return True
        guard = self._guards.get(type)
        if guard is None:
            return False
        try:
            return bool(guard(value))
        except Exception:
            logger.exception("Type guard for %s raised", type_name(type))
            return False

    def check(self, value: Any, type: Any, *, allow_none: bool = True) -> Any:
        """Return ``value`` if it is of ``type``, raise TypeMismatchError otherwise."""
        if not self.is_valid(value, type, allow_none=allow_none):
            raise TypeMismatchError(
                f'Expected value "{value}" to be of type {type_name(type)}, '
                f"but found {value_type_name(value)}."
            )
        return value


def _isinstance(value: Any, type: Any) -> bool:
    # bool is an int subclass, but a flag is not a number here
    if isinstance(value, bool) and type in (int, float):
        return False
    if type is float and isinstance(value, int):
        return True
    try:
        return isinstance(value, type)
    except TypeError:
        # subscripted generics and non-runtime protocols
        return False


def type_name(type: Any) -> str:
    if isinstance(type, tuple):
        return " or ".join(type_name(t) for t in type)
    return getattr(type, "__name__", repr(type))


def value_type_name(value: Any) -> str:
    if value is None:
        return "None"
    return type(value).__name__


type_guards = TypeGuards()


def check_type(value: Any, type: Any, *, allow_none: bool = True) -> Any:
    return type_guards.check(value, type, allow_none=allow_none)
