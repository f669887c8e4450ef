"""Bindable properties.

A Property stores its value per instance, type-checks assignments and fires
a ``<name>_changed`` ChangeEvent through the owner's ``trigger`` whenever
the value actually changes. That event is what makes a property a valid
binding source.

    class Person(EventEmitter):
        name = Property(str, default="")
        age = Property(guard=lambda v: isinstance(v, int) and v >= 0)
        tags = Property(list, equals="shallow")

By default only the same object, or an equal number or string of the same
type, counts as unchanged. The ``equals`` option relaxes that, see equals().
"""

from __future__ import annotations

import inspect
import math
from typing import Any, Callable, Literal, Union

from bindx.errors import BindingError, TypeMismatchError
from bindx.listeners import ChangeEvent, change_event
from bindx.observable import ObservableList
from bindx.type_guards import type_guards

CompareMode = Union[Literal["strict", "shallow", "auto"], Callable[[Any, Any], bool]]
_MODES = ("strict", "shallow", "auto")
_SCALARS = (int, float, complex, str, bytes)


class Property:

    def __init__(
        self,
        type: Any = None,
        *,
        guard: Callable[[Any], bool] | None = None,
        default: Any = None,
        nullable: bool = True,
        equals: CompareMode = "strict",
    ) -> None:
        if equals not in _MODES and not callable(equals):
            raise ValueError(f"Invalid compare mode {equals!r}")
        self.type = type
        self.guard = guard
        self.default = default
        self.nullable = nullable
        self.equals = equals
        self.name = ""
        self.event = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.event = change_event(name)

    @property
    def checked(self) -> bool:
        """False if values of any type are accepted."""
        return self.type is not None or self.guard is not None

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.name, self.default)

    def __set__(self, instance: Any, value: Any) -> None:
        current = instance.__dict__.get(self.name, self.default)
        if equals(current, value, self.equals):
            return
        try:
            self.check(value)
        except TypeMismatchError as ex:
            raise TypeMismatchError(f'Failed to set property "{self.name}": {ex}') from ex
        instance.__dict__[self.name] = value
        trigger = getattr(instance, "trigger", None)
        if callable(trigger):
            trigger(self.event, ChangeEvent(instance, self.event, value))

    def is_valid(self, value: Any) -> bool:
        if value is None:
            return self.nullable
        if self.guard is not None:
            return bool(self.guard(value))
        return type_guards.is_valid(value, self.type)

    def check(self, value: Any) -> Any:
        if value is None and not self.nullable:
            raise TypeMismatchError("Value may not be None.")
        if self.guard is not None:
            if value is not None and not self.guard(value):
                raise TypeMismatchError(f'Type guard check failed for value "{value}".')
            return value
        return type_guards.check(value, self.type)

    def __repr__(self) -> str:
        return f"Property({self.name!r})"


def property_descriptor(obj: Any, name: str) -> Property | None:
    """The Property declared as ``name`` on ``obj`` (an instance or class), if any."""
    owner = obj if inspect.isclass(obj) else type(obj)
    try:
        attr = inspect.getattr_static(owner, name)
    except AttributeError:
        return None
    return attr if isinstance(attr, Property) else None


def get_property_type(obj: Any, name: str) -> Any:
    """Declared type of property ``name``, None if undeclared or unchecked."""
    descriptor = property_descriptor(obj, name)
    return descriptor.type if descriptor is not None else None


def equals(a: Any, b: Any, mode: CompareMode = "strict") -> bool:
    """True if ``a`` and ``b`` count as the same property value.

    "strict"   identity, or equality for numbers and strings of the
               same type (NaN equals NaN)
    "shallow"  same type and same items, compared by identity, for
               sequences, dicts and plain objects
    "auto"     same type and ``a == b``
    callable   ``mode(a, b)``, which must return a bool
    """
    if _strict(a, b):
        return True
    if callable(mode):
        result = mode(a, b)
        if not isinstance(result, bool):
            raise BindingError(f"Invalid return value of compare function: {result!r} is not a bool")
        return result
    if mode == "shallow":
        return _shallow(a, b)
    if mode == "auto":
        return _auto(a, b)
    if mode != "strict":
        raise ValueError(f"Invalid compare mode {mode!r}")
    return False


def _strict(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _SCALARS):
        return False
    if isinstance(a, float) and math.isnan(a) and math.isnan(b):
        return True
    return a == b


def _shallow(a: Any, b: Any) -> bool:
    if a is None or b is None or type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(a[key] is b[key] for key in a)
    if isinstance(a, (list, tuple, ObservableList)):
        return len(a) == len(b) and all(x is y for x, y in zip(a, b))
    if isinstance(getattr(a, "__dict__", None), dict):
        return _shallow(vars(a), vars(b))
    return False


def _auto(a: Any, b: Any) -> bool:
    if type(a) is not type(b):
        return False
    try:
        return bool(a == b)
    except Exception:
        # ambiguous comparisons (e.g. arrays) count as a change
        return False
