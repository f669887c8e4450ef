"""The ``@component`` class decorator.

    @component
    class Form(Composite):
        name = bind("#name.text", str)

        def __init__(self, **properties):
            super().__init__(**properties)
            self.append(TextInput(id="name"))

A component keeps its children private and resolves its bindings when it is
attached. For widgets with an ``append`` method the first call to it is the
attach signal; other hosts call attach() themselves.

get_by_id() gives a component typed access to one of its own children:

    name_input = get_by_id(TextInput)   # the child with id "name_input"
"""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable

from bindx._binding import _COMPONENT_ATTR, add_post_append_handler, attach, is_component, was_appended
from bindx.config import options
from bindx.errors import PropertyResolutionError, TypeMismatchError
from bindx.one_way import process_one_way_bindings
from bindx.type_guards import type_guards


def component(cls: type) -> type:
    if not inspect.isclass(cls):
        raise TypeError('Decorator "component" must be applied to a class')
    first = not getattr(cls, _COMPONENT_ATTR, False)
    setattr(cls, _COMPONENT_ATTR, True)
    cls._bindx_isolated = True
    if first:
        add_post_append_handler(cls, process_one_way_bindings)
    append = getattr(cls, "append", None)
    if callable(append) and not getattr(append, "_bindx_attaches", False):
        cls.append = _attaching(append)
    return cls


def _attaching(append):

    @functools.wraps(append)
    def wrapper(self, *widgets, **kwargs):
        result = append(self, *widgets, **kwargs)
        attach(self)
        return result

    wrapper._bindx_attaches = True
    return wrapper


class ById:
    """Descriptor created by get_by_id()."""

    def __init__(self, type: Any = None, *, guard: Callable[[Any], bool] | None = None) -> None:
        if type is None and guard is None and options().strict_mode:
            raise TypeMismatchError("get_by_id needs a type or a guard in strict mode.")
        self.type = type
        self.guard = guard
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        add_post_append_handler(owner, self._resolve)

    @property
    def _key(self) -> str:
        return f"_bindx_by_id_{self.name}"

    def __get__(self, base: Any, owner: type | None = None) -> Any:
        if base is None:
            return self
        if not is_component(base):
            raise self._error(f"{type(base).__name__} is not a @component")
        if not was_appended(base):
            raise self._error("no widgets have been appended yet.")
        widget = base.__dict__.get(self._key)
        if widget is None:
            raise self._error("the widget was not resolved.")
        return widget

    def __set__(self, base: Any, value: Any) -> None:
        raise AttributeError(f'Property "{self.name}" is read-only')

    def _resolve(self, base: Any) -> None:
        results = list(base._find(f"#{self.name}"))
        if not results:
            raise self._error(f'No widget with id "{self.name}" appended.')
        if len(results) > 1:
            raise self._error(f'More than one widget with id "{self.name}" appended.')
        widget = results[0]
        if self.guard is not None:
            if not self.guard(widget):
                raise self._error("Type guard rejected widget")
        else:
            try:
                type_guards.check(widget, self.type)
            except TypeMismatchError as ex:
                raise self._error(str(ex)) from ex
        base.__dict__[self._key] = widget

    def _error(self, message: str) -> PropertyResolutionError:
        return PropertyResolutionError(
            f'Decorator "get_by_id" could not resolve property "{self.name}": {message}'
        )

    def __repr__(self) -> str:
        return f"get_by_id({self.name!r})"


def get_by_id(type: Any = None, *, guard: Callable[[Any], bool] | None = None) -> ById:
    """The appended child whose id is the attribute name, resolved at attach."""
    return ById(type, guard=guard)
