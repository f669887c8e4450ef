"""Shared plumbing for one-way and two-way bindings.

Bindings are declared at class definition time but resolved only once the
owning component is attached, i.e. on its first append. Each component class
carries a table of post-append handlers; attach() runs them, base classes
first, exactly once per instance.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from bindx.errors import PathSyntaxError, PropertyResolutionError

PostAppendHandler = Callable[[Any], None]

_HANDLERS_ATTR = "__bindx_post_append__"
_COMPONENT_ATTR = "_bindx_component"
_APPENDED_ATTR = "_bindx_appended"

_INVALID_CHARS = re.compile(r"[\s\[\]()<>]")
_RESERVED = re.compile(r"\bthis\b")
_TYPE_SELECTOR = re.compile(r"^[A-Z]\w*$")


def check_path_syntax(path: Any) -> None:
    if not isinstance(path, str) or not path:
        raise PathSyntaxError("Binding path must be a non-empty string.")
    if _INVALID_CHARS.search(path):
        raise PathSyntaxError("Binding path contains invalid characters.")
    if _RESERVED.search(path):
        raise PathSyntaxError('Binding path contains reserved word "this".')


def parse_two_way_path(path: Any) -> tuple[str, str]:
    """Split ``"#id.property"`` (or ``"TypeName.property"``) into selector and property."""
    check_path_syntax(path)
    segments = path.split(".")
    if not (path.startswith("#") or _TYPE_SELECTOR.match(segments[0])):
        raise PathSyntaxError('Binding path needs to start with "#" or a widget type name.')
    if len(segments) < 2:
        raise PathSyntaxError("Binding path needs at least two segments.")
    if len(segments) > 2:
        raise PathSyntaxError("Binding path has too many segments.")
    selector, prop = segments
    if selector == "#" or not prop:
        raise PathSyntaxError("Binding path has an empty segment.")
    return selector, prop


def check_property_exists(target: Any, name: str, owner: str | None = None) -> None:
    if not hasattr(type(target), name) and name not in getattr(target, "__dict__", {}):
        owner = owner or type(target).__name__
        raise PropertyResolutionError(f'{owner} does not have a property "{name}".')


def get_child(base: Any, selector: str) -> Any:
    """The single descendant of ``base`` matching ``selector``."""
    finder = getattr(base, "_find", None)
    if not callable(finder):
        raise PropertyResolutionError(f"{type(base).__name__} can not look up child widgets.")
    results = list(finder(selector))
    if not results:
        raise PropertyResolutionError(f'No widget matching "{selector}" was appended.')
    if len(results) > 1:
        raise PropertyResolutionError(f'Multiple widgets matching "{selector}" were appended.')
    return results[0]


def add_post_append_handler(cls: type, handler: PostAppendHandler) -> None:
    handlers = cls.__dict__.get(_HANDLERS_ATTR)
    if handlers is None:
        handlers = []
        setattr(cls, _HANDLERS_ATTR, handlers)
    handlers.append(handler)


def post_append_handlers(cls: type) -> list[PostAppendHandler]:
    result: list[PostAppendHandler] = []
    for klass in reversed(cls.__mro__):
        result.extend(klass.__dict__.get(_HANDLERS_ATTR, ()))
    return result


def is_component(obj: Any) -> bool:
    return bool(getattr(type(obj), _COMPONENT_ATTR, False))


def was_appended(obj: Any) -> bool:
    return bool(getattr(obj, "__dict__", {}).get(_APPENDED_ATTR, False))


def attach(base: Any) -> bool:
    """Resolve the bindings of ``base``. Returns False if already attached."""
    if was_appended(base):
        return False
    base.__dict__[_APPENDED_ATTR] = True
    for handler in post_append_handlers(type(base)):
        handler(base)
    return True
