"""Value converters for one-way bindings.

A converter is called with the source value, and optionally with a
Conversion describing where the result goes. The second form lets one
converter serve several targets:

    def to_color(value, conversion):
        if conversion.targets(TextView, "text"):
            conversion.resolve(str(value))
        else:
            conversion.resolve(value)

    apply_bindings(label, {"text": to("color", to_color)})
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from typing import Any, Callable

from bindx.errors import BindingError, PathSyntaxError

_PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")


@dataclass(frozen=True)
class Binding:
    """A binding path with an optional converter."""

    path: str
    converter: Callable | None = None


def to(path: str, converter: Callable | None = None) -> Binding:
    return Binding(path, converter)


class Conversion:
    """Describes the target of a single conversion."""

    def __init__(self, target: Any, property: str) -> None:
        self.target = target
        self.property = property
        self._matched = False
        self._resolved = False
        self._value: Any = None

    @property
    def resolved(self) -> bool:
        return self._resolved

    def targets(self, type: type, property: str | None = None) -> bool:
        """True if the target is an instance of ``type`` (and the property is ``property``)."""
        if self._matched:
            raise BindingError("targets() may not be called again after it returned True")
        self._matched = isinstance(self.target, type) and (property is None or property == self.property)
        return self._matched

    def resolve(self, value: Any) -> None:
        if self._resolved:
            raise BindingError("resolve() was already called")
        self._resolved = True
        self._value = value

    @classmethod
    def convert(cls, value: Any, converter: Callable, target: Any, property: str) -> Any:
        conversion = cls(target, property)
        if _takes_conversion(converter):
            result = converter(value, conversion)
        else:
            result = converter(value)
        if not conversion.resolved:
            return result
        if result is not None:
            raise BindingError("Converter returned a value although resolve() was called")
        return conversion._value


def template_converter(template: str) -> tuple[str, Callable[[Any], str]]:
    """Path and converter of a ``"text ${path} text"`` template."""
    found = _PLACEHOLDER.findall(template)
    if len(found) != 1:
        raise PathSyntaxError("Template must contain exactly one \"${...}\" placeholder.")
    path = found[0].strip()

    def render(value: Any) -> str:
        return _PLACEHOLDER.sub(lambda _match: str(value), template)

    return path, render


def _takes_conversion(converter: Callable) -> bool:
    try:
        params = inspect.signature(converter).parameters.values()
    except (TypeError, ValueError):
        return False
    required = 0
    for p in params:
        if p.kind is p.VAR_POSITIONAL:
            return True
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty:
            required += 1
    return required >= 2
