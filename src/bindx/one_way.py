"""One-way bindings: component property -> widget property.

apply_bindings() records bindings on a target widget, typically from the
``bind-*`` and ``template-*`` attributes of create_element(). They stay
pending until the enclosing component is attached; then every pending
binding of its descendants is resolved against the component: the current
value is assigned immediately and every later ``<source>_changed`` event is
forwarded.

    label = TextView()
    apply_bindings(label, {"text": to("count", str)})
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from bindx._binding import check_path_syntax, check_property_exists
from bindx.config import options
from bindx.conversion import Binding, Conversion, template_converter
from bindx.errors import BindingError, PathSyntaxError, PropertyResolutionError, TypeMismatchError, rewrap
from bindx.listeners import change_event
from bindx.property import Property, property_descriptor

logger = logging.getLogger("bindx.one_way")

_PENDING_ATTR = "_bindx_one_way"


@dataclass
class OneWayBinding:
    target: Any
    target_property: str
    source_property: str
    description: str
    converter: Callable | None = None
    descriptor: Property | None = None

    def message(self, cause: BaseException) -> str:
        return f'{self.description} "{self.target_property}" -> "{self.source_property}" failed: {cause}'


def apply_bindings(
    target: Any,
    bindings: Mapping[str, str | Binding] | None = None,
    templates: Mapping[str, str] | None = None,
) -> list[OneWayBinding]:
    """Record one-way bindings on ``target``; keys are target property names."""
    created = []
    for name, binding in (bindings or {}).items():
        if not isinstance(binding, Binding):
            binding = Binding(binding)
        created.append(_create(target, name, binding.path, binding.converter, "Binding", binding.path))
    for name, template in (templates or {}).items():
        try:
            path, converter = template_converter(template)
        except PathSyntaxError as ex:
            raise rewrap(ex, f'Template binding "{name}" -> "{template}" failed: {ex}') from ex
        created.append(_create(target, name, path, converter, "Template binding", template))
    pending = [b for b in created if b is not None]
    if pending:
        target.__dict__.setdefault(_PENDING_ATTR, []).extend(pending)
    return pending


def pending_bindings(target: Any) -> list[OneWayBinding]:
    return list(getattr(target, "__dict__", {}).get(_PENDING_ATTR, ()))


def process_one_way_bindings(base: Any) -> None:
    """Resolve the pending bindings of all descendants of ``base`` against it."""
    for target in base._find():
        for binding in getattr(target, "__dict__", {}).pop(_PENDING_ATTR, ()):
            _initialize(base, binding)


def _create(target, name, path, converter, kind, text) -> OneWayBinding | None:
    try:
        check_path_syntax(path)
        if path.startswith(("#", ".")):
            raise PathSyntaxError("JSX binding path can currently not contain a selector.")
        if "." in path:
            raise PathSyntaxError("JSX binding path can currently only have one segment.")
        mode = options().unsafe_bindings
        try:
            check_property_exists(target, name)
        except PropertyResolutionError:
            if mode == "error":
                raise
            if mode == "warn":
                logger.warning('Ignoring %s "%s" -> "%s": %s has no property "%s"',
                               kind.lower(), name, text, type(target).__name__, name)
            return None
        descriptor = property_descriptor(target, name)
        if descriptor is None or not descriptor.checked:
            if mode == "error":
                raise PropertyResolutionError(
                    f'Can not bind to property "{name}" without a declared type.'
                )
            if mode == "warn":
                logger.warning('Unsafe %s "%s" -> "%s": property "%s" is not type checked',
                               kind.lower(), name, text, name)
    except Exception as ex:
        raise rewrap(ex, f'{kind} "{name}" -> "{text}" failed: {ex}') from ex
    return OneWayBinding(target, name, path, kind, converter, descriptor)


def _initialize(base: Any, binding: OneWayBinding) -> None:
    try:
        check_property_exists(base, binding.source_property)
        _update(binding, getattr(base, binding.source_property))
    except Exception as ex:
        raise rewrap(ex, binding.message(ex)) from ex

    def on_change(event: Any) -> None:
        try:
            _update(binding, event.value)
        except Exception as ex:
            raise rewrap(ex, binding.message(ex)) from ex

    dispose = base.on(change_event(binding.source_property), on_change)
    target_on = getattr(binding.target, "on", None)
    if callable(target_on):
        target_on("dispose", lambda _event: dispose())


def _update(binding: OneWayBinding, value: Any) -> None:
    if binding.converter is not None and value is not None:
        try:
            value = Conversion.convert(value, binding.converter, binding.target, binding.target_property)
        except BindingError:
            raise
        except Exception as ex:
            raise BindingError(f"Converter exception: {ex}") from ex
    if binding.descriptor is not None and binding.descriptor.checked:
        try:
            binding.descriptor.check(value)
        except TypeMismatchError as ex:
            raise TypeMismatchError(f'Failed to set property "{binding.target_property}": {ex}') from ex
    setattr(binding.target, binding.target_property, value)
