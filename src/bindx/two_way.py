"""Two-way bindings between a component and its child widgets.

    @component
    class Counter(Composite):
        value = bind("#slider.selection", int)

Reading ``counter.value`` reads the slider's selection, assigning it writes
through, and every ``selection_changed`` of the slider is re-fired as
``value_changed`` on the component. Values are type-checked in both
directions and on every access. The binding resolves when the component is
first attached; accessing it earlier raises PropertyResolutionError.

A converter translates between the two sides. It is called with a
Conversion whose target is the component when the value travels inwards:

    def upper_outside(value, conversion):
        if conversion.targets(TextInput):
            conversion.resolve(value.upper())
        else:
            conversion.resolve(value.lower())

    shout = bind("TextInput.text", str, convert=upper_outside)

bind_all() binds the properties of a model object instead:

    @component
    class PersonForm(Composite):
        person = bind_all({"name": "#name.text", "age": "#age.selection"}, Person)
"""

from __future__ import annotations

from typing import Any, Callable

from bindx._binding import (
    add_post_append_handler,
    check_property_exists,
    get_child,
    is_component,
    parse_two_way_path,
    was_appended,
)
from bindx.config import options
from bindx.conversion import Binding, Conversion
from bindx.errors import PathSyntaxError, PropertyResolutionError, TypeMismatchError, rewrap
from bindx.listeners import ChangeEvent, Disposer, change_event
from bindx.property import equals
from bindx.type_guards import type_guards


class BoundProperty:
    """Descriptor created by bind()."""

    def __init__(
        self,
        path: str,
        type: Any = None,
        *,
        guard: Callable[[Any], bool] | None = None,
        convert: Callable | None = None,
    ) -> None:
        self.selector, self.target_property = parse_two_way_path(path)
        _check_strict(path, type, guard)
        self.path = path
        self.type = type
        self.guard = guard
        self.convert = convert
        self.name = ""
        self.event = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.event = change_event(name)
        add_post_append_handler(owner, self._initialize)

    @property
    def _key(self) -> str:
        return f"_bindx_target_{self.name}"

    def __get__(self, base: Any, owner: type | None = None) -> Any:
        if base is None:
            return self
        try:
            value = self._to_local(base, getattr(self._target(base), self.target_property))
            self.check(value)
            return value
        except Exception as ex:
            raise rewrap(ex, self._message(f'provide {type(base).__name__} property "{self.name}"', ex)) from ex

    def __set__(self, base: Any, value: Any) -> None:
        try:
            target = self._target(base)
            self.check(value)
            setattr(target, self.target_property, self._to_target(target, value))
        except Exception as ex:
            raise rewrap(ex, self._message(f'update {self.target_property} value', ex)) from ex

    def check(self, value: Any) -> Any:
        return _check(value, self.type, self.guard)

    def _target(self, base: Any) -> Any:
        if not is_component(base):
            raise PropertyResolutionError(f"{type(base).__name__} is not a @component")
        if not was_appended(base):
            raise PropertyResolutionError(
                f'Can not access property "{self.name}": '
                "binding is not ready because no widgets have been appended yet."
            )
        target = base.__dict__.get(self._key)
        if target is None:
            raise PropertyResolutionError(f'Can not access property "{self.name}": binding is not resolved.')
        return target

    def _to_local(self, base: Any, value: Any) -> Any:
        if self.convert is None:
            return value
        return Conversion.convert(value, self.convert, base, self.name)

    def _to_target(self, target: Any, value: Any) -> Any:
        if self.convert is None:
            return value
        return Conversion.convert(value, self.convert, target, self.target_property)

    def _initialize(self, base: Any) -> None:
        try:
            child = get_child(base, self.selector)
            check_property_exists(child, self.target_property)
            value = self._to_local(base, getattr(child, self.target_property))
            self.check(value)
            base.__dict__[self._key] = child
            dispose = child.on(change_event(self.target_property), lambda event: self._forward(base, event))
            base.on("dispose", lambda _event: dispose())
            base.trigger(self.event, ChangeEvent(base, self.event, value))
        except Exception as ex:
            raise rewrap(ex, self._message("initialize", ex)) from ex

    def _forward(self, base: Any, event: Any) -> None:
        try:
            value = self._to_local(base, event.value)
            self.check(value)
        except Exception as ex:
            action = f'update {type(base).__name__} property "{self.name}"'
            raise rewrap(ex, self._message(action, ex)) from ex
        base.trigger(self.event, ChangeEvent(base, self.event, value))

    def _message(self, action: str, cause: BaseException) -> str:
        return f'Binding "{self.name}" <-> "{self.path}" failed to {action}: {cause}'

    def __repr__(self) -> str:
        return f"bind({self.path!r})"


class ModelBinding:
    """Descriptor created by bind_all().

    The component property holds a model object, an EventEmitter whose
    properties are kept in sync with child widget properties. The model may
    be assigned before or after attach and replaced at any time.
    """

    def __init__(
        self,
        bindings: dict[str, str | Binding],
        type: Any = None,
        *,
        guard: Callable[[Any], bool] | None = None,
    ) -> None:
        if not bindings:
            raise PathSyntaxError("bind_all needs at least one binding.")
        self.bindings: dict[str, tuple[str, str, Binding]] = {}
        for key, entry in bindings.items():
            binding = entry if isinstance(entry, Binding) else Binding(entry)
            selector, prop = parse_two_way_path(binding.path)
            self.bindings[key] = (selector, prop, binding)
        _check_strict(", ".join(b.path for _, _, b in self.bindings.values()), type, guard)
        self.type = type
        self.guard = guard
        self.name = ""
        self.event = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.event = change_event(name)
        add_post_append_handler(owner, self._initialize)

    @property
    def _key(self) -> str:
        return f"_bindx_model_{self.name}"

    def __get__(self, base: Any, owner: type | None = None) -> Any:
        if base is None:
            return self
        return base.__dict__.get(self.name)

    def __set__(self, base: Any, model: Any) -> None:
        current = base.__dict__.get(self.name)
        if equals(current, model):
            return
        try:
            _check(model, self.type, self.guard)
            if model is not None:
                self._check_model(model)
        except Exception as ex:
            raise rewrap(ex, f'Failed to set property "{self.name}": {ex}') from ex
        base.__dict__[self.name] = model
        link = base.__dict__.get(self._key)
        if link is not None:
            link.connect(model)
        base.trigger(self.event, ChangeEvent(base, self.event, model))

    def _check_model(self, model: Any) -> None:
        if not callable(getattr(model, "on", None)):
            raise TypeMismatchError(f"{type(model).__name__} does not emit change events.")
        for key in self.bindings:
            check_property_exists(model, key)

    def _initialize(self, base: Any) -> None:
        link = _ModelLink(self, base)
        for key, (selector, prop, binding) in self.bindings.items():
            try:
                child = get_child(base, selector)
                check_property_exists(child, prop)
            except Exception as ex:
                raise rewrap(ex, self._message(key, binding.path, "initialize", ex)) from ex
            link.add_target(key, child, prop, binding.converter)
        base.__dict__[self._key] = link
        base.on("dispose", lambda _event: link.dispose())
        link.connect(base.__dict__.get(self.name))

    def _message(self, key: str, path: str, action: str, cause: BaseException) -> str:
        return f'Binding "{self.name}.{key}" <-> "{path}" failed to {action}: {cause}'

    def __repr__(self) -> str:
        paths = {key: binding.path for key, (_, _, binding) in self.bindings.items()}
        return f"bind_all({paths!r})"


class _ModelLink:
    """Live connection between one component's model and its target widgets."""

    def __init__(self, binding: ModelBinding, base: Any) -> None:
        self.binding = binding
        self.base = base
        self.targets: dict[str, tuple[Any, str, Callable | None]] = {}
        # target values at attach, restored when the model lets go
        self.fallbacks: dict[str, Any] = {}
        self.model: Any = None
        self._target_disposers: list[Disposer] = []
        self._model_disposers: list[Disposer] = []
        self._suspended = False

    def add_target(self, key: str, child: Any, prop: str, converter: Callable | None) -> None:
        self.targets[key] = (child, prop, converter)
        self.fallbacks[key] = getattr(child, prop)
        self._target_disposers.append(
            child.on(change_event(prop), lambda event: self._target_changed(key, event.value))
        )

    def connect(self, model: Any) -> None:
        self._disconnect_model()
        self.model = model
        for key in self.targets:
            if model is None:
                self._sync(key, "reset target", self._set_target, key, self.fallbacks[key])
            elif getattr(model, key) is None:
                # an empty model property takes the target's value
                child, prop, _ = self.targets[key]
                self._sync(key, "initialize model", self._set_model, key, getattr(child, prop))
            else:
                self._sync(key, "initialize target", self._set_target, key, getattr(model, key))
        if model is not None:
            for key in self.targets:
                self._model_disposers.append(
                    model.on(change_event(key), lambda event, key=key: self._model_changed(key, event.value))
                )

    def dispose(self) -> None:
        self._disconnect_model()
        for dispose in self._target_disposers:
            dispose()
        self._target_disposers.clear()

    def _disconnect_model(self) -> None:
        for dispose in self._model_disposers:
            dispose()
        self._model_disposers.clear()

    def _target_changed(self, key: str, value: Any) -> None:
        if self._suspended or self.model is None:
            return
        self._sync(key, "update model", self._set_model, key, value)

    def _model_changed(self, key: str, value: Any) -> None:
        if self._suspended:
            return
        if value is None:
            value = self.fallbacks[key]
        self._sync(key, "update target", self._set_target, key, value)

    def _sync(self, key: str, action: str, setter: Callable[[str, Any], None], *args: Any) -> None:
        self._suspended = True
        try:
            setter(*args)
        except Exception as ex:
            path = self.binding.bindings[key][2].path
            raise rewrap(ex, self.binding._message(key, path, action, ex)) from ex
        finally:
            self._suspended = False

    def _set_target(self, key: str, value: Any) -> None:
        child, prop, converter = self.targets[key]
        if converter is not None and value is not None:
            value = Conversion.convert(value, converter, child, prop)
        setattr(child, prop, value)

    def _set_model(self, key: str, value: Any) -> None:
        _, _, converter = self.targets[key]
        if converter is not None and value is not None:
            value = Conversion.convert(value, converter, self.model, key)
        setattr(self.model, key, value)


def _check(value: Any, type: Any, guard: Callable[[Any], bool] | None) -> Any:
    if guard is not None:
        if value is not None and not guard(value):
            raise TypeMismatchError(f'Type guard check failed for value "{value}".')
        return value
    return type_guards.check(value, type)


def _check_strict(path: str, type: Any, guard: Any) -> None:
    if type is None and guard is None and options().strict_mode:
        raise TypeMismatchError(
            f'Binding to "{path}" failed: type could not be determined, '
            "pass a type or a guard."
        )


def bind(
    path: str,
    type: Any = None,
    *,
    guard: Callable[[Any], bool] | None = None,
    convert: Callable | None = None,
) -> BoundProperty:
    return BoundProperty(path, type, guard=guard, convert=convert)


def bind_all(
    bindings: dict[str, str | Binding],
    type: Any = None,
    *,
    guard: Callable[[Any], bool] | None = None,
) -> ModelBinding:
    """Bind properties of the model held by this component property to child widgets."""
    return ModelBinding(bindings, type, guard=guard)
