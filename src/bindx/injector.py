"""Dependency injection.

An Injector maps types to injection handlers. A handler receives an
Injection describing the request and returns an instance, or None to let the
next compatible handler try.

Registering:

    @injectable
    class Database: ...

    @injectable(shared=True, implements=Storage)
    class FileStorage: ...

    @injection_handler(Config)
    def create_config(injection):
        return Config.load()

Consuming, through constructor parameters or class attributes:

    class Repository:
        cache = Injected(Cache)

        def __init__(self, db: Annotated[Database, Inject()], name="repo"):
            ...

    repo = create(Repository)

Once a handler has been invoked it is considered in use: removing it, or
clearing the registry while it is registered, raises InjectionConfigError.
"""

from __future__ import annotations

import inspect
import itertools
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable, TypeVar, get_args, get_origin, get_type_hints

from bindx.errors import BindxError, InjectionConfigError, rewrap

logger = logging.getLogger("bindx.injector")

T = TypeVar("T")

InjectionHandler = Callable[["Injection"], Any]

_INJECTOR_ATTR = "__bindx_injector__"
_ANY_PARAM: Any = object()
_PRIMITIVES = (int, float, str, bool)


@dataclass(frozen=True)
class Inject:
    """Marks a constructor parameter for injection: ``Annotated[T, Inject(param)]``."""

    param: Any = None


@dataclass
class Injection:
    """What a handler is asked to provide."""

    type: type
    param: Any = None
    injector: Injector | None = None
    target: type | None = None
    name: str | None = None
    index: int | None = None


@dataclass
class _HandlerEntry:
    target_type: type
    handler: InjectionHandler
    priority: int
    implements: tuple
    order: int
    used: bool = False


class Injector:
    """Registry of injection handlers that also creates instances."""

    def __init__(self) -> None:
        self._handlers: dict[type, _HandlerEntry] = {}
        self._order = itertools.count()

    @staticmethod
    def get(obj: object) -> Injector:
        """The injector that created ``obj``."""
        injector = getattr(obj, "__dict__", {}).get(_INJECTOR_ATTR)
        if injector is None:
            raise InjectionConfigError(f"{type(obj).__name__} object was not created by an Injector")
        return injector

    # --- Registry ---

    def add_handler(
        self,
        target_type: type,
        handler: InjectionHandler,
        *,
        priority: int = 0,
        implements: type | tuple[type, ...] | None = None,
    ) -> None:
        if not inspect.isclass(target_type) or not callable(handler):
            raise InjectionConfigError("add_handler() needs a type and a callable handler")
        if target_type in self._handlers:
            raise InjectionConfigError(f"Injector already has a handler for {target_type.__name__}")
        if implements is None:
            implements = ()
        elif not isinstance(implements, tuple):
            implements = (implements,)
        self._handlers[target_type] = _HandlerEntry(
            target_type, handler, priority, implements, next(self._order)
        )
        logger.debug("Added injection handler for %s", target_type.__name__)

    def get_handler(self, target_type: type) -> InjectionHandler | None:
        entry = self._handlers.get(target_type)
        return entry.handler if entry else None

    def remove_handler(self, target_type: type) -> None:
        entry = self._handlers.get(target_type)
        if entry is not None and entry.used:
            raise InjectionConfigError(
                f"Can not remove injection handler for type {target_type.__name__} "
                "because it was already used."
            )
        if self._handlers.pop(target_type, None) is not None:
            logger.debug("Removed injection handler for %s", target_type.__name__)

    def clear_handlers(self) -> None:
        for target_type, entry in self._handlers.items():
            if entry.used:
                raise InjectionConfigError(
                    "Can not clear Injector because the injection handler "
                    f"for type {target_type.__name__} was already used."
                )
        self._handlers.clear()

    # --- Resolution ---

    def resolve(
        self,
        type: type[T],
        param: Any = None,
        *,
        target: type | None = None,
        name: str | None = None,
        index: int | None = None,
    ) -> T:
        """Return an instance of ``type`` from the best matching handler."""
        if type is None:
            raise InjectionConfigError(
                "Can not inject value since type is None. Is there a circular import?"
            )
        entries = self._find_compatible(type)
        if not entries:
            raise InjectionConfigError(
                f"Can not inject value of type {_name(type)} since no compatible "
                "injection handler exists for this type."
            )
        injection = Injection(type, param, self, target, name, index)
        for entry in entries:
            entry.used = True
            result = entry.handler(injection)
            if result is not None:
                return self._tag(_unbox(type, result))
        raise InjectionConfigError(
            f"Can not inject value of type {_name(type)} since no compatible "
            "injection handler returned a value."
        )

    def create(self, cls: type[T], *args: Any, **kwargs: Any) -> T:
        """Instantiate ``cls``, injecting every omitted ``Inject``-annotated parameter."""
        if cls is None:
            raise InjectionConfigError("No type to create was given")
        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError):
            return self._tag(cls(*args, **kwargs))
        hints = _injection_hints(cls)
        try:
            bound = sig.bind_partial(*args, **kwargs)
        except TypeError as e:
            raise TypeError(f"Arguments don't match {cls.__name__} signature: {e}") from e
        try:
            for index, (name, p) in enumerate(sig.parameters.items()):
                if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD) or name in bound.arguments:
                    continue
                if name in hints:
                    param_type, marker = hints[name]
                    bound.arguments[name] = self.resolve(
                        param_type, marker.param, target=cls, name=name, index=index
                    )
        except BindxError as ex:
            raise rewrap(ex, f"Could not create instance of {cls.__name__}:\n{ex}") from ex
        return self._tag(cls(*bound.args, **bound.kwargs))

    def _find_compatible(self, type: type) -> list[_HandlerEntry]:
        matches = [e for e in self._handlers.values() if _is_compatible(e, type)]
        matches.sort(key=lambda e: (e.priority, e.target_type is type, e.order), reverse=True)
        return matches

    def _tag(self, value: T) -> T:
        if not inspect.isclass(value) and isinstance(getattr(value, "__dict__", None), dict):
            value.__dict__.setdefault(_INJECTOR_ATTR, self)
        return value

    # --- Decorators ---

    def injectable(
        self,
        cls: type | None = None,
        *,
        shared: bool = False,
        implements: type | tuple[type, ...] | None = None,
        param: Any = _ANY_PARAM,
        priority: int = 0,
    ):
        """Class decorator registering a handler that creates the class.

        ``shared`` memoizes one instance, ``implements`` lets the class satisfy
        requests for a type it does not subclass, ``param`` restricts the
        handler to injections carrying that parameter.
        """

        def register(target: type) -> type:
            try:
                handler = DefaultInjectionHandler(target, shared=shared, param=param)
                self.add_handler(target, handler, priority=priority, implements=implements)
            except BindxError as ex:
                raise rewrap(
                    ex, f'Could not apply decorator "injectable" to class {target.__name__}: {ex}'
                ) from ex
            return target

        return register(cls) if cls is not None else register

    def shared(self, cls: type) -> type:
        return self.injectable(cls, shared=True)

    def injection_handler(self, target_type: type, *, priority: int = 0):
        """Function decorator registering the function as a handler for ``target_type``."""

        def register(fn):
            func = fn.__func__ if isinstance(fn, (staticmethod, classmethod)) else fn
            if not callable(func):
                raise InjectionConfigError(
                    'Decorator "injection_handler" must be applied to a function'
                )
            self.add_handler(target_type, func, priority=priority)
            return fn

        return register


class DefaultInjectionHandler:
    """Handler used by ``@injectable``: creates instances through the injector."""

    def __init__(self, type: type, *, shared: bool = False, param: Any = _ANY_PARAM) -> None:
        self.type = type
        self.shared = shared
        self._param = param
        self._instance = None

    def __call__(self, injection: Injection) -> Any:
        if self._param is not _ANY_PARAM and injection.param != self._param:
            return None
        if not self.shared:
            return injection.injector.create(self.type)
        if self._instance is None:
            self._instance = injection.injector.create(self.type)
        return self._instance


class Injected:
    """Class attribute resolved on first access and cached on the instance.

    The value comes from the injector that created the instance, or the
    default injector for instances created directly.
    """

    def __init__(self, type: type, param: Any = None) -> None:
        self.type = type
        self.param = param
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        source = instance.__dict__.get(_INJECTOR_ATTR, injector)
        try:
            value = source.resolve(self.type, self.param, target=owner, name=self.name)
        except BindxError as ex:
            raise rewrap(ex, f'Could not inject property "{self.name}": {ex}') from ex
        instance.__dict__[self.name] = value
        return value


def inject(type: type, param: Any = None) -> Injected:
    return Injected(type, param)


def _is_compatible(entry: _HandlerEntry, requested: type) -> bool:
    if entry.target_type is requested or requested in entry.implements:
        return True
    try:
        return inspect.isclass(requested) and issubclass(entry.target_type, requested)
    except TypeError:
        # non-runtime protocols refuse issubclass
        return False


def _unbox(type: type, value: Any) -> Any:
    # only subclasses of the primitive are unwrapped (IntEnum -> int), never converted
    if (
        type in _PRIMITIVES
        and isinstance(value, type)
        and value.__class__ is not type
        and not isinstance(value, bool)
    ):
        return type(value)
    return value


def _injection_hints(cls: type) -> dict[str, tuple[type, Inject]]:
    try:
        init = inspect.getattr_static(cls, "__init__")
        hints = get_type_hints(init, include_extras=True)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}
    result = {}
    for name, hint in hints.items():
        if get_origin(hint) is not Annotated:
            continue
        base, *extras = get_args(hint)
        markers = [extra for extra in extras if isinstance(extra, Inject)]
        if markers:
            result[name] = (base, markers[0])
    return result


def _name(type: Any) -> str:
    return getattr(type, "__name__", repr(type))


injector = Injector()

injectable = injector.injectable
shared = injector.shared
injection_handler = injector.injection_handler
resolve = injector.resolve
create = injector.create
