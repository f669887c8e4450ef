"""bindx: declarative data binding, dependency injection and observable lists."""

from importlib.metadata import version as _version

__version__ = _version("bindx")

from bindx.errors import (
    BindingError,
    BindxError,
    InjectionConfigError,
    ListAccessError,
    PathSyntaxError,
    PropertyResolutionError,
    RouteError,
    TypeMismatchError,
)
from bindx.config import configure, options, overrides
from bindx.listeners import ChangeEvent, EventEmitter, Listeners, event
from bindx.type_guards import TypeGuards, check_type, type_guards
from bindx.observable import HOLE, Mutation, ObservableList, list_observers
from bindx.list_observer import ListLikeObserver
from bindx.injector import (
    DefaultInjectionHandler,
    Inject,
    Injected,
    Injection,
    Injector,
    create,
    inject,
    injectable,
    injection_handler,
    injector,
    resolve,
    shared,
)
from bindx.property import Property, equals, get_property_type
from bindx._binding import attach, check_path_syntax
from bindx.conversion import Binding, Conversion, to
from bindx.one_way import apply_bindings
from bindx.two_way import bind, bind_all
from bindx.component import component, get_by_id
from bindx.jsx import JSX, create_element, jsx
from bindx.router import HistoryItem, Route, Router, RouterHistory, RouterMatcher
# textual NOT auto-imported, opt-in only

__all__ = [
    "BindingError",
    "BindxError",
    "InjectionConfigError",
    "ListAccessError",
    "PathSyntaxError",
    "PropertyResolutionError",
    "RouteError",
    "TypeMismatchError",
    "configure",
    "options",
    "overrides",
    "ChangeEvent",
    "EventEmitter",
    "Listeners",
    "event",
    "TypeGuards",
    "check_type",
    "type_guards",
    "HOLE",
    "Mutation",
    "ObservableList",
    "list_observers",
    "ListLikeObserver",
    "DefaultInjectionHandler",
    "Inject",
    "Injected",
    "Injection",
    "Injector",
    "create",
    "inject",
    "injectable",
    "injection_handler",
    "injector",
    "resolve",
    "shared",
    "Property",
    "equals",
    "get_property_type",
    "attach",
    "check_path_syntax",
    "Binding",
    "Conversion",
    "to",
    "apply_bindings",
    "bind",
    "bind_all",
    "component",
    "get_by_id",
    "JSX",
    "create_element",
    "jsx",
    "HistoryItem",
    "Route",
    "Router",
    "RouterHistory",
    "RouterMatcher",
]
