"""Minimal widget tree the binding engine runs against.

Widgets are EventEmitters with Property-declared state. A Composite holds
children and answers selector queries:

    "*"          any widget
    "#submit"    the widget whose id is "submit"
    "TextInput"  widgets of exactly that class
    TextInput    (a class) instances of it or its subclasses

Composites decorated with ``@component`` hide their children: children()
and find() return nothing to outsiders, the component itself uses the
protected _children() and _find().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from bindx.errors import BindxError
from bindx.list_observer import ListLikeObserver
from bindx.listeners import EventEmitter
from bindx.observable import Mutation, ObservableList
from bindx.property import Property

Selector = str | type | None


def is_list_like(value: Any) -> bool:
    return isinstance(value, (list, ObservableList))


@dataclass
class ChildEvent:
    """Payload of ``add_child`` and ``remove_child``."""

    target: Any
    type: str
    child: Widget
    index: int


class Widget(EventEmitter):
    """Leaf of the tree."""

    id = Property(str)

    def __init__(self, **properties: Any) -> None:
        self._parent: Composite | None = None
        self._disposed = False
        self.set(**properties)

    def set(self, **properties: Any) -> Widget:
        for name, value in properties.items():
            setattr(self, name, value)
        return self

    def parent(self) -> Composite | None:
        return self._parent

    @property
    def disposed(self) -> bool:
        return self._disposed

    def detach(self) -> Widget:
        parent = self._parent
        if parent is not None:
            parent._remove_child(self)
        return self

    def dispose(self) -> None:
        """Fire ``dispose``, detach from the parent and drop all listeners."""
        if self._disposed:
            return
        self.trigger("dispose", self)
        self._dispose_children()
        self.detach()
        self._disposed = True
        self._dispose_listeners()

    def _dispose_children(self) -> None:
        pass

    def _check_disposed(self) -> None:
        if self._disposed:
            raise BindxError(f"{type(self).__name__} is disposed")

    def __repr__(self) -> str:
        suffix = f"#{self.id}" if self.id else ""
        return f"{type(self).__name__}{suffix}"


class Composite(Widget):
    """Widget with children."""

    _bindx_isolated = False

    def __init__(self, **properties: Any) -> None:
        self._child_list: list[Widget] = []
        super().__init__(**properties)

    def append(self, *widgets: Widget | Iterable[Widget]) -> Composite:
        self._check_disposed()
        for widget in _flatten(widgets):
            if not isinstance(widget, Widget):
                raise TypeError(f"Can not append {widget!r}: not a Widget")
            if widget is self or (isinstance(widget, Composite) and self._has_ancestor(widget)):
                raise ValueError(f"Can not append {widget!r} to itself or its descendant")
            widget.detach()
            widget._parent = self
            self._child_list.append(widget)
            self.trigger("add_child", ChildEvent(self, "add_child", widget, len(self._child_list) - 1))
        return self

    def children(self, selector: Selector = None) -> list[Widget]:
        if self._bindx_isolated:
            return []
        return self._children(selector)

    def find(self, selector: Selector = None) -> list[Widget]:
        """All matching descendants visible from outside."""
        return [w for w in _descendants(self.children()) if matches(w, selector)]

    def _children(self, selector: Selector = None) -> list[Widget]:
        return [w for w in self._child_list if matches(w, selector)]

    def _find(self, selector: Selector = None) -> list[Widget]:
        """All matching descendants, including the own isolated children."""
        return [w for w in _descendants(self._child_list) if matches(w, selector)]

    def _remove_child(self, child: Widget) -> None:
        index = self._child_list.index(child)
        del self._child_list[index]
        child._parent = None
        self.trigger("remove_child", ChildEvent(self, "remove_child", child, index))

    def _dispose_children(self) -> None:
        for child in list(self._child_list):
            child.dispose()

    def _has_ancestor(self, widget: Widget) -> bool:
        node = self._parent
        while node is not None:
            if node is widget:
                return True
            node = node._parent
        return False


class TextView(Widget):
    text = Property(str, default="")


class TextInput(Widget):
    text = Property(str, default="")
    message = Property(str, default="")


class CheckBox(Widget):
    text = Property(str, default="")
    checked = Property(bool, default=False)


class Slider(Widget):
    minimum = Property(int, default=0)
    maximum = Property(int, default=100)
    selection = Property(int, default=0)


class ItemPicker(Widget):
    items = Property(guard=is_list_like)
    selection_index = Property(int, default=-1)

    @property
    def selection(self) -> Any:
        items = self.items
        if items is None or not 0 <= self.selection_index < len(items):
            return None
        return items[self.selection_index]


class ListView(Widget):
    """Renders the contents of ``items``, a list or ObservableList.

    ``rendered`` mirrors the source. Every change arrives as one Mutation,
    applied to the mirror and re-fired as ``items_mutated``.
    """

    items = Property(guard=is_list_like)

    def __init__(self, **properties: Any) -> None:
        self.rendered: list = []
        self._observer: ListLikeObserver = ListLikeObserver(self._apply)
        self.on("items_changed", self._items_changed)
        super().__init__(**properties)

    @property
    def item_count(self) -> int:
        return len(self.rendered)

    def _items_changed(self, event: Any) -> None:
        self._observer.source = event.value

    def _apply(self, mutation: Mutation) -> None:
        end = mutation.start + mutation.delete_count
        self.rendered[mutation.start:end] = mutation.items
        self.trigger("items_mutated", mutation)

    def dispose(self) -> None:
        self._observer.dispose()
        super().dispose()


class Page(Composite):
    title = Property(str, default="")


class NavigationView(Composite):
    """Stack of pages, topmost last."""

    def pages(self) -> list[Widget]:
        return self._children(Page)

    def top(self) -> Widget | None:
        children = self._children()
        return children[-1] if children else None


def matches(widget: Widget, selector: Selector) -> bool:
    if selector is None or selector == "*":
        return True
    if isinstance(selector, type):
        return isinstance(widget, selector)
    if selector.startswith("#"):
        return widget.id == selector[1:]
    return type(widget).__name__ == selector


def _descendants(widgets: Iterable[Widget]) -> Iterable[Widget]:
    for widget in widgets:
        yield widget
        if isinstance(widget, Composite):
            yield from _descendants(widget.children())


def _flatten(items: Iterable[Any]) -> Iterable[Any]:
    for item in items:
        if isinstance(item, (list, tuple)):
            yield from _flatten(item)
        else:
            yield item
