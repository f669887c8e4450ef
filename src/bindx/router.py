"""Named-route navigation over a NavigationView.

The history list is the source of truth: every change to it is mirrored on
the navigation view (pages disposed or created and appended), and pages the
navigation view drops by itself, e.g. on a back gesture, are popped from the
history again. History length and page count stay equal.

    router = Router(navigation_view, [Route("home", HomePage), Route("detail", DetailPage)])
    router.go_to("detail", {"title": "Item 3"})
    router.back()
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from bindx.errors import RouteError
from bindx.list_observer import ListLike, ListLikeObserver
from bindx.observable import Mutation, ObservableList

logger = logging.getLogger("bindx.router")


@dataclass
class Route:
    name: str
    page: Callable[[], Any]

    def create_page(self) -> Any:
        return self.page()


@dataclass
class HistoryItem:
    route: str
    payload: dict | None = None


class RouterMatcher:
    """Name -> Route lookup, fixed at construction."""

    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes: dict[str, Route] = {}
        for route in routes:
            if route.name in self._routes:
                raise RouteError(f'Route with name "{route.name}" is defined more than once.')
            self._routes[route.name] = route

    def match(self, item: HistoryItem) -> Route:
        route = self._routes.get(item.route)
        if route is None:
            raise RouteError(f'Route "{item.route}" does not exist.')
        return route

    def __contains__(self, name: object) -> bool:
        return name in self._routes


class RouterHistory(ListLikeObserver[HistoryItem]):
    """Stack operations on the observed history list."""

    def push(self, item: HistoryItem) -> None:
        source = self.source
        if isinstance(source, ObservableList):
            source.push(item)
        else:
            self.source = [*(source or []), item]

    def pop(self) -> HistoryItem | None:
        source = self.source
        if not source:
            return None
        if isinstance(source, ObservableList):
            return source.pop()
        item = source[-1]
        self.source = source[:-1]
        return item

    def remove_last(self) -> HistoryItem | None:
        """Drop the newest item from the source in place."""
        source = self.source
        if not source:
            return None
        return source.pop()

    @property
    def current(self) -> HistoryItem | None:
        source = self.source
        return source[len(source) - 1] if source else None

    def __len__(self) -> int:
        return len(self.source) if self.source is not None else 0


class Router:

    def __init__(
        self,
        navigation_view: Any,
        routes: Iterable[Route] = (),
        history: ListLike | None = None,
    ) -> None:
        self.navigation_view = navigation_view
        self.routes: ObservableList[Route] = (
            routes if isinstance(routes, ObservableList) else ObservableList(routes)
        )
        self._matcher = RouterMatcher(self.routes)
        self.routes.observers.add_listener(self._routes_changed)
        self._sync_depth = 0
        self._history = RouterHistory(self._history_changed)
        self._history.source = history if history is not None else ObservableList()
        navigation_view.on("remove_child", self._child_removed)

    @property
    def history(self) -> ListLike:
        return self._history.source

    @history.setter
    def history(self, value: ListLike) -> None:
        for item in value:
            self._matcher.match(item)
        self._history.source = value

    @property
    def current(self) -> HistoryItem | None:
        return self._history.current

    def go_to(self, route: HistoryItem | str, payload: dict | None = None) -> None:
        item = route if isinstance(route, HistoryItem) else HistoryItem(route, payload)
        self._matcher.match(item)
        logger.debug("Navigating to %s", item.route)
        self._history.push(item)

    def back(self) -> None:
        if not len(self._history):
            raise RouteError("Can not go back: history is empty.")
        logger.debug("Navigating back from %s", self._history.current.route)
        self._history.pop()

    @contextmanager
    def _syncing(self):
        self._sync_depth += 1
        try:
            yield
        finally:
            self._sync_depth -= 1

    def _routes_changed(self, _mutation: Mutation) -> None:
        self._matcher = RouterMatcher(self.routes)

    def _history_changed(self, mutation: Mutation) -> None:
        if self._sync_depth:
            return
        pages = self.navigation_view.children()
        removed = pages[mutation.start:mutation.start + mutation.delete_count]
        with self._syncing():
            for page in reversed(removed):
                page.dispose()
        for item in mutation.items:
            self._show(item)

    def _show(self, item: HistoryItem) -> None:
        page = self._matcher.match(item).create_page()
        for key, value in (item.payload or {}).items():
            if hasattr(page, key):
                setattr(page, key, value)
            else:
                logger.debug("Ignoring payload key %r, %s has no such property", key, type(page).__name__)
        self.navigation_view.append(page)

    def _child_removed(self, _event: Any) -> None:
        if self._sync_depth:
            return
        with self._syncing():
            while len(self._history) > len(self.navigation_view.children()):
                self._history.remove_last()
        logger.debug("History synced with navigation view, %d page(s) left", len(self._history))
