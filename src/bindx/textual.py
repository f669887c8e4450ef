"""Textual integration for bindx. Opt-in, requires textual.

Lets a Textual widget serve as the base of bindings: selectors are resolved
with ``DOMNode.query``, and Textual's query errors surface as
PropertyResolutionError like everywhere else in bindx.

    @component
    class Form(TextualComponentMixin, Container):
        name = bind("#name.text", str)

        def on_mount(self):
            attach(self)
"""

from __future__ import annotations

from textual.css.query import NoMatches, TooManyMatches

from bindx.errors import PropertyResolutionError
from bindx.listeners import EventEmitter


def find(node, selector: str | None = None) -> list:
    return list(node.query(selector or "*"))


def find_one(node, selector: str):
    try:
        return node.query(selector).only_one()
    except NoMatches as ex:
        raise PropertyResolutionError(f'No widget matching "{selector}" was appended.') from ex
    except TooManyMatches as ex:
        raise PropertyResolutionError(f'Multiple widgets matching "{selector}" were appended.') from ex


class TextualComponentMixin(EventEmitter):
    """Gives a Textual widget the lookup and event protocol of a binding base."""

    def _find(self, selector: str | None = None) -> list:
        return find(self, selector)
