"""Element factory with binding attributes.

    create_element(TextView, {"id": "label", "bind-text": "title"})
    create_element(TextView, {"template_text": "Hello ${name}!"})

``bind-`` and ``template-`` attributes (or ``bind_``/``template_``, usable
as keyword arguments) become one-way bindings; everything else goes to
the constructor. Classes are instantiated through an Injector, so
constructor parameters marked with Inject are filled in.
"""

from __future__ import annotations

import inspect
import re
from typing import Any, Mapping

from bindx.injector import Injector, injector as default_injector
from bindx.one_way import apply_bindings

_BINDING_ATTR = re.compile(r"^(bind|template)[-_](.+)$")


class JSX:

    def __init__(self, injector: Injector | None = None) -> None:
        self.injector = injector if injector is not None else default_injector

    def create_element(self, type: Any, attributes: Mapping[str, Any] | None = None, *children: Any) -> Any:
        plain, bindings, templates = split_attributes(attributes or {})
        if inspect.isclass(type):
            element = self.injector.create(type, **plain)
        else:
            element = type(**plain)
        if bindings or templates:
            apply_bindings(element, bindings, templates)
        if children:
            element.append(*children)
        return element

    __call__ = create_element


def split_attributes(attributes: Mapping[str, Any]) -> tuple[dict, dict, dict]:
    """Separate constructor arguments from bind and template attributes."""
    plain: dict[str, Any] = {}
    bindings: dict[str, Any] = {}
    templates: dict[str, Any] = {}
    for key, value in attributes.items():
        match = _BINDING_ATTR.match(key)
        if match is None:
            plain[key] = value
        elif match.group(1) == "bind":
            bindings[match.group(2)] = value
        else:
            templates[match.group(2)] = value
    return plain, bindings, templates


jsx = JSX()
create_element = jsx.create_element
