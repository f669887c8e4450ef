"""Tests for create_element: element factory with binding attributes."""

from typing import Annotated

import pytest

from bindx.component import component
from bindx.errors import PropertyResolutionError
from bindx.injector import Inject, Injector
from bindx.jsx import JSX, create_element, split_attributes
from bindx.one_way import pending_bindings
from bindx.property import Property
from bindx.widgets import Composite, TextView


class Theme:
    pass


class ThemedView(TextView):
    def __init__(self, theme: Annotated[Theme, Inject()], **properties):
        self.theme = theme
        super().__init__(**properties)


@component
class Greeting(Composite):
    name = Property(str, default="World")

    def __init__(self, **properties):
        super().__init__(**properties)
        self.append(
            create_element(TextView, {"id": "plain", "bind-text": "name"}),
            create_element(TextView, {"id": "templated", "template_text": "Hello ${name}!"}),
        )


class TestSplitAttributes:
    def test_prefixes(self):
        plain, bindings, templates = split_attributes({
            "id": "a",
            "bind-text": "title",
            "bind_selection_index": "index",
            "template-text": "${x}",
            "template_message": "${y}",
            "binding": "not a prefix",
        })
        assert plain == {"id": "a", "binding": "not a prefix"}
        assert bindings == {"text": "title", "selection_index": "index"}
        assert templates == {"text": "${x}", "message": "${y}"}


class TestCreateElement:
    def test_plain_attributes_go_to_constructor(self):
        view = create_element(TextView, {"id": "label", "text": "hi"})
        assert view.id == "label"
        assert view.text == "hi"

    def test_no_attributes(self):
        assert isinstance(create_element(TextView), TextView)

    def test_children_are_appended(self):
        child = TextView()
        parent = create_element(Composite, None, child)
        assert parent.children() == [child]

    def test_binding_attributes_become_pending_bindings(self):
        view = create_element(TextView, {"bind-text": "name"})
        assert [b.source_property for b in pending_bindings(view)] == ["name"]

    def test_bindings_resolve_in_component(self):
        greeting = Greeting()
        plain = greeting._find("#plain")[0]
        templated = greeting._find("#templated")[0]
        assert plain.text == "World"
        assert templated.text == "Hello World!"
        greeting.name = "bindx"
        assert plain.text == "bindx"
        assert templated.text == "Hello bindx!"

    def test_unknown_binding_target(self):
        with pytest.raises(PropertyResolutionError):
            create_element(TextView, {"bind-colour": "name"})

    def test_factory_function(self):
        def Labeled(text):
            return TextView(text=text.upper())

        assert create_element(Labeled, {"text": "hi"}).text == "HI"

    def test_constructor_injection(self):
        injector = Injector()
        injector.shared(Theme)
        jsx = JSX(injector)
        view = jsx(ThemedView, {"text": "x"})
        assert view.theme is injector.resolve(Theme)
        assert view.text == "x"
        assert Injector.get(view) is injector
