"""Tests for one-way bindings, converters and templates."""

import logging

import pytest

from bindx.component import component
from bindx.config import overrides
from bindx.conversion import Binding, Conversion, template_converter, to
from bindx.errors import BindingError, PathSyntaxError, PropertyResolutionError, TypeMismatchError
from bindx.one_way import apply_bindings, pending_bindings
from bindx.property import Property
from bindx.two_way import bind
from bindx.widgets import CheckBox, Composite, Slider, TextView, Widget


@component
class Profile(Composite):
    name = Property(str, default="Ada")
    count = Property(int, default=0)
    flag = Property(bool, default=False)


@component
class Mirror(Composite):
    level = bind("#slider.selection", int)


class Loose(Widget):
    anything = None


class TestDeclaration:
    def test_records_pending_binding(self):
        view = TextView()
        created = apply_bindings(view, {"text": "name"})
        assert pending_bindings(view) == created
        assert created[0].source_property == "name"

    @pytest.mark.parametrize("path, message", [
        ("#label", "can currently not contain a selector"),
        (".name", "can currently not contain a selector"),
        ("person.name", "only have one segment"),
        ("na me", "invalid characters"),
        ("this", 'reserved word "this"'),
    ])
    def test_invalid_paths(self, path, message):
        with pytest.raises(PathSyntaxError, match=message):
            apply_bindings(TextView(), {"text": path})

    def test_error_names_binding(self):
        with pytest.raises(PathSyntaxError, match='Binding "text" -> "a.b" failed'):
            apply_bindings(TextView(), {"text": "a.b"})


class TestUnsafeBindings:
    def test_missing_target_property_raises(self):
        with pytest.raises(PropertyResolutionError, match='does not have a property "color"'):
            apply_bindings(TextView(), {"color": "name"})

    def test_missing_target_property_warns_and_skips(self, caplog):
        view = TextView()
        with overrides(unsafe_bindings="warn"):
            with caplog.at_level(logging.WARNING, logger="bindx.one_way"):
                assert apply_bindings(view, {"color": "name"}) == []
        assert 'has no property "color"' in caplog.text
        assert pending_bindings(view) == []

    def test_missing_target_property_ignored(self, caplog):
        with overrides(unsafe_bindings="ignore"):
            assert apply_bindings(TextView(), {"color": "name"}) == []
        assert caplog.text == ""

    def test_unchecked_target_property_raises(self):
        with pytest.raises(PropertyResolutionError, match="without a declared type"):
            apply_bindings(Loose(), {"anything": "name"})

    def test_unchecked_target_property_warns_and_binds(self, caplog):
        target = Loose()
        profile = Profile()
        with overrides(unsafe_bindings="warn"):
            with caplog.at_level(logging.WARNING, logger="bindx.one_way"):
                apply_bindings(target, {"anything": "name"})
        assert "is not type checked" in caplog.text
        profile.append(target)
        assert target.anything == "Ada"


class TestResolution:
    def test_initial_assignment_at_attach(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, {"text": "name"})
        assert view.text == ""
        profile.append(view)
        assert view.text == "Ada"
        assert pending_bindings(view) == []

    def test_updates_follow_source(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, {"text": "name"})
        profile.append(view)
        profile.name = "Grace"
        assert view.text == "Grace"

    def test_nested_targets(self):
        profile = Profile()
        box = CheckBox()
        apply_bindings(box, {"checked": "flag"})
        profile.append(Composite().append(box))
        profile.flag = True
        assert box.checked is True

    def test_missing_source_property(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, {"text": "title"})
        with pytest.raises(PropertyResolutionError, match='Binding "text" -> "title" failed: Profile does not have'):
            profile.append(view)

    def test_type_mismatch_at_resolution(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, {"text": "count"})
        with pytest.raises(TypeMismatchError, match='Binding "text" -> "count" failed'):
            profile.append(view)

    def test_type_mismatch_on_change(self):
        profile = Profile()
        slider = Slider()
        apply_bindings(slider, {"selection": to("count", lambda v: v if v < 10 else "many")})
        profile.append(slider)
        with pytest.raises(TypeMismatchError, match='Binding "selection" -> "count" failed'):
            profile.count = 20
        assert slider.selection == 0

    def test_none_passes_through(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, {"text": "name"})
        profile.append(view)
        profile.name = None
        assert view.text is None

    def test_source_is_two_way_binding(self):
        mirror = Mirror()
        label = TextView()
        apply_bindings(label, {"text": to("level", str)})
        mirror.append(Slider(id="slider", selection=4), label)
        assert label.text == "4"
        mirror.level = 6
        assert label.text == "6"

    def test_disposed_target_stops_updates(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, {"text": "name"})
        profile.append(view)
        view.dispose()
        profile.name = "Grace"
        assert view.text == "Ada"


class TestConverters:
    def test_single_argument_converter(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, {"text": Binding("count", lambda v: f"{v} items")})
        profile.append(view)
        profile.count = 2
        assert view.text == "2 items"

    def test_converter_exception(self):
        profile = Profile()
        view = TextView()

        def broken(value):
            raise ValueError("nope")

        apply_bindings(view, {"text": to("name", broken)})
        with pytest.raises(BindingError, match="Converter exception: nope"):
            profile.append(view)

    def test_target_aware_conversion(self):
        def convert(value, conversion):
            if conversion.targets(TextView, "text"):
                conversion.resolve(f"#{value}")
            elif conversion.targets(Slider):
                conversion.resolve(value * 2)

        profile = Profile()
        view, slider = TextView(), Slider()
        apply_bindings(view, {"text": to("count", convert)})
        apply_bindings(slider, {"selection": to("count", convert)})
        profile.count = 5
        profile.append(view, slider)
        assert view.text == "#5"
        assert slider.selection == 10

    def test_resolve_twice(self):
        conversion = Conversion(TextView(), "text")
        conversion.resolve(1)
        with pytest.raises(BindingError, match="already called"):
            conversion.resolve(2)

    def test_targets_after_match(self):
        conversion = Conversion(TextView(), "text")
        assert conversion.targets(TextView)
        with pytest.raises(BindingError):
            conversion.targets(TextView)

    def test_return_after_resolve(self):
        def convert(value, conversion):
            conversion.resolve(value)
            return value

        with pytest.raises(BindingError, match="resolve\\(\\) was called"):
            Conversion.convert(1, convert, TextView(), "text")

    def test_unresolved_returns_result(self):
        assert Conversion.convert(2, lambda v, c: v + 1, TextView(), "text") == 3

    def test_builtin_converter(self):
        assert Conversion.convert(2, str, TextView(), "text") == "2"


class TestTemplates:
    def test_template_binding(self):
        profile = Profile()
        view = TextView()
        apply_bindings(view, templates={"text": "Hello ${name}!"})
        profile.append(view)
        assert view.text == "Hello Ada!"
        profile.name = "Grace"
        assert view.text == "Hello Grace!"

    def test_template_converter(self):
        path, render = template_converter("${ count } left")
        assert path == "count"
        assert render(3) == "3 left"

    @pytest.mark.parametrize("template", ["no placeholder", "${a} and ${b}"])
    def test_placeholder_count(self, template):
        with pytest.raises(PathSyntaxError, match="exactly one"):
            apply_bindings(TextView(), templates={"text": template})

    def test_error_names_template(self):
        with pytest.raises(PathSyntaxError, match='Template binding "text" -> "\\$\\{a.b\\}" failed'):
            apply_bindings(TextView(), templates={"text": "${a.b}"})
