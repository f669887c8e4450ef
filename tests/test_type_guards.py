"""Tests for TypeGuards: runtime checks for bindable values."""

import logging
from typing import Any

import pytest

from bindx.errors import TypeMismatchError
from bindx.type_guards import TypeGuards, check_type, type_name, value_type_name


class Color:
    def __init__(self, value):
        self.value = value


class TestIsValid:
    def test_plain_isinstance(self):
        guards = TypeGuards()
        assert guards.is_valid("a", str)
        assert not guards.is_valid(1, str)

    def test_untyped_accepts_everything(self):
        guards = TypeGuards()
        for type_ in (None, object, Any):
            assert guards.is_valid(object(), type_)

    def test_none(self):
        guards = TypeGuards()
        assert guards.is_valid(None, int)
        assert not guards.is_valid(None, int, allow_none=False)

    def test_bool_is_not_a_number(self):
        guards = TypeGuards()
        assert not guards.is_valid(True, int)
        assert not guards.is_valid(False, float)
        assert guards.is_valid(True, bool)

    def test_int_is_a_float(self):
        assert TypeGuards().is_valid(3, float)

    def test_tuple_of_types(self):
        guards = TypeGuards()
        assert guards.is_valid(1, (str, int))
        assert not guards.is_valid(1.5, (str, int))

    def test_subscripted_generic_is_rejected(self):
        assert not TypeGuards().is_valid([1], list[int])


class TestRegistry:
    def test_registered_guard_extends_type(self):
        guards = TypeGuards()
        guards.register(Color, lambda v: isinstance(v, str) and v.startswith("#"))
        assert guards.is_valid(Color("red"), Color)
        assert guards.is_valid("#fff", Color)
        assert not guards.is_valid("red", Color)

    def test_duplicate_registration(self):
        guards = TypeGuards()
        guards.register(Color, lambda v: True)
        with pytest.raises(ValueError, match="already registered"):
            guards.register(Color, lambda v: False)
        guards.register(Color, lambda v: False, replace=True)
        assert not guards.is_valid("x", Color)

    def test_not_callable(self):
        with pytest.raises(ValueError, match="not callable"):
            TypeGuards().register(Color, "nope")

    def test_unregister(self):
        guards = TypeGuards()
        guards.register(Color, lambda v: True)
        assert Color in guards
        guards.unregister(Color)
        assert Color not in guards
        assert guards.get(Color) is None

    def test_raising_guard_counts_as_failure(self, caplog):
        guards = TypeGuards()

        def broken(value):
            raise RuntimeError("boom")

        guards.register(Color, broken)
        with caplog.at_level(logging.ERROR, logger="bindx.type_guards"):
            assert not guards.is_valid("x", Color)
        assert "Type guard for Color raised" in caplog.text


class TestCheck:
    def test_returns_value(self):
        assert TypeGuards().check(5, int) == 5

    def test_message(self):
        with pytest.raises(TypeMismatchError, match='Expected value "abc" to be of type int, but found str.'):
            TypeGuards().check("abc", int)

    def test_mismatch_is_a_type_error(self):
        with pytest.raises(TypeError):
            check_type("abc", int)

    def test_names(self):
        assert type_name((int, str)) == "int or str"
        assert value_type_name(None) == "None"
        assert value_type_name(1.5) == "float"
