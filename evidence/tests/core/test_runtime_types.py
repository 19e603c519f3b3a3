# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from decimal import Decimal

import pytest

from evidence.core.descriptors import ANY, TypeDescriptor
from evidence.core.runtime_types import (
	BOOLEAN,
	DECIMAL,
	DOUBLE,
	INT,
	STRING,
	UNIT,
	descriptor_of,
	descriptor_of_class,
)


class Connection:
	class Cursor:
		pass


def test_scalars_map_to_builtin_tags() -> None:
	assert descriptor_of("abc") == STRING
	assert descriptor_of(5) == INT
	assert descriptor_of(3.14) == DOUBLE
	assert descriptor_of(None) == UNIT
	assert descriptor_of(Decimal("1.5")) == DECIMAL


def test_bool_is_not_an_int() -> None:
	assert descriptor_of(True) == BOOLEAN
	assert descriptor_of(True) != INT


def test_homogeneous_containers_carry_element_descriptor() -> None:
	assert descriptor_of([1, 2, 3]) == TypeDescriptor.builtin("List", INT)
	assert descriptor_of(("a", "b")) == TypeDescriptor.builtin("Tuple", STRING)
	assert descriptor_of(frozenset({1.0})) == TypeDescriptor.builtin("Set", DOUBLE)
	assert descriptor_of({"a": 1}) == TypeDescriptor.builtin("Map", STRING, INT)


def test_empty_or_mixed_containers_use_any() -> None:
	assert descriptor_of([]) == TypeDescriptor.builtin("List", ANY)
	assert descriptor_of([1, "a"]) == TypeDescriptor.builtin("List", ANY)
	assert descriptor_of({}) == TypeDescriptor.builtin("Map", ANY, ANY)


def test_nested_containers() -> None:
	assert str(descriptor_of([[1], [2]])) == "List<List<Int>>"


def test_user_class_is_nominal_and_keeps_origin() -> None:
	desc = descriptor_of(Connection.Cursor())
	assert desc.module == __name__
	assert desc.name == "Connection.Cursor"
	assert desc.origin is Connection.Cursor


def test_origin_does_not_affect_equality() -> None:
	with_origin = descriptor_of_class(Connection)
	without = TypeDescriptor(module=__name__, name="Connection")
	assert with_origin == without
	assert hash(with_origin) == hash(without)


def test_descriptor_of_class_for_builtins() -> None:
	assert descriptor_of_class(str) == STRING
	assert descriptor_of_class(object) == ANY
	assert descriptor_of_class(dict) == TypeDescriptor.builtin("Map", ANY, ANY)
	with pytest.raises(TypeError):
		descriptor_of_class("str")  # type: ignore[arg-type]
