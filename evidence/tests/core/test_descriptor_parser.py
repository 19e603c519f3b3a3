# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from evidence.core.descriptor_parser import parse_descriptor
from evidence.core.descriptors import TypeDescriptor
from evidence.errors import DescriptorSyntaxError


def test_parse_builtin_name() -> None:
	desc = parse_descriptor("Int")
	assert desc == TypeDescriptor(module=None, name="Int")
	assert not desc.is_generic


def test_parse_generic_with_nested_args() -> None:
	desc = parse_descriptor("Map<String, List<Int>>")
	assert desc.name == "Map"
	assert desc.args == (
		TypeDescriptor.builtin("String"),
		TypeDescriptor.builtin("List", TypeDescriptor.builtin("Int")),
	)


def test_parse_module_qualified_nominal_type() -> None:
	desc = parse_descriptor("geo.shapes:Point")
	assert desc.module == "geo.shapes"
	assert desc.name == "Point"


def test_parse_qualname_after_colon_keeps_dots() -> None:
	desc = parse_descriptor("app.models:Outer.Inner<Int>")
	assert desc.module == "app.models"
	assert desc.name == "Outer.Inner"
	assert desc.args == (TypeDescriptor.builtin("Int"),)


def test_parse_ignores_whitespace_and_renders_canonically() -> None:
	desc = parse_descriptor("  Map < String ,List<Int> > ")
	assert str(desc) == "Map<String, List<Int>>"


@pytest.mark.parametrize("text", ["", "   ", "List<", "Map<,>", "List<Int>>", "a:b:c", "1Int"])
def test_parse_rejects_malformed_text(text: str) -> None:
	with pytest.raises(DescriptorSyntaxError) as exc:
		parse_descriptor(text)
	assert exc.value.reason_code == "descriptor-syntax"
