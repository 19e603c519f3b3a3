# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from evidence.core.descriptor_parser import parse_descriptor as d
from evidence.core.descriptors import ANY
from evidence.core.runtime_types import descriptor_of_class
from evidence.errors import HierarchyCycle, RegistryFrozen
from evidence.hierarchy import TypeHierarchy


class Resource:
	pass


class FileResource(Resource):
	pass


class LockedFile(FileResource):
	pass


def test_reflexive_and_any_is_top() -> None:
	h = TypeHierarchy()
	assert h.is_subtype(d("Int"), d("Int"))
	assert h.is_subtype(d("Int"), ANY)
	assert h.is_subtype(d("List<Int>"), ANY)
	assert not h.is_subtype(ANY, d("Int"))


def test_declared_parents_are_transitive() -> None:
	h = TypeHierarchy()
	h.declare("Int", "Number")
	h.declare("Number", "Ordered")
	assert h.is_subtype(d("Int"), d("Ordered"))
	assert not h.is_subtype(d("Ordered"), d("Int"))
	assert h.ancestors(d("Int")) == [d("Number"), d("Ordered")]


def test_generic_arguments_are_covariant() -> None:
	h = TypeHierarchy()
	h.declare("Int", "Number")
	assert h.is_subtype(d("List<Int>"), d("List<Number>"))
	assert not h.is_subtype(d("List<Number>"), d("List<Int>"))
	assert not h.is_subtype(d("Map<Int, Int>"), d("List<Int>"))


def test_bare_constructor_matches_every_instantiation() -> None:
	h = TypeHierarchy()
	assert h.is_subtype(d("List<Int>"), d("List"))
	assert not h.is_subtype(d("List"), d("List<Int>"))


def test_generic_edges_keep_the_child_arguments() -> None:
	h = TypeHierarchy()
	h.declare("List<Int>", "Seq<Int>")
	assert h.is_subtype(d("List<Int>"), d("Seq<Int>"))
	assert not h.is_subtype(d("List<String>"), d("Seq<Int>"))
	assert not h.is_subtype(d("List<String>"), d("Seq"))
	assert h.parents(d("List<String>")) == []
	assert h.parents(d("List<Int>")) == [d("Seq<Int>")]


def test_generic_edges_apply_to_covariant_instantiations() -> None:
	h = TypeHierarchy()
	h.declare("Int", "Number")
	h.declare("List<Number>", "Seq<Number>")
	assert h.is_subtype(d("List<Int>"), d("Seq<Number>"))
	assert not h.is_subtype(d("List<String>"), d("Seq<Number>"))


def test_bare_child_edges_cover_every_instantiation() -> None:
	h = TypeHierarchy()
	h.declare("List", "Seq")
	assert h.is_subtype(d("List<String>"), d("Seq"))
	assert h.is_subtype(d("List"), d("Seq"))


def _make_box() -> type:
	class Box:
		pass

	return Box


def test_same_named_classes_are_unrelated() -> None:
	h = TypeHierarchy()
	first, second = _make_box(), _make_box()
	a, b = descriptor_of_class(first), descriptor_of_class(second)
	assert a == b
	assert h.is_subtype(a, descriptor_of_class(first))
	assert not h.is_subtype(a, b)
	assert not h.is_subtype(d("List<Int>"), d("List<String>"))


def test_common_subtype_of_a_diamond() -> None:
	h = TypeHierarchy()
	h.declare("Int", "Number", "Ordered")
	assert h.common_subtype(d("Number"), d("Ordered")) == d("Int")
	assert h.common_subtype(d("Int"), d("Number")) == d("Int")
	assert h.common_subtype(d("List<Number>"), d("List<Ordered>")) == d("List<Int>")
	assert h.common_subtype(d("Number"), d("String")) is None


def test_common_subtype_through_python_subclasses() -> None:
	class Readable:
		pass

	class Writable:
		pass

	class Stream(Readable, Writable):
		pass

	h = TypeHierarchy()
	witness = h.common_subtype(descriptor_of_class(Readable), descriptor_of_class(Writable))
	assert witness == descriptor_of_class(Stream)


def test_python_classes_follow_the_mro() -> None:
	h = TypeHierarchy()
	locked = descriptor_of_class(LockedFile)
	assert h.is_subtype(locked, descriptor_of_class(Resource))
	assert h.ancestors(locked) == [descriptor_of_class(FileResource), descriptor_of_class(Resource)]


def test_declare_class_records_bases_for_text_descriptors() -> None:
	h = TypeHierarchy()
	h.declare_class(FileResource)
	# A descriptor parsed from text has no origin; the declared edge still applies.
	plain = d(f"{FileResource.__module__}:FileResource")
	assert h.is_subtype(plain, descriptor_of_class(Resource))


def test_cycles_are_rejected() -> None:
	h = TypeHierarchy()
	h.declare("A", "B")
	h.declare("B", "C")
	with pytest.raises(HierarchyCycle):
		h.declare("C", "A")
	with pytest.raises(HierarchyCycle):
		h.declare("A", "A")


def test_frozen_hierarchy_rejects_declarations() -> None:
	h = TypeHierarchy()
	h.freeze()
	with pytest.raises(RegistryFrozen):
		h.declare("Int", "Number")
