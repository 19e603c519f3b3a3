# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from evidence.core.descriptor_parser import parse_descriptor
from evidence.erasure import ErasedPolicy, ReifiedPolicy, policy_from_name


def test_reified_policy_keeps_generic_arguments() -> None:
	policy = ReifiedPolicy()
	desc = parse_descriptor("List<Int>")
	assert policy.normalize(desc) == desc
	assert str(policy.describe([1, 2])) == "List<Int>"


def test_erased_policy_collapses_instantiations() -> None:
	policy = ErasedPolicy()
	ints = policy.normalize(parse_descriptor("List<Int>"))
	strings = policy.normalize(parse_descriptor("List<String>"))
	assert ints == strings == parse_descriptor("List")
	assert policy.describe(["a"]) == parse_descriptor("List")


def test_erased_policy_keeps_listed_constructors_reified() -> None:
	policy = ErasedPolicy(keep=["Array"])
	assert str(policy.normalize(parse_descriptor("Array<List<Int>>"))) == "Array<List>"
	assert str(policy.normalize(parse_descriptor("List<Array<Int>>"))) == "List"


def test_erased_policy_leaves_plain_descriptors_alone() -> None:
	policy = ErasedPolicy()
	desc = parse_descriptor("geo:Point")
	assert policy.normalize(desc) is desc


def test_policy_from_name() -> None:
	assert policy_from_name("reified").name == "reified"
	erased = policy_from_name("erased", keep=["Array"])
	assert isinstance(erased, ErasedPolicy)
	assert erased.keep == frozenset({"Array"})
	with pytest.raises(ValueError):
		policy_from_name("monomorphized")
