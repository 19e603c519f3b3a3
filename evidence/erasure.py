# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Descriptor policies.

A policy is the descriptor function the registry uses on both sides: it
normalizes declared descriptors at registration time and describes values at
resolution time. Using one object for both is what keeps a value and its
registration comparable.

ReifiedPolicy keeps generic arguments, so `List<Int>` and `List<String>` are
distinct keys. ErasedPolicy drops them (the JVM view), so those two collapse
into `List` and the registry must reject the second registration with
ErasureCollision instead of dispatching one type's values to the other's
implementation.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Protocol

from evidence.core.descriptors import TypeDescriptor
from evidence.core.runtime_types import descriptor_of


class DescriptorPolicy(Protocol):
	"""Protocol for descriptor functions."""

	name: str

	def normalize(self, descriptor: TypeDescriptor) -> TypeDescriptor:
		"""Return the key a declared descriptor is indexed under."""
		...

	def describe(self, value: Any) -> TypeDescriptor:
		"""Return the normalized descriptor of a runtime value."""
		...


class ReifiedPolicy:
	name = "reified"

	def normalize(self, descriptor: TypeDescriptor) -> TypeDescriptor:
		return descriptor

	def describe(self, value: Any) -> TypeDescriptor:
		return self.normalize(descriptor_of(value))

	def __repr__(self) -> str:
		return "ReifiedPolicy()"


class ErasedPolicy:
	"""
	Drop generic arguments, recursively.

	Constructors named in `keep` retain their arguments (each argument is still
	normalized). This mirrors runtimes where a few constructors, like arrays,
	stay reified while the rest are erased.
	"""

	name = "erased"

	def __init__(self, keep: Iterable[str] = ()) -> None:
		self.keep: FrozenSet[str] = frozenset(keep)

	def normalize(self, descriptor: TypeDescriptor) -> TypeDescriptor:
		if not descriptor.args:
			return descriptor
		if descriptor.name in self.keep:
			return descriptor.with_args(tuple(self.normalize(a) for a in descriptor.args))
		return descriptor.erased()

	def describe(self, value: Any) -> TypeDescriptor:
		return self.normalize(descriptor_of(value))

	def __repr__(self) -> str:
		return f"ErasedPolicy(keep={sorted(self.keep)!r})"


def policy_from_name(name: str, *, keep: Iterable[str] = ()) -> DescriptorPolicy:
	if name == "reified":
		return ReifiedPolicy()
	if name == "erased":
		return ErasedPolicy(keep=keep)
	raise ValueError(f"unknown descriptor policy '{name}' (expected 'reified' or 'erased')")


__all__ = ["DescriptorPolicy", "ErasedPolicy", "ReifiedPolicy", "policy_from_name"]
