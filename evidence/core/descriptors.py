# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type descriptors and capability kinds.

A TypeDescriptor names a target type: a builtin tag (`Int`), a nominal type
qualified by its module (`geo.shapes:Point`), or a generic constructor applied
to arguments (`List<Int>`). Descriptors are frozen and hashable so they can be
used directly as registry keys.

`origin` optionally carries the Python class a descriptor was computed from.
It does not take part in equality or hashing; the hierarchy uses it to derive
nominal parents from the MRO. Two classes can share `module:QualName` (classes
made by a factory function); `distinct_classes` tells such descriptors apart
wherever a match or a registration key is decided.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class TypeHeadKey:
	"""Descriptor head: the constructor without its arguments."""

	module: Optional[str]
	name: str


@dataclass(frozen=True)
class TypeDescriptor:
	module: Optional[str]
	name: str
	args: Tuple["TypeDescriptor", ...] = ()
	origin: Optional[type] = field(default=None, compare=False, repr=False)

	def __post_init__(self) -> None:
		if not self.name:
			raise ValueError("type descriptor name must be non-empty")
		if not isinstance(self.args, tuple):
			object.__setattr__(self, "args", tuple(self.args))

	def head(self) -> TypeHeadKey:
		return TypeHeadKey(module=self.module, name=self.name)

	@property
	def is_generic(self) -> bool:
		return bool(self.args)

	def with_args(self, args: Tuple["TypeDescriptor", ...]) -> "TypeDescriptor":
		return TypeDescriptor(module=self.module, name=self.name, args=tuple(args), origin=self.origin)

	def erased(self) -> "TypeDescriptor":
		"""Return the descriptor with its generic arguments dropped."""
		if not self.args:
			return self
		return TypeDescriptor(module=self.module, name=self.name, origin=self.origin)

	@staticmethod
	def builtin(name: str, *args: "TypeDescriptor") -> "TypeDescriptor":
		return TypeDescriptor(module=None, name=name, args=tuple(args))

	def __str__(self) -> str:
		return descriptor_str(self)


@dataclass(frozen=True)
class CapabilityKind:
	"""A family of operations a type may support (e.g. `SettableParameter`)."""

	name: str

	def __post_init__(self) -> None:
		if not self.name:
			raise ValueError("capability kind name must be non-empty")

	def __str__(self) -> str:
		return self.name


ANY = TypeDescriptor.builtin("Any")


def head_str(key: TypeHeadKey | TypeDescriptor) -> str:
	return f"{key.module}:{key.name}" if key.module else key.name


def descriptor_str(key: TypeDescriptor) -> str:
	base = head_str(key)
	if not key.args:
		return base
	args = ", ".join(descriptor_str(a) for a in key.args)
	return f"{base}<{args}>"


def distinct_classes(a: TypeDescriptor, b: TypeDescriptor) -> bool:
	"""True when `a` and `b` were computed from two different Python classes."""
	return a.origin is not None and b.origin is not None and a.origin is not b.origin


def origins_conflict(a: TypeDescriptor, b: TypeDescriptor) -> bool:
	"""Like `distinct_classes`, also looking through generic arguments."""
	if distinct_classes(a, b):
		return True
	if len(a.args) != len(b.args):
		return False
	return any(origins_conflict(x, y) for x, y in zip(a.args, b.args))


def as_kind(kind: CapabilityKind | str) -> CapabilityKind:
	if kind is None:
		raise TypeError("capability kind must not be None")
	if isinstance(kind, CapabilityKind):
		return kind
	if isinstance(kind, str):
		return CapabilityKind(kind)
	raise TypeError(f"expected CapabilityKind or str, got {type(kind).__name__}")


__all__ = [
	"ANY",
	"CapabilityKind",
	"TypeDescriptor",
	"TypeHeadKey",
	"as_kind",
	"descriptor_str",
	"distinct_classes",
	"head_str",
	"origins_conflict",
]
