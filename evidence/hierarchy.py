# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural/subtype matching between descriptors.

Rules, in the order `is_subtype` tries them:
  - `Any` is the top of every descriptor;
  - same head: a bare constructor matches every instantiation of it
    (`List<Int> <: List`), otherwise generic arguments are compared
    covariantly (which also makes the relation reflexive);
  - nominal parents: edges declared per head (`Int <: Number`), plus the
    direct bases of `origin` for descriptors computed from Python classes.

An edge keeps its child descriptor as a pattern. `declare("List", "Seq")`
holds for every `List<...>`; `declare("List<Int>", "Seq<Int>")` holds only
for instantiations whose arguments are subtypes of `Int`, never for
`List<String>`.

Descriptors with the same name but different `origin` classes are unrelated.
Cycles are rejected when declared.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from evidence.core.coerce import TypeLike, as_descriptor
from evidence.core.descriptors import ANY, TypeDescriptor, TypeHeadKey, distinct_classes
from evidence.core.runtime_types import descriptor_of_class
from evidence.errors import HierarchyCycle, RegistryFrozen

# (child pattern, parent)
Edge = Tuple[TypeDescriptor, TypeDescriptor]


class TypeHierarchy:
	def __init__(self) -> None:
		self._edges: Dict[TypeHeadKey, Tuple[Edge, ...]] = {}
		self._frozen = False

	@property
	def frozen(self) -> bool:
		return self._frozen

	def freeze(self) -> None:
		self._frozen = True

	def declare(self, child: TypeLike, *parents: TypeLike) -> None:
		"""Declare `child <: parent` for each parent."""
		if self._frozen:
			raise RegistryFrozen("declare a subtype edge")
		child_desc = as_descriptor(child)
		head = child_desc.head()
		updated = dict(self._edges)
		current = list(updated.get(head, ()))
		for parent in parents:
			parent_desc = as_descriptor(parent)
			if parent_desc.head() == head or self._reaches(parent_desc, head):
				raise HierarchyCycle(child_desc, parent_desc)
			if (child_desc, parent_desc) not in current:
				current.append((child_desc, parent_desc))
		updated[head] = tuple(current)
		# Publish a new mapping so readers never observe a half-applied update.
		self._edges = updated

	def declare_class(self, cls: type) -> None:
		"""Declare the direct bases of a Python class as its parents."""
		child = descriptor_of_class(cls)
		bases = [descriptor_of_class(b) for b in cls.__bases__ if b is not object]
		if bases:
			self.declare(child, *bases)

	def _applies(self, pattern: TypeDescriptor, descriptor: TypeDescriptor) -> bool:
		if distinct_classes(pattern, descriptor):
			return False
		if not pattern.args:
			return True
		return len(pattern.args) == len(descriptor.args) and all(
			self.is_subtype(a, b) for a, b in zip(descriptor.args, pattern.args)
		)

	def parents(self, descriptor: TypeDescriptor) -> List[TypeDescriptor]:
		out: List[TypeDescriptor] = []
		for pattern, parent in self._edges.get(descriptor.head(), ()):
			if parent not in out and self._applies(pattern, descriptor):
				out.append(parent)
		origin = descriptor.origin
		if isinstance(origin, type):
			for base in origin.__bases__:
				if base is object:
					continue
				base_desc = descriptor_of_class(base)
				if base_desc not in out:
					out.append(base_desc)
		return out

	def ancestors(self, descriptor: TypeDescriptor) -> List[TypeDescriptor]:
		"""Breadth-first ancestors, nearest first, without `Any` and without duplicates."""
		seen: List[TypeDescriptor] = []
		queue = self.parents(descriptor)
		while queue:
			item = queue.pop(0)
			if item in seen or item == descriptor or item == ANY:
				continue
			seen.append(item)
			queue.extend(self.parents(item))
		return seen

	def is_subtype(self, sub: TypeDescriptor, sup: TypeDescriptor) -> bool:
		if sup == ANY:
			return True
		if sub.head() == sup.head() and not distinct_classes(sub, sup):
			if not sup.args:
				return True
			if len(sub.args) == len(sup.args) and all(
				self.is_subtype(a, b) for a, b in zip(sub.args, sup.args)
			):
				return True
		return any(self.is_subtype(p, sup) for p in self.parents(sub))

	def children(self) -> List[TypeDescriptor]:
		"""Every declared child pattern, in declaration order per head."""
		return [pattern for edges in self._edges.values() for pattern, _ in edges]

	def common_subtype(
		self,
		a: TypeDescriptor,
		b: TypeDescriptor,
		known: Iterable[TypeDescriptor] = (),
	) -> Optional[TypeDescriptor]:
		"""
		A descriptor that is a subtype of both `a` and `b`, or None.

		Looks at `a` and `b` themselves, argument-wise meets of two
		instantiations of one constructor, declared children, `known`, and the
		Python subclasses of classes behind `a` and `b`. It does not invent
		nominal types, so None means no such type is known here.
		"""
		if self.is_subtype(a, b):
			return a
		if self.is_subtype(b, a):
			return b
		known = tuple(known)
		if a.head() == b.head() and a.args and len(a.args) == len(b.args) and not distinct_classes(a, b):
			meets = [self.common_subtype(x, y, known) for x, y in zip(a.args, b.args)]
			if all(m is not None for m in meets):
				return a.with_args(tuple(m for m in meets if m is not None))
		for candidate in self._witnesses(a, b, known):
			if self.is_subtype(candidate, a) and self.is_subtype(candidate, b):
				return candidate
		return None

	def _witnesses(
		self,
		a: TypeDescriptor,
		b: TypeDescriptor,
		known: Tuple[TypeDescriptor, ...],
	) -> Iterator[TypeDescriptor]:
		yield from self.children()
		yield from known
		for desc in (a, b):
			if isinstance(desc.origin, type):
				yield from (descriptor_of_class(c) for c in _subclasses(desc.origin))

	def _reaches(self, start: TypeDescriptor, head: TypeHeadKey) -> bool:
		return any(a.head() == head for a in self.ancestors(start))

	def __len__(self) -> int:
		return len(self._edges)


def _subclasses(cls: type) -> List[type]:
	out: List[type] = []
	queue = list(cls.__subclasses__())
	while queue:
		sub = queue.pop(0)
		if sub not in out:
			out.append(sub)
			queue.extend(sub.__subclasses__())
	return out


__all__ = ["TypeHierarchy"]
