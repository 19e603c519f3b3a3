# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Descriptor function for Python runtime values.

Builtin scalars map to fixed builtin tags. Containers are described by their
constructor plus the common descriptor of their elements; an empty or mixed
container gets `Any` as its element descriptor. Everything else is described
nominally by its class (`module:QualName`) and keeps the class as `origin` so
the hierarchy can see its MRO.

`bool` is checked before `int`: `True` is a Boolean, not an Int.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable

from evidence.core.descriptors import ANY, TypeDescriptor

BOOLEAN = TypeDescriptor.builtin("Boolean")
INT = TypeDescriptor.builtin("Int")
DOUBLE = TypeDescriptor.builtin("Double")
STRING = TypeDescriptor.builtin("String")
BYTES = TypeDescriptor.builtin("Bytes")
UNIT = TypeDescriptor.builtin("Unit")
DECIMAL = TypeDescriptor.builtin("Decimal")

_SCALARS: Dict[type, TypeDescriptor] = {
	bool: BOOLEAN,
	int: INT,
	float: DOUBLE,
	str: STRING,
	bytes: BYTES,
	type(None): UNIT,
	Decimal: DECIMAL,
}

# Container class -> builtin constructor name.
_CONTAINERS: Dict[type, str] = {
	list: "List",
	tuple: "Tuple",
	set: "Set",
	frozenset: "Set",
	dict: "Map",
}


def _common(descs: Iterable[TypeDescriptor]) -> TypeDescriptor:
	seen: TypeDescriptor | None = None
	for d in descs:
		if seen is None:
			seen = d
		elif d != seen:
			return ANY
	return seen if seen is not None else ANY


def descriptor_of_class(cls: type) -> TypeDescriptor:
	"""Describe a class (not an instance)."""
	if not isinstance(cls, type):
		raise TypeError(f"expected a class, got {type(cls).__name__}")
	scalar = _SCALARS.get(cls)
	if scalar is not None:
		return scalar
	if cls is object:
		return ANY
	container = _CONTAINERS.get(cls)
	if container is not None:
		arity = 2 if container == "Map" else 1
		return TypeDescriptor.builtin(container, *([ANY] * arity))
	return TypeDescriptor(module=cls.__module__, name=cls.__qualname__, origin=cls)


def descriptor_of(value: Any) -> TypeDescriptor:
	"""Describe a runtime value."""
	cls = type(value)
	scalar = _SCALARS.get(cls)
	if scalar is not None:
		return scalar
	container = _CONTAINERS.get(cls)
	if container == "Map":
		return TypeDescriptor.builtin(
			container,
			_common(descriptor_of(k) for k in value.keys()),
			_common(descriptor_of(v) for v in value.values()),
		)
	if container is not None:
		return TypeDescriptor.builtin(container, _common(descriptor_of(v) for v in value))
	return descriptor_of_class(cls)


__all__ = [
	"BOOLEAN",
	"BYTES",
	"DECIMAL",
	"DOUBLE",
	"INT",
	"STRING",
	"UNIT",
	"descriptor_of",
	"descriptor_of_class",
]
