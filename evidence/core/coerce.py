# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Accept descriptors, descriptor text or Python classes wherever a type is expected."""

from __future__ import annotations

from typing import Union

from evidence.core.descriptor_parser import parse_descriptor
from evidence.core.descriptors import TypeDescriptor
from evidence.core.runtime_types import descriptor_of_class

TypeLike = Union[TypeDescriptor, str, type]


def as_descriptor(ty: TypeLike) -> TypeDescriptor:
	if ty is None:
		raise TypeError("type descriptor must not be None")
	if isinstance(ty, TypeDescriptor):
		return ty
	if isinstance(ty, str):
		return parse_descriptor(ty)
	if isinstance(ty, type):
		return descriptor_of_class(ty)
	raise TypeError(f"expected TypeDescriptor, descriptor text or class, got {type(ty).__name__}")


__all__ = ["TypeLike", "as_descriptor"]
