# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Decorator façade for declaring and summoning type-class instances.

	settable = TypeClass("SettableParameter", registry)

	@settable.instance(str)
	def bind_string(value, stmt, index): ...

	settable(value, stmt, 1)   # resolves by type of `value`, then calls

The registry does all the work; this only fixes the capability kind and
forwards to register/resolve.
"""

from __future__ import annotations

from typing import Any, Callable, List, Tuple, TypeVar

from evidence.core.coerce import TypeLike
from evidence.core.descriptors import CapabilityKind
from evidence.registry import CapabilityRegistry, RegistrationHandle, RegistrationState

T = TypeVar("T")


class TypeClass:
	def __init__(self, name: str, registry: CapabilityRegistry) -> None:
		self.kind = CapabilityKind(name)
		self.registry = registry
		self._handles: List[RegistrationHandle] = []

	@property
	def handles(self) -> Tuple[RegistrationHandle, ...]:
		"""Handles of this type class's instances that are still registered."""
		self._handles = [h for h in self._handles if h.state is not RegistrationState.REMOVED]
		return tuple(self._handles)

	def instance(self, ty: TypeLike, *, rank: Any = 0) -> Callable[[T], T]:
		"""Register the decorated object as the instance for `ty`."""

		def deco(impl: T) -> T:
			self.provide(ty, impl, rank=rank)
			return impl

		return deco

	def provide(self, ty: TypeLike, impl: Any, *, rank: Any = 0) -> RegistrationHandle:
		handle = self.registry.register(self.kind, ty, impl, rank)
		self._handles.append(handle)
		return handle

	def clear(self) -> None:
		"""Unregister every instance this type class registered."""
		for handle in self.handles:
			handle.unregister()
		self._handles = []

	def evidence(self, value: Any) -> Any:
		"""The instance for `value`'s type (raises NotFound/Ambiguous)."""
		return self.registry.resolve(self.kind, value)

	def evidence_for(self, ty: TypeLike) -> Any:
		return self.registry.resolve_type(self.kind, ty)

	def supports(self, value: Any) -> bool:
		return self.registry.try_resolve(self.kind, value).ok

	def __call__(self, value: Any, *args: Any, **kwargs: Any) -> Any:
		return self.evidence(value)(value, *args, **kwargs)

	def __repr__(self) -> str:
		return f"TypeClass({self.kind.name!r}, instances={len(self.registry.registrations(self.kind))})"


__all__ = ["TypeClass"]
