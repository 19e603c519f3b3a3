# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Registry error taxonomy.

Every error carries a stable `reason_code` plus enough structure to serialize
it (`to_dict`) or print it (`format_human`). None of these are transient; the
registry never retries and never recovers by picking a candidate on its own.

Registration-time:
  - DuplicateExactMatch: same (kind, declared descriptor) already ACTIVE.
  - ErasureCollision: a different declared descriptor normalizes to the same key.
  - RegistryFrozen / RegistryClosed: write after freeze()/close().
Resolution-time:
  - NotFound: nothing matches (kind, descriptor).
  - Ambiguous: two or more top-ranked candidates tie.
Configuration:
  - HierarchyCycle, DescriptorSyntaxError, ManifestError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from evidence.core.descriptors import CapabilityKind, TypeDescriptor
from evidence.core.refs import implementation_ref

if TYPE_CHECKING:
	from evidence.registry import Registration


class RegistryError(ValueError):
	"""Base class for all registry errors."""

	reason_code = "registry-error"

	def __init__(
		self,
		message: str,
		*,
		kind: CapabilityKind | None = None,
		descriptor: TypeDescriptor | None = None,
	) -> None:
		super().__init__(message)
		self.message = message
		self.kind = kind
		self.descriptor = descriptor

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"kind": str(self.kind) if self.kind is not None else None,
			"descriptor": str(self.descriptor) if self.descriptor is not None else None,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.kind is not None:
			parts.append(f"kind={self.kind}")
		if self.descriptor is not None:
			parts.append(f"descriptor={self.descriptor}")
		return " ".join(parts)


def _registration_dict(reg: "Registration") -> dict[str, Any]:
	return {
		"registration_id": reg.registration_id,
		"descriptor": str(reg.descriptor),
		"key": str(reg.key),
		"implementation": implementation_ref(reg.implementation),
		"rank": reg.rank,
	}


class DuplicateExactMatch(RegistryError):
	reason_code = "duplicate-exact-match"

	def __init__(self, kind: CapabilityKind, descriptor: TypeDescriptor, *, existing: "Registration") -> None:
		super().__init__(
			f"capability '{kind}' already has an implementation for '{descriptor}'",
			kind=kind,
			descriptor=descriptor,
		)
		self.existing = existing

	def to_dict(self) -> dict[str, Any]:
		out = super().to_dict()
		out["existing"] = _registration_dict(self.existing)
		return out


class ErasureCollision(RegistryError):
	reason_code = "erasure-collision"

	def __init__(
		self,
		kind: CapabilityKind,
		descriptor: TypeDescriptor,
		*,
		existing: "Registration",
		key: TypeDescriptor,
	) -> None:
		super().__init__(
			f"capability '{kind}': '{descriptor}' and '{existing.descriptor}' are indistinguishable "
			f"under the descriptor policy (both map to '{key}')",
			kind=kind,
			descriptor=descriptor,
		)
		self.existing = existing
		self.key = key

	def to_dict(self) -> dict[str, Any]:
		out = super().to_dict()
		out["existing"] = _registration_dict(self.existing)
		out["key"] = str(self.key)
		return out


class NotFound(RegistryError):
	reason_code = "not-found"

	def __init__(self, kind: CapabilityKind, descriptor: TypeDescriptor) -> None:
		super().__init__(
			f"no implementation of capability '{kind}' for '{descriptor}'",
			kind=kind,
			descriptor=descriptor,
		)


class Ambiguous(RegistryError):
	reason_code = "ambiguous"

	def __init__(
		self,
		kind: CapabilityKind,
		descriptor: TypeDescriptor,
		candidates: Sequence["Registration"],
	) -> None:
		labels = ", ".join(f"'{c.descriptor}' (rank {c.rank!r})" for c in candidates)
		super().__init__(
			f"ambiguous implementation of capability '{kind}' for '{descriptor}': {labels}",
			kind=kind,
			descriptor=descriptor,
		)
		self.candidates = tuple(candidates)

	def to_dict(self) -> dict[str, Any]:
		out = super().to_dict()
		out["candidates"] = [_registration_dict(c) for c in self.candidates]
		return out


class RegistryFrozen(RegistryError):
	reason_code = "registry-frozen"

	def __init__(self, operation: str) -> None:
		super().__init__(f"cannot {operation}: registry is frozen")
		self.operation = operation


class RegistryClosed(RegistryError):
	reason_code = "registry-closed"

	def __init__(self, operation: str) -> None:
		super().__init__(f"cannot {operation}: registry is closed")
		self.operation = operation


class HierarchyCycle(RegistryError):
	reason_code = "hierarchy-cycle"

	def __init__(self, child: TypeDescriptor, parent: TypeDescriptor) -> None:
		super().__init__(f"declaring '{child}' <: '{parent}' would create a cycle", descriptor=child)
		self.parent = parent


class DescriptorSyntaxError(RegistryError):
	reason_code = "descriptor-syntax"

	def __init__(self, text: str, *, column: int | None = None) -> None:
		where = f" at column {column}" if column is not None else ""
		super().__init__(f"invalid type descriptor '{text}'{where}")
		self.text = text
		self.column = column


class ManifestError(RegistryError):
	reason_code = "manifest-invalid"

	def __init__(self, message: str, *, path: str | None = None, field: str | None = None) -> None:
		super().__init__(message)
		self.path = path
		self.field = field

	def to_dict(self) -> dict[str, Any]:
		out = super().to_dict()
		out["path"] = self.path
		out["field"] = self.field
		return out

	def format_human(self) -> str:
		parts = [super().format_human()]
		if self.path:
			parts.append(f"path={self.path}")
		if self.field:
			parts.append(f"field={self.field}")
		return " ".join(parts)


__all__ = [
	"Ambiguous",
	"DescriptorSyntaxError",
	"DuplicateExactMatch",
	"ErasureCollision",
	"HierarchyCycle",
	"ManifestError",
	"NotFound",
	"RegistryClosed",
	"RegistryError",
	"RegistryFrozen",
]
