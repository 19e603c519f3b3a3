# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
evidence: capability registry with type-class style resolution.

Register one implementation ("evidence") of a capability per type, then
resolve a value to exactly that implementation, or to a typed failure:

	registry = CapabilityRegistry()
	registry.register("SettableParameter", str, bind_string)
	registry.resolve("SettableParameter", "abc")  # -> bind_string

The CLI entrypoint is `evidence.cli:main`.
"""

from evidence.coherence import check_registrations
from evidence.core.descriptor_parser import parse_descriptor
from evidence.core.descriptors import ANY, CapabilityKind, TypeDescriptor
from evidence.core.runtime_types import descriptor_of, descriptor_of_class
from evidence.erasure import ErasedPolicy, ReifiedPolicy
from evidence.errors import (
	Ambiguous,
	DuplicateExactMatch,
	ErasureCollision,
	NotFound,
	RegistryClosed,
	RegistryError,
	RegistryFrozen,
)
from evidence.hierarchy import TypeHierarchy
from evidence.registry import CapabilityRegistry, Registration, RegistrationHandle, RegistrationState
from evidence.resolver import ResolutionResult, ResolutionStatus
from evidence.typeclass import TypeClass

__all__ = [
	"ANY",
	"Ambiguous",
	"CapabilityKind",
	"CapabilityRegistry",
	"DuplicateExactMatch",
	"ErasedPolicy",
	"ErasureCollision",
	"NotFound",
	"Registration",
	"RegistrationHandle",
	"RegistrationState",
	"RegistryClosed",
	"RegistryError",
	"RegistryFrozen",
	"ReifiedPolicy",
	"ResolutionResult",
	"ResolutionStatus",
	"TypeClass",
	"TypeDescriptor",
	"TypeHierarchy",
	"check_registrations",
	"descriptor_of",
	"descriptor_of_class",
	"parse_descriptor",
]
