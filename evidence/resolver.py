# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolution atop the registry's ACTIVE set.

Rules:
- Candidates are registrations under the requested kind whose key is the
  request descriptor or a supertype of it in the hierarchy. A key computed
  from a different Python class with the same name never matches.
- No candidates -> NOT_FOUND.
- One candidate -> RESOLVED.
- Several -> the strictly highest rank wins; a tie at the top is AMBIGUOUS.
  Registration order never breaks a tie.

Everything here is a pure function of (entries, hierarchy, request); the
registry passes in the snapshot it read, so resolution never touches registry
state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple

from evidence.core.descriptors import CapabilityKind, TypeDescriptor, descriptor_str
from evidence.errors import Ambiguous, NotFound, RegistryError
from evidence.hierarchy import TypeHierarchy

if TYPE_CHECKING:
	from evidence.registry import Registration


class ResolutionStatus(Enum):
	RESOLVED = auto()
	NOT_FOUND = auto()
	AMBIGUOUS = auto()


@dataclass(frozen=True)
class ResolutionRequest:
	kind: CapabilityKind
	descriptor: TypeDescriptor


@dataclass(frozen=True)
class ResolutionResult:
	"""Outcome of one lookup; `candidates` holds the tied set when AMBIGUOUS."""

	status: ResolutionStatus
	request: ResolutionRequest
	registration: Optional["Registration"] = None
	candidates: Tuple["Registration", ...] = ()

	@property
	def ok(self) -> bool:
		return self.status is ResolutionStatus.RESOLVED

	@property
	def implementation(self) -> Any:
		return self.unwrap()

	def error(self) -> RegistryError | None:
		if self.status is ResolutionStatus.NOT_FOUND:
			return NotFound(self.request.kind, self.request.descriptor)
		if self.status is ResolutionStatus.AMBIGUOUS:
			return Ambiguous(self.request.kind, self.request.descriptor, self.candidates)
		return None

	def unwrap(self) -> Any:
		"""Return the implementation or raise the typed failure."""
		err = self.error()
		if err is not None:
			raise err
		assert self.registration is not None
		return self.registration.implementation


def _order(candidates: List["Registration"]) -> List["Registration"]:
	# Highest rank first; equal ranks ordered by key text so reports are stable.
	by_key = sorted(candidates, key=lambda r: (descriptor_str(r.key), r.registration_id))
	return sorted(by_key, key=lambda r: r.rank, reverse=True)


def gather_candidates(
	entries: Mapping[TypeDescriptor, "Registration"],
	descriptor: TypeDescriptor,
	hierarchy: TypeHierarchy,
) -> List["Registration"]:
	"""All registrations matching `descriptor`, highest rank first."""
	# No dict lookup by key: an equal key computed from a different class is
	# not a match, and only is_subtype compares origins.
	matched = [reg for reg in entries.values() if hierarchy.is_subtype(descriptor, reg.key)]
	return _order(matched)


def select(request: ResolutionRequest, candidates: List["Registration"]) -> ResolutionResult:
	"""Pick the winner from ordered candidates (see `gather_candidates`)."""
	if not candidates:
		return ResolutionResult(status=ResolutionStatus.NOT_FOUND, request=request)
	if len(candidates) == 1:
		return ResolutionResult(status=ResolutionStatus.RESOLVED, request=request, registration=candidates[0])
	top = candidates[0].rank
	tied = [c for c in candidates if not (c.rank < top)]
	if len(tied) > 1:
		return ResolutionResult(status=ResolutionStatus.AMBIGUOUS, request=request, candidates=tuple(tied))
	return ResolutionResult(status=ResolutionStatus.RESOLVED, request=request, registration=candidates[0])


def resolve_request(
	entries: Mapping[TypeDescriptor, "Registration"],
	request: ResolutionRequest,
	hierarchy: TypeHierarchy,
) -> ResolutionResult:
	return select(request, gather_candidates(entries, request.descriptor, hierarchy))


__all__ = [
	"ResolutionRequest",
	"ResolutionResult",
	"ResolutionStatus",
	"gather_candidates",
	"resolve_request",
	"select",
]
