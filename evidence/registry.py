# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Capability registry.

Stores implementations keyed by (capability kind, normalized descriptor) and
resolves a (kind, value) request to exactly one implementation or a typed
failure.

Concurrency:
  - Writes (register, unregister, freeze, close, declare_subtype) are
    serialized by one lock.
  - Every write publishes a new immutable snapshot. `resolve` reads the
    current snapshot once and never takes the lock.
  - After `freeze()` the snapshot never changes; any number of threads may
    resolve concurrently.

Lifecycle of a registration: CREATED (being validated) -> ACTIVE -> REMOVED.
REMOVED is terminal; a registration that fails validation is never ACTIVE.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

from evidence.core.coerce import TypeLike, as_descriptor
from evidence.core.descriptors import CapabilityKind, TypeDescriptor, as_kind, origins_conflict
from evidence.erasure import DescriptorPolicy, ReifiedPolicy
from evidence.errors import DuplicateExactMatch, ErasureCollision, RegistryClosed, RegistryFrozen
from evidence.hierarchy import TypeHierarchy
from evidence.resolver import ResolutionRequest, ResolutionResult, gather_candidates, resolve_request

logger = logging.getLogger(__name__)

RegistrationId = int


class RegistrationState(Enum):
	CREATED = auto()
	ACTIVE = auto()
	REMOVED = auto()


@dataclass(frozen=True)
class Registration:
	"""One implementation of a capability for one declared descriptor."""

	registration_id: RegistrationId
	kind: CapabilityKind
	descriptor: TypeDescriptor  # as declared
	key: TypeDescriptor  # after policy normalization; the index key
	implementation: Any = field(compare=False)
	rank: Any = 0


@dataclass(frozen=True)
class _Snapshot:
	by_kind: Mapping[CapabilityKind, Mapping[TypeDescriptor, Registration]]
	by_id: Mapping[RegistrationId, Registration]


_EMPTY = _Snapshot(by_kind=MappingProxyType({}), by_id=MappingProxyType({}))


class RegistrationHandle:
	"""
	Token returned by `register`.

	Usable as a context manager: leaving the block unregisters.
	"""

	def __init__(self, registry: "CapabilityRegistry", registration: Registration) -> None:
		self._registry = registry
		self.registration = registration

	@property
	def registration_id(self) -> RegistrationId:
		return self.registration.registration_id

	@property
	def state(self) -> RegistrationState:
		return self._registry.state_of(self.registration_id)

	def unregister(self) -> None:
		self._registry.unregister(self)

	def __enter__(self) -> "RegistrationHandle":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.unregister()

	def __repr__(self) -> str:
		reg = self.registration
		return f"RegistrationHandle(id={reg.registration_id}, kind={reg.kind}, descriptor={reg.descriptor})"


class CapabilityRegistry:
	def __init__(
		self,
		*,
		policy: Optional[DescriptorPolicy] = None,
		hierarchy: Optional[TypeHierarchy] = None,
	) -> None:
		self.policy: DescriptorPolicy = policy if policy is not None else ReifiedPolicy()
		self.hierarchy = hierarchy if hierarchy is not None else TypeHierarchy()
		self._lock = threading.RLock()
		self._snapshot = _EMPTY
		self._states: Dict[RegistrationId, RegistrationState] = {}
		self._ids = itertools.count(1)
		self._frozen = False
		self._closed = False

	# --- state -----------------------------------------------------------------

	@property
	def frozen(self) -> bool:
		return self._frozen

	@property
	def closed(self) -> bool:
		return self._closed

	def state_of(self, registration_id: RegistrationId) -> RegistrationState:
		try:
			return self._states[registration_id]
		except KeyError:
			raise KeyError(f"unknown registration id {registration_id}") from None

	def _check_writable(self, operation: str) -> None:
		if self._closed:
			raise RegistryClosed(operation)
		if self._frozen:
			raise RegistryFrozen(operation)

	def _publish(self, by_kind: Dict[CapabilityKind, Dict[TypeDescriptor, Registration]]) -> None:
		by_id = {reg.registration_id: reg for entries in by_kind.values() for reg in entries.values()}
		self._snapshot = _Snapshot(
			by_kind=MappingProxyType({k: MappingProxyType(dict(v)) for k, v in by_kind.items() if v}),
			by_id=MappingProxyType(by_id),
		)

	def _mutable_copy(self) -> Dict[CapabilityKind, Dict[TypeDescriptor, Registration]]:
		return {k: dict(v) for k, v in self._snapshot.by_kind.items()}

	# --- writes ----------------------------------------------------------------

	def register(
		self,
		kind: CapabilityKind | str,
		ty: TypeLike,
		implementation: Any,
		rank: Any = 0,
	) -> RegistrationHandle:
		"""
		Register `implementation` as the evidence of `kind` for `ty`.

		Raises DuplicateExactMatch when the same declared descriptor is already
		registered for `kind`, and ErasureCollision when a different declared
		descriptor normalizes to the same key. Two distinct classes sharing
		`module:QualName` are different descriptors here. `rank` must be comparable with
		the ranks already registered for `kind`; higher is more specific.
		"""
		cap = as_kind(kind)
		descriptor = as_descriptor(ty)
		if rank is None:
			raise TypeError("specificity rank must not be None")
		with self._lock:
			self._check_writable("register")
			key = self.policy.normalize(descriptor)
			reg = Registration(
				registration_id=next(self._ids),
				kind=cap,
				descriptor=descriptor,
				key=key,
				implementation=implementation,
				rank=rank,
			)
			self._states[reg.registration_id] = RegistrationState.CREATED
			try:
				by_kind = self._mutable_copy()
				entries = by_kind.setdefault(cap, {})
				self._validate(reg, entries)
			except BaseException:
				del self._states[reg.registration_id]
				raise
			entries[key] = reg
			self._publish(by_kind)
			self._states[reg.registration_id] = RegistrationState.ACTIVE
		logger.debug("registered %s for %s (key %s, rank %r) as #%d", cap, descriptor, key, rank, reg.registration_id)
		return RegistrationHandle(self, reg)

	def _validate(self, reg: Registration, entries: Mapping[TypeDescriptor, Registration]) -> None:
		existing = entries.get(reg.key)
		if existing is not None:
			if existing.descriptor == reg.descriptor and not origins_conflict(existing.descriptor, reg.descriptor):
				raise DuplicateExactMatch(reg.kind, reg.descriptor, existing=existing)
			raise ErasureCollision(reg.kind, reg.descriptor, existing=existing, key=reg.key)
		for other in entries.values():
			try:
				_ = other.rank < reg.rank
			except TypeError:
				raise TypeError(
					f"rank {reg.rank!r} for '{reg.descriptor}' is not comparable with rank "
					f"{other.rank!r} of '{other.descriptor}' under capability '{reg.kind}'"
				) from None

	def unregister(self, handle: RegistrationHandle | RegistrationId) -> None:
		"""Remove a registration. Idempotent: removing twice is a no-op."""
		reg_id = handle.registration_id if isinstance(handle, RegistrationHandle) else handle
		with self._lock:
			state = self._states.get(reg_id)
			if state is None:
				raise KeyError(f"unknown registration id {reg_id}")
			if state is RegistrationState.REMOVED:
				return
			self._check_writable("unregister")
			reg = self._snapshot.by_id[reg_id]
			by_kind = self._mutable_copy()
			del by_kind[reg.kind][reg.key]
			self._publish(by_kind)
			self._states[reg_id] = RegistrationState.REMOVED
		logger.debug("unregistered #%d (%s for %s)", reg_id, reg.kind, reg.descriptor)

	def declare_subtype(self, child: TypeLike, *parents: TypeLike) -> None:
		with self._lock:
			self._check_writable("declare a subtype edge")
			self.hierarchy.declare(child, *parents)

	def freeze(self) -> "CapabilityRegistry":
		"""Reject further writes; resolution is lock-free from here on."""
		with self._lock:
			if self._closed:
				raise RegistryClosed("freeze")
			if not self._frozen:
				self._frozen = True
				self.hierarchy.freeze()
				logger.debug("registry frozen with %d registrations", len(self._snapshot.by_id))
		return self

	def close(self) -> None:
		"""Tear down: every ACTIVE registration becomes REMOVED. Idempotent."""
		with self._lock:
			if self._closed:
				return
			for reg_id in self._snapshot.by_id:
				self._states[reg_id] = RegistrationState.REMOVED
			self._snapshot = _EMPTY
			self._closed = True
		logger.debug("registry closed")

	def __enter__(self) -> "CapabilityRegistry":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.close()

	# --- reads -----------------------------------------------------------------

	def _request(self, kind: CapabilityKind | str, descriptor: TypeDescriptor) -> ResolutionRequest:
		return ResolutionRequest(kind=as_kind(kind), descriptor=descriptor)

	def try_resolve(self, kind: CapabilityKind | str, value: Any) -> ResolutionResult:
		request = self._request(kind, self.policy.describe(value))
		entries = self._snapshot.by_kind.get(request.kind, {})
		return resolve_request(entries, request, self.hierarchy)

	def try_resolve_type(self, kind: CapabilityKind | str, ty: TypeLike) -> ResolutionResult:
		request = self._request(kind, self.policy.normalize(as_descriptor(ty)))
		entries = self._snapshot.by_kind.get(request.kind, {})
		return resolve_request(entries, request, self.hierarchy)

	def resolve(self, kind: CapabilityKind | str, value: Any) -> Any:
		"""Return the implementation of `kind` for `value` (raises NotFound/Ambiguous)."""
		return self.try_resolve(kind, value).unwrap()

	def resolve_type(self, kind: CapabilityKind | str, ty: TypeLike) -> Any:
		"""Like `resolve`, for a descriptor, descriptor text or class instead of a value."""
		return self.try_resolve_type(kind, ty).unwrap()

	def candidates(self, kind: CapabilityKind | str, value: Any) -> List[Registration]:
		"""Every registration matching `value`, highest rank first (no selection)."""
		entries = self._snapshot.by_kind.get(as_kind(kind), {})
		return gather_candidates(entries, self.policy.describe(value), self.hierarchy)

	def registrations(self, kind: CapabilityKind | str | None = None) -> List[Registration]:
		snap = self._snapshot
		if kind is None:
			regs = list(snap.by_id.values())
		else:
			regs = list(snap.by_kind.get(as_kind(kind), {}).values())
		return sorted(regs, key=lambda r: r.registration_id)

	def kinds(self) -> List[CapabilityKind]:
		return sorted(self._snapshot.by_kind.keys(), key=lambda k: k.name)

	def __len__(self) -> int:
		return len(self._snapshot.by_id)

	def __iter__(self) -> Iterator[Registration]:
		return iter(self.registrations())

	def __contains__(self, item: object) -> bool:
		if isinstance(item, RegistrationHandle):
			item = item.registration_id
		return item in self._snapshot.by_id

	def __repr__(self) -> str:
		flags = " frozen" if self._frozen else ""
		flags += " closed" if self._closed else ""
		return f"<CapabilityRegistry policy={self.policy.name} registrations={len(self)}{flags}>"


__all__ = [
	"CapabilityRegistry",
	"Registration",
	"RegistrationHandle",
	"RegistrationId",
	"RegistrationState",
]
