# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Up-front coherence report for a capability table.

`CapabilityRegistry.register` stops at the first conflict. This module looks
at a whole batch and reports every problem as a Diagnostic, without raising:

  error   duplicate-exact-match  same kind, same declared descriptor
  error   erasure-collision      same kind, different descriptors, same key
  error   incomparable-rank      ranks under one kind cannot be ordered
  warning potential-ambiguity    same kind, same rank, and some type known to
                                 the hierarchy matches both keys (one key a
                                 subtype of the other, or a shared subtype as
                                 in `Int <: Number`, `Int <: Ordered`): its
                                 values would tie at resolve time
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from evidence.core.descriptors import CapabilityKind, TypeDescriptor, origins_conflict
from evidence.core.diagnostics import Diagnostic
from evidence.core.refs import implementation_ref
from evidence.erasure import DescriptorPolicy
from evidence.hierarchy import TypeHierarchy
from evidence.registry import CapabilityRegistry


@dataclass(frozen=True)
class PlannedRegistration:
	kind: CapabilityKind
	descriptor: TypeDescriptor
	rank: Any = 0
	label: str = ""


def _ranks_equal(a: Any, b: Any) -> bool:
	return not (a < b) and not (b < a)


def check_entries(
	entries: Iterable[PlannedRegistration],
	*,
	policy: DescriptorPolicy,
	hierarchy: TypeHierarchy,
) -> List[Diagnostic]:
	diags: List[Diagnostic] = []
	by_kind: Dict[CapabilityKind, Dict[TypeDescriptor, PlannedRegistration]] = {}
	for entry in entries:
		kind_entries = by_kind.setdefault(entry.kind, {})
		key = policy.normalize(entry.descriptor)
		first = kind_entries.get(key)
		if first is None:
			kind_entries[key] = entry
			continue
		if first.descriptor == entry.descriptor and not origins_conflict(first.descriptor, entry.descriptor):
			diags.append(
				Diagnostic(
					message=f"duplicate implementation of '{entry.kind}' for '{entry.descriptor}'",
					code="duplicate-exact-match",
					kind=entry.kind.name,
					descriptors=[str(entry.descriptor)],
					notes=[n for n in (first.label, entry.label) if n],
				)
			)
		else:
			diags.append(
				Diagnostic(
					message=(
						f"'{first.descriptor}' and '{entry.descriptor}' collapse to '{key}' "
						f"under the {policy.name} policy for '{entry.kind}'"
					),
					code="erasure-collision",
					kind=entry.kind.name,
					descriptors=[str(first.descriptor), str(entry.descriptor)],
					notes=[n for n in (first.label, entry.label) if n],
				)
			)

	for kind in sorted(by_kind, key=lambda k: k.name):
		items: List[Tuple[TypeDescriptor, PlannedRegistration]] = sorted(
			by_kind[kind].items(), key=lambda item: str(item[0])
		)
		known = [key for key, _ in items]
		for i, (key_a, a) in enumerate(items):
			for key_b, b in items[i + 1 :]:
				try:
					same_rank = _ranks_equal(a.rank, b.rank)
				except TypeError:
					diags.append(
						Diagnostic(
							message=(
								f"ranks {a.rank!r} ('{a.descriptor}') and {b.rank!r} ('{b.descriptor}') "
								f"cannot be compared under '{kind}'"
							),
							code="incomparable-rank",
							kind=kind.name,
							descriptors=[str(a.descriptor), str(b.descriptor)],
						)
					)
					continue
				if not same_rank:
					continue
				witness = hierarchy.common_subtype(key_a, key_b, known)
				if witness is None:
					continue
				if witness == key_a or witness == key_b:
					narrow, wide = (a, b) if witness == key_a else (b, a)
					message = (
						f"values of '{narrow.descriptor}' would be ambiguous for '{kind}': "
						f"'{narrow.descriptor}' and '{wide.descriptor}' share rank {a.rank!r}"
					)
					involved = [str(narrow.descriptor), str(wide.descriptor)]
					note = "give the narrower registration a higher rank"
				else:
					message = (
						f"values of '{witness}' would be ambiguous for '{kind}': it matches both "
						f"'{a.descriptor}' and '{b.descriptor}' at rank {a.rank!r}"
					)
					involved = [str(a.descriptor), str(b.descriptor)]
					note = f"rank one of them higher, or register '{witness}' directly with a higher rank"
				diags.append(
					Diagnostic(
						message=message,
						code="potential-ambiguity",
						severity="warning",
						kind=kind.name,
						descriptors=involved,
						notes=[note],
					)
				)
	return diags


def check_registrations(registry: CapabilityRegistry) -> List[Diagnostic]:
	"""Report potential ambiguities among a registry's ACTIVE registrations."""
	planned = [
		PlannedRegistration(
			kind=reg.kind,
			descriptor=reg.descriptor,
			rank=reg.rank,
			label=implementation_ref(reg.implementation),
		)
		for reg in registry.registrations()
	]
	return check_entries(planned, policy=registry.policy, hierarchy=registry.hierarchy)


def has_errors(diags: Iterable[Diagnostic]) -> bool:
	return any(d.is_error for d in diags)


__all__ = ["PlannedRegistration", "check_entries", "check_registrations", "has_errors"]
