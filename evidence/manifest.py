# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Capability manifest (v0).

A manifest is a JSON description of a capability table that is read at
start-up to build a fresh registry:

	{
	  "format": "evidence-manifest",
	  "version": 0,
	  "policy": {"name": "erased", "keep": ["Array"]},
	  "hierarchy": {"Int": ["Number"]},
	  "freeze": true,
	  "registrations": [
	    {"kind": "SettableParameter", "type": "String", "impl": "app.binders:bind_string", "rank": 0}
	  ]
	}

`policy` may also be a bare string. Unknown fields are rejected at every level
so typos fail loudly instead of being ignored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from evidence.coherence import PlannedRegistration, check_entries, has_errors
from evidence.core.descriptor_parser import parse_descriptor
from evidence.core.descriptors import CapabilityKind
from evidence.core.diagnostics import Diagnostic
from evidence.core.refs import import_ref
from evidence.erasure import DescriptorPolicy, policy_from_name
from evidence.errors import DescriptorSyntaxError, HierarchyCycle, ManifestError
from evidence.hierarchy import TypeHierarchy
from evidence.registry import CapabilityRegistry

logger = logging.getLogger(__name__)

MANIFEST_FORMAT = "evidence-manifest"
MANIFEST_VERSION = 0


@dataclass(frozen=True)
class ManifestEntry:
	kind: str
	type: str
	impl: str
	rank: int = 0


@dataclass(frozen=True)
class Manifest:
	policy_name: str = "reified"
	policy_keep: Tuple[str, ...] = ()
	hierarchy: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
	freeze: bool = True
	registrations: Tuple[ManifestEntry, ...] = ()
	path: Optional[str] = None


def _check_fields(obj: Mapping[str, Any], allowed: set[str], *, where: str, path: str | None) -> None:
	unknown = sorted(set(obj.keys()) - allowed)
	if unknown:
		raise ManifestError(f"{where} has unknown fields: {', '.join(unknown)}", path=path, field=where)


def _parse_policy(raw: Any, *, path: str | None) -> Tuple[str, Tuple[str, ...]]:
	if raw is None:
		return "reified", ()
	if isinstance(raw, str):
		return raw, ()
	if not isinstance(raw, dict):
		raise ManifestError("policy must be a string or an object", path=path, field="policy")
	_check_fields(raw, {"name", "keep"}, where="policy", path=path)
	name = raw.get("name")
	if not isinstance(name, str):
		raise ManifestError("policy.name must be a string", path=path, field="policy.name")
	keep = raw.get("keep", [])
	if not isinstance(keep, list) or not all(isinstance(k, str) for k in keep):
		raise ManifestError("policy.keep must be a list of strings", path=path, field="policy.keep")
	return name, tuple(keep)


def _parse_hierarchy(raw: Any, *, path: str | None) -> Dict[str, Tuple[str, ...]]:
	if raw is None:
		return {}
	if not isinstance(raw, dict):
		raise ManifestError("hierarchy must be an object", path=path, field="hierarchy")
	out: Dict[str, Tuple[str, ...]] = {}
	for child, parents in raw.items():
		if isinstance(parents, str):
			parents = [parents]
		if not isinstance(parents, list) or not all(isinstance(p, str) for p in parents):
			raise ManifestError(
				f"hierarchy['{child}'] must be a string or a list of strings",
				path=path,
				field=f"hierarchy.{child}",
			)
		out[child] = tuple(parents)
	return out


def _parse_entry(raw: Any, idx: int, *, path: str | None) -> ManifestEntry:
	where = f"registrations[{idx}]"
	if not isinstance(raw, dict):
		raise ManifestError(f"{where} must be an object", path=path, field=where)
	_check_fields(raw, {"kind", "type", "impl", "rank"}, where=where, path=path)
	for name in ("kind", "type", "impl"):
		val = raw.get(name)
		if not isinstance(val, str) or not val:
			raise ManifestError(f"{where}.{name} must be a non-empty string", path=path, field=f"{where}.{name}")
	rank = raw.get("rank", 0)
	if isinstance(rank, bool) or not isinstance(rank, int):
		raise ManifestError(f"{where}.rank must be an integer", path=path, field=f"{where}.rank")
	return ManifestEntry(kind=raw["kind"], type=raw["type"], impl=raw["impl"], rank=rank)


def parse_manifest(data: Any, *, path: str | None = None) -> Manifest:
	if not isinstance(data, dict):
		raise ManifestError("manifest must be a JSON object", path=path)
	if data.get("format") != MANIFEST_FORMAT or data.get("version") != MANIFEST_VERSION:
		raise ManifestError(
			f"unsupported manifest format/version (expected {MANIFEST_FORMAT!r} v{MANIFEST_VERSION})",
			path=path,
			field="format",
		)
	_check_fields(
		data,
		{"format", "version", "policy", "hierarchy", "freeze", "registrations"},
		where="manifest",
		path=path,
	)
	policy_name, keep = _parse_policy(data.get("policy"), path=path)
	hierarchy = _parse_hierarchy(data.get("hierarchy"), path=path)
	freeze = data.get("freeze", True)
	if not isinstance(freeze, bool):
		raise ManifestError("freeze must be a boolean", path=path, field="freeze")
	regs = data.get("registrations", [])
	if not isinstance(regs, list):
		raise ManifestError("registrations must be a list", path=path, field="registrations")
	entries = tuple(_parse_entry(r, i, path=path) for i, r in enumerate(regs))
	return Manifest(
		policy_name=policy_name,
		policy_keep=keep,
		hierarchy=hierarchy,
		freeze=freeze,
		registrations=entries,
		path=path,
	)


def load_manifest(path: Path) -> Manifest:
	try:
		data = json.loads(Path(path).read_text(encoding="utf-8"))
	except FileNotFoundError:
		raise ManifestError("manifest file not found", path=str(path)) from None
	except json.JSONDecodeError as err:
		raise ManifestError(f"manifest is not valid JSON: {err.msg} (line {err.lineno})", path=str(path)) from err
	return parse_manifest(data, path=str(path))


def manifest_policy(manifest: Manifest) -> DescriptorPolicy:
	try:
		return policy_from_name(manifest.policy_name, keep=manifest.policy_keep)
	except ValueError as err:
		raise ManifestError(str(err), path=manifest.path, field="policy") from err


def manifest_hierarchy(manifest: Manifest) -> TypeHierarchy:
	hierarchy = TypeHierarchy()
	for child, parents in manifest.hierarchy.items():
		try:
			hierarchy.declare(child, *parents)
		except (DescriptorSyntaxError, HierarchyCycle) as err:
			raise ManifestError(err.message, path=manifest.path, field=f"hierarchy.{child}") from err
	return hierarchy


def plan_registrations(manifest: Manifest) -> List[PlannedRegistration]:
	planned: List[PlannedRegistration] = []
	for idx, entry in enumerate(manifest.registrations):
		try:
			descriptor = parse_descriptor(entry.type)
		except DescriptorSyntaxError as err:
			raise ManifestError(err.message, path=manifest.path, field=f"registrations[{idx}].type") from err
		planned.append(
			PlannedRegistration(kind=CapabilityKind(entry.kind), descriptor=descriptor, rank=entry.rank, label=entry.impl)
		)
	return planned


def check_manifest(manifest: Manifest) -> List[Diagnostic]:
	"""Coherence report for a manifest; does not import implementations."""
	return check_entries(
		plan_registrations(manifest),
		policy=manifest_policy(manifest),
		hierarchy=manifest_hierarchy(manifest),
	)


def build_registry(
	manifest: Manifest,
	*,
	importer: Callable[[str], Any] = import_ref,
) -> CapabilityRegistry:
	"""
	Build (and, when the manifest asks for it, freeze) a registry.

	All conflicts are reported together before anything is imported; warnings
	are logged and do not stop the build.
	"""
	diags = check_manifest(manifest)
	for diag in diags:
		if not diag.is_error:
			logger.warning("%s: %s", manifest.path or "<manifest>", diag.message)
	if has_errors(diags):
		summary = "; ".join(d.message for d in diags if d.is_error)
		raise ManifestError(f"manifest has conflicting registrations: {summary}", path=manifest.path)

	registry = CapabilityRegistry(policy=manifest_policy(manifest), hierarchy=manifest_hierarchy(manifest))
	for idx, (entry, plan) in enumerate(zip(manifest.registrations, plan_registrations(manifest))):
		try:
			impl = importer(entry.impl)
		except (ImportError, ValueError) as err:
			raise ManifestError(
				f"cannot import implementation '{entry.impl}': {err}",
				path=manifest.path,
				field=f"registrations[{idx}].impl",
			) from err
		registry.register(plan.kind, plan.descriptor, impl, plan.rank)
	if manifest.freeze:
		registry.freeze()
	logger.info(
		"built registry from %s: %d registrations across %d kinds",
		manifest.path or "<manifest>",
		len(registry),
		len(registry.kinds()),
	)
	return registry


__all__ = [
	"MANIFEST_FORMAT",
	"MANIFEST_VERSION",
	"Manifest",
	"ManifestEntry",
	"build_registry",
	"check_manifest",
	"load_manifest",
	"manifest_hierarchy",
	"manifest_policy",
	"parse_manifest",
	"plan_registrations",
]
