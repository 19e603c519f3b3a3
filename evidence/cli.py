# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`evidence` command line.

  evidence check MANIFEST [--json] [--strict]
      Coherence report for a manifest. Exit 0 when clean, 1 when --strict and
      only warnings were found, 2 on errors.

  evidence resolve MANIFEST --kind KIND --type TYPE [--json]
      Build the registry and print the implementation reference TYPE resolves
      to. Exit 2 on NotFound/Ambiguous or an invalid manifest.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from evidence.coherence import has_errors
from evidence.core.refs import implementation_ref
from evidence.errors import RegistryError
from evidence.manifest import build_registry, check_manifest, load_manifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckOptions:
	manifest_path: Path
	strict: bool = False
	json: bool = False


@dataclass(frozen=True)
class ResolveOptions:
	manifest_path: Path
	kind: str
	type: str
	json: bool = False


def _kind_name(text: str) -> str:
	if not text.strip():
		raise argparse.ArgumentTypeError("capability kind must be a non-empty name")
	return text


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="evidence", description="Capability registry tooling")
	p.add_argument(
		"--log-level",
		default="WARNING",
		choices=["DEBUG", "INFO", "WARNING", "ERROR"],
		help="Logging level (default: WARNING)",
	)
	sub = p.add_subparsers(dest="cmd", required=True)

	check = sub.add_parser("check", help="Report conflicts and potential ambiguities in a manifest")
	check.add_argument("manifest", type=Path, help="Path to the manifest JSON file")
	check.add_argument("--strict", action="store_true", help="Exit non-zero on warnings too")
	check.add_argument("--json", action="store_true", help="Emit machine-readable JSON report")

	resolve = sub.add_parser("resolve", help="Resolve one (kind, type) pair against a manifest")
	resolve.add_argument("manifest", type=Path, help="Path to the manifest JSON file")
	resolve.add_argument("--kind", required=True, type=_kind_name, help="Capability kind (e.g. SettableParameter)")
	resolve.add_argument("--type", required=True, dest="type_text", help="Descriptor text (e.g. 'List<Int>')")
	resolve.add_argument("--json", action="store_true", help="Emit machine-readable JSON report")
	return p


def _emit(obj: dict, *, as_json: bool) -> None:
	if as_json:
		print(json.dumps(obj, sort_keys=True, separators=(",", ":")))
	else:
		print(json.dumps(obj, indent=2, sort_keys=True))


def run_check(opts: CheckOptions) -> int:
	try:
		diags = check_manifest(load_manifest(opts.manifest_path))
	except RegistryError as err:
		if opts.json:
			_emit({"ok": False, "error": err.to_dict()}, as_json=True)
		else:
			print(err.format_human(), file=sys.stderr)
		return 2
	if opts.json:
		_emit({"ok": not has_errors(diags), "diagnostics": [d.to_dict() for d in diags]}, as_json=True)
	else:
		for diag in diags:
			print(diag.format_human(), file=sys.stderr)
	if has_errors(diags):
		return 2
	if opts.strict and diags:
		return 1
	return 0


def run_resolve(opts: ResolveOptions) -> int:
	try:
		registry = build_registry(load_manifest(opts.manifest_path))
		impl = registry.resolve_type(opts.kind, opts.type)
	except RegistryError as err:
		if opts.json:
			_emit({"ok": False, "error": err.to_dict()}, as_json=True)
		else:
			print(err.format_human(), file=sys.stderr)
		return 2
	ref = implementation_ref(impl)
	if opts.json:
		_emit({"ok": True, "kind": opts.kind, "type": opts.type, "implementation": ref}, as_json=True)
	else:
		print(ref)
	return 0


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

	if args.cmd == "check":
		return run_check(CheckOptions(manifest_path=args.manifest, strict=bool(args.strict), json=bool(args.json)))

	if args.cmd == "resolve":
		return run_resolve(
			ResolveOptions(manifest_path=args.manifest, kind=args.kind, type=args.type_text, json=bool(args.json))
		)

	raise AssertionError("unreachable")


__all__ = ["CheckOptions", "ResolveOptions", "main", "run_check", "run_resolve"]
