# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Import references of the form `package.module:attr.path`."""

from __future__ import annotations

import importlib
from typing import Any


def implementation_ref(obj: Any) -> str:
	"""
	Best-effort `module:qualname` label for an implementation object.

	Instances are labelled by their class; the label is for humans and reports,
	it is not guaranteed to round-trip through `import_ref`.
	"""
	target = obj if hasattr(obj, "__qualname__") else type(obj)
	module = getattr(target, "__module__", None)
	qualname = getattr(target, "__qualname__", None) or repr(obj)
	if module and module != "builtins":
		return f"{module}:{qualname}"
	return qualname


def import_ref(ref: str) -> Any:
	"""Import `package.module:attr.path` and return the attribute."""
	module_name, sep, attr_path = ref.partition(":")
	if not sep or not module_name or not attr_path:
		raise ValueError(f"invalid import reference '{ref}' (expected 'module:attr')")
	module = importlib.import_module(module_name)
	obj: Any = module
	for part in attr_path.split("."):
		try:
			obj = getattr(obj, part)
		except AttributeError as err:
			raise ValueError(f"import reference '{ref}': '{part}' not found") from err
	return obj


__all__ = ["implementation_ref", "import_ref"]
