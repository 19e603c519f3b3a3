# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic records for batch checks.

Registration raises on the first problem; the coherence report and the
manifest loader instead collect every problem as a Diagnostic so a whole
capability table can be reviewed at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Diagnostic:
	"""A single finding (error or warning) about a set of registrations."""

	message: str
	code: str | None = None
	severity: str = "error"
	kind: str | None = None
	# Declared descriptors involved, rendered as text.
	descriptors: list[str] = field(default_factory=list)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.severity not in ("error", "warning"):
			raise ValueError(f"unknown diagnostic severity '{self.severity}'")

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def to_dict(self) -> dict[str, Any]:
		return {
			"message": self.message,
			"code": self.code,
			"severity": self.severity,
			"kind": self.kind,
			"descriptors": list(self.descriptors),
			"notes": list(self.notes),
		}

	def format_human(self) -> str:
		code = f"[{self.code}] " if self.code else ""
		out = f"{self.severity}: {code}{self.message}"
		for note in self.notes:
			out += f"\n  note: {note}"
		return out


__all__ = ["Diagnostic"]
