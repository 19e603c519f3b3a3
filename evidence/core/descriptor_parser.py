# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for descriptor text.

Accepted shapes:
  Int
  List<Int>
  Map<String, List<Int>>
  geo.shapes:Point          (module-qualified nominal type)
  geo.shapes:Outer.Inner<T> (qualname with dots after the colon)

Unqualified names are builtins (`module=None`). A dotted name without a colon
is also treated as a builtin name; qualify with `module:` to bind it to a
module.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from lark import Lark, Token, Tree
from lark.exceptions import LarkError, UnexpectedInput

from evidence.core.descriptors import TypeDescriptor
from evidence.errors import DescriptorSyntaxError

_GRAMMAR_PATH = Path(__file__).with_name("descriptor.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	maybe_placeholders=False,
)


def _name(node: Tree) -> str:
	return node.data if isinstance(node.data, str) else node.data.value


def _dotted(node: Tree) -> str:
	return ".".join(tok.value for tok in node.children if isinstance(tok, Token))


def _build_descriptor(node: Tree) -> TypeDescriptor:
	if _name(node) != "descriptor":
		raise TypeError(f"expected descriptor node, got {_name(node)}")
	qual = node.children[0]
	parts = [_dotted(c) for c in qual.children if isinstance(c, Tree)]
	if len(parts) == 2:
		module, name = parts
	else:
		module, name = None, parts[0]
	args: List[TypeDescriptor] = []
	if len(node.children) > 1:
		type_args = node.children[1]
		args = [_build_descriptor(c) for c in type_args.children if isinstance(c, Tree)]
	return TypeDescriptor(module=module, name=name, args=tuple(args))


@lru_cache(maxsize=1024)
def parse_descriptor(text: str) -> TypeDescriptor:
	"""Parse descriptor text into a TypeDescriptor (raises DescriptorSyntaxError)."""
	if not isinstance(text, str) or not text.strip():
		raise DescriptorSyntaxError(str(text))
	try:
		tree = _PARSER.parse(text)
	except UnexpectedInput as err:
		raise DescriptorSyntaxError(text, column=getattr(err, "column", None)) from err
	except LarkError as err:
		raise DescriptorSyntaxError(text) from err
	return _build_descriptor(tree.children[0])


__all__ = ["parse_descriptor"]
