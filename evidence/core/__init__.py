# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
evidence.core: descriptor primitives shared by the registry and its tooling.

Modules:
  - descriptors: TypeDescriptor / CapabilityKind
  - descriptor_parser: lark parser for descriptor text
  - runtime_types: descriptor function for Python values
  - diagnostics: Diagnostic records for batch checks
  - refs: `module:attr` import references
  - coerce: descriptor/text/class coercion
"""
