# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
isosplit package: split one annotated syntax tree into per-target variants.

Layers:
  core:   build-target vocabulary, spans, diagnostics
  syntax: SyntaxNode family, tree dump reader/printer
  filter: the target filter pass
"""

__all__ = ["core", "syntax", "filter"]
