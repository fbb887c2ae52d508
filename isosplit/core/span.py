# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by tree nodes and diagnostics.

A Span can wrap whatever location object the tree reader provides via the
`raw` field while also carrying optional file/line/column info.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a reader/location object.

		If `loc` is already a Span, it is returned unchanged. lark trees expose
		their positions through `.meta`, tokens expose them directly; both are
		handled by the attribute lookups below.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		meta = getattr(loc, "meta", loc)
		if getattr(meta, "empty", False):
			return cls(file=file)
		return cls(
			file=file or getattr(meta, "file", None),
			line=getattr(meta, "line", None),
			column=getattr(meta, "column", None),
			end_line=getattr(meta, "end_line", None),
			end_column=getattr(meta, "end_column", None),
		)


__all__ = ["Span"]
