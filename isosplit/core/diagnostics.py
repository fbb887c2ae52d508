"""
Common diagnostic structure for the reader, the filter and the driver.

Library code raises; the driver turns those errors into Diagnostics so it can
print them for humans or as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	# Phase label: "config", "parser" or "filter".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so the driver can rely
		# on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def location(self) -> str:
		line = self.span.line if self.span.line is not None else "?"
		column = self.span.column if self.span.column is not None else "?"
		return f"{line}:{column}"


__all__ = ["Diagnostic"]
