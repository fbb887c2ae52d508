# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build-target vocabulary.

A build target is named by the annotation that claims code for it, so targets
are plain strings (`"server"`, `"browser"`, ...). The vocabulary is the closed
set of names the filter treats as annotations; any other callee is an ordinary
call. `anywhere` is reserved as the wildcard and is always a member.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Tuple

# Annotation name of a target (e.g. "browser").
BuildTarget = str

ANYWHERE: BuildTarget = "anywhere"
DEFAULT_TARGETS: Tuple[BuildTarget, ...] = ("server", "browser", ANYWHERE)

_TARGET_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*[?!]?$")


class TargetConfigError(ValueError):
	"""
	Invalid target configuration (bad vocabulary, unknown build target).

	Raised before any traversal begins; the driver reports it as a `config`
	phase diagnostic.
	"""


@dataclass(frozen=True)
class TargetVocabulary:
	"""Ordered, duplicate-free set of known targets (always includes `anywhere`)."""

	names: Tuple[BuildTarget, ...] = DEFAULT_TARGETS

	def __post_init__(self) -> None:
		seen: list[BuildTarget] = []
		for name in self.names:
			if not isinstance(name, str) or not _TARGET_NAME.match(name):
				raise TargetConfigError(f"invalid build target name {name!r}")
			if name not in seen:
				seen.append(name)
		if ANYWHERE not in seen:
			seen.append(ANYWHERE)
		object.__setattr__(self, "names", tuple(seen))

	@classmethod
	def of(cls, names: Iterable[BuildTarget]) -> "TargetVocabulary":
		# A bare string would otherwise be split into one-letter targets.
		if isinstance(names, str):
			raise TargetConfigError(f"expected a collection of target names, got the string {names!r}")
		return cls(names=tuple(names))

	@classmethod
	def parse(cls, text: str) -> "TargetVocabulary":
		"""Parse the comma separated CLI form, e.g. `server,browser`."""
		names = [part.strip() for part in text.split(",")]
		if not any(names):
			raise TargetConfigError("target list is empty")
		if any(not name for name in names):
			raise TargetConfigError(f"empty target name in {text!r}")
		return cls.of(names)

	def __contains__(self, name: object) -> bool:
		return name in self.names

	def __iter__(self):
		return iter(self.names)

	def __len__(self) -> int:
		return len(self.names)

	def build_targets(self) -> Tuple[BuildTarget, ...]:
		"""Concrete targets a build can be made for (everything but `anywhere`)."""
		return tuple(name for name in self.names if name != ANYWHERE)

	def require(self, build_target: BuildTarget) -> BuildTarget:
		"""Return `build_target` if it is a member of the vocabulary, else raise."""
		if build_target not in self.names:
			known = ", ".join(self.names)
			raise TargetConfigError(f"unknown build target {build_target!r} (known targets: {known})")
		return build_target


__all__ = [
	"ANYWHERE",
	"BuildTarget",
	"DEFAULT_TARGETS",
	"TargetConfigError",
	"TargetVocabulary",
]
