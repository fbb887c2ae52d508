# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Target filter: strip declarations meant for other build targets.

One annotated tree is specialized into per-target variants:

	class Page
	  server
	  def render; end      # server build only

	  browser
	  def render; end      # browser build only
	  def mount; end       # browser build only

	  anywhere(:title)     # `title` goes everywhere, whatever its region
	  def title; end
	end

Each sibling list (a `Block`) is handled in two steps before the survivors
are processed recursively:

1. classify: build `TargetClaims` for the list.
   - explicit claims: `server(:a, :b)` claims the named identifiers. The first
     claim of an identifier wins across the whole list.
   - regional claims: a zero-argument `server` opens a region; every
     declaration after it is claimed under `(identifier, index)` so same-named
     declarations in different regions stay distinct.
   Explicit claims take precedence over regional ones at lookup time.
2. filter: drop every annotation call, drop declarations whose resolved target
   is neither `anywhere` nor the build target, keep everything else in order.

Trees are immutable; the filter builds new nodes and shares unchanged
subtrees, so the same input tree can be filtered for several targets
concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Container, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from isosplit.core.targets import ANYWHERE, BuildTarget, DEFAULT_TARGETS, TargetVocabulary
from isosplit.syntax.nodes import (
	DECLARATION_KINDS,
	Block,
	Call,
	ClassDecl,
	ConstantAssign,
	FunctionDecl,
	GlobalAssign,
	MethodDecl,
	Other,
	SyntaxNode,
)

# (identifier, sibling index)
PositionalKey = Tuple[str, int]


class UnsupportedNodeError(NotImplementedError):
	"""Identifier extraction was asked about a node kind it does not know."""

	def __init__(self, node: object) -> None:
		super().__init__(f"no identifier for node kind {type(node).__name__}")
		self.node = node
		self.loc = getattr(node, "loc", None)


class UnresolvedTargetError(AssertionError):
	"""A declaration sibling has neither an explicit nor a regional claim."""

	def __init__(self, identifier: str, index: int, loc: object = None) -> None:
		super().__init__(f"declaration {identifier!r} at sibling {index} has no target claim")
		self.identifier = identifier
		self.index = index
		self.loc = loc


def identifier_for(node: SyntaxNode) -> str:
	"""
	Return the name token of a declaration or call.

	Only defined for declaration kinds and `Call`; anything else is a caller
	bug and raises `UnsupportedNodeError`.
	"""
	if isinstance(node, ClassDecl):
		# Namespace was split off when the tree was built: `A::B` -> `B`.
		return node.name
	if isinstance(node, (FunctionDecl, MethodDecl)):
		# Receiver of `def self.x` does not take part in identity.
		return node.name
	if isinstance(node, (ConstantAssign, GlobalAssign)):
		return node.name
	if isinstance(node, Call):
		return node.callee
	raise UnsupportedNodeError(node)


@dataclass(frozen=True)
class TargetClaims:
	"""Claims collected for one sibling list."""

	explicit: Mapping[str, BuildTarget] = field(default_factory=dict)
	regional: Mapping[PositionalKey, BuildTarget] = field(default_factory=dict)

	def resolve(self, identifier: str, index: int) -> Optional[BuildTarget]:
		"""Explicit claim first, then the region the sibling sits in."""
		target = self.explicit.get(identifier)
		if target is None:
			target = self.regional.get((identifier, index))
		return target


def _annotation_target(node: SyntaxNode, known: Container[BuildTarget]) -> Optional[BuildTarget]:
	if isinstance(node, Call) and node.callee in known:
		return node.callee
	return None


def _claimed_identifier(arg: SyntaxNode) -> Optional[str]:
	"""
	Raw identifier named by an annotation argument: the first atom of a literal
	such as `(sym :m)` or `(str "m")`. Non-literal arguments name nothing.
	"""
	if isinstance(arg, Other) and arg.children:
		value = arg.children[0]
		if isinstance(value, str):
			return str(value)
	return None


def _explicit_claims(siblings: Sequence[SyntaxNode], known: Container[BuildTarget]) -> Dict[str, BuildTarget]:
	claims: Dict[str, BuildTarget] = {}
	for node in siblings:
		target = _annotation_target(node, known)
		if target is None or not node.args:
			continue
		for arg in node.args:
			ident = _claimed_identifier(arg)
			if ident is not None and ident not in claims:
				claims[ident] = target
	return claims


def _regional_claims(siblings: Sequence[SyntaxNode], known: Container[BuildTarget]) -> Dict[PositionalKey, BuildTarget]:
	claims: Dict[PositionalKey, BuildTarget] = {}
	region: BuildTarget = ANYWHERE
	for idx, node in enumerate(siblings):
		target = _annotation_target(node, known)
		if target is not None:
			if not node.args:
				region = target
			continue
		if isinstance(node, DECLARATION_KINDS):
			claims[(identifier_for(node), idx)] = region
	return claims


def classify(siblings: Sequence[SyntaxNode], known: Container[BuildTarget]) -> TargetClaims:
	"""Collect explicit and regional claims for one sibling list."""
	return TargetClaims(
		explicit=MappingProxyType(_explicit_claims(siblings, known)),
		regional=MappingProxyType(_regional_claims(siblings, known)),
	)


def _same(old: object, new: object) -> bool:
	if isinstance(old, tuple) and isinstance(new, tuple):
		return len(old) == len(new) and all(a is b for a, b in zip(old, new))
	return old is new


def _rebuild(node: SyntaxNode, **changes: object) -> SyntaxNode:
	"""`replace(node, **changes)`, or `node` itself when nothing changed."""
	if all(_same(getattr(node, name), value) for name, value in changes.items()):
		return node
	return replace(node, **changes)


@dataclass(frozen=True)
class TargetFilter:
	"""Filters trees for a single build target."""

	build_target: BuildTarget
	vocabulary: TargetVocabulary = field(default_factory=TargetVocabulary)

	def __post_init__(self) -> None:
		self.vocabulary.require(self.build_target)

	def keeps(self, target: BuildTarget) -> bool:
		return target == ANYWHERE or target == self.build_target

	def filter(self, siblings: Sequence[SyntaxNode]) -> List[SyntaxNode]:
		"""Drop annotation calls and mistargeted declarations from one sibling list."""
		claims = classify(siblings, self.vocabulary)
		kept: List[SyntaxNode] = []
		for idx, node in enumerate(siblings):
			if isinstance(node, Call):
				if node.callee not in self.vocabulary:
					kept.append(node)
			elif isinstance(node, DECLARATION_KINDS):
				ident = identifier_for(node)
				target = claims.resolve(ident, idx)
				if target is None:
					raise UnresolvedTargetError(ident, idx, node.loc)
				if self.keeps(target):
					kept.append(node)
			else:
				kept.append(node)
		return kept

	def _body_siblings(self, node: SyntaxNode, kept: Dict[int, List[SyntaxNode]]) -> List[SyntaxNode]:
		"""
		Survivors of a declaration body that is a lone statement rather than a
		`Block`: it is filtered as a one-element sibling list.
		"""
		body = node.body
		if body is None or isinstance(body, Block):
			return [] if body is None else [body]
		kept[id(node)] = self.filter((body,))
		return kept[id(node)]

	def _child_nodes(self, node: SyntaxNode, kept: Dict[int, List[SyntaxNode]]) -> List[SyntaxNode]:
		"""Nodes that must be processed before `node` can be rebuilt."""
		if isinstance(node, Block):
			kept[id(node)] = self.filter(node.statements)
			return kept[id(node)]
		if isinstance(node, ClassDecl):
			children = [node.namespace, node.superclass]
		elif isinstance(node, FunctionDecl):
			children = [node.params]
		elif isinstance(node, MethodDecl):
			children = [node.receiver, node.params]
		elif isinstance(node, ConstantAssign):
			return [n for n in (node.namespace, node.value) if n is not None]
		elif isinstance(node, GlobalAssign):
			return [] if node.value is None else [node.value]
		elif isinstance(node, Call):
			return ([] if node.receiver is None else [node.receiver]) + list(node.args)
		elif isinstance(node, Other):
			return [c for c in node.children if isinstance(c, SyntaxNode)]
		else:
			raise UnsupportedNodeError(node)
		return [n for n in children if n is not None] + self._body_siblings(node, kept)

	def _rebuild_node(
		self,
		node: SyntaxNode,
		done: Dict[int, SyntaxNode],
		kept: Dict[int, List[SyntaxNode]],
	) -> SyntaxNode:
		def get(child: Optional[SyntaxNode]) -> Optional[SyntaxNode]:
			return None if child is None else done[id(child)]

		def body() -> Optional[SyntaxNode]:
			if id(node) not in kept:
				return get(node.body)
			survivors = kept[id(node)]
			return get(survivors[0]) if survivors else None

		if isinstance(node, Block):
			return _rebuild(node, statements=tuple(done[id(s)] for s in kept[id(node)]))
		if isinstance(node, ClassDecl):
			return _rebuild(node, namespace=get(node.namespace), superclass=get(node.superclass), body=body())
		if isinstance(node, FunctionDecl):
			return _rebuild(node, params=get(node.params), body=body())
		if isinstance(node, MethodDecl):
			return _rebuild(node, receiver=get(node.receiver), params=get(node.params), body=body())
		if isinstance(node, ConstantAssign):
			return _rebuild(node, namespace=get(node.namespace), value=get(node.value))
		if isinstance(node, GlobalAssign):
			return _rebuild(node, value=get(node.value))
		if isinstance(node, Call):
			return _rebuild(node, receiver=get(node.receiver), args=tuple(done[id(a)] for a in node.args))
		children = tuple(done[id(c)] if isinstance(c, SyntaxNode) else c for c in node.children)
		return _rebuild(node, children=children)

	def process(self, node: SyntaxNode) -> SyntaxNode:
		"""
		Return `node` with every nested sibling list filtered.

		Post-order walk over an explicit stack: a sibling list is filtered when
		its parent is first visited, survivors are processed, then the parent is
		rebuilt from their results. Depth is bounded by memory, not by the
		interpreter's recursion limit.
		"""
		done: Dict[int, SyntaxNode] = {}
		kept: Dict[int, List[SyntaxNode]] = {}
		stack: List[Tuple[SyntaxNode, bool]] = [(node, False)]
		while stack:
			current, expanded = stack.pop()
			if id(current) in done:
				continue
			if expanded:
				done[id(current)] = self._rebuild_node(current, done, kept)
				continue
			stack.append((current, True))
			for child in reversed(self._child_nodes(current, kept)):
				if id(child) not in done:
					stack.append((child, False))
		return done[id(node)]


def _vocabulary(known_targets: Union[TargetVocabulary, Iterable[BuildTarget]]) -> TargetVocabulary:
	if isinstance(known_targets, TargetVocabulary):
		return known_targets
	return TargetVocabulary.of(known_targets)


def process(
	tree: SyntaxNode,
	build_target: BuildTarget,
	known_targets: Union[TargetVocabulary, Iterable[BuildTarget]] = DEFAULT_TARGETS,
) -> SyntaxNode:
	"""
	Filter `tree` for `build_target`.

	`known_targets` is the annotation vocabulary (`anywhere` is implied). The
	build target is validated before the tree is touched.
	"""
	return TargetFilter(build_target=build_target, vocabulary=_vocabulary(known_targets)).process(tree)


def split_targets(
	tree: SyntaxNode,
	known_targets: Union[TargetVocabulary, Iterable[BuildTarget]] = DEFAULT_TARGETS,
) -> Dict[BuildTarget, SyntaxNode]:
	"""Filter `tree` once per concrete build target of the vocabulary."""
	vocabulary = _vocabulary(known_targets)
	return {target: process(tree, target, vocabulary) for target in vocabulary.build_targets()}


__all__ = [
	"PositionalKey",
	"TargetClaims",
	"TargetFilter",
	"UnresolvedTargetError",
	"UnsupportedNodeError",
	"classify",
	"identifier_for",
	"process",
	"split_targets",
]
