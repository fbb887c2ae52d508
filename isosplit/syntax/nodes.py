# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax tree nodes consumed by the target filter.

The tree comes from an external parser (usually via a tree dump, see
`isosplit.syntax.sexp`). Only the kinds the filter reasons about get their own
class; every other kind is an `Other` node that keeps its kind name and its
children verbatim.

Guiding rules:
- Nodes are immutable; passes build new nodes with `dataclasses.replace`.
- Children are tuples so a parent exclusively owns an ordered sequence.
- `Other` children may be atoms (Symbol/str/int/float/bool/None) or nodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from isosplit.core.span import Span


class Symbol(str):
	"""Symbol atom (`:name` in a tree dump)."""

	def __repr__(self) -> str:
		return f"Symbol({str.__repr__(self)})"


Atom = Union[Symbol, str, int, float, bool, None]


# Base node kinds

class SyntaxNode:
	"""Base class for all syntax tree nodes."""
	loc: Span


class Declaration(SyntaxNode):
	"""Base class for nodes a build target can claim by name."""
	name: str


# Sibling lists

@dataclass(frozen=True)
class Block(SyntaxNode):
	"""Sequence of sibling statements (`begin`)."""
	statements: Tuple[SyntaxNode, ...] = ()
	loc: Span = field(default_factory=Span, compare=False)


# Declarations

@dataclass(frozen=True)
class ClassDecl(Declaration):
	"""
	Class declaration.

	`name` is the class's own name component; `namespace` is the scope node of
	the constant path (`A::B` has namespace `(const nil :A)` and name `B`).
	"""
	name: str
	namespace: Optional[SyntaxNode] = None
	superclass: Optional[SyntaxNode] = None
	body: Optional[SyntaxNode] = None
	loc: Span = field(default_factory=Span, compare=False)


@dataclass(frozen=True)
class FunctionDecl(Declaration):
	"""Free function (`def name`)."""
	name: str
	params: Optional[SyntaxNode] = None
	body: Optional[SyntaxNode] = None
	loc: Span = field(default_factory=Span, compare=False)


@dataclass(frozen=True)
class MethodDecl(Declaration):
	"""Receiver-qualified function (`def self.name`)."""
	receiver: SyntaxNode
	name: str
	params: Optional[SyntaxNode] = None
	body: Optional[SyntaxNode] = None
	loc: Span = field(default_factory=Span, compare=False)


@dataclass(frozen=True)
class ConstantAssign(Declaration):
	"""Constant assignment (`NAME = value`, optionally scoped)."""
	name: str
	namespace: Optional[SyntaxNode] = None
	value: Optional[SyntaxNode] = None
	loc: Span = field(default_factory=Span, compare=False)


@dataclass(frozen=True)
class GlobalAssign(Declaration):
	"""Global variable assignment (`$name = value`)."""
	name: str
	value: Optional[SyntaxNode] = None
	loc: Span = field(default_factory=Span, compare=False)


# Expressions

@dataclass(frozen=True)
class Call(SyntaxNode):
	"""Invocation (`send`). A receiver-less call may be a target annotation."""
	callee: str
	args: Tuple[SyntaxNode, ...] = ()
	receiver: Optional[SyntaxNode] = None
	loc: Span = field(default_factory=Span, compare=False)


@dataclass(frozen=True)
class Other(SyntaxNode):
	"""Any node kind the filter does not reason about."""
	kind: str
	children: Tuple[Union[SyntaxNode, Atom], ...] = ()
	loc: Span = field(default_factory=Span, compare=False)


DECLARATION_KINDS = (ClassDecl, FunctionDecl, MethodDecl, ConstantAssign, GlobalAssign)


def sym(name: str, *, loc: Span | None = None) -> Other:
	"""Shorthand for a symbol literal node, e.g. the `:m` in `server(:m)`."""
	return Other(kind="sym", children=(Symbol(name),), loc=loc or Span())


def block(*statements: SyntaxNode) -> Block:
	return Block(statements=tuple(statements))


__all__ = [
	"Atom",
	"Block",
	"Call",
	"ClassDecl",
	"ConstantAssign",
	"DECLARATION_KINDS",
	"Declaration",
	"FunctionDecl",
	"GlobalAssign",
	"MethodDecl",
	"Other",
	"Symbol",
	"SyntaxNode",
	"block",
	"sym",
]
