# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tree dump reader.

External parsers hand us their trees as s-expression dumps (the
`(kind child ...)` text form). This module decodes one dump into SyntaxNode
values; it does not parse any programming language itself.

Node mapping:
  begin  -> Block
  class  -> ClassDecl        (class (const scope :Name) superclass body)
  def    -> FunctionDecl     (def :name (args ...) body)
  defs   -> MethodDecl       (defs receiver :name (args ...) body)
  casgn  -> ConstantAssign   (casgn scope :NAME value)
  gvasgn -> GlobalAssign     (gvasgn :$name value)
  send   -> Call             (send receiver :callee args...)
  *      -> Other
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from lark import Lark, Token, Tree

from isosplit.core.span import Span
from .nodes import (
	Atom,
	Block,
	Call,
	ClassDecl,
	ConstantAssign,
	FunctionDecl,
	GlobalAssign,
	MethodDecl,
	Other,
	Symbol,
	SyntaxNode,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_ESCAPE = re.compile(r"\\(u\{[0-9a-fA-F ]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{1,2}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	"e": "\x1b",
	"s": " ",
	"0": "\0",
	"a": "\a",
	"b": "\b",
	"f": "\f",
	"v": "\v",
}


class SexpShapeError(ValueError):
	"""
	A syntactically valid dump whose node has the wrong shape for its kind
	(e.g. `(def)` without a name).

	Carries the node's location so the driver can report a pinned diagnostic.
	"""

	def __init__(self, message: str, *, loc: Span | None = None) -> None:
		super().__init__(message)
		self.loc = loc or Span()


def _decode_escape(esc: str) -> str:
	if esc.startswith("u{"):
		return "".join(chr(int(cp, 16)) for cp in esc[2:-1].split())
	if esc.startswith("u") and len(esc) == 5:
		return chr(int(esc[1:], 16))
	if esc.startswith("x") and len(esc) > 1:
		return chr(int(esc[1:], 16))
	return _SIMPLE_ESCAPES.get(esc, esc)


def _unescape(body: str, loc: Span) -> str:
	"""Decode the backslash escapes of a dumped string/symbol body."""

	def repl(match: re.Match) -> str:
		try:
			return _decode_escape(match.group(1))
		except (ValueError, OverflowError):
			raise SexpShapeError(f"escape `{match.group(0)}` is not a valid code point", loc=loc) from None

	return _ESCAPE.sub(repl, body)


def _number(text: str) -> int | float:
	if any(ch in text for ch in ".eE"):
		return float(text)
	return int(text)


def _build_atom(item: Tree, file: Optional[str]) -> Atom:
	name = str(item.data)
	tok: Token = item.children[0]
	text = str(tok)
	if name == "word":
		# Bare words only appear as the dump's nil/true/false atoms.
		if text == "nil":
			return None
		if text in ("true", "false"):
			return text == "true"
		raise SexpShapeError(f"unexpected bare word {text!r}", loc=Span.from_loc(tok, file=file))
	if name == "symbol":
		return Symbol(text[1:])
	if name == "quoted_symbol":
		return Symbol(_unescape(text[2:-1], Span.from_loc(tok, file=file)))
	if name == "string":
		return _unescape(text[1:-1], Span.from_loc(tok, file=file))
	if name == "number":
		return _number(text)
	raise SexpShapeError(f"unexpected dump item {name!r}", loc=Span.from_loc(item, file=file))


def _node_at(items: List[SyntaxNode | Atom], idx: int, kind: str, loc: Span, *, optional: bool = True) -> Optional[SyntaxNode]:
	value = items[idx] if idx < len(items) else None
	if value is None and optional:
		return None
	if not isinstance(value, SyntaxNode):
		raise SexpShapeError(f"`{kind}` expects a node at position {idx}, got {value!r}", loc=loc)
	return value


def _symbol_at(items: List[SyntaxNode | Atom], idx: int, kind: str, loc: Span) -> str:
	value = items[idx] if idx < len(items) else None
	if not isinstance(value, Symbol):
		raise SexpShapeError(f"`{kind}` expects a symbol at position {idx}, got {value!r}", loc=loc)
	return str(value)


def _arity(items: List[SyntaxNode | Atom], kind: str, loc: Span, lo: int, hi: int) -> None:
	if not lo <= len(items) <= hi:
		want = str(lo) if lo == hi else f"{lo}..{hi}"
		raise SexpShapeError(f"`{kind}` expects {want} children, got {len(items)}", loc=loc)


def _build_begin(kind: str, items: List[SyntaxNode | Atom], loc: Span) -> SyntaxNode:
	stmts = []
	for idx in range(len(items)):
		stmts.append(_node_at(items, idx, kind, loc, optional=False))
	return Block(statements=tuple(stmts), loc=loc)


def _build_class(kind: str, items: List[SyntaxNode | Atom], loc: Span) -> SyntaxNode:
	_arity(items, kind, loc, 3, 3)
	const = _node_at(items, 0, kind, loc, optional=False)
	if not isinstance(const, Other) or const.kind != "const" or len(const.children) != 2:
		raise SexpShapeError("`class` expects a `(const scope :Name)` head", loc=loc)
	scope, name = const.children
	if scope is not None and not isinstance(scope, SyntaxNode):
		raise SexpShapeError(f"`const` expects a scope node, got {scope!r}", loc=const.loc)
	if not isinstance(name, Symbol):
		raise SexpShapeError(f"`const` expects a symbol name, got {name!r}", loc=const.loc)
	return ClassDecl(
		name=str(name),
		namespace=scope,
		superclass=_node_at(items, 1, kind, loc),
		body=_node_at(items, 2, kind, loc),
		loc=loc,
	)


def _build_def(kind: str, items: List[SyntaxNode | Atom], loc: Span) -> SyntaxNode:
	_arity(items, kind, loc, 2, 3)
	return FunctionDecl(
		name=_symbol_at(items, 0, kind, loc),
		params=_node_at(items, 1, kind, loc),
		body=_node_at(items, 2, kind, loc),
		loc=loc,
	)


def _build_defs(kind: str, items: List[SyntaxNode | Atom], loc: Span) -> SyntaxNode:
	_arity(items, kind, loc, 3, 4)
	return MethodDecl(
		receiver=_node_at(items, 0, kind, loc, optional=False),
		name=_symbol_at(items, 1, kind, loc),
		params=_node_at(items, 2, kind, loc),
		body=_node_at(items, 3, kind, loc),
		loc=loc,
	)


def _build_casgn(kind: str, items: List[SyntaxNode | Atom], loc: Span) -> SyntaxNode:
	# The value is absent when the constant is a multiple-assignment target.
	_arity(items, kind, loc, 2, 3)
	return ConstantAssign(
		namespace=_node_at(items, 0, kind, loc),
		name=_symbol_at(items, 1, kind, loc),
		value=_node_at(items, 2, kind, loc),
		loc=loc,
	)


def _build_gvasgn(kind: str, items: List[SyntaxNode | Atom], loc: Span) -> SyntaxNode:
	_arity(items, kind, loc, 1, 2)
	return GlobalAssign(
		name=_symbol_at(items, 0, kind, loc),
		value=_node_at(items, 1, kind, loc),
		loc=loc,
	)


def _build_send(kind: str, items: List[SyntaxNode | Atom], loc: Span) -> SyntaxNode:
	if len(items) < 2:
		raise SexpShapeError(f"`{kind}` expects a receiver and a callee", loc=loc)
	args = tuple(_node_at(items, idx, kind, loc, optional=False) for idx in range(2, len(items)))
	return Call(
		receiver=_node_at(items, 0, kind, loc),
		callee=_symbol_at(items, 1, kind, loc),
		args=args,
		loc=loc,
	)


_NODE_BUILDERS: Dict[str, Callable[[str, List[SyntaxNode | Atom], Span], SyntaxNode]] = {
	"begin": _build_begin,
	"class": _build_class,
	"def": _build_def,
	"defs": _build_defs,
	"casgn": _build_casgn,
	"gvasgn": _build_gvasgn,
	"send": _build_send,
}


def _is_node(item: object) -> bool:
	return isinstance(item, Tree) and item.data == "node"


def _build_node(tree: Tree, file: Optional[str], built: Dict[int, SyntaxNode]) -> SyntaxNode:
	kind_tok, *rest = tree.children
	kind = str(kind_tok)
	loc = Span.from_loc(tree, file=file)
	items = [built[id(child)] if _is_node(child) else _build_atom(child, file) for child in rest]
	builder = _NODE_BUILDERS.get(kind)
	if builder is None:
		return Other(kind=kind, children=tuple(items), loc=loc)
	return builder(kind, items, loc)


def _build_tree(root: Tree, file: Optional[str]) -> SyntaxNode:
	"""Build nodes children-first over an explicit stack so nesting depth is unbounded."""
	built: Dict[int, SyntaxNode] = {}
	stack: List[Tuple[Tree, bool]] = [(root, False)]
	while stack:
		tree, expanded = stack.pop()
		if expanded:
			built[id(tree)] = _build_node(tree, file, built)
			continue
		stack.append((tree, True))
		stack.extend((child, False) for child in tree.children[1:] if _is_node(child))
	return built[id(root)]


def parse_sexp(source: str, *, file: Optional[str] = None) -> SyntaxNode:
	"""
	Read one tree dump.

	Raises lark's `UnexpectedInput` for malformed text and `SexpShapeError`
	for a well-formed dump whose node does not fit its kind.
	"""
	tree = _PARSER.parse(source)
	(root,) = tree.children
	return _build_tree(root, file)


__all__ = ["SexpShapeError", "parse_sexp"]
