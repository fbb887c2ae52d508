# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tree dump printer: the inverse of `isosplit.syntax.sexp`.

Layout follows the usual s-expression dump: atoms stay on the node's line,
child nodes start a new line indented two spaces deeper.
"""

from __future__ import annotations

import math
import re
from typing import List, Tuple, Union

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

_PLAIN_SYMBOL = re.compile(r'^[^\s()"#]+$')
_STRING_ESCAPES = {
	"\\": "\\\\",
	'"': '\\"',
	"\n": "\\n",
	"\t": "\\t",
	"\r": "\\r",
	"\x1b": "\\e",
}


def _quote(text: str) -> str:
	out = []
	for ch in text:
		if ch in _STRING_ESCAPES:
			out.append(_STRING_ESCAPES[ch])
		elif ord(ch) < 0x20 or ord(ch) == 0x7F:
			out.append(f"\\x{ord(ch):02X}")
		else:
			out.append(ch)
	return '"' + "".join(out) + '"'


def format_atom(atom: Atom) -> str:
	"""Render one atom the way the reader expects to see it."""
	if atom is None:
		return "nil"
	if isinstance(atom, bool):
		return "true" if atom else "false"
	if isinstance(atom, Symbol):
		if _PLAIN_SYMBOL.match(atom):
			return f":{atom}"
		return ":" + _quote(atom)
	if isinstance(atom, str):
		return _quote(atom)
	if isinstance(atom, float) and not math.isfinite(atom):
		# The dump format has no spelling for inf/nan.
		raise ValueError(f"cannot print non-finite float {atom!r}")
	if isinstance(atom, (int, float)):
		return repr(atom)
	raise TypeError(f"cannot print atom {atom!r}")


def node_items(node: SyntaxNode) -> Tuple[str, List[Union[SyntaxNode, Atom]]]:
	"""Return the dump kind and child items of `node`."""
	if isinstance(node, Block):
		return "begin", list(node.statements)
	if isinstance(node, ClassDecl):
		const = Other(kind="const", children=(node.namespace, Symbol(node.name)))
		return "class", [const, node.superclass, node.body]
	if isinstance(node, FunctionDecl):
		return "def", [Symbol(node.name), node.params, node.body]
	if isinstance(node, MethodDecl):
		return "defs", [node.receiver, Symbol(node.name), node.params, node.body]
	if isinstance(node, ConstantAssign):
		items: List[Union[SyntaxNode, Atom]] = [node.namespace, Symbol(node.name)]
		if node.value is not None:
			items.append(node.value)
		return "casgn", items
	if isinstance(node, GlobalAssign):
		return "gvasgn", [Symbol(node.name)] + ([node.value] if node.value is not None else [])
	if isinstance(node, Call):
		return "send", [node.receiver, Symbol(node.callee), *node.args]
	if isinstance(node, Other):
		return node.kind, list(node.children)
	raise NotImplementedError(f"format_sexp does not handle node {type(node).__name__}")


def format_sexp(node: SyntaxNode, indent: int = 0) -> str:
	"""
	Render `node` as an s-expression tree dump.

	Work items are either literal text or `(node, indent)` pairs still to be
	expanded; the explicit stack keeps deep trees off the interpreter stack.
	"""
	parts: List[str] = []
	stack: List[Union[str, Tuple[SyntaxNode, int]]] = [(node, indent)]
	while stack:
		work = stack.pop()
		if isinstance(work, str):
			parts.append(work)
			continue
		current, level = work
		kind, items = node_items(current)
		parts.append("  " * level + "(" + kind)
		pending: List[Union[str, Tuple[SyntaxNode, int]]] = []
		for item in items:
			if isinstance(item, SyntaxNode):
				pending.append("\n")
				pending.append((item, level + 1))
			else:
				pending.append(" " + format_atom(item))
		pending.append(")")
		stack.extend(reversed(pending))
	return "".join(parts)


__all__ = ["format_atom", "format_sexp", "node_items"]
