# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import sys

import pytest

from isosplit.syntax.nodes import Block, Call, ClassDecl, FunctionDecl, GlobalAssign, Other, Symbol, SyntaxNode, sym
from isosplit.syntax.printer import format_atom, format_sexp
from isosplit.syntax.sexp import parse_sexp


def test_nested_layout() -> None:
	tree = ClassDecl(
		name="MyClass",
		body=Block(
			statements=(
				FunctionDecl(name="a", params=Other(kind="args"), body=Other(kind="str", children=("a",))),
				Call(callee="server", args=(sym("a"),)),
			)
		),
	)
	assert format_sexp(tree) == (
		"(class\n"
		"  (const nil :MyClass) nil\n"
		"  (begin\n"
		"    (def :a\n"
		"      (args)\n"
		"      (str \"a\"))\n"
		"    (send nil :server\n"
		"      (sym :a))))"
	)


@pytest.mark.parametrize(
	"atom, text",
	[
		(None, "nil"),
		(True, "true"),
		(False, "false"),
		(Symbol("name"), ":name"),
		(Symbol("=="), ":=="),
		(Symbol("two words"), ':"two words"'),
		("plain", '"plain"'),
		('say "hi"\n', '"say \\"hi\\"\\n"'),
		("\x01", '"\\x01"'),
		(42, "42"),
		(-1.5, "-1.5"),
	],
)
def test_format_atom(atom, text) -> None:
	assert format_atom(atom) == text


def test_global_assign_without_value() -> None:
	assert format_sexp(GlobalAssign(name="$x")) == "(gvasgn :$x)"


def test_printed_dump_reads_back() -> None:
	source = """
(begin
  (class
    (const
      (const nil :App) :Page)
    (const nil :Base)
    (begin
      (send nil :browser)
      (defs
        (self) :mount
        (args) nil)
      (casgn nil :ROUTES
        (array
          (str "/")
          (str "caf\\u00e9")))
      (gvasgn :$hits
        (int 0))
      (send nil :server
        (sym :render)
        (sym :"with space")))))
"""
	tree = parse_sexp(source)
	assert parse_sexp(format_sexp(tree)) == tree


def test_unknown_node_class_is_rejected() -> None:
	class Foreign(SyntaxNode):
		pass

	with pytest.raises(NotImplementedError):
		format_sexp(Block(statements=(Foreign(),)))


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_floats_are_rejected(value: float) -> None:
	with pytest.raises(ValueError):
		format_atom(value)
	with pytest.raises(ValueError):
		format_sexp(Other(kind="float", children=(value,)))


def test_deep_tree_prints_and_reads_back() -> None:
	depth = sys.getrecursionlimit() + 500
	tree: SyntaxNode = Other(kind="lvar", children=(Symbol("x"),))
	for _ in range(depth):
		tree = Call(callee="+", receiver=tree, args=(Other(kind="int", children=(1,)),))
	text = format_sexp(tree)
	assert text.count("(send") == depth
	node = parse_sexp(text)
	for _ in range(depth):
		assert isinstance(node, Call) and node.callee == "+"
		node = node.receiver
	assert node == Other(kind="lvar", children=(Symbol("x"),))
