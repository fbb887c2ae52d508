# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from isosplit.core.targets import TargetVocabulary
from isosplit.filter import target_filter as tf
from isosplit.filter.target_filter import (
	TargetClaims,
	TargetFilter,
	UnresolvedTargetError,
	UnsupportedNodeError,
	classify,
	identifier_for,
)
from isosplit.syntax.nodes import (
	Block,
	Call,
	ClassDecl,
	ConstantAssign,
	FunctionDecl,
	GlobalAssign,
	MethodDecl,
	Other,
	sym,
)

KNOWN = TargetVocabulary.of(["server", "browser"])


@pytest.mark.parametrize(
	"node, expected",
	[
		(ClassDecl(name="B", namespace=Other(kind="const", children=(None, "A"))), "B"),
		(FunctionDecl(name="run"), "run"),
		(MethodDecl(receiver=Other(kind="self"), name="build"), "build"),
		(ConstantAssign(name="VERSION"), "VERSION"),
		(GlobalAssign(name="$stdout"), "$stdout"),
		(Call(callee="server", args=(sym("x"),)), "server"),
	],
)
def test_identifier_for_supported_kinds(node, expected):
	assert identifier_for(node) == expected


@pytest.mark.parametrize("node", [Block(), Other(kind="lvasgn", children=("x",))])
def test_identifier_for_rejects_other_kinds(node):
	with pytest.raises(UnsupportedNodeError) as excinfo:
		identifier_for(node)
	assert excinfo.value.node is node


def test_classify_splits_explicit_and_regional_claims():
	siblings = [
		FunctionDecl(name="a"),
		Call(callee="server", args=(sym("a"), Other(kind="str", children=("b",)))),
		Call(callee="browser"),
		FunctionDecl(name="b"),
		Call(callee="log", args=(sym("c"),)),
		Other(kind="lvar", children=("x",)),
		ConstantAssign(name="C"),
	]
	claims = classify(siblings, KNOWN)
	assert dict(claims.explicit) == {"a": "server", "b": "server"}
	assert dict(claims.regional) == {("a", 0): "anywhere", ("b", 3): "browser", ("C", 6): "browser"}


def test_claim_maps_are_read_only():
	claims = classify([Call(callee="server", args=(sym("a"),)), FunctionDecl(name="a")], KNOWN)
	with pytest.raises(TypeError):
		claims.explicit["a"] = "browser"  # type: ignore[index]
	with pytest.raises(TypeError):
		claims.regional[("a", 1)] = "browser"  # type: ignore[index]


def test_region_is_scoped_to_one_sibling_list():
	first = classify([Call(callee="server"), FunctionDecl(name="f")], KNOWN)
	second = classify([FunctionDecl(name="g")], KNOWN)
	assert dict(first.regional) == {("f", 1): "server"}
	assert dict(second.regional) == {("g", 0): "anywhere"}


def test_resolve_prefers_explicit_claim():
	claims = TargetClaims(explicit={"m": "server"}, regional={("m", 2): "browser", ("n", 3): "browser"})
	assert claims.resolve("m", 2) == "server"
	assert claims.resolve("n", 3) == "browser"
	assert claims.resolve("n", 4) is None


def test_missing_claim_is_an_invariant_violation(monkeypatch):
	"""A declaration the region scan did not record cannot be silently kept or dropped."""
	monkeypatch.setattr(tf, "classify", lambda siblings, known: TargetClaims())
	flt = TargetFilter(build_target="server", vocabulary=KNOWN)
	with pytest.raises(UnresolvedTargetError) as excinfo:
		flt.filter([Other(kind="nil"), FunctionDecl(name="f")])
	assert excinfo.value.identifier == "f"
	assert excinfo.value.index == 1
