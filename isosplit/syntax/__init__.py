"""
isosplit.syntax: the SyntaxNode family plus the tree dump reader/printer.
"""

from .nodes import (
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
from .printer import format_sexp
from .sexp import SexpShapeError, parse_sexp

__all__ = [
    "Block",
    "Call",
    "ClassDecl",
    "ConstantAssign",
    "FunctionDecl",
    "GlobalAssign",
    "MethodDecl",
    "Other",
    "SexpShapeError",
    "Symbol",
    "SyntaxNode",
    "format_sexp",
    "parse_sexp",
]
