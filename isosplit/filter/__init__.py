"""
isosplit.filter: the build-target filter pass.
"""

from .target_filter import (
    TargetClaims,
    TargetFilter,
    UnresolvedTargetError,
    UnsupportedNodeError,
    classify,
    identifier_for,
    process,
    split_targets,
)

__all__ = [
    "TargetClaims",
    "TargetFilter",
    "UnresolvedTargetError",
    "UnsupportedNodeError",
    "classify",
    "identifier_for",
    "process",
    "split_targets",
]
