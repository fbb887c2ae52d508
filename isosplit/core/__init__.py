"""
isosplit.core: shared configuration/diagnostic types used by every layer.

Modules:
  - targets: build-target vocabulary and validation
  - span: minimal source span
  - diagnostics: Diagnostic record rendered by the driver
"""

__all__ = [
    "targets",
    "span",
    "diagnostics",
]
