"""Julia source analysis: region classification, indentation and defun navigation."""

from __future__ import annotations

from jlindent.classifier import ClassificationCache, classify, escapes
from jlindent.defun import definitions, find_defun_end, find_defun_start
from jlindent.errors import check
from jlindent.indent import compute_indent, line_context, reindent
from jlindent.scanner import tokens

__version__ = "0.1.0"

__all__ = [
    "ClassificationCache",
    "check",
    "classify",
    "compute_indent",
    "definitions",
    "escapes",
    "find_defun_end",
    "find_defun_start",
    "line_context",
    "reindent",
    "tokens",
]
