"""
Text Comparison Module v1.0.0
=============================
Side-by-side text comparison with line-level alignment
and word-level diff highlighting.

Features:
- Optional whitespace collapsing and case folding before diffing
- Adjacent removed/added hunks paired as modifications
- Word-level spans within modified lines
- Placeholder rows keeping both columns aligned
- HTML rendering and a Flask blueprint for the comparison API
"""

from .differ import (
    TextDiffer,
    compare_texts,
    detect_modified_blocks,
    emit_rows,
    pair_lines,
    word_diff,
)
from .models import (
    EditKind,
    EditOp,
    ProcessedKind,
    ProcessedOp,
    LinePair,
    SpanKind,
    WordSpan,
    LineStatus,
    AlignedRow,
    CompareOptions,
    ComparisonResult,
)
from .normalizer import normalize
from .primitives import diff_lines, diff_words

__version__ = "1.0.0"
__all__ = [
    'TextDiffer',
    'compare_texts',
    'detect_modified_blocks',
    'emit_rows',
    'pair_lines',
    'word_diff',
    'normalize',
    'diff_lines',
    'diff_words',
    'EditKind',
    'EditOp',
    'ProcessedKind',
    'ProcessedOp',
    'LinePair',
    'SpanKind',
    'WordSpan',
    'LineStatus',
    'AlignedRow',
    'CompareOptions',
    'ComparisonResult',
]
