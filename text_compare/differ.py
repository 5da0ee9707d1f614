"""
Text Differ v1.0.0
==================
Line-level alignment with word-level diff highlighting.

Pipeline:
    normalize -> diff_lines -> detect_modified_blocks -> emit_rows

A removed hunk immediately followed by an added hunk is treated as a
modification and word-diffed line by line. Only directly adjacent
pairs are merged; a removal separated from an addition by anything
else stays a plain removal and a plain addition.
"""

from typing import List, Tuple, Sequence, Optional

from config_logging import get_logger, get_config, ValidationError, ProcessingError

from .models import (
    EditOp, EditKind, ProcessedOp, ProcessedKind, LinePair,
    WordSpan, SpanKind, LineStatus, AlignedRow, CompareOptions,
    ComparisonResult,
)
from .normalizer import normalize
from .primitives import diff_lines, diff_words

logger = get_logger('text_compare.differ')


def split_block_lines(value: str) -> List[str]:
    """
    Split a hunk into lines.

    A trailing empty line produced by a terminal newline is dropped.
    """
    lines = value.split('\n')
    if lines[-1] == '':
        lines.pop()
    return lines


def detect_modified_blocks(ops: Sequence[EditOp]) -> List[ProcessedOp]:
    """
    Merge each REMOVED hunk that is directly followed by an ADDED hunk.

    Single left-to-right pass; each hunk is consumed at most once.

    Args:
        ops: Line-level edit script

    Returns:
        List of ProcessedOp
    """
    processed = []
    i = 0
    while i < len(ops):
        current = ops[i]
        if current.removed and i + 1 < len(ops) and ops[i + 1].added:
            processed.append(ProcessedOp.modified(current.value, ops[i + 1].value))
            i += 2
        else:
            processed.append(ProcessedOp.from_edit(current))
            i += 1
    return processed


def pair_lines(old_value: str, new_value: str) -> List[LinePair]:
    """Pair the lines of a modified block by index."""
    old_lines = split_block_lines(old_value)
    new_lines = split_block_lines(new_value)

    pairs = []
    for idx in range(max(len(old_lines), len(new_lines))):
        old_missing = idx >= len(old_lines)
        new_missing = idx >= len(new_lines)
        pairs.append(LinePair(
            old='' if old_missing else old_lines[idx],
            new='' if new_missing else new_lines[idx],
            old_missing=old_missing,
            new_missing=new_missing
        ))
    return pairs


def word_diff(
    old_line: str,
    new_line: str,
    timeout: Optional[float] = None
) -> Tuple[Tuple[WordSpan, ...], Tuple[WordSpan, ...]]:
    """
    Word-level highlighting for one pair of lines.

    When either line is empty no diff is computed: the other line is
    returned whole as a single unchanged span and the empty side gets
    no spans.

    Args:
        old_line: Line from document 1
        new_line: Line from document 2
        timeout: Word diff time limit in seconds (config default if None)

    Returns:
        Tuple of (left_spans, right_spans)
    """
    if not old_line or not new_line:
        left = (WordSpan(SpanKind.UNCHANGED, old_line),) if old_line else ()
        right = (WordSpan(SpanKind.UNCHANGED, new_line),) if new_line else ()
        return left, right

    if timeout is None:
        timeout = get_config().word_diff_timeout

    left: List[WordSpan] = []
    right: List[WordSpan] = []
    for op in diff_words(old_line, new_line, timeout=timeout):
        if op.kind is EditKind.UNCHANGED:
            span = WordSpan(SpanKind.UNCHANGED, op.value)
            left.append(span)
            right.append(span)
        elif op.kind is EditKind.REMOVED:
            left.append(WordSpan(SpanKind.REMOVED, op.value))
        else:
            right.append(WordSpan(SpanKind.ADDED, op.value))

    return tuple(left), tuple(right)


def emit_rows(
    processed: Sequence[ProcessedOp],
    timeout: Optional[float] = None
) -> Tuple[List[AlignedRow], List[AlignedRow]]:
    """
    Build the two aligned columns.

    Left and right line numbers are counted independently and start
    at 1. Both lists always have the same length.

    Args:
        processed: Output of detect_modified_blocks
        timeout: Word diff time limit in seconds

    Returns:
        Tuple of (left_rows, right_rows)
    """
    left: List[AlignedRow] = []
    right: List[AlignedRow] = []
    left_number = 1
    right_number = 1

    for part in processed:
        if part.kind is ProcessedKind.MODIFIED:
            for pair in pair_lines(part.old_value, part.new_value):
                left_spans, right_spans = word_diff(pair.old, pair.new, timeout)
                left.append(AlignedRow.content(
                    left_number, LineStatus.MODIFIED, left_spans, padding=pair.old_missing))
                right.append(AlignedRow.content(
                    right_number, LineStatus.MODIFIED, right_spans, padding=pair.new_missing))
                left_number += 1
                right_number += 1

        elif part.kind is ProcessedKind.ADDED:
            for line in split_block_lines(part.value):
                _, spans = word_diff('', line)
                left.append(AlignedRow.placeholder())
                right.append(AlignedRow.content(right_number, LineStatus.ADDED, spans))
                right_number += 1

        elif part.kind is ProcessedKind.REMOVED:
            for line in split_block_lines(part.value):
                spans, _ = word_diff(line, '')
                left.append(AlignedRow.content(left_number, LineStatus.REMOVED, spans))
                right.append(AlignedRow.placeholder())
                left_number += 1

        elif part.kind is ProcessedKind.UNCHANGED:
            for line in split_block_lines(part.value):
                spans = (WordSpan(SpanKind.UNCHANGED, line),)
                left.append(AlignedRow.content(left_number, LineStatus.UNCHANGED, spans))
                right.append(AlignedRow.content(right_number, LineStatus.UNCHANGED, spans))
                left_number += 1
                right_number += 1

        else:
            raise ValueError(f"Unknown processed op kind: {part.kind!r}")

    return left, right


def compute_stats(left: Sequence[AlignedRow], right: Sequence[AlignedRow]) -> dict:
    """Row counts by classification."""
    return {
        'total_rows': len(left),
        'unchanged': sum(1 for r in left if r.status is LineStatus.UNCHANGED),
        'added': sum(1 for r in right if r.status is LineStatus.ADDED),
        'removed': sum(1 for r in left if r.status is LineStatus.REMOVED),
        'modified': sum(1 for r in left if r.status is LineStatus.MODIFIED),
        'placeholders_left': sum(1 for r in left if r.is_placeholder),
        'placeholders_right': sum(1 for r in right if r.is_placeholder)
    }


class TextDiffer:
    """
    Comparison engine producing two aligned columns with
    word-level diff highlighting.
    """

    def __init__(self, word_diff_timeout: Optional[float] = None):
        """
        Initialize the differ.

        Args:
            word_diff_timeout: Max seconds per word-level diff; falls back
                               to the configured TC_WORD_DIFF_TIMEOUT
        """
        if word_diff_timeout is None:
            word_diff_timeout = get_config().word_diff_timeout
        self.word_diff_timeout = word_diff_timeout

    def compare(
        self,
        old_text: str,
        new_text: str,
        options: Optional[CompareOptions] = None
    ) -> ComparisonResult:
        """
        Perform full comparison.

        Args:
            old_text: Document 1 text
            new_text: Document 2 text
            options: Preprocessing options (defaults: nothing ignored)

        Returns:
            ComparisonResult with aligned rows and statistics
        """
        if not isinstance(old_text, str) or not isinstance(new_text, str):
            raise ValidationError("Both texts must be strings")

        options = options or CompareOptions()
        logger.debug(f"Text lengths: old={len(old_text)}, new={len(new_text)}",
                     ignore_whitespace=options.ignore_whitespace,
                     ignore_case=options.ignore_case)

        old_text = normalize(old_text, options)
        new_text = normalize(new_text, options)

        with logger.log_operation('compare'):
            ops = diff_lines(old_text, new_text)
            processed = detect_modified_blocks(ops)
            try:
                left, right = emit_rows(processed, self.word_diff_timeout)
            except ValueError as e:
                raise ProcessingError(str(e), stage='emit_rows') from e

        stats = compute_stats(left, right)
        logger.info(f"Diff complete: {stats['total_rows']} rows "
                    f"(+{stats['added']}, -{stats['removed']}, ~{stats['modified']})")

        return ComparisonResult(left=left, right=right, options=options, stats=stats)


def compare_texts(
    old_text: str,
    new_text: str,
    options: Optional[CompareOptions] = None,
    **kwargs
) -> ComparisonResult:
    """
    Compare two texts.

    Args:
        old_text: Document 1 text
        new_text: Document 2 text
        options: Preprocessing options; resolved from config if None
        **kwargs: Passed to TextDiffer

    Returns:
        ComparisonResult with aligned rows
    """
    if options is None:
        options = CompareOptions.from_config(get_config())
    return TextDiffer(**kwargs).compare(old_text, new_text, options)
