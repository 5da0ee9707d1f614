"""
Tests for the Alignment Engine
==============================
Modification detection, row emission and full comparisons.
"""

import pytest

from text_compare import (
    TextDiffer,
    compare_texts,
    detect_modified_blocks,
    emit_rows,
    pair_lines,
    word_diff,
    normalize,
    EditOp,
    EditKind,
    ProcessedKind,
    ProcessedOp,
    SpanKind,
    WordSpan,
    LineStatus,
    CompareOptions,
)
from text_compare.differ import split_block_lines


def removed(value):
    return EditOp(EditKind.REMOVED, value)


def added(value):
    return EditOp(EditKind.ADDED, value)


def unchanged(value):
    return EditOp(EditKind.UNCHANGED, value)


@pytest.fixture
def differ() -> TextDiffer:
    return TextDiffer(word_diff_timeout=0)


SAMPLE_PAIRS = [
    ("", ""),
    ("", "a\nb"),
    ("a\nb", ""),
    ("x\n", "y\n"),
    ("a\nb\nc\n", "a\nb\nc\n"),
    ("x\nsame\n", "same\ny\n"),
    ("one\ntwo\nthree\n", "one\n2\nthree\nfour\n"),
    ("alpha beta\ngamma\n", "alpha delta\n"),
    ("head\n\nbody text here\ntail", "head\nbody text there\n\ntail\nextra"),
    ("the quick brown fox\njumps\n", "the slow brown fox\njumps over\n"),
]


class TestSplitBlockLines:
    """Tests for hunk line splitting."""

    def test_drops_single_trailing_empty_line(self):
        assert split_block_lines("a\nb\n") == ["a", "b"]

    def test_keeps_last_line_without_newline(self):
        assert split_block_lines("a\nb") == ["a", "b"]

    def test_blank_line_survives(self):
        assert split_block_lines("\n") == [""]
        assert split_block_lines("a\n\n") == ["a", ""]

    def test_empty_value(self):
        assert split_block_lines("") == []


class TestDetectModifiedBlocks:
    """Tests for the greedy removed/added pairing pass."""

    def test_adjacent_pair_is_merged(self):
        result = detect_modified_blocks([removed("x\n"), added("y\n")])
        assert result == [ProcessedOp.modified("x\n", "y\n")]

    def test_added_before_removed_is_not_merged(self):
        result = detect_modified_blocks([added("y\n"), removed("x\n")])
        assert [p.kind for p in result] == [ProcessedKind.ADDED, ProcessedKind.REMOVED]

    def test_separated_pair_is_not_merged(self):
        result = detect_modified_blocks([removed("x\n"), unchanged("s\n"), added("y\n")])
        assert [p.kind for p in result] == [
            ProcessedKind.REMOVED, ProcessedKind.UNCHANGED, ProcessedKind.ADDED
        ]

    def test_run_only_merges_the_adjacent_pair(self):
        ops = [removed("a\n"), removed("b\n"), added("c\n"), added("d\n")]
        result = detect_modified_blocks(ops)
        assert [p.kind for p in result] == [
            ProcessedKind.REMOVED, ProcessedKind.MODIFIED, ProcessedKind.ADDED
        ]
        assert result[0].value == "a\n"
        assert result[1].old_value == "b\n"
        assert result[1].new_value == "c\n"
        assert result[2].value == "d\n"

    def test_each_op_consumed_once(self):
        ops = [removed("a\n"), added("b\n"), added("c\n")]
        result = detect_modified_blocks(ops)
        assert [p.kind for p in result] == [ProcessedKind.MODIFIED, ProcessedKind.ADDED]

    def test_trailing_removed(self):
        result = detect_modified_blocks([unchanged("a\n"), removed("b\n")])
        assert result[-1] == ProcessedOp(ProcessedKind.REMOVED, value="b\n")

    def test_empty_script(self):
        assert detect_modified_blocks([]) == []


class TestPairLines:
    """Tests for pairing the lines of a modified block."""

    def test_equal_lengths(self):
        pairs = pair_lines("a\nb\n", "c\nd\n")
        assert [(p.old, p.new) for p in pairs] == [("a", "c"), ("b", "d")]
        assert not any(p.old_missing or p.new_missing for p in pairs)

    def test_shorter_new_side_padded(self):
        pairs = pair_lines("a\nb\nc\n", "x\n")
        assert len(pairs) == 3
        assert [(p.old, p.new) for p in pairs] == [("a", "x"), ("b", ""), ("c", "")]
        assert [p.new_missing for p in pairs] == [False, True, True]

    def test_shorter_old_side_padded(self):
        pairs = pair_lines("a\n", "x\ny\n")
        assert [p.old_missing for p in pairs] == [False, True]


class TestWordDiff:
    """Tests for word-level highlighting of a line pair."""

    def test_single_word_change(self):
        left, right = word_diff("the quick fox", "the slow fox")
        assert left == (
            WordSpan(SpanKind.UNCHANGED, "the "),
            WordSpan(SpanKind.REMOVED, "quick"),
            WordSpan(SpanKind.UNCHANGED, " fox"),
        )
        assert right == (
            WordSpan(SpanKind.UNCHANGED, "the "),
            WordSpan(SpanKind.ADDED, "slow"),
            WordSpan(SpanKind.UNCHANGED, " fox"),
        )

    def test_punctuation_change_keeps_word(self):
        left, right = word_diff("hello, world", "hello. world")
        assert left == (
            WordSpan(SpanKind.UNCHANGED, "hello"),
            WordSpan(SpanKind.REMOVED, ","),
            WordSpan(SpanKind.UNCHANGED, " world"),
        )
        assert right == (
            WordSpan(SpanKind.UNCHANGED, "hello"),
            WordSpan(SpanKind.ADDED, "."),
            WordSpan(SpanKind.UNCHANGED, " world"),
        )

    def test_sides_reconstruct_lines(self):
        old = "alpha  beta gamma\tdelta"
        new = "alpha beta  epsilon delta zeta"
        left, right = word_diff(old, new)
        assert "".join(s.text for s in left) == old
        assert "".join(s.text for s in right) == new
        assert all(s.kind is not SpanKind.ADDED for s in left)
        assert all(s.kind is not SpanKind.REMOVED for s in right)

    def test_empty_old_line_skips_diff(self):
        left, right = word_diff("", "new line")
        assert left == ()
        assert right == (WordSpan(SpanKind.UNCHANGED, "new line"),)

    def test_empty_new_line_skips_diff(self):
        left, right = word_diff("old line", "")
        assert left == (WordSpan(SpanKind.UNCHANGED, "old line"),)
        assert right == ()

    def test_both_empty(self):
        assert word_diff("", "") == ((), ())


class TestEmitRows:
    """Tests for column emission from processed ops."""

    def test_modified_block_never_emits_placeholders(self):
        left, right = emit_rows([ProcessedOp.modified("a\nb\n", "c\n")])
        assert len(left) == len(right) == 2
        assert not any(r.is_placeholder for r in left + right)
        assert all(r.status is LineStatus.MODIFIED for r in left + right)
        assert right[1].padding
        assert right[1].text == ""
        assert right[1].line_number == 2

    def test_independent_line_counters(self):
        processed = [
            ProcessedOp(ProcessedKind.REMOVED, value="r1\nr2\n"),
            ProcessedOp(ProcessedKind.UNCHANGED, value="u\n"),
            ProcessedOp(ProcessedKind.ADDED, value="a1\n"),
        ]
        left, right = emit_rows(processed)
        assert [r.line_number for r in left] == [1, 2, 3, None]
        assert [r.line_number for r in right] == [None, None, 1, 2]


class TestTextDiffer:
    """End-to-end comparisons."""

    def test_identical_documents(self, differ):
        result = differ.compare("a\nb\nc\n", "a\nb\nc\n")
        assert len(result.left) == 3
        assert all(r.status is LineStatus.UNCHANGED for r in result.left + result.right)
        assert result.stats['placeholders_left'] == 0
        assert result.stats['placeholders_right'] == 0
        assert not result.has_changes

    def test_unchanged_row_is_single_span(self, differ):
        result = differ.compare("same line\n", "same line\n")
        assert result.left[0].spans == (WordSpan(SpanKind.UNCHANGED, "same line"),)

    def test_pure_addition(self, differ):
        result = differ.compare("", "a\nb")
        assert [r.is_placeholder for r in result.left] == [True, True]
        assert [r.status for r in result.right] == [LineStatus.ADDED, LineStatus.ADDED]
        assert [r.text for r in result.right] == ["a", "b"]
        assert [r.line_number for r in result.right] == [1, 2]

    def test_pure_removal(self, differ):
        result = differ.compare("a\nb", "")
        assert [r.status for r in result.left] == [LineStatus.REMOVED, LineStatus.REMOVED]
        assert [r.text for r in result.left] == ["a", "b"]
        assert [r.is_placeholder for r in result.right] == [True, True]

    def test_adjacent_modification(self, differ):
        result = differ.compare("x\n", "y\n")
        assert len(result.left) == len(result.right) == 1
        left, right = result.left[0], result.right[0]
        assert left.status is LineStatus.MODIFIED
        assert right.status is LineStatus.MODIFIED
        assert left.spans == (WordSpan(SpanKind.REMOVED, "x"),)
        assert right.spans == (WordSpan(SpanKind.ADDED, "y"),)
        assert result.stats['modified'] == 1

    def test_non_adjacent_change_is_not_merged(self, differ):
        result = differ.compare("x\nsame\n", "same\ny\n")
        assert [r.status for r in result.left] == [
            LineStatus.REMOVED, LineStatus.UNCHANGED, None
        ]
        assert [r.status for r in result.right] == [
            None, LineStatus.UNCHANGED, LineStatus.ADDED
        ]
        assert LineStatus.MODIFIED not in [r.status for r in result.left + result.right]

    def test_uneven_modified_block(self, differ):
        result = differ.compare("a\nb\n", "A\n")
        assert [r.status for r in result.left] == [LineStatus.MODIFIED] * 2
        assert [r.status for r in result.right] == [LineStatus.MODIFIED] * 2
        assert [r.text for r in result.left] == ["a", "b"]
        assert [r.text for r in result.right] == ["A", ""]
        assert result.right_lines() == ["A"]

    def test_ignore_case_makes_lines_equal(self, differ):
        result = differ.compare("Hello", "hello", CompareOptions(ignore_case=True))
        assert [r.status for r in result.left] == [LineStatus.UNCHANGED]
        assert result.left[0].text == "hello"

    def test_case_difference_without_option(self, differ):
        result = differ.compare("Hello", "hello")
        statuses = {r.status for r in result.left + result.right}
        assert LineStatus.UNCHANGED not in statuses

    def test_ignore_whitespace_collapses_lines(self, differ):
        options = CompareOptions(ignore_whitespace=True)
        result = differ.compare("a  b\nc", "a b\tc", options)
        assert len(result.left) == 1
        assert result.left[0].status is LineStatus.UNCHANGED
        assert result.left[0].text == "a b c"

    def test_stats(self, differ):
        result = differ.compare("keep\nold\ngone\n", "keep\nnew\n")
        assert result.stats['total_rows'] == len(result.left)
        assert result.stats['unchanged'] == 1

    def test_to_dict_shape(self, differ):
        data = differ.compare("", "a\n").to_dict()
        assert data['left'] == [{'placeholder': True}]
        assert data['right'][0]['status'] == 'added'
        assert data['right'][0]['line_number'] == 1
        assert data['options'] == {'ignore_whitespace': False, 'ignore_case': False}

    def test_rejects_non_string_input(self, differ):
        from config_logging import ValidationError
        with pytest.raises(ValidationError):
            differ.compare(None, "text")

    @pytest.mark.parametrize("old,new", SAMPLE_PAIRS)
    def test_columns_have_equal_length(self, differ, old, new):
        result = differ.compare(old, new)
        assert len(result.left) == len(result.right)

    @pytest.mark.parametrize("old,new", SAMPLE_PAIRS)
    def test_columns_reconstruct_documents(self, differ, old, new):
        result = differ.compare(old, new)
        assert result.left_lines() == split_block_lines(old)
        assert result.right_lines() == split_block_lines(new)

    @pytest.mark.parametrize("old,new", SAMPLE_PAIRS)
    def test_at_most_one_placeholder_per_row(self, differ, old, new):
        result = differ.compare(old, new)
        for left, right in zip(result.left, result.right):
            assert not (left.is_placeholder and right.is_placeholder)

    def test_reconstruction_after_normalization(self, differ):
        options = CompareOptions(ignore_whitespace=True, ignore_case=True)
        old, new = "Foo  Bar\nBaz", "foo bar\n\nqux"
        result = differ.compare(old, new, options)
        assert result.left_lines() == split_block_lines(normalize(old, options))
        assert result.right_lines() == split_block_lines(normalize(new, options))


    def test_bad_processed_op_raises_processing_error(self, differ, monkeypatch):
        import text_compare.differ as differ_module
        from config_logging import ProcessingError
        monkeypatch.setattr(differ_module, "detect_modified_blocks",
                            lambda ops: [ProcessedOp(EditKind.ADDED, value="x\n")])
        with pytest.raises(ProcessingError) as exc_info:
            differ.compare("a\n", "b\n")
        assert exc_info.value.details["stage"] == "emit_rows"
        assert exc_info.value.status_code == 500

class TestCompareTexts:
    """Tests for the convenience entry point."""

    def test_uses_configured_options(self, monkeypatch):
        from config_logging import reset_config
        monkeypatch.setenv('TC_IGNORE_CASE', 'true')
        reset_config()
        try:
            result = compare_texts("ABC", "abc")
            assert result.options.ignore_case is True
            assert result.left[0].status is LineStatus.UNCHANGED
        finally:
            reset_config()

    def test_explicit_options_win(self):
        result = compare_texts("ABC", "abc", CompareOptions())
        assert result.left[0].status is LineStatus.MODIFIED
