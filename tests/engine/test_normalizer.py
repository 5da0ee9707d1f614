"""
Tests for Text Normalization
============================
"""

import pytest

from text_compare import normalize, CompareOptions

ALL_OPTIONS = [
    CompareOptions(),
    CompareOptions(ignore_whitespace=True),
    CompareOptions(ignore_case=True),
    CompareOptions(ignore_whitespace=True, ignore_case=True),
]


class TestNormalize:
    """Tests for normalize()."""

    def test_no_options_is_identity(self):
        text = "Mixed  Case\n\tText\n"
        assert normalize(text, CompareOptions()) == text

    def test_whitespace_runs_collapse_to_one_space(self):
        text = "a  b\t\tc\n\nd \r\n e"
        assert normalize(text, CompareOptions(ignore_whitespace=True)) == "a b c d e"

    def test_whitespace_collapse_removes_line_breaks(self):
        result = normalize("line one\nline two\n", CompareOptions(ignore_whitespace=True))
        assert "\n" not in result
        assert result == "line one line two "

    def test_case_folding(self):
        assert normalize("Hello WORLD", CompareOptions(ignore_case=True)) == "hello world"

    def test_both_options(self):
        options = CompareOptions(ignore_whitespace=True, ignore_case=True)
        assert normalize("Foo\n\n  BAR", options) == "foo bar"

    def test_empty_string(self):
        for options in ALL_OPTIONS:
            assert normalize("", options) == ""

    @pytest.mark.parametrize("options", ALL_OPTIONS)
    def test_idempotent(self, options):
        text = "  The Quick\t\tBrown\n\nFox  "
        once = normalize(text, options)
        assert normalize(once, options) == once
