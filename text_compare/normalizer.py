"""
Text normalization applied before diffing.
"""

import re

from .models import CompareOptions

_WHITESPACE_RUN = re.compile(r'\s+')


def normalize(text: str, options: CompareOptions) -> str:
    """
    Normalize text according to the comparison options.

    Whitespace collapsing runs first, then case folding. Collapsing
    includes newlines, so a text normalized with ``ignore_whitespace``
    becomes a single line.

    Args:
        text: Raw document text
        options: Resolved comparison options

    Returns:
        Normalized text
    """
    if options.ignore_whitespace:
        text = _WHITESPACE_RUN.sub(' ', text)
    if options.ignore_case:
        text = text.lower()
    return text
