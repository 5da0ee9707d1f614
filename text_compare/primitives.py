"""
Sequence-diff primitives
========================
Line- and word-granularity edit scripts.

Lines are aligned with difflib.SequenceMatcher. Words use
diff-match-patch: each whitespace-preserving token is mapped to a
single character (the same trick diff_linesToChars uses for lines),
diffed, then mapped back.

For both primitives the non-added values concatenate to the old text
and the non-removed values concatenate to the new text.
"""

import re
import difflib
from typing import List, Tuple, Dict

import diff_match_patch as dmp_module

from .models import EditOp, EditKind

_LINE_RE = re.compile(r'[^\n]*\n|[^\n]+')
_TOKEN_SPLIT_RE = re.compile(r"(\s+|[()\[\]{}'\"]|\b)")

_DMP_KINDS = {
    dmp_module.diff_match_patch.DIFF_DELETE: EditKind.REMOVED,
    dmp_module.diff_match_patch.DIFF_INSERT: EditKind.ADDED,
    dmp_module.diff_match_patch.DIFF_EQUAL: EditKind.UNCHANGED,
}


def split_keepends(text: str) -> List[str]:
    """Split on '\\n' only, keeping the terminator on each line."""
    return _LINE_RE.findall(text)


def tokenize(text: str) -> List[str]:
    """
    Split text into word, punctuation and whitespace tokens.

    Splits at word boundaries, whitespace runs, brackets and quotes, so
    "hello," becomes ["hello", ","]. Joining the tokens gives the text back.
    """
    return [token for token in _TOKEN_SPLIT_RE.split(text) if token]


def _append(ops: List[EditOp], kind: EditKind, value: str):
    if not value:
        return
    if ops and ops[-1].kind is kind:
        ops[-1] = EditOp(kind, ops[-1].value + value)
    else:
        ops.append(EditOp(kind, value))


def diff_lines(old_text: str, new_text: str) -> List[EditOp]:
    """
    Line-level edit script.

    A 'replace' opcode becomes a REMOVED hunk followed by an ADDED hunk.

    Args:
        old_text: Original text
        new_text: New text

    Returns:
        Ordered list of EditOp hunks
    """
    old_lines = split_keepends(old_text)
    new_lines = split_keepends(new_text)

    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    ops: List[EditOp] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == 'equal':
            _append(ops, EditKind.UNCHANGED, ''.join(old_lines[i1:i2]))
        elif tag == 'delete':
            _append(ops, EditKind.REMOVED, ''.join(old_lines[i1:i2]))
        elif tag == 'insert':
            _append(ops, EditKind.ADDED, ''.join(new_lines[j1:j2]))
        elif tag == 'replace':
            _append(ops, EditKind.REMOVED, ''.join(old_lines[i1:i2]))
            _append(ops, EditKind.ADDED, ''.join(new_lines[j1:j2]))

    return ops


def _tokens_to_chars(old_text: str, new_text: str) -> Tuple[str, str, List[str]]:
    """Encode each distinct token as one character."""
    token_array: List[str] = []
    token_hash: Dict[str, int] = {}

    def encode(text: str) -> str:
        chars = []
        for token in tokenize(text):
            if token not in token_hash:
                token_hash[token] = len(token_array)
                token_array.append(token)
            chars.append(chr(token_hash[token]))
        return ''.join(chars)

    return encode(old_text), encode(new_text), token_array


def diff_words(old_text: str, new_text: str, timeout: float = 2.0) -> List[EditOp]:
    """
    Word-level edit script that preserves whitespace.

    Args:
        old_text: Original line
        new_text: New line
        timeout: diff-match-patch Diff_Timeout in seconds (0 = no limit)

    Returns:
        Ordered list of EditOp hunks
    """
    dmp = dmp_module.diff_match_patch()
    dmp.Diff_Timeout = timeout

    chars1, chars2, token_array = _tokens_to_chars(old_text, new_text)
    diffs = dmp.diff_main(chars1, chars2, False)

    ops: List[EditOp] = []
    for op, chars in diffs:
        text = ''.join(token_array[ord(c)] for c in chars)
        _append(ops, _DMP_KINDS[op], text)
    return ops
