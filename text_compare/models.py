"""
Text Comparison Models v1.0.0
=============================
Data classes for the side-by-side comparison model.

Every variant below is a closed set: a kind enum plus a frozen
dataclass payload. Consumers match on ``kind`` / ``status``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional, Any, Tuple


class EditKind(Enum):
    """Hunk type produced by a sequence-diff primitive."""
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class EditOp:
    """
    One hunk of an edit script.

    Attributes:
        kind: ADDED, REMOVED or UNCHANGED
        value: Text of the hunk. For line diffs this is one or more
               newline-terminated lines joined together.
    """
    kind: EditKind
    value: str

    @property
    def added(self) -> bool:
        return self.kind is EditKind.ADDED

    @property
    def removed(self) -> bool:
        return self.kind is EditKind.REMOVED


class ProcessedKind(Enum):
    """Hunk type after modification detection."""
    MODIFIED = "modified"
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ProcessedOp:
    """
    An edit-script hunk after removed/added pairs have been merged.

    Attributes:
        kind: MODIFIED, ADDED, REMOVED or UNCHANGED
        value: Hunk text (ADDED, REMOVED, UNCHANGED)
        old_value: Removed text of a MODIFIED block
        new_value: Added text of a MODIFIED block
    """
    kind: ProcessedKind
    value: str = ""
    old_value: str = ""
    new_value: str = ""

    @classmethod
    def modified(cls, old_value: str, new_value: str) -> 'ProcessedOp':
        return cls(ProcessedKind.MODIFIED, old_value=old_value, new_value=new_value)

    @classmethod
    def from_edit(cls, op: EditOp) -> 'ProcessedOp':
        return cls(ProcessedKind(op.kind.value), value=op.value)


@dataclass(frozen=True)
class LinePair:
    """
    Old/new lines at the same index of a modified block.

    ``old_missing`` / ``new_missing`` mark the side that ran out of
    lines and was filled with an empty string.
    """
    old: str
    new: str
    old_missing: bool = False
    new_missing: bool = False


class SpanKind(Enum):
    """Word span type."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class WordSpan:
    """A contiguous run of text within one line."""
    kind: SpanKind
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind.value, 'text': self.text}


class LineStatus(str, Enum):
    """Classification of a content row."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class AlignedRow:
    """
    A single row of one column in the side-by-side view.

    Placeholder rows carry no line number, status or spans; they exist
    only so the opposite column keeps the same row count.

    Attributes:
        line_number: 1-based line number within this column (None for placeholders)
        status: Row classification (None for placeholders)
        spans: Word spans whose concatenation is the row text
        padding: True for the empty content row that fills the shorter
                 side of a modified block
    """
    line_number: Optional[int] = None
    status: Optional[LineStatus] = None
    spans: Tuple[WordSpan, ...] = ()
    padding: bool = False

    @classmethod
    def placeholder(cls) -> 'AlignedRow':
        return cls()

    @classmethod
    def content(cls, line_number: int, status: LineStatus,
                spans: Tuple[WordSpan, ...], padding: bool = False) -> 'AlignedRow':
        return cls(line_number=line_number, status=status, spans=tuple(spans), padding=padding)

    @property
    def is_placeholder(self) -> bool:
        return self.status is None

    @property
    def text(self) -> str:
        return ''.join(span.text for span in self.spans)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        if self.is_placeholder:
            return {'placeholder': True}
        return {
            'placeholder': False,
            'line_number': self.line_number,
            'status': self.status.value,
            'text': self.text,
            'spans': [s.to_dict() for s in self.spans],
            'padding': self.padding
        }


@dataclass(frozen=True)
class CompareOptions:
    """Resolved preprocessing options."""
    ignore_whitespace: bool = False
    ignore_case: bool = False

    @classmethod
    def from_config(cls, config) -> 'CompareOptions':
        return cls(
            ignore_whitespace=bool(config.ignore_whitespace),
            ignore_case=bool(config.ignore_case)
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            'ignore_whitespace': self.ignore_whitespace,
            'ignore_case': self.ignore_case
        }


def _empty_stats() -> Dict[str, int]:
    return {
        'total_rows': 0,
        'unchanged': 0,
        'added': 0,
        'removed': 0,
        'modified': 0,
        'placeholders_left': 0,
        'placeholders_right': 0
    }


@dataclass
class ComparisonResult:
    """
    Complete result of comparing two texts.

    Attributes:
        left: Rows for document 1
        right: Rows for document 2, same length as ``left``
        options: Options the texts were normalized with
        stats: Row counts by classification
    """
    left: List[AlignedRow] = field(default_factory=list)
    right: List[AlignedRow] = field(default_factory=list)
    options: CompareOptions = field(default_factory=CompareOptions)
    stats: Dict[str, int] = field(default_factory=_empty_stats)

    @property
    def has_changes(self) -> bool:
        return any(row.status is not LineStatus.UNCHANGED for row in self.left + self.right)

    def left_lines(self) -> List[str]:
        """Document 1 lines, skipping placeholder and padding rows."""
        return [r.text for r in self.left if not r.is_placeholder and not r.padding]

    def right_lines(self) -> List[str]:
        """Document 2 lines, skipping placeholder and padding rows."""
        return [r.text for r in self.right if not r.is_placeholder and not r.padding]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'left': [r.to_dict() for r in self.left],
            'right': [r.to_dict() for r in self.right],
            'options': self.options.to_dict(),
            'stats': self.stats
        }
