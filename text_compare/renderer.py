"""
HTML rendering of a ComparisonResult as two synchronized columns.
"""

import html
from typing import Dict, Tuple, Optional, Sequence

from .models import AlignedRow, ComparisonResult, LineStatus, SpanKind

_SPAN_CLASSES = {
    SpanKind.ADDED: 'word-diff word-added',
    SpanKind.REMOVED: 'word-diff word-removed',
}

PLACEHOLDER_HTML = '<div class="line empty-line"></div>'


def _render_spans(row: AlignedRow) -> str:
    parts = []
    for span in row.spans:
        escaped = html.escape(span.text)
        css = _SPAN_CLASSES.get(span.kind)
        parts.append(f'<span class="{css}">{escaped}</span>' if css else escaped)
    return ''.join(parts)


def render_row(row: AlignedRow, colors: Dict[str, str]) -> str:
    """Render one row; placeholders become an empty line."""
    if row.is_placeholder:
        return PLACEHOLDER_HTML

    if row.status is LineStatus.UNCHANGED:
        opening = '<div class="line">'
    else:
        # 20 = ~12% alpha on a #rrggbb color
        color = colors.get(row.status.value, '')
        opening = (f'<div class="line {row.status.value}" '
                   f'style="background-color: {color}20;">')

    return (
        f'{opening}'
        f'<span class="line-number">{row.line_number}</span>'
        f'<span class="line-content" data-line="{row.line_number}">{_render_spans(row)}</span>'
        f'</div>'
    )


def render_column(rows: Sequence[AlignedRow], colors: Dict[str, str]) -> str:
    return '\n'.join(render_row(row, colors) for row in rows)


def render_columns(result: ComparisonResult, colors: Dict[str, str]) -> Tuple[str, str]:
    """
    Render both columns.

    Args:
        result: Comparison to render
        colors: #rrggbb colors keyed by 'added', 'removed', 'modified'

    Returns:
        Tuple of (left_html, right_html)
    """
    return render_column(result.left, colors), render_column(result.right, colors)


_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{title}</title>
<style>
.container {{ display: flex; width: 100%; }}
.file-view {{ flex: 1; overflow-y: auto; border-right: 1px solid #ccc; }}
.file-header {{ position: sticky; top: 0; padding: 10px; font-weight: bold; background: #fff; }}
.line {{ display: flex; min-height: 1.5em; white-space: pre; }}
.line-number {{ width: 3em; text-align: right; padding-right: 0.5em; color: #888; user-select: none; }}
.line-content {{ flex-grow: 1; white-space: pre-wrap; word-break: break-all; padding: 0 4px; }}
.empty-line {{ background-color: rgba(128, 128, 128, 0.1); }}
.word-added {{ background-color: {added}40; }}
.word-removed {{ background-color: {removed}40; text-decoration: line-through; }}
</style>
</head>
<body>
<div class="container">
<div class="file-view" id="file1"><div class="file-header">{left_name}</div>
{left}
</div>
<div class="file-view" id="file2"><div class="file-header">{right_name}</div>
{right}
</div>
</div>
</body>
</html>
"""


def render_page(
    result: ComparisonResult,
    colors: Dict[str, str],
    left_name: str = "Document 1",
    right_name: str = "Document 2",
    title: Optional[str] = None
) -> str:
    """Render a standalone side-by-side HTML page."""
    left, right = render_columns(result, colors)
    return _PAGE_TEMPLATE.format(
        title=html.escape(title or f"Compare: {left_name} ↔ {right_name}"),
        added=colors.get('added', ''),
        removed=colors.get('removed', ''),
        left_name=html.escape(left_name),
        right_name=html.escape(right_name),
        left=left,
        right=right
    )
