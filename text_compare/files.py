"""
Reading and saving the documents being compared.

Files are only read from or written to inside the configured root.
A pair opened for comparison is remembered under a comparison ID, and
edits can only be saved back to one of the two files of that pair.
"""

import threading
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Union, Tuple

from config_logging import get_logger, FileError, TextCompareError, ValidationError

logger = get_logger('text_compare.files')

PathLike = Union[str, Path]

MAX_OPEN_COMPARISONS = 256


def resolve_in_root(path: PathLike, root: PathLike) -> Path:
    """
    Resolve ``path`` and require it to lie inside ``root``.

    Raises:
        FileError: 403 if the resolved path escapes the root
    """
    resolved = Path(path).resolve()
    root = Path(root).resolve()
    if resolved != root and root not in resolved.parents:
        logger.warning(f"Refused path outside file root: {path}")
        raise FileError(f"Path is outside the allowed directory: {Path(path).name}",
                        filename=Path(path).name, status_code=403)
    return resolved


class ComparisonRegistry:
    """File pairs opened for comparison, keyed by comparison ID."""

    def __init__(self, max_entries: int = MAX_OPEN_COMPARISONS):
        self.max_entries = max_entries
        self._pairs: "OrderedDict[str, Tuple[Path, Path]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._pairs)

    def register(self, old_path: Path, new_path: Path) -> str:
        """Remember a pair and return its comparison ID. Oldest pairs are evicted first."""
        comparison_id = uuid.uuid4().hex
        with self._lock:
            self._pairs[comparison_id] = (Path(old_path), Path(new_path))
            while len(self._pairs) > self.max_entries:
                self._pairs.popitem(last=False)
        return comparison_id

    def path_for(self, comparison_id: str, side: int) -> Path:
        """
        File behind one side of a comparison (1 = old, 2 = new).

        Raises:
            ValidationError: side is not 1 or 2
            TextCompareError: COMPARISON_NOT_FOUND for an unknown ID
        """
        if isinstance(side, bool) or side not in (1, 2):
            raise ValidationError("'side' must be 1 or 2", field='side')
        with self._lock:
            pair = self._pairs.get(comparison_id)
        if pair is None:
            raise TextCompareError(f"Unknown comparison: {comparison_id}",
                                   code="COMPARISON_NOT_FOUND", status_code=404)
        return pair[side - 1]


def read_text_file(path: PathLike) -> str:
    """
    Read a UTF-8 text file as-is.

    Line endings are not translated; CRLF files keep their carriage returns.

    Raises:
        FileError: if the file is missing, unreadable or not UTF-8
    """
    path = Path(path)
    if not path.is_file():
        raise FileError(f"File not found: {path}", filename=path.name, status_code=404)
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except UnicodeDecodeError as e:
        logger.warning(f"Not a UTF-8 text file: {path}")
        raise FileError(f"Not a UTF-8 text file: {path.name}", filename=path.name) from e
    except OSError as e:
        logger.error(f"Failed to read {path}: {e}")
        raise FileError(f"Failed to read file: {e}", filename=path.name) from e


def save_text_file(path: PathLike, content: str) -> int:
    """
    Overwrite an existing file with edited content.

    Returns:
        Number of characters written

    Raises:
        FileError: if the file does not exist or cannot be written
    """
    path = Path(path)
    if not path.is_file():
        raise FileError(f"File not found: {path}", filename=path.name, status_code=404)
    try:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            written = f.write(content)
    except OSError as e:
        logger.error(f"Failed to save {path}: {e}")
        raise FileError(f"Failed to save file: {e}", filename=path.name) from e

    logger.info(f"Saved {written} chars to {path.name}")
    return written


def comparison_title(old_path: PathLike, new_path: PathLike) -> str:
    """Panel title for a pair of files."""
    return f"Compare: {Path(old_path).name} ↔ {Path(new_path).name}"
