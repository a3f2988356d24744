"""
Line-oriented text buffer applying editor range edits
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..constants import DEFAULT_POSITION_ENCODING, POSITION_ENCODINGS


@dataclass(frozen=True)
class Position:
    """Zero-based line and character offset in the client's position encoding"""
    line: int
    character: int


@dataclass(frozen=True)
class TextRange:
    start: Position
    end: Position


@dataclass(frozen=True)
class TextEdit:
    """Replacement of a range; a range of None replaces the whole document"""
    range: Optional[TextRange]
    text: str


@dataclass(frozen=True)
class EditSpan:
    """Lines touched by one edit: ``removed`` old lines at ``start`` became ``inserted`` new ones"""
    start: int
    removed: int
    inserted: int

    @property
    def delta(self) -> int:
        return self.inserted - self.removed


def _unit_width(char: str, encoding: str) -> int:
    if encoding == "utf-16":
        return 2 if ord(char) > 0xFFFF else 1
    if encoding == "utf-8":
        return len(char.encode("utf-8"))
    return 1


def to_column(line: str, character: int, encoding: str = DEFAULT_POSITION_ENCODING) -> int:
    """
    Convert a client character offset into a code-point index

    Args:
        line: Line text
        character: Offset in the client's encoding units
        encoding: Position encoding negotiated with the client

    Returns:
        Index into the Python string, clamped to the line length
    """
    if encoding == "utf-32":
        return max(0, min(character, len(line)))
    units = 0
    for index, char in enumerate(line):
        if units >= character:
            return index
        units += _unit_width(char, encoding)
    return len(line)


def to_character(line: str, column: int, encoding: str = DEFAULT_POSITION_ENCODING) -> int:
    """Convert a code-point index into the client's encoding units"""
    column = max(0, min(column, len(line)))
    if encoding == "utf-32":
        return column
    return sum(_unit_width(char, encoding) for char in line[:column])


class TextBuffer:
    """
    Document text held as lines split on "\\n".

    A trailing "\\r" stays part of its line; the parser drops it.
    """

    def __init__(self, text: str = "", encoding: str = DEFAULT_POSITION_ENCODING):
        if encoding not in POSITION_ENCODINGS:
            raise ValueError(f"Unsupported position encoding: {encoding}")
        self.encoding = encoding
        self._lines: List[str] = text.split("\n")

    @property
    def lines(self) -> Sequence[str]:
        return self._lines

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def resolve(self, position: Position) -> Tuple[int, int]:
        """Clamp a client position to (line, code-point column)"""
        if position.line < 0:
            return 0, 0
        if position.line >= len(self._lines):
            last = len(self._lines) - 1
            return last, len(self._lines[last])
        line = self._lines[position.line]
        return position.line, to_column(line, position.character, self.encoding)

    def apply(self, edit: TextEdit) -> EditSpan:
        """
        Apply one edit in place

        Args:
            edit: Range replacement or full-document replacement

        Returns:
            EditSpan describing which lines were replaced
        """
        if edit.range is None:
            removed = len(self._lines)
            self._lines = edit.text.split("\n")
            return EditSpan(0, removed, len(self._lines))

        start = self.resolve(edit.range.start)
        end = self.resolve(edit.range.end)
        if end < start:
            start, end = end, start
        (start_line, start_column), (end_line, end_column) = start, end

        prefix = self._lines[start_line][:start_column]
        suffix = self._lines[end_line][end_column:]
        replacement = (prefix + edit.text + suffix).split("\n")
        self._lines[start_line:end_line + 1] = replacement
        return EditSpan(start_line, end_line - start_line + 1, len(replacement))
