"""Offset <-> line/column translation over a fixed source text."""

from bisect import bisect_right
from typing import List, Optional, Tuple


class LineIndex:
    """
    Precomputed line-start table for a source text.

    Lines and columns are 1-based and counted in characters; a column resets
    to 1 after every ``\\n``.
    """

    def __init__(self, text: str):
        self._length = len(text)
        self._line_starts: List[int] = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_column(self, offset: int) -> Tuple[int, int]:
        """
        Translate an offset into ``(line, column)``.

        Offsets outside ``[0, len(text)]`` clamp to ``(1, 1)``.
        """
        if offset < 0 or offset > self._length:
            return 1, 1

        line_index = bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index] + 1

    def offset(self, line: int, column: int) -> Optional[int]:
        """
        Translate ``(line, column)`` into the offset of the character there.

        Returns None when the pair does not address a character of the text,
        including columns past the end of their line.
        """
        if line < 1 or column < 1 or line > len(self._line_starts):
            return None

        offset = self._line_starts[line - 1] + column - 1
        if line < len(self._line_starts):
            line_end = self._line_starts[line]
        else:
            line_end = self._length

        if offset >= line_end:
            return None
        return offset
