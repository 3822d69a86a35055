"""Immutable character-grid buffer with Unicode display-width awareness.

A ``Buffer`` is a ``width`` x ``height`` grid of cells.  Each cell holds one
printable code point, or ``None`` when it is the second column of a
double-width character (a *tombstone*).  Buffers never change after
construction; :meth:`Buffer.merge` always returns a new one.

Example::

    >>> b = Buffer("Hello\\nWorld")
    >>> (b.width, b.height)
    (5, 2)
    >>> Buffer("Hello World", width=8, height=1).to_text()
    'Hello Wo'
    >>> (Buffer("AAA") << Buffer("BBB")).to_text()
    'AAA\\nBBB'
"""

from __future__ import annotations

from typing import Iterator, Literal, Sequence, Union

from unmagic.terminal.utils import (
    char_width,
    grapheme_width,
    graphemes,
    max_line_width,
)

__all__ = ["Buffer", "Cell", "Placement"]

# A printable code point, or None for the tombstone half of a wide character
Cell = Union[str, None]

Placement = Union[Literal["below", "above", "right", "left"], Sequence[int]]

_BLANK = " "


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


def _release(row: list[Cell], col: int) -> None:
    """Break up a wide character that is about to lose one of its halves."""
    cell = row[col]
    if cell is None:
        if col > 0:
            row[col - 1] = _BLANK
    elif (
        col + 1 < len(row)
        and row[col + 1] is None
        and char_width(cell) == 2
    ):
        row[col + 1] = _BLANK


def _place(row: list[Cell], x: int, char: str, w: int) -> None:
    """Write *char* (of width *w*) at column *x*, keeping wide pairs intact."""
    if x < 0 or x + w > len(row):
        return
    for col in range(x, x + w):
        _release(row, col)
    row[x] = char
    if w == 2:
        row[x + 1] = None


def _layout_line(line: str, width: int) -> list[Cell]:
    """Lay *line* out into exactly *width* cells.

    Every printable code point takes its own cell (two for wide ones) and
    control characters are skipped.  A grapheme cluster that would overflow
    the remaining width is dropped whole, so marks never lose their base.
    """
    row: list[Cell] = [_BLANK] * width
    x = 0
    for g in graphemes(line):
        if x + grapheme_width(g) > width:
            break
        for char in g:
            w = char_width(char)
            if w == 0:
                continue
            row[x] = char
            if w == 2:
                row[x + 1] = None
            x += w
    return row


# ---------------------------------------------------------------------------
# Buffer
# ---------------------------------------------------------------------------


class Buffer:
    """A fixed-size grid of display cells.

    Parameters
    ----------
    value:
        Text to lay out; lines are separated by ``"\\n"``.
    width:
        Number of columns.  Inferred from the widest line when omitted.
    height:
        Number of rows.  Inferred from the number of lines when omitted.

    Content that does not fit is truncated at a grapheme boundary; missing
    rows and columns are padded with spaces.
    """

    __slots__ = ("_width", "_height", "_rows")

    def __init__(
        self,
        value: str = "",
        width: int | None = None,
        height: int | None = None,
    ) -> None:
        text = str(value)
        lines = text.split("\n") if text else []

        self._width: int = max(0, width) if width is not None else max_line_width(lines)
        self._height: int = max(0, height) if height is not None else len(lines)

        rows: list[list[Cell]] = [
            _layout_line(line, self._width) for line in lines[: self._height]
        ]
        while len(rows) < self._height:
            rows.append([_BLANK] * self._width)

        self._rows: tuple[tuple[Cell, ...], ...] = tuple(tuple(r) for r in rows)

    # -- construction helpers -----------------------------------------------

    @classmethod
    def blank(cls, width: int, height: int) -> Buffer:
        """Return a buffer of *width* x *height* spaces."""
        return cls("", width=width, height=height)

    @classmethod
    def _from_rows(cls, rows: list[list[Cell]], width: int, height: int) -> Buffer:
        buf = cls.__new__(cls)
        buf._width = width
        buf._height = height
        buf._rows = tuple(tuple(r) for r in rows)
        return buf

    # -- properties ---------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def rows(self) -> tuple[tuple[Cell, ...], ...]:
        """The raw cell grid, row-major."""
        return self._rows

    def cell(self, x: int, y: int) -> Cell:
        """Return the cell at column *x*, row *y*.

        Raises ``IndexError`` when the position lies outside the buffer.
        """
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"({x}, {y}) out of bounds ({self._width}x{self._height})"
            )
        return self._rows[y][x]

    # -- composition --------------------------------------------------------

    def merge(self, other: Buffer, at: Placement = "below") -> Buffer:
        """Combine this buffer with *other* and return the result.

        * ``"below"`` / ``"above"`` -- stack vertically.
        * ``"right"`` / ``"left"`` -- join horizontally.
        * ``(x, y)`` (or any two-item sequence) -- overlay *other* at that offset; its non-space cells
          win over this buffer's.
        """
        if at == "below":
            return self._stack(self, other)
        if at == "above":
            return self._stack(other, self)
        if at == "right":
            return self._join(self, other)
        if at == "left":
            return self._join(other, self)
        if isinstance(at, Sequence) and not isinstance(at, str) and len(at) == 2:
            return self._overlay(other, int(at[0]), int(at[1]))
        raise ValueError(f"Invalid merge position: {at!r}")

    def __lshift__(self, other: Buffer) -> Buffer:
        """``a << b`` is ``a.merge(b, at="below")``."""
        return self.merge(other, at="below")

    @staticmethod
    def _stack(top: Buffer, bottom: Buffer) -> Buffer:
        width = max(top.width, bottom.width)
        height = top.height + bottom.height
        rows: list[list[Cell]] = []
        for src in (top, bottom):
            for row in src.rows:
                rows.append(list(row) + [_BLANK] * (width - src.width))
        return Buffer._from_rows(rows, width, height)

    @staticmethod
    def _join(left: Buffer, right: Buffer) -> Buffer:
        width = left.width + right.width
        height = max(left.height, right.height)
        rows: list[list[Cell]] = []
        for y in range(height):
            lhs = list(left.rows[y]) if y < left.height else [_BLANK] * left.width
            rhs = list(right.rows[y]) if y < right.height else [_BLANK] * right.width
            rows.append(lhs + rhs)
        return Buffer._from_rows(rows, width, height)

    def _overlay(self, other: Buffer, pos_x: int, pos_y: int) -> Buffer:
        width = max(self._width, pos_x + other.width)
        height = max(self._height, pos_y + other.height)

        rows: list[list[Cell]] = []
        for y in range(height):
            if y < self._height:
                rows.append(list(self._rows[y]) + [_BLANK] * (width - self._width))
            else:
                rows.append([_BLANK] * width)

        for oy, row in enumerate(other.rows):
            ty = pos_y + oy
            if not (0 <= ty < height):
                continue
            for ox, char in enumerate(row):
                # Tombstones travel with their lead cell; spaces are transparent
                if char is None or char == _BLANK:
                    continue
                _place(rows[ty], pos_x + ox, char, char_width(char))

        return Buffer._from_rows(rows, width, height)

    # -- output -------------------------------------------------------------

    def lines(self) -> list[str]:
        """Return each row as a string, tombstones omitted."""
        return ["".join(c for c in row if c is not None) for row in self._rows]

    def to_text(self) -> str:
        """Return the rows joined by newlines."""
        return "\n".join(self.lines())

    def __str__(self) -> str:
        return self.to_text()

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Buffer):
            return NotImplemented
        return (
            self._width == other._width
            and self._height == other._height
            and self._rows == other._rows
        )

    def __hash__(self) -> int:
        return hash((self._width, self._height, self._rows))

    def __repr__(self) -> str:
        return f"Buffer(width={self._width}, height={self._height}, text={self.to_text()!r})"
