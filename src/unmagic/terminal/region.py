"""Region - a named, positioned viewport on the canvas.

A region accumulates raw text (``content``) without bound but only shows the
most recent lines that fit, like a log tail.  Every mutation rebuilds the
visible :class:`~unmagic.terminal.buffer.Buffer`.

Regions are owned by the canvas render thread; application code changes them
through :class:`~unmagic.terminal.region_collection.RegionCollection`.
"""

from __future__ import annotations

from typing import Hashable

from unmagic.terminal import ansi
from unmagic.terminal.buffer import Buffer

# ---------------------------------------------------------------------------
# Border character sets
# ---------------------------------------------------------------------------

# (top_left, top, top_right, left, right, bottom_left, bottom, bottom_right)
BORDER_STYLES: dict[str, tuple[str, str, str, str, str, str, str, str]] = {
    "single": ("┌", "─", "┐", "│", "│", "└", "─", "┘"),
    "double": ("╔", "═", "╗", "║", "║", "╚", "═", "╝"),
    "rounded": ("╭", "─", "╮", "│", "│", "╰", "─", "╯"),
    "bold": ("┏", "━", "┓", "┃", "┃", "┗", "━", "┛"),
    "ascii": ("+", "-", "+", "|", "|", "+", "-", "+"),
    "dashed": ("┌", "┄", "┐", "┆", "┆", "└", "┄", "┘"),
}


def visible_lines(content: str, height: int) -> list[str]:
    """Return the trailing lines of *content* that fit in *height* rows.

    A trailing newline yields a final empty line (the cursor sits on a fresh
    row); content without one does not.
    """
    lines = content.split("\n")
    if lines[-1] == "" and not content.endswith("\n"):
        # Only reachable for empty content
        lines.pop()
    if height <= 0:
        return []
    if len(lines) > height:
        return lines[-height:]
    return lines


class Region:
    """A rectangular area of the canvas with its own content and style.

    ``width`` and ``height`` include the border when ``border`` is set; the
    content area is then two columns narrower and two rows shorter.
    """

    def __init__(
        self,
        id: Hashable,
        x: int,
        y: int,
        width: int,
        height: int,
        background: ansi.Color | None = None,
        foreground: ansi.Color | None = None,
        border: bool = False,
        border_style: str = "single",
    ) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Region {id!r} has negative size {width}x{height}")
        if border_style not in BORDER_STYLES:
            raise ValueError(f"Unknown border style: {border_style!r}")
        ansi.validate_color(foreground)
        if background is not None:
            ansi.background_code(background)

        self.id = id
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.background = background
        self.foreground = foreground
        self.border = border
        self.border_style = border_style

        self._content: str = ""
        self._content_buffer: Buffer = self._build_content_buffer()

    # -- geometry -----------------------------------------------------------

    @property
    def content_width(self) -> int:
        return max(0, self.width - 2) if self.border else self.width

    @property
    def content_height(self) -> int:
        return max(0, self.height - 2) if self.border else self.height

    # -- content ------------------------------------------------------------

    @property
    def content(self) -> str:
        """All text accumulated so far (not just the visible tail)."""
        return self._content

    @property
    def content_buffer(self) -> Buffer:
        return self._content_buffer

    def set_content(self, text: object) -> None:
        """Replace the accumulated content."""
        self._content = str(text)
        self._content_buffer = self._build_content_buffer()

    def append_content(self, text: object) -> None:
        """Append to the accumulated content and scroll to the end."""
        self._content += str(text)
        self._content_buffer = self._build_content_buffer()

    def clear(self) -> None:
        self._content = ""
        self._content_buffer = self._build_content_buffer()

    def _build_content_buffer(self) -> Buffer:
        lines = visible_lines(self._content, self.content_height)
        return Buffer(
            "\n".join(lines),
            width=self.content_width,
            height=self.content_height,
        )

    # -- rendering ----------------------------------------------------------

    def render_buffer(self) -> Buffer:
        """Return the buffer to paint: the content, framed if bordered."""
        if not self.border:
            return self._content_buffer
        return self._bordered_buffer()

    def _bordered_buffer(self) -> Buffer:
        tl, top, tr, left, right, bl, bottom, br = BORDER_STYLES[self.border_style]
        inner = self.content_width

        top_buffer = Buffer(f"{tl}{top * inner}{tr}", width=self.width, height=1)
        bottom_buffer = Buffer(f"{bl}{bottom * inner}{br}", width=self.width, height=1)

        framed = "\n".join(
            f"{left}{line}{right}" for line in self._content_buffer.lines()
        )
        middle_buffer = Buffer(framed, width=self.width, height=self.content_height)

        framed_buffer = top_buffer.merge(middle_buffer, at="below").merge(
            bottom_buffer, at="below"
        )
        if framed_buffer.height != self.height:
            # Regions shorter than two rows only have room for part of the frame
            return Buffer(framed_buffer.to_text(), width=self.width, height=self.height)
        return framed_buffer

    def __repr__(self) -> str:
        return (
            f"Region(id={self.id!r}, x={self.x}, y={self.y}, "
            f"width={self.width}, height={self.height}, border={self.border})"
        )
