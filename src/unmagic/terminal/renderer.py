"""Paints regions onto the terminal relative to the canvas origin."""

from __future__ import annotations

from unmagic.terminal import ansi
from unmagic.terminal.buffer import Buffer
from unmagic.terminal.region import Region
from unmagic.terminal.terminal import RESTORE_CURSOR, Terminal, cursor_down, cursor_right


class Renderer:
    """Stateless writer that positions the cursor and emits region rows.

    Every row is addressed from the saved cursor origin (``ESC[u``) so the
    output never depends on where the previous write left the cursor.
    """

    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal

    def render_region(self, region: Region) -> None:
        """Paint *region* and flush the terminal."""
        self.render_region_without_flush(region)
        self.terminal.flush()

    def render_region_without_flush(self, region: Region) -> None:
        """Paint *region*; the caller is responsible for flushing."""
        self._paint(
            region.render_buffer(),
            region.x,
            region.y,
            region.foreground,
            region.background,
        )

    def erase_region_without_flush(self, region: Region) -> None:
        """Overwrite the full area of *region* with unstyled spaces."""
        self._paint(Buffer.blank(region.width, region.height), region.x, region.y)

    def _paint(
        self,
        buffer: Buffer,
        x: int,
        y: int,
        foreground: ansi.Color | None = None,
        background: ansi.Color | None = None,
    ) -> None:
        out: list[str] = []
        for row, line in enumerate(buffer.lines()):
            out.append(self._move_to(x, y + row))
            if foreground is not None or background is not None:
                out.append(ansi.text(line, color=foreground, background=background))
            else:
                out.append(line)
        if out:
            self.terminal.write("".join(out))

    @staticmethod
    def _move_to(x: int, y: int) -> str:
        return RESTORE_CURSOR + cursor_down(y) + cursor_right(x)
