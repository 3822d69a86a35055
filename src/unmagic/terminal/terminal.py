"""Terminal output sink for the canvas.

Provides a ``Terminal`` protocol and a concrete ``StreamTerminal`` that writes
ANSI escape sequences to a text stream (``sys.stdout`` by default).  The
canvas only needs ``write`` and ``flush``; the remaining helpers are for
applications that set up the screen around it.
"""

from __future__ import annotations

import io
import os
import sys
from typing import Protocol, TextIO, runtime_checkable

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

SAVE_CURSOR = "\x1b[s"
RESTORE_CURSOR = "\x1b[u"
BEGIN_SYNCHRONIZED_UPDATE = "\x1b[?2026h"
END_SYNCHRONIZED_UPDATE = "\x1b[?2026l"

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[2K"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_CURSOR_DOWN_FMT = "\x1b[{}B"
_CURSOR_RIGHT_FMT = "\x1b[{}C"


def cursor_down(lines: int) -> str:
    """Escape sequence moving the cursor down *lines* rows ("" for <= 0)."""
    return _CURSOR_DOWN_FMT.format(lines) if lines > 0 else ""


def cursor_right(cols: int) -> str:
    """Escape sequence moving the cursor right *cols* columns ("" for <= 0)."""
    return _CURSOR_RIGHT_FMT.format(cols) if cols > 0 else ""


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Terminal(Protocol):
    """Interface for terminal output operations."""

    def write(self, data: str) -> None: ...

    def flush(self) -> None: ...


# ---------------------------------------------------------------------------
# StreamTerminal implementation
# ---------------------------------------------------------------------------


class StreamTerminal:
    """Terminal backed by a text stream.

    Writes are buffered by the stream until :meth:`flush`, which lets the
    canvas emit a whole frame with a single flush.  When *write_log_path* is
    set (or ``UNMAGIC_TERMINAL_WRITE_LOG`` is in the environment) every write
    is mirrored to that file for debugging.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        write_log_path: str | None = None,
    ) -> None:
        self._stream: TextIO = stream if stream is not None else sys.stdout
        self._write_log_path: str = (
            write_log_path
            if write_log_path is not None
            else os.environ.get("UNMAGIC_TERMINAL_WRITE_LOG", "")
        )

    # -- properties ---------------------------------------------------------

    @property
    def stream(self) -> TextIO:
        return self._stream

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(self._stream.fileno()).columns
        except (AttributeError, ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(self._stream.fileno()).lines
        except (AttributeError, ValueError, OSError):
            return 24

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to the stream (and the write log, if configured)."""
        self._stream.write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                pass

    def flush(self) -> None:
        self._stream.flush()

    # -- cursor / screen manipulation --------------------------------------

    def save_cursor(self) -> None:
        self.write(SAVE_CURSOR)

    def restore_cursor(self) -> None:
        self.write(RESTORE_CURSOR)

    def begin_synchronized_update(self) -> None:
        self.write(BEGIN_SYNCHRONIZED_UPDATE)

    def end_synchronized_update(self) -> None:
        self.write(END_SYNCHRONIZED_UPDATE)

    def hide_cursor(self) -> None:
        self.write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self.write(_SHOW_CURSOR)

    def clear_line(self) -> None:
        self.write(_CLEAR_LINE)

    def clear_screen(self) -> None:
        self.write(_CLEAR_SCREEN)


def as_terminal(
    output: Terminal | TextIO | None,
    write_log_path: str | None = None,
) -> Terminal:
    """Wrap a raw stream in a ``StreamTerminal``; pass terminals through."""
    if output is None:
        return StreamTerminal(write_log_path=write_log_path)
    if isinstance(output, StreamTerminal):
        return output
    if isinstance(output, io.TextIOBase):
        return StreamTerminal(output, write_log_path=write_log_path)
    if isinstance(output, Terminal):
        return output
    raise TypeError(f"Expected a Terminal or text stream, got {type(output).__name__}")
