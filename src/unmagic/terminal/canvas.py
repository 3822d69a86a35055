"""Canvas - region-based terminal rendering driven by a single UI thread.

All terminal I/O goes through one render thread so that writes from many
producer threads can never interleave their escape sequences.  Producers
only enqueue messages; the render thread applies them, collects the regions
they touched, and paints those regions as one synchronized-update frame.

Example::

    canvas = Canvas(fps=30)
    canvas.define_region("status", x=0, y=0, width=80, height=3, background="blue")
    canvas.define_region("logs", x=0, y=4, width=80, height=20, border=True)

    canvas.regions["status"] = "Ready"
    canvas.regions["logs"] << "Starting...\\n"

    canvas.start(background=True)
    ...
    canvas.stop()
"""

from __future__ import annotations

import dataclasses
import logging
import queue
import threading
import time
from typing import TextIO

from unmagic.terminal import ansi
from unmagic.terminal.config import CanvasConfig
from unmagic.terminal.errors import CanvasError, DuplicateRegionError
from unmagic.terminal.messages import (
    Append,
    Clear,
    Message,
    RegionId,
    RegionMessage,
    Remove,
    Render,
    Stop,
    Update,
)
from unmagic.terminal.rate import Rate
from unmagic.terminal.region import Region
from unmagic.terminal.region_collection import RegionCollection
from unmagic.terminal.renderer import Renderer
from unmagic.terminal.terminal import (
    BEGIN_SYNCHRONIZED_UPDATE,
    END_SYNCHRONIZED_UPDATE,
    RESTORE_CURSOR,
    SAVE_CURSOR,
    Terminal,
    as_terminal,
)

__all__ = ["Canvas"]

logger = logging.getLogger(__name__)


class _Frame:
    """Regions touched since the last paint, in first-touched order."""

    __slots__ = ("dirty", "erased")

    def __init__(self) -> None:
        self.dirty: dict[RegionId, Region] = {}
        self.erased: list[Region] = []

    def __bool__(self) -> bool:
        return bool(self.dirty or self.erased)


class Canvas:
    """Coordinates region updates and terminal output.

    Parameters
    ----------
    output:
        A :class:`~unmagic.terminal.terminal.Terminal` or a text stream.
        Defaults to ``sys.stdout``.
    fps:
        Target frame rate.  Defaults to ``UNMAGIC_CANVAS_FPS`` or 24.
    config:
        Explicit configuration; read from the environment when omitted.

    The current cursor position is saved on construction and used as the
    origin for every region's ``(x, y)``.
    """

    def __init__(
        self,
        output: Terminal | TextIO | None = None,
        fps: float | None = None,
        config: CanvasConfig | None = None,
    ) -> None:
        if config is None:
            config = CanvasConfig.from_env()
        if fps is not None:
            if fps <= 0:
                raise ValueError(f"fps must be positive, got {fps}")
            config = dataclasses.replace(config, fps=float(fps))
        self.config: CanvasConfig = config

        self.terminal: Terminal = as_terminal(
            output, write_log_path=self.config.write_log_path
        )
        self._frame_duration: float = self.config.frame_duration
        self._renderer = Renderer(self.terminal)

        self._regions_map: dict[RegionId, Region] = {}
        self._lock = threading.Lock()
        self._queue: queue.Queue[Message] = queue.Queue()

        self._running: bool = False
        self._thread: threading.Thread | None = None

        self._rate_monitor = Rate(window=self.config.rate_window)

        self.regions = RegionCollection(self)

        self._origin_saved: bool = False
        self._save_cursor_position()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def target_fps(self) -> float:
        return self.config.fps

    @property
    def actual_fps(self) -> float:
        """Frames painted per second over the rate window."""
        return self._rate_monitor.current_rate

    def performance_stats(self) -> dict[str, float]:
        actual = self.actual_fps
        efficiency = min(100.0, actual / self.target_fps * 100.0) if actual > 0 else 0.0
        return {
            "target_fps": self.target_fps,
            "actual_fps": actual,
            "frame_efficiency": efficiency,
        }

    # ------------------------------------------------------------------
    # Region registry
    # ------------------------------------------------------------------

    def define_region(
        self,
        name: RegionId,
        x: int,
        y: int,
        width: int,
        height: int,
        *,
        background: ansi.Color | None = None,
        foreground: ansi.Color | None = None,
        border: bool = False,
        border_style: str = "single",
    ) -> Canvas:
        """Register a new region.

        Raises :class:`DuplicateRegionError` if *name* is already defined.
        When the canvas is running the empty region is painted right away.
        """
        with self._lock:
            if name in self._regions_map:
                raise DuplicateRegionError(name)
            self._regions_map[name] = Region(
                id=name,
                x=x,
                y=y,
                width=width,
                height=height,
                background=background,
                foreground=foreground,
                border=border,
                border_style=border_style,
            )

        if self._running:
            self.send_message(Render(name))

        return self

    def get_region(self, name: RegionId) -> Region | None:
        with self._lock:
            return self._regions_map.get(name)

    def has_region(self, name: object) -> bool:
        with self._lock:
            return name in self._regions_map

    def region_ids(self) -> list[RegionId]:
        with self._lock:
            return list(self._regions_map)

    def delete_region(self, name: RegionId) -> None:
        """Remove *name* from the canvas and erase it on the next frame.

        Messages for *name* that are still queued are dropped, unless *name*
        is defined again before the render thread applies them.
        """
        with self._lock:
            region = self._regions_map.pop(name, None)
        if region is not None:
            self.send_message(Remove(region))

    def clear(self) -> None:
        """Clear the content of every region."""
        for name in self.region_ids():
            self.send_message(Clear(name))

    def send_message(self, message: Message) -> None:
        """Enqueue *message* for the render thread (never blocks)."""
        self._queue.put(message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, background: bool = False) -> threading.Thread | None:
        """Paint every region, then start the render thread.

        With ``background=False`` this blocks until the canvas is stopped
        (``KeyboardInterrupt`` stops it).  With ``background=True`` the
        render thread is returned immediately.
        """
        if self._running or (self._thread is not None and self._thread.is_alive()):
            raise CanvasError("Canvas is already running")

        self._running = True
        self._save_cursor_position()

        # Apply everything queued before start and show all regions at once
        try:
            self._perform_initial_render()
        except Exception:
            self._running = False
            raise

        thread = threading.Thread(
            target=self._run, name="unmagic-canvas", daemon=True
        )
        self._thread = thread
        thread.start()
        logger.debug("Canvas started at %.1f fps", self.target_fps)

        if background:
            return thread

        try:
            while thread.is_alive():
                thread.join(0.1)
        except KeyboardInterrupt:
            self.stop()
        return None

    def stop(self) -> None:
        """Stop the render thread and restore the cursor to the origin.

        Waits at most ``config.join_timeout`` seconds for the thread.
        """
        self._running = False
        self._queue.put(Stop())

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self.config.join_timeout)
            if thread.is_alive():
                logger.warning(
                    "Canvas render thread did not exit within %.1fs",
                    self.config.join_timeout,
                )

        self._restore_cursor_position()
        logger.debug("Canvas stopped")

    # ------------------------------------------------------------------
    # Render thread
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while self._running:
            # Block while idle
            first = self._queue.get()
            if isinstance(first, Stop):
                break

            stopping = False
            frame_start = time.perf_counter()
            try:
                frame = _Frame()
                self._apply_logged(first, frame)

                # Collapse a burst of messages into one frame
                while True:
                    try:
                        message = self._queue.get_nowait()
                    except queue.Empty:
                        break
                    if isinstance(message, Stop):
                        stopping = True
                        break
                    self._apply_logged(message, frame)

                if frame:
                    self._render_frame(frame)

                self._rate_monitor.record_event()
            except Exception:
                logger.exception("Canvas render thread error")

            if stopping:
                break

            remaining = self._frame_duration - (time.perf_counter() - frame_start)
            if remaining > 0:
                time.sleep(remaining)

    def _perform_initial_render(self) -> None:
        frame = _Frame()
        while True:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                break
            if isinstance(message, Stop):
                # Left over from an earlier stop()
                continue
            self._apply_logged(message, frame)

        with self._lock:
            for name, region in self._regions_map.items():
                frame.dirty.setdefault(name, region)

        if frame:
            self._render_frame(frame)

    def _apply_logged(self, message: RegionMessage, frame: _Frame) -> None:
        try:
            self._apply(message, frame)
        except Exception:
            logger.exception("Canvas failed to apply %r", message)

    def _apply(self, message: RegionMessage, frame: _Frame) -> None:
        """Apply *message* to its region and record the region as dirty."""
        if isinstance(message, Remove):
            region = message.region
            region.clear()
            # A region redefined under the same id stays dirty
            if frame.dirty.get(region.id) is region:
                del frame.dirty[region.id]
            frame.erased.append(region)
            return

        region = self.get_region(message.region_id)
        if region is None:
            # Deleted (or never defined) by the time we got here
            return

        if isinstance(message, Update):
            region.set_content(message.content)
        elif isinstance(message, Append):
            region.append_content(message.content)
        elif isinstance(message, Clear):
            region.clear()
        elif isinstance(message, Render):
            pass
        else:
            raise TypeError(f"Unknown canvas message: {message!r}")

        frame.dirty[region.id] = region

    def _render_frame(self, frame: _Frame) -> None:
        """Paint a frame atomically using synchronized-update mode."""
        self.terminal.write(BEGIN_SYNCHRONIZED_UPDATE)
        try:
            for region in frame.erased:
                self._renderer.erase_region_without_flush(region)
            for region in frame.dirty.values():
                self._renderer.render_region_without_flush(region)
        except Exception:
            self._close_failed_frame()
            raise
        self.terminal.write(END_SYNCHRONIZED_UPDATE)
        self.terminal.flush()

    def _close_failed_frame(self) -> None:
        """End synchronized-update mode after a paint error.

        The paint error is what the caller sees; a second failure here is
        only logged.
        """
        try:
            self.terminal.write(END_SYNCHRONIZED_UPDATE)
            self.terminal.flush()
        except Exception:
            logger.warning("Canvas could not close a failed frame", exc_info=True)

    # ------------------------------------------------------------------
    # Cursor origin
    # ------------------------------------------------------------------

    def _save_cursor_position(self) -> None:
        if self._origin_saved:
            return
        self.terminal.write(SAVE_CURSOR)
        self.terminal.flush()
        self._origin_saved = True

    def _restore_cursor_position(self) -> None:
        if not self._origin_saved:
            return
        self.terminal.write(RESTORE_CURSOR)
        self.terminal.flush()
        self._origin_saved = False

    def __repr__(self) -> str:
        return (
            f"Canvas(regions={self.region_ids()!r}, fps={self.target_fps}, "
            f"running={self._running})"
        )
