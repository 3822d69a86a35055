"""Tests for unmagic.terminal.canvas.Canvas using a VirtualTerminal."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

import pytest

from unmagic.terminal.canvas import Canvas, _Frame
from unmagic.terminal.config import CanvasConfig
from unmagic.terminal.errors import CanvasError, DuplicateRegionError
from unmagic.terminal.messages import Remove, Update
from unmagic.terminal.terminal import (
    BEGIN_SYNCHRONIZED_UPDATE,
    END_SYNCHRONIZED_UPDATE,
    RESTORE_CURSOR,
    SAVE_CURSOR,
)

from .virtual_terminal import VirtualTerminal, malformed_escape_sequences

CANVAS_LOGGER = "unmagic.terminal.canvas"


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    """Poll *predicate* until it holds or fail after *timeout* seconds."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(0.005)
    raise AssertionError("condition not met within timeout")


@pytest.fixture
def term() -> VirtualTerminal:
    return VirtualTerminal(rows=40, columns=60)


@pytest.fixture
def canvas(term: VirtualTerminal):
    c = Canvas(term, fps=1000)
    yield c
    if c.running:
        c.stop()


# ---------------------------------------------------------------------------
# Construction and registry
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_saves_cursor_origin(self, term: VirtualTerminal) -> None:
        Canvas(term)
        assert term.output == SAVE_CURSOR
        assert term.flush_count == 1

    def test_fps_from_environment(
        self, term: VirtualTerminal, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("UNMAGIC_CANVAS_FPS", "12")
        assert Canvas(term).target_fps == 12.0

    def test_explicit_fps_wins(
        self, term: VirtualTerminal, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("UNMAGIC_CANVAS_FPS", "12")
        assert Canvas(term, fps=30).target_fps == 30.0

    def test_explicit_config_is_not_modified(self, term: VirtualTerminal) -> None:
        config = CanvasConfig(fps=10)
        canvas = Canvas(term, fps=50, config=config)
        assert canvas.target_fps == 50
        assert config.fps == 10

    @pytest.mark.parametrize("fps", [0, -5])
    def test_non_positive_fps_rejected(self, term: VirtualTerminal, fps: float) -> None:
        with pytest.raises(ValueError):
            Canvas(term, fps=fps)

    def test_rejects_non_terminal_output(self) -> None:
        with pytest.raises(TypeError):
            Canvas(object())  # type: ignore[arg-type]


class TestRegistry:
    def test_define_region_returns_canvas(self, canvas: Canvas) -> None:
        assert canvas.define_region("a", 0, 0, 5, 1) is canvas
        assert canvas.has_region("a")
        assert canvas.get_region("a").width == 5

    def test_duplicate_region_raises(self, canvas: Canvas) -> None:
        canvas.define_region("a", 0, 0, 5, 1)
        with pytest.raises(DuplicateRegionError, match="already exists"):
            canvas.define_region("a", 0, 1, 5, 1)

    def test_region_ids_keep_definition_order(self, canvas: Canvas) -> None:
        for name in ("c", "a", "b"):
            canvas.define_region(name, 0, 0, 1, 1)
        assert canvas.region_ids() == ["c", "a", "b"]

    def test_non_string_ids(self, canvas: Canvas) -> None:
        canvas.define_region(("pane", 1), 0, 0, 3, 1)
        canvas.regions[("pane", 1)] = "x"
        assert canvas.has_region(("pane", 1))

    def test_invalid_region_rejected_without_registering(self, canvas: Canvas) -> None:
        with pytest.raises(ValueError):
            canvas.define_region("a", 0, 0, 3, 1, foreground="not-a-colour")
        assert not canvas.has_region("a")

    def test_delete_unknown_is_noop(self, canvas: Canvas) -> None:
        canvas.delete_region("missing")
        assert canvas._queue.empty()


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestInitialRender:
    def test_queued_updates_collapse_into_one_frame(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("status", 0, 0, 10, 1)
        canvas.define_region("logs", 0, 2, 10, 3, border=True)
        for i in range(20):
            canvas.regions["status"] = f"step {i}"
        canvas.regions["logs"] << "hello"

        canvas.start(background=True)

        assert term.output.count(BEGIN_SYNCHRONIZED_UPDATE) == 1
        assert term.output.count(END_SYNCHRONIZED_UPDATE) == 1
        screen = term.screen()
        assert screen[0] == "step 19"
        assert screen[2:5] == ["┌────────┐", "│hello   │", "└────────┘"]

    def test_empty_regions_are_painted(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("box", 1, 0, 4, 3, border=True, border_style="ascii")
        canvas.start(background=True)
        assert term.screen()[:3] == [" +--+", " |  |", " +--+"]

    def test_no_regions_no_frame(self, canvas: Canvas, term: VirtualTerminal) -> None:
        canvas.start(background=True)
        assert BEGIN_SYNCHRONIZED_UPDATE not in term.output

    def test_initial_render_failure_leaves_canvas_stopped(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("a", 0, 0, 3, 1)
        term.fail_writes = 1
        with pytest.raises(OSError):
            canvas.start(background=True)
        assert not canvas.running

    def test_failed_paint_still_closes_frame(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("a", 0, 0, 3, 1)
        # BEGIN goes through, the region paint fails
        term.fail_writes_after = 1
        term.fail_writes = 1

        with pytest.raises(OSError):
            canvas.start(background=True)

        assert term.output.count(BEGIN_SYNCHRONIZED_UPDATE) == 1
        assert term.output.count(END_SYNCHRONIZED_UPDATE) == 1
        assert term.output.endswith(END_SYNCHRONIZED_UPDATE)

    def test_queued_write_follows_id_to_redefined_region(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("r", 0, 0, 5, 1)
        canvas.regions["r"] = "early"
        canvas.delete_region("r")
        canvas.define_region("r", 0, 1, 5, 1)

        canvas.start(background=True)

        assert canvas.regions.get("r") == "early"
        assert term.screen()[:2] == ["", "early"]

    def test_erasing_old_region_keeps_redefined_one_dirty(
        self, canvas: Canvas
    ) -> None:
        canvas.define_region("r", 0, 0, 5, 1)
        old = canvas.get_region("r")
        canvas.delete_region("r")
        canvas.define_region("r", 0, 1, 5, 1)
        new = canvas.get_region("r")

        frame = _Frame()
        canvas._apply(Update("r", "fresh"), frame)
        canvas._apply(Remove(old), frame)

        assert frame.erased == [old]
        assert frame.dirty == {"r": new}
        assert new.content == "fresh"


class TestRunningCanvas:
    def test_update_is_painted(self, canvas: Canvas, term: VirtualTerminal) -> None:
        canvas.define_region("status", 0, 0, 10, 1)
        canvas.start(background=True)

        canvas.regions["status"] = "Ready"

        wait_for(lambda: term.screen()[0] == "Ready")

    def test_append_scrolls(self, canvas: Canvas, term: VirtualTerminal) -> None:
        canvas.define_region("logs", 0, 0, 10, 3)
        canvas.start(background=True)

        for i in range(1, 6):
            canvas.regions["logs"] << f"line{i}\n"

        wait_for(lambda: term.screen()[:3] == ["line4", "line5", ""])

    def test_define_region_while_running_paints_it(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.start(background=True)
        canvas.define_region("late", 0, 1, 4, 3, border=True, border_style="ascii")
        wait_for(lambda: term.screen()[1:4] == ["+--+", "|  |", "+--+"])

    def test_delete_region_erases_it(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("gone", 0, 0, 6, 3, border=True)
        canvas.regions["gone"] = "bye"
        canvas.start(background=True)
        assert term.screen()[1] == "│bye │"

        canvas.regions.delete("gone")

        wait_for(lambda: term.screen()[:3] == ["", "", ""])
        assert not canvas.has_region("gone")

    def test_delete_then_redefine_shows_new_region(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("r", 0, 0, 8, 1)
        canvas.regions["r"] = "old text"
        canvas.start(background=True)

        canvas.delete_region("r")
        canvas.define_region("r", 0, 0, 3, 1)
        canvas.regions["r"] = "new"

        wait_for(lambda: term.screen()[0] == "new")

    def test_clear_blanks_every_region(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("a", 0, 0, 3, 1)
        canvas.define_region("b", 0, 1, 3, 1)
        canvas.regions["a"] = "aaa"
        canvas.regions["b"] = "bbb"
        canvas.start(background=True)
        assert term.screen()[:2] == ["aaa", "bbb"]

        canvas.clear()

        wait_for(lambda: term.screen()[:2] == ["", ""])
        assert canvas.regions.get("a") == ""

    def test_messages_for_unknown_regions_are_dropped(
        self,
        canvas: Canvas,
        term: VirtualTerminal,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        canvas.define_region("real", 0, 0, 5, 1)
        canvas.start(background=True)

        with caplog.at_level(logging.ERROR, logger=CANVAS_LOGGER):
            canvas.send_message(Update("ghost", "boo"))
            canvas.regions["real"] = "ok"
            wait_for(lambda: term.screen()[0] == "ok")

        assert not caplog.records
        assert "boo" not in term.output

    def test_write_failure_is_logged_and_loop_recovers(
        self,
        canvas: Canvas,
        term: VirtualTerminal,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        canvas.define_region("status", 0, 0, 10, 1)
        canvas.start(background=True)

        with caplog.at_level(logging.ERROR, logger=CANVAS_LOGGER):
            term.fail_writes = 1
            canvas.regions["status"] = "first"
            wait_for(
                lambda: any(
                    "render thread error" in r.getMessage() for r in caplog.records
                )
            )

        canvas.regions["status"] = "second"
        wait_for(lambda: term.screen()[0] == "second")
        assert canvas.running

    def test_mid_frame_failure_keeps_sync_pairs_balanced(
        self,
        canvas: Canvas,
        term: VirtualTerminal,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        canvas.define_region("status", 0, 0, 10, 1)
        canvas.start(background=True)

        with caplog.at_level(logging.ERROR, logger=CANVAS_LOGGER):
            term.fail_writes_after = 1
            term.fail_writes = 1
            canvas.regions["status"] = "lost"
            wait_for(
                lambda: any(
                    "render thread error" in r.getMessage() for r in caplog.records
                )
            )

        canvas.regions["status"] = "shown"
        wait_for(lambda: term.screen()[0] == "shown")
        canvas.stop()

        output = term.output
        assert output.count(BEGIN_SYNCHRONIZED_UPDATE) == output.count(
            END_SYNCHRONIZED_UPDATE
        )

    def test_wide_characters_on_screen(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.define_region("cjk", 0, 0, 5, 1)
        canvas.start(background=True)
        canvas.regions["cjk"] = "世界!"
        wait_for(lambda: term.screen()[0] == "世界!")


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_background_start_returns_daemon_thread(self, canvas: Canvas) -> None:
        thread = canvas.start(background=True)
        assert isinstance(thread, threading.Thread)
        assert thread.daemon
        assert thread.name == "unmagic-canvas"
        assert canvas.running

    def test_double_start_raises(self, canvas: Canvas) -> None:
        canvas.start(background=True)
        with pytest.raises(CanvasError, match="already running"):
            canvas.start(background=True)

    def test_stop_joins_thread_and_restores_cursor(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        thread = canvas.start(background=True)
        canvas.stop()
        assert not canvas.running
        assert not thread.is_alive()
        assert term.output.endswith(RESTORE_CURSOR)

    def test_stop_restores_cursor_once(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        canvas.stop()
        canvas.stop()
        assert term.output == SAVE_CURSOR + RESTORE_CURSOR

    def test_restart_after_stop(self, canvas: Canvas, term: VirtualTerminal) -> None:
        canvas.define_region("status", 0, 0, 10, 1)
        canvas.start(background=True)
        canvas.stop()

        canvas.regions["status"] = "again"
        canvas.start(background=True)

        assert term.screen()[0] == "again"
        canvas.regions["status"] = "live"
        wait_for(lambda: term.screen()[0] == "live")

    def test_blocking_start_returns_after_stop(self, canvas: Canvas) -> None:
        result: list[object] = []
        runner = threading.Thread(
            target=lambda: result.append(canvas.start()), daemon=True
        )
        runner.start()

        wait_for(lambda: canvas._thread is not None and canvas._thread.is_alive())
        canvas.stop()
        runner.join(3.0)

        assert not runner.is_alive()
        assert result == [None]

    def test_repr(self, canvas: Canvas) -> None:
        canvas.define_region("a", 0, 0, 1, 1)
        assert "'a'" in repr(canvas)
        assert "running=False" in repr(canvas)


class TestPerformanceStats:
    def test_idle_canvas(self, term: VirtualTerminal) -> None:
        stats = Canvas(term, fps=20).performance_stats()
        assert stats == {"target_fps": 20.0, "actual_fps": 0.0, "frame_efficiency": 0.0}

    def test_frames_are_counted(self, canvas: Canvas) -> None:
        canvas.define_region("tick", 0, 0, 5, 1)
        canvas.start(background=True)
        for i in range(10):
            canvas.regions["tick"] = str(i)
            time.sleep(0.005)

        wait_for(lambda: canvas.actual_fps > 0)
        stats = canvas.performance_stats()
        assert stats["target_fps"] == 1000.0
        assert 0 < stats["frame_efficiency"] <= 100.0


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestConcurrentProducers:
    PRODUCERS = 4
    LINES = 25

    def test_only_render_thread_writes(
        self, canvas: Canvas, term: VirtualTerminal
    ) -> None:
        for n in range(self.PRODUCERS):
            canvas.define_region(f"p{n}", x=n * 12, y=0, width=10, height=self.LINES + 1)
        canvas.start(background=True)
        term.clear_buffer()
        term.write_threads.clear()

        def produce(n: int) -> None:
            for i in range(self.LINES):
                canvas.regions[f"p{n}"] << f"{n}-{i}\n"

        producers = [
            threading.Thread(target=produce, args=(n,), name=f"producer-{n}")
            for n in range(self.PRODUCERS)
        ]
        for t in producers:
            t.start()
        for t in producers:
            t.join()

        expected = {
            n: "".join(f"{n}-{i}\n" for i in range(self.LINES))
            for n in range(self.PRODUCERS)
        }
        wait_for(
            lambda: all(
                canvas.regions.get(f"p{n}") == text for n, text in expected.items()
            )
        )

        def painted() -> bool:
            screen = term.screen()
            return all(
                screen[i][n * 12 : n * 12 + 10].rstrip() == f"{n}-{i}"
                for n in range(self.PRODUCERS)
                for i in range(self.LINES)
            )

        wait_for(painted)
        canvas.stop()

        output = term.output
        assert term.concurrent_writes == 0
        assert not any(name.startswith("producer") for name in term.write_threads)
        assert "unmagic-canvas" in term.write_threads
        assert malformed_escape_sequences(output) == []
        assert output.count(BEGIN_SYNCHRONIZED_UPDATE) == output.count(
            END_SYNCHRONIZED_UPDATE
        )
