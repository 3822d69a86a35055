"""Environment-driven canvas configuration.

Variables
---------
``UNMAGIC_CANVAS_FPS``
    Target frame rate (default 24).
``UNMAGIC_CANVAS_JOIN_TIMEOUT``
    Seconds ``Canvas.stop`` waits for the render thread (default 1.0).
``UNMAGIC_CANVAS_RATE_WINDOW``
    Window in seconds for the measured FPS (default 1.0).
``UNMAGIC_TERMINAL_WRITE_LOG``
    If set, every terminal write is also appended to this file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_FPS = 24.0
DEFAULT_JOIN_TIMEOUT = 1.0
DEFAULT_RATE_WINDOW = 1.0


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass
class CanvasConfig:
    fps: float = DEFAULT_FPS
    join_timeout: float = DEFAULT_JOIN_TIMEOUT
    rate_window: float = DEFAULT_RATE_WINDOW
    write_log_path: str = ""

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> CanvasConfig:
        """Build a config from ``os.environ`` (or *env* when given)."""
        if env is None:
            env = os.environ
        return cls(
            fps=_positive_float(env, "UNMAGIC_CANVAS_FPS", DEFAULT_FPS),
            join_timeout=_positive_float(
                env, "UNMAGIC_CANVAS_JOIN_TIMEOUT", DEFAULT_JOIN_TIMEOUT
            ),
            rate_window=_positive_float(
                env, "UNMAGIC_CANVAS_RATE_WINDOW", DEFAULT_RATE_WINDOW
            ),
            write_log_path=env.get("UNMAGIC_TERMINAL_WRITE_LOG", ""),
        )

    @property
    def frame_duration(self) -> float:
        return 1.0 / self.fps
