"""unmagic-terminal: character-grid buffers and a threaded region canvas."""

# Styling
from unmagic.terminal import ansi

# Cell grid
from unmagic.terminal.buffer import Buffer, Cell, Placement

# Canvas and its parts
from unmagic.terminal.canvas import Canvas
from unmagic.terminal.config import CanvasConfig
from unmagic.terminal.errors import (
    CanvasError,
    DuplicateRegionError,
    UnknownRegionError,
)
from unmagic.terminal.messages import Append, Clear, Remove, Render, Stop, Update
from unmagic.terminal.rate import Rate
from unmagic.terminal.region import BORDER_STYLES, Region
from unmagic.terminal.region_collection import AppendProxy, RegionCollection
from unmagic.terminal.renderer import Renderer

# Terminal interface and implementations
from unmagic.terminal.terminal import StreamTerminal, Terminal

# Width utilities
from unmagic.terminal.utils import char_width, display_width, grapheme_width

__all__ = [
    # Styling
    "ansi",
    # Cell grid
    "Buffer",
    "Cell",
    "Placement",
    # Canvas
    "Canvas",
    "CanvasConfig",
    "CanvasError",
    "DuplicateRegionError",
    "UnknownRegionError",
    "Append",
    "Clear",
    "Remove",
    "Render",
    "Stop",
    "Update",
    "Rate",
    "BORDER_STYLES",
    "Region",
    "AppendProxy",
    "RegionCollection",
    "Renderer",
    # Terminal
    "StreamTerminal",
    "Terminal",
    # Width utilities
    "char_width",
    "display_width",
    "grapheme_width",
]
