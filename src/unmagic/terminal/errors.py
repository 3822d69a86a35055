"""Configuration errors raised synchronously by the canvas API."""

from __future__ import annotations


class CanvasError(RuntimeError):
    """Base class for canvas misuse (e.g. starting a running canvas)."""


class UnknownRegionError(CanvasError, KeyError):
    """A region id was used before ``Canvas.define_region`` registered it."""

    def __init__(self, region_id: object) -> None:
        super().__init__(
            f"Region {region_id!r} not defined. Use canvas.define_region first"
        )
        self.region_id = region_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class DuplicateRegionError(CanvasError, ValueError):
    """``Canvas.define_region`` was called twice with the same id."""

    def __init__(self, region_id: object) -> None:
        super().__init__(f"Region {region_id!r} already exists")
        self.region_id = region_id
