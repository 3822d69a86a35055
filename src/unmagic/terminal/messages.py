"""Messages passed from producer threads to the canvas render thread."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Hashable, Union

if TYPE_CHECKING:
    from unmagic.terminal.region import Region

RegionId = Hashable


@dataclass(frozen=True)
class Update:
    """Replace a region's content."""

    region_id: RegionId
    content: str


@dataclass(frozen=True)
class Append:
    """Append to a region's content."""

    region_id: RegionId
    content: str


@dataclass(frozen=True)
class Clear:
    """Reset a region's content to empty."""

    region_id: RegionId


@dataclass(frozen=True)
class Render:
    """Repaint a region without changing its content."""

    region_id: RegionId


@dataclass(frozen=True)
class Remove:
    """Erase a region that was just deleted from the canvas.

    Carries the region itself because it is no longer in the region map.
    """

    region: Region

    @property
    def region_id(self) -> RegionId:
        return self.region.id


@dataclass(frozen=True)
class Stop:
    """Sentinel that ends the render loop."""


RegionMessage = Union[Update, Append, Clear, Render, Remove]
Message = Union[Update, Append, Clear, Render, Remove, Stop]
