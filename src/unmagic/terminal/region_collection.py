"""Dict-like facade for updating canvas regions from any thread.

Example::

    canvas.regions["status"] = "Ready"         # replace content
    canvas.regions["logs"] << "New line\\n"     # append content
    canvas.regions.clear("logs")               # clear a region
    canvas.regions.get("status")               # read current content

Every write is turned into a message for the canvas render thread and
returns immediately.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from unmagic.terminal.errors import UnknownRegionError
from unmagic.terminal.messages import Append, Clear, RegionId, Update

if TYPE_CHECKING:
    from unmagic.terminal.canvas import Canvas


class AppendProxy:
    """Handle returned by ``regions[key]``.

    ``proxy << text`` appends and returns the proxy so calls can chain;
    ``str(proxy)`` reads the region's current content.
    """

    __slots__ = ("_canvas", "_key")

    def __init__(self, canvas: Canvas, key: RegionId) -> None:
        self._canvas = canvas
        self._key = key

    @property
    def key(self) -> RegionId:
        return self._key

    def __lshift__(self, value: object) -> AppendProxy:
        self._canvas.send_message(Append(self._key, str(value)))
        return self

    @property
    def content(self) -> str:
        region = self._canvas.get_region(self._key)
        return region.content if region is not None else ""

    def __str__(self) -> str:
        return self.content

    def __repr__(self) -> str:
        return f"AppendProxy({self._key!r})"


class RegionCollection:
    """Map-like view over a canvas's regions."""

    def __init__(self, canvas: Canvas) -> None:
        self._canvas = canvas

    def _require(self, key: RegionId) -> None:
        if not self._canvas.has_region(key):
            raise UnknownRegionError(key)

    # -- reads --------------------------------------------------------------

    def get(self, key: RegionId) -> str | None:
        """Return the current content of *key*, or ``None`` if undefined."""
        region = self._canvas.get_region(key)
        return region.content if region is not None else None

    def __getitem__(self, key: RegionId) -> AppendProxy:
        self._require(key)
        return AppendProxy(self._canvas, key)

    def keys(self) -> list[RegionId]:
        return self._canvas.region_ids()

    def __contains__(self, key: object) -> bool:
        return self._canvas.has_region(key)

    def __iter__(self) -> Iterator[RegionId]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    # -- writes -------------------------------------------------------------

    def set(self, key: RegionId, value: object) -> None:
        """Replace the content of *key*."""
        self._require(key)
        self._canvas.send_message(Update(key, str(value)))

    def __setitem__(self, key: RegionId, value: object) -> None:
        self.set(key, value)

    def append(self, key: RegionId, value: object) -> None:
        """Append *value* to the content of *key*."""
        self._require(key)
        self._canvas.send_message(Append(key, str(value)))

    def clear(self, key: RegionId) -> None:
        """Clear the content of *key*."""
        self._require(key)
        self._canvas.send_message(Clear(key))

    def delete(self, key: RegionId) -> None:
        """Blank *key* on screen, then remove it from the canvas."""
        self._require(key)
        self._canvas.delete_region(key)

    def __delitem__(self, key: RegionId) -> None:
        self.delete(key)
