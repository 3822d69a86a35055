"""ANSI SGR formatting for region text.

Colours may be given as a name (``"blue"``, ``"bright_red"``, ``"gray"``), an
RGB triple (``(100, 150, 200)``), or a ``"#rrggbb"`` hex string.  Named
colours use the 16-colour palette; everything else uses 24-bit true colour.
"""

from __future__ import annotations

from typing import Sequence, Union

# ---------------------------------------------------------------------------
# Escape codes
# ---------------------------------------------------------------------------

RESET = "\x1b[0m"

_STYLES: dict[str, str] = {
    "bold": "\x1b[1m",
    "dim": "\x1b[2m",
    "italic": "\x1b[3m",
    "underline": "\x1b[4m",
}

_FOREGROUND: dict[str, str] = {
    "black": "\x1b[30m",
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
    "bright_black": "\x1b[90m",
    "gray": "\x1b[90m",
    "grey": "\x1b[90m",
    "bright_red": "\x1b[91m",
    "bright_green": "\x1b[92m",
    "bright_yellow": "\x1b[93m",
    "bright_blue": "\x1b[94m",
    "bright_magenta": "\x1b[95m",
    "bright_cyan": "\x1b[96m",
    "bright_white": "\x1b[97m",
}

_BACKGROUND: dict[str, str] = {
    "black": "\x1b[40m",
    "red": "\x1b[41m",
    "green": "\x1b[42m",
    "yellow": "\x1b[43m",
    "blue": "\x1b[44m",
    "magenta": "\x1b[45m",
    "cyan": "\x1b[46m",
    "white": "\x1b[47m",
    "bright_black": "\x1b[100m",
    "gray": "\x1b[100m",
    "grey": "\x1b[100m",
    "bright_red": "\x1b[101m",
    "bright_green": "\x1b[102m",
    "bright_yellow": "\x1b[103m",
    "bright_blue": "\x1b[104m",
    "bright_magenta": "\x1b[105m",
    "bright_cyan": "\x1b[106m",
    "bright_white": "\x1b[107m",
}

Color = Union[str, Sequence[int]]


# ---------------------------------------------------------------------------
# Colour parsing
# ---------------------------------------------------------------------------


def parse_rgb(color: Color) -> tuple[int, int, int] | None:
    """Return an ``(r, g, b)`` triple for RGB / hex colours, else ``None``."""
    if isinstance(color, str):
        if not color.startswith("#"):
            return None
        hex_digits = color[1:]
        if len(hex_digits) != 6:
            raise ValueError(f"Invalid hex colour: {color!r}")
        try:
            return (
                int(hex_digits[0:2], 16),
                int(hex_digits[2:4], 16),
                int(hex_digits[4:6], 16),
            )
        except ValueError:
            raise ValueError(f"Invalid hex colour: {color!r}") from None

    components = tuple(color)
    if len(components) != 3:
        raise ValueError(f"RGB colour needs three components, got {color!r}")
    r, g, b = (max(0, min(255, int(c))) for c in components)
    return (r, g, b)


def color_code(color: Color) -> str:
    """Return the foreground escape code for *color*."""
    rgb = parse_rgb(color)
    if rgb is not None:
        return "\x1b[38;2;{};{};{}m".format(*rgb)
    try:
        return _FOREGROUND[str(color)]
    except KeyError:
        raise ValueError(f"Unknown colour: {color!r}") from None


def background_code(color: Color) -> str:
    """Return the background escape code for *color*."""
    rgb = parse_rgb(color)
    if rgb is not None:
        return "\x1b[48;2;{};{};{}m".format(*rgb)
    try:
        return _BACKGROUND[str(color)]
    except KeyError:
        raise ValueError(f"Unknown background colour: {color!r}") from None


def style_code(style: str) -> str:
    try:
        return _STYLES[style]
    except KeyError:
        raise ValueError(f"Unknown text style: {style!r}") from None


def validate_color(color: Color | None) -> None:
    """Raise ``ValueError`` if *color* cannot be formatted."""
    if color is not None:
        color_code(color)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def text(
    value: str,
    color: Color | None = None,
    background: Color | None = None,
    style: str | None = None,
) -> str:
    """Wrap *value* in SGR codes.

    A reset is appended only when at least one code was emitted, so plain
    text passes through unchanged.
    """
    parts: list[str] = []
    if style is not None:
        parts.append(style_code(style))
    if color is not None:
        parts.append(color_code(color))
    if background is not None:
        parts.append(background_code(background))

    if not parts:
        return value
    return "".join(parts) + value + RESET
