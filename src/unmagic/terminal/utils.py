"""Display-width utilities: code point classification and grapheme widths.

Provides the width rules the buffer uses to lay text out on a cell grid:
control characters take no columns, CJK and emoji take two, everything else
takes one.  A line is as wide as the sum of its code points.  Grapheme
clusters only decide where text may be cut, so a combining mark or an emoji
modifier is never separated from its base when a line is truncated.
"""

from __future__ import annotations

import grapheme

# ---------------------------------------------------------------------------
# Code point ranges
# ---------------------------------------------------------------------------

# CJK Unified Ideographs, CJK Compatibility, Hiragana/Katakana, Hangul,
# full-width ASCII forms
_WIDE_RANGES: tuple[tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),
    (0xF900, 0xFAFF),
    (0x3040, 0x30FF),
    (0xAC00, 0xD7AF),
    (0xFF01, 0xFF60),
)

# Emoticons and pictographs, misc symbols and dingbats, mahjong/dominoes,
# extended symbols
_EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F300, 0x1F9FF),
    (0x2600, 0x27BF),
    (0x1F000, 0x1F02F),
    (0x1FA70, 0x1FAFF),
)

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_control(cp: int) -> bool:
    return cp < 0x20 or 0x7F <= cp <= 0x9F


def is_wide(cp: int) -> bool:
    """Return ``True`` for CJK / full-width code points."""
    return any(lo <= cp <= hi for lo, hi in _WIDE_RANGES)


def is_emoji(cp: int) -> bool:
    """Return ``True`` for code points in the common emoji blocks."""
    # Printable ASCII (digits, '#', '*') is never treated as emoji
    if 0x20 <= cp <= 0x7E:
        return False
    return any(lo <= cp <= hi for lo, hi in _EMOJI_RANGES)


def char_width(char: str) -> int:
    """Return the display width (0, 1 or 2) of a single code point."""
    if not char:
        return 0
    cp = ord(char[0])
    if is_control(cp):
        return 0
    if is_emoji(cp) or is_wide(cp):
        return 2
    return 1


def grapheme_width(g: str) -> int:
    """Return the display width of a grapheme cluster.

    Every code point in the cluster contributes its own width, so ``e``
    followed by U+0301 COMBINING ACUTE ACCENT is two columns wide.
    """
    return sum(char_width(c) for c in g)


# ---------------------------------------------------------------------------
# Segmentation and measurement
# ---------------------------------------------------------------------------


def graphemes(text: str) -> list[str]:
    """Split *text* into grapheme clusters."""
    return list(grapheme.graphemes(text))


def display_width(text: str) -> int:
    """Calculate the display width of a single line of *text*.

    * Uses a fast path for printable ASCII.
    * Caches results for non-ASCII strings.
    """
    if not text:
        return 0

    if text.isascii() and text.isprintable():
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    return _cache_width(text, sum(char_width(c) for c in text))


def max_line_width(lines: list[str]) -> int:
    """Return the widest display width among *lines* (0 for no lines)."""
    return max((display_width(line) for line in lines), default=0)
