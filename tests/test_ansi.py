"""Tests for unmagic.terminal.ansi."""

from __future__ import annotations

import pytest

from unmagic.terminal import ansi


class TestText:
    def test_plain_text_passes_through(self) -> None:
        assert ansi.text("hello") == "hello"

    def test_named_foreground(self) -> None:
        assert ansi.text("x", color="red") == "\x1b[31mx\x1b[0m"

    def test_named_background(self) -> None:
        assert ansi.text("x", background="blue") == "\x1b[44mx\x1b[0m"

    def test_bright_and_gray_aliases(self) -> None:
        assert ansi.text("x", color="bright_green") == "\x1b[92mx\x1b[0m"
        assert ansi.text("x", color="gray") == ansi.text("x", color="grey")
        assert ansi.text("x", background="gray") == "\x1b[100mx\x1b[0m"

    def test_rgb_tuple(self) -> None:
        assert ansi.text("x", color=(100, 150, 200)) == "\x1b[38;2;100;150;200mx\x1b[0m"

    def test_rgb_components_are_clamped(self) -> None:
        assert ansi.color_code((300, -5, 10)) == "\x1b[38;2;255;0;10m"

    def test_hex_background(self) -> None:
        assert ansi.text("x", background="#ff8000") == "\x1b[48;2;255;128;0mx\x1b[0m"

    def test_code_order_is_style_color_background(self) -> None:
        assert (
            ansi.text("x", color="red", background="white", style="bold")
            == "\x1b[1m\x1b[31m\x1b[47mx\x1b[0m"
        )

    @pytest.mark.parametrize("style", ["bold", "dim", "italic", "underline"])
    def test_styles(self, style: str) -> None:
        assert ansi.text("x", style=style).endswith("x" + ansi.RESET)


class TestValidation:
    @pytest.mark.parametrize("color", ["chartreuse", "#12345", "#gggggg", (1, 2)])
    def test_invalid_colours(self, color) -> None:
        with pytest.raises(ValueError):
            ansi.color_code(color)

    def test_unknown_style(self) -> None:
        with pytest.raises(ValueError):
            ansi.text("x", style="blink")

    def test_validate_color_accepts_none(self) -> None:
        ansi.validate_color(None)

    def test_parse_rgb_ignores_names(self) -> None:
        assert ansi.parse_rgb("red") is None
        assert ansi.parse_rgb("#0a0B0c") == (10, 11, 12)
