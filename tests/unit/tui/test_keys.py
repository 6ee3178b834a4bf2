"""Unit tests for key event translation."""

import pytest
from pkgscope.tui.keys import controller_key
from textual.events import Key


class TestControllerKey:
    """Tests for controller_key."""

    @pytest.mark.parametrize("character", ["j", "q", "/", "U", "G"])
    def test_printable_characters(self, character: str) -> None:
        assert controller_key(Key(character, character)) == character

    @pytest.mark.parametrize(
        ("key", "character", "expected"),
        [
            ("escape", "\x1b", "esc"),
            ("shift+tab", None, "backtab"),
            ("space", " ", " "),
        ],
    )
    def test_renamed_keys(self, key: str, character: str | None, expected: str) -> None:
        assert controller_key(Key(key, character)) == expected

    @pytest.mark.parametrize(
        ("key", "character"),
        [
            ("up", None),
            ("pagedown", None),
            ("home", None),
            ("enter", "\r"),
            ("tab", "\t"),
            ("backspace", "\x7f"),
            ("ctrl+u", "\x15"),
        ],
    )
    def test_named_keys_pass_through(self, key: str, character: str | None) -> None:
        assert controller_key(Key(key, character)) == key

    def test_unknown_key(self) -> None:
        """Keys the dashboard has no use for are dropped."""
        assert controller_key(Key("f5", None)) is None
