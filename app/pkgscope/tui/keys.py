"""Translation of textual key events into controller key names.

Key names are plain strings: printable characters stand for themselves,
everything else uses a lowercase name ("up", "enter", "ctrl+u", ...).
"""

from textual.events import Key

# textual names whose controller name differs
_RENAMED: dict[str, str] = {
    "escape": "esc",
    "shift+tab": "backtab",
    "space": " ",
}

_NAMED = frozenset(
    {
        "up",
        "down",
        "left",
        "right",
        "home",
        "end",
        "pageup",
        "pagedown",
        "enter",
        "tab",
        "backspace",
        "delete",
        "ctrl+u",
    }
)


def controller_key(event: Key) -> str | None:
    """Return the controller key name for ``event``, None if it has no meaning.

    Example:
        >>> controller_key(Key("escape", "\\x1b"))
        'esc'
    """
    if event.key in _RENAMED:
        return _RENAMED[event.key]
    if event.key in _NAMED:
        return event.key
    if event.is_printable and event.character:
        return event.character
    return None
