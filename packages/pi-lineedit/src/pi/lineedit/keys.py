"""Key codes and key classification for the line editor.

Special keys that terminals send as escape sequences are folded into single
reserved control characters by :class:`pi.lineedit.key_reader.KeyReader`, so
every key the editor sees is one character.  Most of them double as the
emacs-style control bindings (Ctrl+A home, Ctrl+B left, Ctrl+F right).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

# ---------------------------------------------------------------------------
# Key codes
# ---------------------------------------------------------------------------

KEY_ENTER = "\r"
KEY_NEWLINE = "\n"
KEY_END_TRANSMISSION = "\x04"
KEY_INTERRUPT = "\x03"
KEY_BACKSPACE = "\b"
KEY_DELETE = "\x7f"
KEY_ESCAPE = "\x1b"
KEY_ARROW_LEFT = "\x02"
KEY_ARROW_RIGHT = "\x06"
SPECIAL_KEY_HOME = "\x01"
SPECIAL_KEY_END = "\x11"
SPECIAL_KEY_DELETE = "\x12"
KEY_IGNORE = "\x00"

KeyKind = Literal[
    "printable",
    "enter",
    "interrupt",
    "delete_backward",
    "delete_forward",
    "left",
    "right",
    "home",
    "end",
    "ignore",
]

_SPECIAL_KEYS: dict[str, KeyKind] = {
    KEY_ENTER: "enter",
    KEY_NEWLINE: "enter",
    KEY_END_TRANSMISSION: "enter",
    KEY_INTERRUPT: "interrupt",
    KEY_BACKSPACE: "delete_backward",
    KEY_DELETE: "delete_backward",
    SPECIAL_KEY_DELETE: "delete_forward",
    KEY_ARROW_LEFT: "left",
    KEY_ARROW_RIGHT: "right",
    SPECIAL_KEY_HOME: "home",
    SPECIAL_KEY_END: "end",
}


@dataclass(frozen=True)
class KeyEvent:
    """A classified key press. ``char`` is set only for printable keys."""

    kind: KeyKind
    char: str = ""


def is_control_char(char: str) -> bool:
    """Return True for C0/C1 control characters and DEL."""
    code = ord(char)
    return code < 32 or code == 0x7F or 0x80 <= code <= 0x9F


def classify_key(char: str) -> KeyEvent:
    """Map one key code to the category the editor acts on."""
    if len(char) != 1:
        raise ValueError(f"expected a single key code, got {char!r}")

    kind = _SPECIAL_KEYS.get(char)
    if kind is not None:
        return KeyEvent(kind)

    if is_control_char(char):
        return KeyEvent("ignore")

    return KeyEvent("printable", char)
