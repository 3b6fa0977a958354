"""KeyReader turns a raw byte stream into single-character key codes.

Terminal input arrives one byte at a time.  Multi-byte UTF-8 characters are
decoded incrementally and escape sequences are read until complete, then
mapped to the key codes in :mod:`pi.lineedit.keys`.  Sequences the editor
has no use for (up/down, function keys, modified keys) map to
``KEY_IGNORE``.
"""

from __future__ import annotations

import codecs
from typing import Protocol

from pi.lineedit.keys import (
    KEY_ARROW_LEFT,
    KEY_ARROW_RIGHT,
    KEY_IGNORE,
    SPECIAL_KEY_DELETE,
    SPECIAL_KEY_END,
    SPECIAL_KEY_HOME,
)

ESC = "\x1b"

# Legacy escape sequences -> key codes
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[D": KEY_ARROW_LEFT,
    "\x1b[C": KEY_ARROW_RIGHT,
    "\x1bOD": KEY_ARROW_LEFT,
    "\x1bOC": KEY_ARROW_RIGHT,
    "\x1b[H": SPECIAL_KEY_HOME,
    "\x1b[F": SPECIAL_KEY_END,
    "\x1bOH": SPECIAL_KEY_HOME,
    "\x1bOF": SPECIAL_KEY_END,
    "\x1b[1~": SPECIAL_KEY_HOME,
    "\x1b[4~": SPECIAL_KEY_END,
    "\x1b[7~": SPECIAL_KEY_HOME,
    "\x1b[8~": SPECIAL_KEY_END,
    "\x1b[3~": SPECIAL_KEY_DELETE,
}


class ByteSource(Protocol):
    """Anything that can hand out raw input bytes."""

    def read(self, size: int) -> bytes: ...


def _is_complete_sequence(data: str) -> str:
    """Check if a string is a complete escape sequence or needs more data.

    Returns 'complete', 'incomplete', or 'not-escape'.
    """
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]

    # CSI sequences: ESC [ <params> <final byte>
    if after_esc.startswith("["):
        if len(data) < 3:
            return "incomplete"
        if 0x40 <= ord(data[-1]) <= 0x7E:
            return "complete"
        return "incomplete"

    # SS3 sequences: ESC O <char>
    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"

    # Meta key sequences: ESC followed by a single character
    return "complete"


class KeyReader:
    """Reads one key code at a time from a :class:`ByteSource`.

    Raises ``EOFError`` when the source is exhausted.  ``OSError`` from the
    source propagates unchanged.
    """

    def __init__(self, source: ByteSource) -> None:
        self._source = source
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        # a broken multi-byte sequence can decode to more than one character
        self._pending: str = ""

    def read_key(self) -> str:
        """Block until a full key has been read and return its key code."""
        char = self._read_char()
        if char != ESC:
            return char

        sequence = char
        while _is_complete_sequence(sequence) == "incomplete":
            sequence += self._read_char()
        return LEGACY_KEY_SEQUENCES.get(sequence, KEY_IGNORE)

    def _read_char(self) -> str:
        while not self._pending:
            chunk = self._source.read(1)
            if not chunk:
                raise EOFError("input stream closed")
            self._pending = self._decoder.decode(chunk)
        char, self._pending = self._pending[0], self._pending[1:]
        return char
