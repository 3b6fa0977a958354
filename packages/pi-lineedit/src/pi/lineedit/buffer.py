"""Logical line state: the typed characters and the cursor index into them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LineBuffer:
    """Immutable snapshot of the line being edited.

    ``index`` is the cursor position, ``0 <= index <= len(chars)``.  Every
    edit returns a new buffer.
    """

    chars: tuple[str, ...] = ()
    index: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.index <= len(self.chars):
            raise ValueError(
                f"cursor index {self.index} outside line of length {len(self.chars)}"
            )

    @classmethod
    def from_text(cls, text: str, index: int | None = None) -> LineBuffer:
        return cls(tuple(text), len(text) if index is None else index)

    @property
    def text(self) -> str:
        return "".join(self.chars)

    @property
    def length(self) -> int:
        return len(self.chars)

    @property
    def at_start(self) -> bool:
        return self.index == 0

    @property
    def at_end(self) -> bool:
        return self.index == len(self.chars)

    @property
    def suffix(self) -> tuple[str, ...]:
        """Characters from the cursor to the end of the line."""
        return self.chars[self.index :]

    # -- edits ---------------------------------------------------------------

    def insert(self, char: str) -> LineBuffer:
        """Insert *char* at the cursor and move past it."""
        chars = self.chars[: self.index] + (char,) + self.chars[self.index :]
        return LineBuffer(chars, self.index + 1)

    def delete_before(self) -> LineBuffer:
        """Remove the character left of the cursor (backspace)."""
        if self.at_start:
            raise IndexError("nothing before the cursor to delete")
        chars = self.chars[: self.index - 1] + self.chars[self.index :]
        return LineBuffer(chars, self.index - 1)

    def delete_at(self) -> LineBuffer:
        """Remove the character under the cursor (forward delete)."""
        if self.at_end:
            raise IndexError("nothing under the cursor to delete")
        chars = self.chars[: self.index] + self.chars[self.index + 1 :]
        return LineBuffer(chars, self.index)

    # -- movement ------------------------------------------------------------

    def move_left(self) -> LineBuffer:
        if self.at_start:
            raise IndexError("cursor already at the start of the line")
        return LineBuffer(self.chars, self.index - 1)

    def move_right(self) -> LineBuffer:
        if self.at_end:
            raise IndexError("cursor already at the end of the line")
        return LineBuffer(self.chars, self.index + 1)

    def move_home(self) -> LineBuffer:
        return LineBuffer(self.chars, 0)

    def move_end(self) -> LineBuffer:
        return LineBuffer(self.chars, len(self.chars))
