"""Render plans: the terminal operations produced by one edit step.

The edit engine never touches the terminal directly.  Each transition
returns a list of ops which :func:`apply_plan` replays against a
:class:`~pi.lineedit.terminal.Renderer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from pi.lineedit.terminal import Renderer


@dataclass(frozen=True)
class Write:
    text: str

    def apply(self, renderer: Renderer) -> None:
        renderer.write(self.text)


@dataclass(frozen=True)
class CursorUp:
    n: int = 1

    def apply(self, renderer: Renderer) -> None:
        renderer.cursor_up(self.n)


@dataclass(frozen=True)
class CursorDown:
    n: int = 1

    def apply(self, renderer: Renderer) -> None:
        renderer.cursor_down(self.n)


@dataclass(frozen=True)
class CursorForward:
    n: int = 1

    def apply(self, renderer: Renderer) -> None:
        renderer.cursor_forward(self.n)


@dataclass(frozen=True)
class CursorBack:
    n: int = 1

    def apply(self, renderer: Renderer) -> None:
        renderer.cursor_back(self.n)


@dataclass(frozen=True)
class NextLine:
    """Move to column 1 of the row *n* rows down."""

    n: int = 1

    def apply(self, renderer: Renderer) -> None:
        renderer.cursor_next_line(self.n)


@dataclass(frozen=True)
class PreviousLine:
    """Move to column 1 of the row *n* rows up."""

    n: int = 1

    def apply(self, renderer: Renderer) -> None:
        renderer.cursor_previous_line(self.n)


@dataclass(frozen=True)
class EraseLineEnd:
    def apply(self, renderer: Renderer) -> None:
        renderer.erase_line_end()


@dataclass(frozen=True)
class SaveCursor:
    def apply(self, renderer: Renderer) -> None:
        renderer.save_cursor()


@dataclass(frozen=True)
class RestoreCursor:
    def apply(self, renderer: Renderer) -> None:
        renderer.restore_cursor()


@dataclass(frozen=True)
class Bell:
    def apply(self, renderer: Renderer) -> None:
        renderer.bell()


RenderOp = Union[
    Write,
    CursorUp,
    CursorDown,
    CursorForward,
    CursorBack,
    NextLine,
    PreviousLine,
    EraseLineEnd,
    SaveCursor,
    RestoreCursor,
    Bell,
]


def apply_plan(renderer: Renderer, plan: Iterable[RenderOp]) -> None:
    """Apply *plan* in order, then flush so the screen is settled."""
    for op in plan:
        op.apply(renderer)
    renderer.flush()


def written_text(plan: Iterable[RenderOp]) -> str:
    """Concatenate the text of every :class:`Write` in *plan*."""
    return "".join(op.text for op in plan if isinstance(op, Write))
