"""Edit engine: key events in, buffer updates and render plans out.

:func:`transition` is pure.  Given a key event, the current
:class:`~pi.lineedit.buffer.LineBuffer` and an :class:`EditContext` it
returns the next buffer, the terminal ops that bring the screen in line with
it, and whether the session is over.  The screen is never modelled; where a
step has to know if the cursor sits at the first or last column of a row it
uses the position the terminal reported just before the step.

:class:`LineEditor` drives one blocking session against a real (or fake)
terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Literal, Sequence

from pi.lineedit.buffer import LineBuffer
from pi.lineedit.errors import Cancelled
from pi.lineedit.key_reader import KeyReader
from pi.lineedit.keys import KeyEvent, classify_key
from pi.lineedit.render import (
    Bell,
    CursorBack,
    CursorForward,
    CursorUp,
    EraseLineEnd,
    NextLine,
    PreviousLine,
    RenderOp,
    RestoreCursor,
    SaveCursor,
    Write,
    apply_plan,
)
from pi.lineedit.terminal import CursorPosition, Terminal

logger = logging.getLogger(__name__)

Outcome = Literal["submit", "cancel"]

_CURSOR_KINDS = frozenset(
    {"delete_backward", "delete_forward", "left", "right", "home", "end"}
)


@dataclass(frozen=True)
class EditContext:
    """What a transition may know about the terminal."""

    width: int
    cursor: CursorPosition | None = None
    mask: str | None = None


@dataclass(frozen=True)
class Transition:
    buffer: LineBuffer
    plan: list[RenderOp] = field(default_factory=list)
    outcome: Outcome | None = None


def needs_cursor(event: KeyEvent, buffer: LineBuffer) -> bool:
    """Return True if handling *event* depends on the cursor position."""
    if event.kind == "printable":
        return not buffer.at_end
    return event.kind in _CURSOR_KINDS


# ---------------------------------------------------------------------------
# Cursor steps
# ---------------------------------------------------------------------------


def _step_back(cursor: CursorPosition, width: int) -> list[RenderOp]:
    """One cell left, onto the last column of the previous row at column 1."""
    if cursor.at_line_begin:
        return [PreviousLine(1), CursorForward(width)]
    return [CursorBack(1)]


def _step_forward(cursor: CursorPosition, width: int) -> list[RenderOp]:
    """One cell right, onto the next row at the last column."""
    if cursor.at_line_end(width):
        return [NextLine(1)]
    return [CursorForward(1)]


def _redraw(
    chars: Sequence[str], column: int, width: int, mask: str | None
) -> list[RenderOp]:
    """Reprint *chars* starting at *column*, clearing each row before use."""
    plan: list[RenderOp] = [EraseLineEnd()]
    for char in chars:
        if column > width:
            plan += [NextLine(1), EraseLineEnd()]
            column = 1
        plan.append(Write(mask or char))
        column += 1
    return plan


def _require_cursor(context: EditContext) -> CursorPosition:
    if context.cursor is None:
        raise ValueError("this edit needs the current cursor position")
    return context.cursor


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def _insert(char: str, buffer: LineBuffer, context: EditContext) -> Transition:
    if buffer.at_end:
        return Transition(buffer.insert(char), [Write(context.mask or char)])

    cursor = _require_cursor(context)
    updated = buffer.insert(char)
    plan: list[RenderOp] = [SaveCursor()]
    plan += _redraw(updated.chars[buffer.index :], cursor.column, context.width, context.mask)
    plan.append(RestoreCursor())
    plan += _step_forward(cursor, context.width)
    return Transition(updated, plan)


def _delete_backward(buffer: LineBuffer, context: EditContext) -> Transition:
    if buffer.at_start:
        return Transition(buffer, [Bell()])

    cursor = _require_cursor(context)
    width = context.width
    updated = buffer.delete_before()

    if buffer.at_end:
        return Transition(updated, _step_back(cursor, width) + [EraseLineEnd()])

    # the column the reprint starts from, one cell left of the cursor
    start_column = width if cursor.at_line_begin else cursor.column - 1
    plan: list[RenderOp] = [SaveCursor()]
    plan += _step_back(cursor, width)
    plan += _redraw(updated.suffix, start_column, width, context.mask)
    # the line got shorter: clear anything left on the row below
    plan += [NextLine(1), EraseLineEnd(), RestoreCursor()]
    plan += _step_back(cursor, width)
    return Transition(updated, plan)


def _delete_forward(buffer: LineBuffer, context: EditContext) -> Transition:
    if buffer.at_end:
        return Transition(buffer, [Bell()])

    cursor = _require_cursor(context)
    updated = buffer.delete_at()
    plan: list[RenderOp] = [SaveCursor()]
    plan += _redraw(updated.suffix, cursor.column, context.width, context.mask)
    plan += [NextLine(1), EraseLineEnd(), RestoreCursor()]
    if updated.length == 0 or updated.at_end:
        plan.append(EraseLineEnd())
    return Transition(updated, plan)


def _left(buffer: LineBuffer, context: EditContext) -> Transition:
    if buffer.at_start:
        return Transition(buffer, [Bell()])

    cursor = _require_cursor(context)
    if cursor.at_line_begin:
        plan: list[RenderOp] = [CursorUp(1), CursorForward(context.width)]
    else:
        plan = [CursorBack(1)]
    return Transition(buffer.move_left(), plan)


def _right(buffer: LineBuffer, context: EditContext) -> Transition:
    if buffer.at_end:
        return Transition(buffer, [Bell()])

    cursor = _require_cursor(context)
    return Transition(buffer.move_right(), _step_forward(cursor, context.width))


def _home(buffer: LineBuffer, context: EditContext) -> Transition:
    if buffer.at_start:
        return Transition(buffer)

    cursor = _require_cursor(context)
    width = context.width
    plan: list[RenderOp] = []
    for _ in range(buffer.index):
        plan += _step_back(cursor, width)
        if cursor.at_line_begin:
            cursor = replace(cursor, column=width, row=cursor.row - 1)
        else:
            cursor = replace(cursor, column=cursor.column - 1)
    return Transition(buffer.move_home(), plan)


def _end(buffer: LineBuffer, context: EditContext) -> Transition:
    if buffer.at_end:
        return Transition(buffer)

    cursor = _require_cursor(context)
    width = context.width
    plan: list[RenderOp] = []
    for _ in range(buffer.length - buffer.index):
        plan += _step_forward(cursor, width)
        if cursor.at_line_end(width):
            cursor = replace(cursor, column=1, row=cursor.row + 1)
        else:
            cursor = replace(cursor, column=cursor.column + 1)
    return Transition(buffer.move_end(), plan)


def transition(event: KeyEvent, buffer: LineBuffer, context: EditContext) -> Transition:
    """Apply one key event to *buffer*."""
    kind = event.kind
    if kind == "printable":
        return _insert(event.char, buffer, context)
    if kind == "enter":
        return Transition(buffer, [Write("\r\n")], "submit")
    if kind == "interrupt":
        return Transition(buffer, [Write("\r\n")], "cancel")
    if kind == "delete_backward":
        return _delete_backward(buffer, context)
    if kind == "delete_forward":
        return _delete_forward(buffer, context)
    if kind == "left":
        return _left(buffer, context)
    if kind == "right":
        return _right(buffer, context)
    if kind == "home":
        return _home(buffer, context)
    if kind == "end":
        return _end(buffer, context)
    return Transition(buffer)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class LineEditor:
    """Reads one line from a terminal, echoing edits as they happen.

    The terminal must already be in raw mode.  Keys are read from the
    terminal unless a separate *reader* is given.
    """

    def __init__(self, terminal: Terminal, reader: KeyReader | None = None) -> None:
        self._terminal = terminal
        self._reader = reader if reader is not None else KeyReader(terminal)

    def read_line(self, mask: str | None = None) -> str:
        """Edit a line until Enter and return it.

        Args:
            mask: Optional character displayed in place of every typed one.

        Returns:
            The text of the line.

        Raises:
            Cancelled: The user pressed Ctrl+C.
            EOFError: The input stream ended.
            OSError: Reading the input failed.
        """
        if mask is not None and len(mask) != 1:
            raise ValueError(f"mask must be a single character, got {mask!r}")

        # geometry is read once; a resize mid-session is not picked up
        width = self._terminal.size().columns
        buffer = LineBuffer()
        logger.debug("edit session started (width=%d, masked=%s)", width, mask is not None)

        while True:
            try:
                key = self._reader.read_key()
            except (EOFError, OSError) as e:
                logger.debug("edit session aborted: %s", e)
                raise

            event = classify_key(key)
            cursor = self._terminal.cursor_position() if needs_cursor(event, buffer) else None
            step = transition(event, buffer, EditContext(width=width, cursor=cursor, mask=mask))
            apply_plan(self._terminal, step.plan)
            buffer = step.buffer

            if step.outcome == "submit":
                logger.debug("edit session submitted %d characters", buffer.length)
                return buffer.text
            if step.outcome == "cancel":
                logger.debug("edit session cancelled")
                raise Cancelled()
