"""pi-lineedit: single-line terminal input with in-place redraw."""

# Line state
from pi.lineedit.buffer import LineBuffer

# Edit engine
from pi.lineedit.engine import (
    EditContext,
    LineEditor,
    Transition,
    needs_cursor,
    transition,
)

# Errors
from pi.lineedit.errors import Cancelled, CursorPositionError, LineEditError

# Keyboard input handling
from pi.lineedit.key_reader import KeyReader
from pi.lineedit.keys import KeyEvent, KeyKind, classify_key

# Render plans
from pi.lineedit.render import RenderOp, apply_plan

# Terminal interface and implementations
from pi.lineedit.terminal import (
    CursorOracle,
    CursorPosition,
    ProcessTerminal,
    Renderer,
    Size,
    Terminal,
)

__all__ = [
    # Line state
    "LineBuffer",
    # Edit engine
    "EditContext",
    "LineEditor",
    "Transition",
    "needs_cursor",
    "transition",
    # Errors
    "Cancelled",
    "CursorPositionError",
    "LineEditError",
    # Keyboard input handling
    "KeyEvent",
    "KeyKind",
    "KeyReader",
    "classify_key",
    # Render plans
    "RenderOp",
    "apply_plan",
    # Terminal
    "CursorOracle",
    "CursorPosition",
    "ProcessTerminal",
    "Renderer",
    "Size",
    "Terminal",
]
