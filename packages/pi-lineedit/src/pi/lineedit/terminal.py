"""Terminal abstraction for the line editor.

Provides the ``Renderer`` and ``CursorOracle`` protocols the edit engine
talks to, the combined ``Terminal`` protocol, and a concrete
``ProcessTerminal`` that drives a real terminal over stdin/stdout with ANSI
escape sequences.
"""

from __future__ import annotations

import logging
import os
import re
import select
import sys
import termios
import tty
from dataclasses import dataclass
from typing import Protocol

from pi.lineedit.errors import CursorPositionError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_DOWN_FMT = "\x1b[{}B"
_CURSOR_FORWARD_FMT = "\x1b[{}C"
_CURSOR_BACK_FMT = "\x1b[{}D"
_CURSOR_NEXT_LINE_FMT = "\x1b[{}E"
_CURSOR_PREVIOUS_LINE_FMT = "\x1b[{}F"
_ERASE_LINE_END = "\x1b[K"
_SAVE_CURSOR = "\x1b7"
_RESTORE_CURSOR = "\x1b8"
_BELL = "\x07"
_REQUEST_CURSOR_POSITION = "\x1b[6n"

_CURSOR_REPORT_RE = re.compile(rb"\x1b\[(\d+);(\d+)R")


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Size:
    """Terminal dimensions in cells."""

    columns: int
    rows: int


@dataclass(frozen=True)
class CursorPosition:
    """1-based cursor location as reported by the terminal."""

    column: int
    row: int

    @property
    def at_line_begin(self) -> bool:
        return self.column == 1

    def at_line_end(self, width: int) -> bool:
        return self.column == width


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class Renderer(Protocol):
    """Relative cursor movement and output primitives."""

    def write(self, data: str) -> None: ...

    def cursor_up(self, n: int = 1) -> None: ...

    def cursor_down(self, n: int = 1) -> None: ...

    def cursor_forward(self, n: int = 1) -> None: ...

    def cursor_back(self, n: int = 1) -> None: ...

    def cursor_next_line(self, n: int = 1) -> None: ...

    def cursor_previous_line(self, n: int = 1) -> None: ...

    def erase_line_end(self) -> None: ...

    def save_cursor(self) -> None: ...

    def restore_cursor(self) -> None: ...

    def bell(self) -> None: ...

    def flush(self) -> None: ...


class CursorOracle(Protocol):
    """Queries answered by the terminal itself."""

    def size(self) -> Size: ...

    def cursor_position(self) -> CursorPosition: ...


class Terminal(Renderer, CursorOracle, Protocol):
    """Everything an edit session needs: input bytes, output, queries."""

    def read(self, size: int) -> bytes: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by ``sys.stdin``/``sys.stdout``.

    Output is buffered until :meth:`flush`.  Raw mode is entered with
    :meth:`start` and the previous terminal attributes are restored by
    :meth:`stop`; the class also works as a context manager for that pair.

    Bytes read while waiting for a cursor position report (keys typed ahead)
    are kept and handed out by :meth:`read` before any new input.
    """

    def __init__(self, *, cursor_timeout: float = 1.0) -> None:
        self._cursor_timeout = cursor_timeout
        self._pending = bytearray()
        self._out: list[str] = []
        self._original_termios: list | None = None
        self._write_log_path: str = os.environ.get("PI_LINEEDIT_WRITE_LOG", "")

    @property
    def _input_fd(self) -> int:
        return sys.stdin.fileno()

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Save the terminal attributes and switch stdin to raw mode."""
        fd = self._input_fd
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        logger.debug("raw mode enabled on fd %d", fd)

    def stop(self) -> None:
        """Flush pending output and restore the saved terminal attributes."""
        self.flush()
        if self._original_termios is not None:
            termios.tcsetattr(self._input_fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None
            logger.debug("terminal attributes restored")

    def __enter__(self) -> ProcessTerminal:
        self.start()
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:
        self.stop()

    # -- queries ------------------------------------------------------------

    def size(self) -> Size:
        try:
            size = os.get_terminal_size(sys.stdout.fileno())
        except (ValueError, OSError):
            return Size(columns=80, rows=24)
        return Size(columns=size.columns, rows=size.lines)

    def cursor_position(self) -> CursorPosition:
        """Ask the terminal where the cursor is (``CSI 6n``)."""
        self.write(_REQUEST_CURSOR_POSITION)
        self.flush()

        fd = self._input_fd
        data = bytearray()
        while True:
            ready, _, _ = select.select([fd], [], [], self._cursor_timeout)
            if not ready:
                self._pending += data
                raise CursorPositionError(
                    f"no cursor position report within {self._cursor_timeout}s"
                )
            chunk = os.read(fd, 1)
            if not chunk:
                self._pending += data
                raise CursorPositionError("input closed while waiting for cursor position")
            data += chunk
            match = _CURSOR_REPORT_RE.search(data)
            if match:
                self._pending += data[: match.start()] + data[match.end() :]
                return CursorPosition(column=int(match.group(2)), row=int(match.group(1)))

    # -- input --------------------------------------------------------------

    def read(self, size: int) -> bytes:
        """Read up to *size* bytes, serving type-ahead bytes first."""
        if self._pending:
            chunk = bytes(self._pending[:size])
            del self._pending[:size]
            return chunk
        return os.read(self._input_fd, size)

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        self._out.append(data)

    def flush(self) -> None:
        """Write buffered output to stdout and optionally to the write log."""
        if not self._out:
            return
        data = "".join(self._out)
        self._out.clear()
        sys.stdout.write(data)
        sys.stdout.flush()

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                logger.warning("could not append to write log %s", self._write_log_path)

    # -- cursor / screen manipulation --------------------------------------

    def cursor_up(self, n: int = 1) -> None:
        self.write(_CURSOR_UP_FMT.format(n))

    def cursor_down(self, n: int = 1) -> None:
        self.write(_CURSOR_DOWN_FMT.format(n))

    def cursor_forward(self, n: int = 1) -> None:
        self.write(_CURSOR_FORWARD_FMT.format(n))

    def cursor_back(self, n: int = 1) -> None:
        self.write(_CURSOR_BACK_FMT.format(n))

    def cursor_next_line(self, n: int = 1) -> None:
        self.write(_CURSOR_NEXT_LINE_FMT.format(n))

    def cursor_previous_line(self, n: int = 1) -> None:
        self.write(_CURSOR_PREVIOUS_LINE_FMT.format(n))

    def erase_line_end(self) -> None:
        self.write(_ERASE_LINE_END)

    def save_cursor(self) -> None:
        self.write(_SAVE_CURSOR)

    def restore_cursor(self) -> None:
        self.write(_RESTORE_CURSOR)

    def bell(self) -> None:
        self.write(_BELL)
