"""Tests for pi.lineedit.terminal.ProcessTerminal and the geometry types."""

from __future__ import annotations

import os

import pytest

from pi.lineedit import terminal as terminal_module
from pi.lineedit.errors import CursorPositionError
from pi.lineedit.terminal import CursorPosition, ProcessTerminal, Size

FAKE_FD = 99


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeStream:
    """Stands in for sys.stdin / sys.stdout."""

    def __init__(self) -> None:
        self.chunks: list[str] = []
        self.flushes = 0

    def fileno(self) -> int:
        return FAKE_FD

    def write(self, data: str) -> int:
        self.chunks.append(data)
        return len(data)

    def flush(self) -> None:
        self.flushes += 1

    def getvalue(self) -> str:
        return "".join(self.chunks)


@pytest.fixture
def stdout(monkeypatch: pytest.MonkeyPatch) -> FakeStream:
    stream = FakeStream()
    monkeypatch.setattr(terminal_module.sys, "stdout", stream)
    monkeypatch.setattr(terminal_module.sys, "stdin", FakeStream())
    return stream


def script_input(monkeypatch: pytest.MonkeyPatch, data: bytes) -> None:
    """Serve *data* one byte at a time from os.read; select reports ready."""
    stream = iter(data)

    def fake_read(_fd: int, _n: int) -> bytes:
        try:
            return bytes([next(stream)])
        except StopIteration:
            return b""

    def fake_select(rlist, _w, _x, _timeout=None):
        return rlist, [], []

    monkeypatch.setattr(terminal_module.os, "read", fake_read)
    monkeypatch.setattr(terminal_module.select, "select", fake_select)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class TestCursorPosition:
    def test_line_begin(self) -> None:
        assert CursorPosition(column=1, row=3).at_line_begin
        assert not CursorPosition(column=2, row=3).at_line_begin

    def test_line_end(self) -> None:
        assert CursorPosition(column=80, row=1).at_line_end(80)
        assert not CursorPosition(column=79, row=1).at_line_end(80)


class TestSize:
    def test_reads_terminal_size(self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            terminal_module.os, "get_terminal_size", lambda fd: os.terminal_size((100, 30))
        )
        assert ProcessTerminal().size() == Size(columns=100, rows=30)

    def test_falls_back_when_not_a_terminal(
        self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def no_terminal(fd: int) -> os.terminal_size:
            raise OSError("not a terminal")

        monkeypatch.setattr(terminal_module.os, "get_terminal_size", no_terminal)
        assert ProcessTerminal().size() == Size(columns=80, rows=24)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class TestEscapeSequences:
    @pytest.mark.parametrize(
        ("method", "args", "expected"),
        [
            ("cursor_up", (2,), "\x1b[2A"),
            ("cursor_down", (1,), "\x1b[1B"),
            ("cursor_forward", (80,), "\x1b[80C"),
            ("cursor_back", (1,), "\x1b[1D"),
            ("cursor_next_line", (1,), "\x1b[1E"),
            ("cursor_previous_line", (1,), "\x1b[1F"),
            ("erase_line_end", (), "\x1b[K"),
            ("save_cursor", (), "\x1b7"),
            ("restore_cursor", (), "\x1b8"),
            ("bell", (), "\x07"),
            ("write", ("héllo",), "héllo"),
        ],
    )
    def test_primitive(self, stdout: FakeStream, method: str, args: tuple, expected: str) -> None:
        term = ProcessTerminal()
        getattr(term, method)(*args)
        term.flush()
        assert stdout.getvalue() == expected

    def test_output_is_buffered_until_flush(self, stdout: FakeStream) -> None:
        term = ProcessTerminal()
        term.write("a")
        term.cursor_back(1)
        assert stdout.getvalue() == ""
        term.flush()
        assert stdout.getvalue() == "a\x1b[1D"
        assert stdout.flushes == 1

    def test_flush_without_output_is_a_no_op(self, stdout: FakeStream) -> None:
        ProcessTerminal().flush()
        assert stdout.flushes == 0

    def test_write_log(
        self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch, tmp_path
    ) -> None:
        log_path = tmp_path / "writes.log"
        monkeypatch.setenv("PI_LINEEDIT_WRITE_LOG", str(log_path))
        term = ProcessTerminal()
        term.write("abc")
        term.erase_line_end()
        term.flush()
        assert log_path.read_text() == "abc\x1b[K"


# ---------------------------------------------------------------------------
# Cursor position queries and input
# ---------------------------------------------------------------------------


class TestCursorPositionQuery:
    def test_parses_report(self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch) -> None:
        script_input(monkeypatch, b"\x1b[12;34R")
        position = ProcessTerminal().cursor_position()
        assert position == CursorPosition(column=34, row=12)
        assert stdout.getvalue() == "\x1b[6n"

    def test_type_ahead_is_kept_for_read(
        self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        script_input(monkeypatch, b"ab\x1b[1;3Rc")
        term = ProcessTerminal()
        assert term.cursor_position() == CursorPosition(column=3, row=1)
        assert term.read(1) == b"a"
        assert term.read(1) == b"b"
        assert term.read(1) == b"c"

    def test_timeout(self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(terminal_module.select, "select", lambda r, w, x, t=None: ([], [], []))
        with pytest.raises(CursorPositionError):
            ProcessTerminal(cursor_timeout=0.01).cursor_position()

    def test_input_closed(self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch) -> None:
        script_input(monkeypatch, b"x")
        term = ProcessTerminal()
        with pytest.raises(CursorPositionError):
            term.cursor_position()
        assert term.read(1) == b"x"


class TestRawMode:
    def test_start_and_stop_restore_attributes(
        self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[tuple] = []
        saved = [0, 0, 0, 0, 0, 0, []]
        monkeypatch.setattr(
            terminal_module.termios, "tcgetattr", lambda fd: calls.append(("get", fd)) or saved
        )
        monkeypatch.setattr(terminal_module.tty, "setraw", lambda fd: calls.append(("raw", fd)))
        monkeypatch.setattr(
            terminal_module.termios,
            "tcsetattr",
            lambda fd, when, attrs: calls.append(("set", fd, attrs)),
        )

        with ProcessTerminal() as term:
            term.write("x")
        assert calls == [("get", FAKE_FD), ("raw", FAKE_FD), ("set", FAKE_FD, saved)]
        assert stdout.getvalue() == "x"

    def test_stop_without_start(self, stdout: FakeStream, monkeypatch: pytest.MonkeyPatch) -> None:
        def unexpected(*args):
            raise AssertionError("tcsetattr should not be called")

        monkeypatch.setattr(terminal_module.termios, "tcsetattr", unexpected)
        ProcessTerminal().stop()
