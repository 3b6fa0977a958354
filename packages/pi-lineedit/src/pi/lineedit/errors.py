"""Exceptions raised by the line editor."""

from __future__ import annotations


class LineEditError(Exception):
    """Base class for line editor errors."""


class Cancelled(LineEditError):
    """The user interrupted the edit session (Ctrl+C).

    The editor has already moved to a fresh line when this is raised.
    """

    def __init__(self, message: str = "input cancelled") -> None:
        super().__init__(message)


class CursorPositionError(LineEditError):
    """The terminal did not answer a cursor position query."""
