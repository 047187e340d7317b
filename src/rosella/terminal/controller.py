"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle, alternate-screen switching and screen size queries.
"""

from __future__ import annotations

import contextlib
import logging as py_logging
import os
import shutil
import termios
import tty
from collections.abc import Iterator

logger = py_logging.getLogger(__name__)

ENTER_TUI = b"\x1b[?1049h\x1b[?25l"
LEAVE_TUI = b"\x1b[?25h\x1b[?1049l"


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Enter alternate screen and hide cursor.
        os.write(self.stdout_fd, ENTER_TUI)
        logger.debug("Entered TUI mode fd=%s", self.stdin_fd)

    def disable_tui_mode(self) -> None:
        # Show cursor and restore the main screen buffer.
        os.write(self.stdout_fd, LEAVE_TUI)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        logger.debug("Left TUI mode fd=%s", self.stdin_fd)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)`` of the controlling terminal."""
        try:
            size = os.get_terminal_size(self.stdout_fd)
        except OSError:
            size = shutil.get_terminal_size()
        return size.columns, size.lines

    def write(self, text: str) -> None:
        data = text.encode("utf-8")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
