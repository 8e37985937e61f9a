# =============================================================================
# Terminal Control
# =============================================================================
# Owns the controlling terminal for the lifetime of the browser:
#
#   - Paging mode: canonical input and echo off, one byte per read. ISIG is
#     left on so Ctrl-C still interrupts.
#   - Line mode: the original settings, used for a single prompt. Echo can be
#     switched off for sensitive input.
#   - Alternate screen and window title.
#
# The original settings are restored on every exit path: normal return,
# exceptions (including KeyboardInterrupt) and SIGTERM/SIGHUP, which are
# turned into SystemExit so that `finally` blocks and __exit__ run.
# =============================================================================

import logging
import os
import shutil
import signal
import sys
import termios
from typing import BinaryIO, TextIO

logger = logging.getLogger(__name__)

# termios attribute list index of the local-mode flags
_LFLAG = 3

ALT_SCREEN_ON = "\x1b[?1049h"
ALT_SCREEN_OFF = "\x1b[?1049l"
CLEAR = "\x1b[H\x1b[2J"


class Terminal:
    """
    Blocking terminal I/O for the pager.

    Usage:
        >>> with Terminal() as term:
        ...     term.paging_mode()
        ...     key = term.read_byte()

    Attributes:
        stdin: Binary input stream (must be a tty).
        stdout: Text output stream.
    """

    def __init__(self, stdin: BinaryIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin or sys.stdin.buffer
        self.stdout = stdout or sys.stdout
        self.fd = self.stdin.fileno()
        self._saved: list | None = None
        self._previous_handlers: dict[int, object] = {}

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def __enter__(self) -> "Terminal":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.restore()

    def start(self) -> None:
        """Save the current settings, switch to the alternate screen."""
        self._saved = termios.tcgetattr(self.fd)
        for signum in (signal.SIGTERM, signal.SIGHUP):
            self._previous_handlers[signum] = signal.signal(signum, self._on_signal)
        self.write(ALT_SCREEN_ON)
        self.flush()

    def restore(self) -> None:
        """Put the terminal back the way start() found it. Safe to call twice."""
        if self._saved is None:
            return
        self.write(ALT_SCREEN_OFF)
        self.flush()
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
        self._saved = None
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()
        logger.debug("Terminal restored")

    def _on_signal(self, signum: int, frame) -> None:
        logger.info(f"Received signal {signum}, exiting")
        raise SystemExit(128 + signum)

    # -------------------------------------------------------------------------
    # Modes
    # -------------------------------------------------------------------------

    def paging_mode(self) -> None:
        """Unbuffered, non-echoing input."""
        self._set_lflags(clear=termios.ICANON | termios.ECHO)

    def line_mode(self, echo: bool = True) -> None:
        """Buffered input, echoed unless `echo` is False."""
        self._set_lflags(set_=termios.ICANON | (termios.ECHO if echo else 0),
                         clear=0 if echo else termios.ECHO)

    def _set_lflags(self, set_: int = 0, clear: int = 0) -> None:
        attrs = termios.tcgetattr(self.fd)
        attrs[_LFLAG] = (attrs[_LFLAG] | set_) & ~clear
        if not attrs[_LFLAG] & termios.ICANON:
            attrs[6][termios.VMIN] = 1
            attrs[6][termios.VTIME] = 0
        termios.tcsetattr(self.fd, termios.TCSADRAIN, attrs)

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def read_byte(self) -> bytes:
        """One byte of input, or b"" at end of input."""
        return os.read(self.fd, 1)

    def read_line(self, prompt: str, echo: bool = True) -> str:
        """
        Prompt on the bottom row and read one line.

        Switches to line mode for the read. The caller is responsible for
        going back to paging mode afterwards.
        """
        rows, _ = self.size()
        self.write(f"\x1b[{rows};1H\x1b[2K{prompt}")
        self.flush()
        self.line_mode(echo=echo)

        data = bytearray()
        while True:
            byte = os.read(self.fd, 1)
            if not byte or byte == b"\n":
                break
            data += byte

        if not echo:
            self.write("\n")
        return data.decode("utf-8", errors="replace").rstrip("\r")

    def wait_key(self, lines: list[str]) -> bytes:
        """Show `lines` on a clear screen and wait for a single key."""
        self.paging_mode()
        self.draw(lines)
        return self.read_byte()

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def size(self) -> tuple[int, int]:
        """(rows, columns) of the terminal."""
        size = shutil.get_terminal_size()
        return size.lines, size.columns

    def write(self, text: str) -> None:
        self.stdout.write(text)

    def flush(self) -> None:
        self.stdout.flush()

    def draw(self, lines: list[str], status: str = "") -> None:
        """Clear the screen, write `lines` from the top, `status` on the last row."""
        rows, _ = self.size()
        self.write(CLEAR + "\r\n".join(lines))
        if status:
            self.write(f"\x1b[{rows};1H\x1b[7m{status}\x1b[0m")
        self.flush()

    def set_title(self, title: str) -> None:
        self.write(f"\x1b]0;{title}\x07")
        self.flush()
