"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation that manages raw mode, reads stdin through the running
asyncio loop, and restores the terminal at interpreter exit if a prompt
is torn down abruptly.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from pi.prompts.ansi import CURSOR_SHOW
from pi.prompts.settings import get_settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal implementation backed by ``sys.stdin``/``sys.stdout``.

    Raw mode is entered via :mod:`tty` only when stdin is a TTY, so prompts
    can still be driven from a pipe.
    """

    def __init__(self) -> None:
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._stdin_reader_active: bool = False
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None
        self._write_log_path: str = get_settings().write_log
        self._atexit_registered: bool = False

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Enable raw mode and begin reading stdin."""
        self._input_handler = on_input
        self._resize_handler = on_resize

        fd = sys.stdin.fileno()
        if os.isatty(fd):
            self._original_termios = termios.tcgetattr(fd)
            tty.setraw(fd)
            # Frames are written with bare "\n"; keep output newline translation
            attrs = termios.tcgetattr(fd)
            attrs[1] |= termios.OPOST | termios.ONLCR
            termios.tcsetattr(fd, termios.TCSANOW, attrs)

        if not self._atexit_registered:
            atexit.register(self._restore)
            self._atexit_registered = True

        try:
            self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
            signal.signal(signal.SIGWINCH, self._on_sigwinch)
        except ValueError:
            # Not on the main thread
            self._prev_sigwinch_handler = None

        self._start_stdin_reader()
        logger.debug("Terminal started (raw=%s)", self._original_termios is not None)

    def stop(self) -> None:
        """Restore terminal state and clean up all handlers."""
        self._remove_stdin_reader()

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        self._restore_termios()

        if self._atexit_registered:
            atexit.unregister(self._restore)
            self._atexit_registered = False

        self._input_handler = None
        self._resize_handler = None
        logger.debug("Terminal stopped")

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                pass

    # -- private: stdin reading --------------------------------------------

    def _start_stdin_reader(self) -> None:
        """Register an asyncio reader on stdin that feeds the input handler."""
        if self._stdin_reader_active:
            return
        try:
            loop = asyncio.get_running_loop()
            loop.add_reader(sys.stdin.fileno(), self._on_stdin_readable)
            self._stdin_reader_active = True
        except RuntimeError:
            # No running event loop -- cannot register reader
            pass

    def _remove_stdin_reader(self) -> None:
        if not self._stdin_reader_active:
            return
        try:
            loop = asyncio.get_running_loop()
            loop.remove_reader(sys.stdin.fileno())
        except (RuntimeError, ValueError):
            pass
        self._stdin_reader_active = False

    def _on_stdin_readable(self) -> None:
        """Callback invoked by the event loop when stdin has data."""
        try:
            raw = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            return

        if not raw:
            return

        if self._input_handler is not None:
            self._input_handler(raw.decode("utf-8", errors="replace"))

    # -- private: SIGWINCH -------------------------------------------------

    def _on_sigwinch(
        self,
        signum: int,
        frame: object,
    ) -> None:
        if self._resize_handler is not None:
            self._resize_handler()

    # -- private: restore --------------------------------------------------

    def _restore_termios(self) -> None:
        if self._original_termios is not None:
            try:
                termios.tcsetattr(
                    sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios
                )
            except termios.error:
                pass
            self._original_termios = None

    def _restore(self) -> None:
        """Exit-time hook: show the cursor and leave raw mode."""
        self._raw_write(CURSOR_SHOW)
        self._restore_termios()

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass
