"""Line editor: typed text, cursor column and keypress dispatch.

The editor owns the user's in-progress line the way a readline interface
does. Raw input is fed in with ``feed``; every decoded keystroke first
edits the line and is then passed to the registered listeners, so a
listener always observes the line *after* the key was applied. Enter
commits the line and clears it.
"""

from __future__ import annotations

import logging
from typing import Callable

import grapheme

from pi.prompts.keys import KeypressEvent, parse_keypresses
from pi.prompts.utils import visible_width

logger = logging.getLogger(__name__)

KeypressListener = Callable[[KeypressEvent], None]


def _is_whitespace_char(char: str) -> bool:
    return char in (" ", "\t", "\n", "\r", "\f", "\v")


class LineEditor:
    """Single-line editor bound to a terminal width."""

    def __init__(
        self,
        columns: Callable[[], int] | int = 80,
        on_interrupt: Callable[[], None] | None = None,
    ) -> None:
        self.line: str = ""
        self.cursor: int = 0
        self.prompt: str = ""
        self.closed: bool = False
        self.on_interrupt = on_interrupt

        self._columns = columns
        self._listeners: list[KeypressListener] = []

    # -- terminal geometry ------------------------------------------------

    @property
    def columns(self) -> int:
        cols = self._columns() if callable(self._columns) else self._columns
        return cols if cols > 0 else 80

    def get_cursor_pos(self) -> tuple[int, int]:
        """Return ``(rows, cols)`` of the cursor relative to the prompt start."""
        width = visible_width(self.prompt + self.line[: self.cursor])
        cols = self.columns
        return (width // cols, width % cols)

    # -- listeners --------------------------------------------------------

    def add_listener(self, listener: KeypressListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.remove_listener(listener)

    def remove_listener(self, listener: KeypressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # -- editing API used by prompts --------------------------------------

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def clear_line(self) -> None:
        self.line = ""
        self.cursor = 0

    def write(self, text: str) -> None:
        """Insert *text* at the cursor without emitting keypress events."""
        self.line = self.line[: self.cursor] + text + self.line[self.cursor :]
        self.cursor += len(text)

    def close(self) -> None:
        self.closed = True
        self._listeners.clear()

    # -- input ------------------------------------------------------------

    def feed(self, data: str) -> None:
        """Decode *data*, apply each keystroke to the line, then notify."""
        for event in parse_keypresses(data):
            if self.closed:
                return

            if event.ctrl and event.name == "c":
                logger.debug("Interrupt received from keyboard")
                if self.on_interrupt is not None:
                    self.on_interrupt()
                continue

            self._apply(event)
            for listener in list(self._listeners):
                listener(event)

    def _apply(self, event: KeypressEvent) -> None:
        name = event.name

        if name in ("enter", "return"):
            self.clear_line()
            return

        if event.ctrl:
            if name == "a":
                self.cursor = 0
            elif name == "e":
                self.cursor = len(self.line)
            elif name == "b":
                self._move_left()
            elif name == "f":
                self._move_right()
            elif name == "h":
                self._delete_backward()
            elif name == "d":
                self._delete_forward()
            elif name == "u":
                self.line = self.line[self.cursor :]
                self.cursor = 0
            elif name == "k":
                self.line = self.line[: self.cursor]
            elif name == "w":
                self._delete_word_backward()
            return

        if name == "backspace":
            if event.meta:
                self._delete_word_backward()
            else:
                self._delete_backward()
        elif name == "delete":
            self._delete_forward()
        elif name == "left":
            self._move_left()
        elif name == "right":
            self._move_right()
        elif name == "home":
            self.cursor = 0
        elif name == "end":
            self.cursor = len(self.line)
        elif not event.meta and self._is_text(event.sequence):
            self.write(event.sequence)

    @staticmethod
    def _is_text(sequence: str) -> bool:
        if not sequence:
            return False
        return not any(
            ord(ch) < 32 or ord(ch) == 0x7F or (0x80 <= ord(ch) <= 0x9F)
            for ch in sequence
        )

    def _move_left(self) -> None:
        if self.cursor > 0:
            graphemes = list(grapheme.graphemes(self.line[: self.cursor]))
            self.cursor -= len(graphemes[-1]) if graphemes else 1

    def _move_right(self) -> None:
        if self.cursor < len(self.line):
            graphemes = list(grapheme.graphemes(self.line[self.cursor :]))
            self.cursor += len(graphemes[0]) if graphemes else 1

    def _delete_backward(self) -> None:
        if self.cursor > 0:
            graphemes = list(grapheme.graphemes(self.line[: self.cursor]))
            gl = len(graphemes[-1]) if graphemes else 1
            self.line = self.line[: self.cursor - gl] + self.line[self.cursor :]
            self.cursor -= gl

    def _delete_forward(self) -> None:
        if self.cursor < len(self.line):
            graphemes = list(grapheme.graphemes(self.line[self.cursor :]))
            gl = len(graphemes[0]) if graphemes else 1
            self.line = self.line[: self.cursor] + self.line[self.cursor + gl :]

    def _delete_word_backward(self) -> None:
        end = self.cursor
        start = end
        while start > 0 and _is_whitespace_char(self.line[start - 1]):
            start -= 1
        while start > 0 and not _is_whitespace_char(self.line[start - 1]):
            start -= 1
        self.line = self.line[:start] + self.line[end:]
        self.cursor = start
