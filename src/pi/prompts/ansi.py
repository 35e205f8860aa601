"""ANSI escape sequences used by the screen manager and themes."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Cursor and erase sequences
# ---------------------------------------------------------------------------

ESC = "\x1b["

CURSOR_LEFT = ESC + "G"
CURSOR_HIDE = ESC + "?25l"
CURSOR_SHOW = ESC + "?25h"
ERASE_LINE = ESC + "2K"


def cursor_up(count: int) -> str:
    """Move the cursor up *count* rows (empty string for ``count <= 0``)."""
    return f"{ESC}{count}A" if count > 0 else ""


def cursor_down(count: int) -> str:
    """Move the cursor down *count* rows (empty string for ``count <= 0``)."""
    return f"{ESC}{count}B" if count > 0 else ""


def cursor_to(x: int) -> str:
    """Move the cursor to the zero-based column *x* of the current row."""
    return f"{ESC}{x + 1}G"


def erase_lines(count: int) -> str:
    """Erase *count* rows, walking upward from the cursor's row.

    The cursor ends in the first column of the topmost erased row.
    """
    if count <= 0:
        return ""
    return (ERASE_LINE + cursor_up(1)) * (count - 1) + ERASE_LINE + CURSOR_LEFT


# ---------------------------------------------------------------------------
# SGR styling
# ---------------------------------------------------------------------------


def _sgr(open_code: int, close_code: int):
    def style(text: str) -> str:
        return f"{ESC}{open_code}m{text}{ESC}{close_code}m"

    return style


bold = _sgr(1, 22)
dim = _sgr(2, 22)
inverse = _sgr(7, 27)
red = _sgr(31, 39)
green = _sgr(32, 39)
yellow = _sgr(33, 39)
blue = _sgr(34, 39)
cyan = _sgr(36, 39)


# ---------------------------------------------------------------------------
# Figures
# ---------------------------------------------------------------------------

POINTER = "❯"
TICK = "✔"
CROSS = "✖"
LINE = "─"
CIRCLE = "◯"
CIRCLE_FILLED = "◉"
