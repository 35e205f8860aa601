"""Screen manager: redraws a prompt in place below the current output.

Each render erases exactly the rows written by the previous render and
writes the new frame in one terminal write. Afterwards the cursor is moved
back to where the line editor believes it is, so typing and cursor keys
keep working even though the frame itself was written behind the line
editor's back.
"""

from __future__ import annotations

from pi.prompts.ansi import CURSOR_SHOW, cursor_down, cursor_to, cursor_up, erase_lines
from pi.prompts.line_editor import LineEditor
from pi.prompts.terminal import Terminal
from pi.prompts.utils import break_lines, strip_ansi, visible_width


def height(content: str) -> int:
    return len(content.split("\n"))


def last_line(content: str) -> str:
    return content.split("\n")[-1]


class ScreenManager:
    """Incremental renderer for one prompt session."""

    def __init__(self, terminal: Terminal, line_editor: LineEditor) -> None:
        self.terminal = terminal
        self.line_editor = line_editor

        # Rows written by the last render, and how many of them sit below the cursor
        self.height: int = 0
        self.extra_lines_under_prompt: int = 0
        self.cursor_pos: tuple[int, int] = (0, 0)

    def write(self, content: str) -> None:
        if content:
            self.terminal.write(content)

    def render(self, content: str, bottom_content: str = "") -> None:
        rl = self.line_editor

        # The line editor prompt is the undecorated last line minus typed input
        prompt_line = last_line(content)
        raw_prompt_line = strip_ansi(prompt_line)

        prompt = raw_prompt_line
        if rl.line:
            prompt = prompt[: -len(rl.line)]
        rl.set_prompt(prompt)

        self.cursor_pos = rl.get_cursor_pos()
        cursor_rows, cursor_cols = self.cursor_pos

        width = rl.columns
        content = break_lines(content, width)
        bottom_content = break_lines(bottom_content, width)

        # Force the break when the prompt line exactly fills its last row
        prompt_width = visible_width(raw_prompt_line)
        if prompt_width % width == 0:
            content += "\n"

        output = content + ("\n" + bottom_content if bottom_content else "")

        # Rows of the prompt line wrapped below the cursor count as bottom content
        prompt_line_up_diff = prompt_width // width - cursor_rows
        bottom_content_height = prompt_line_up_diff + (
            height(bottom_content) if bottom_content else 0
        )

        self.write(
            cursor_down(self.extra_lines_under_prompt)
            + erase_lines(self.height)
            + output
            + cursor_up(bottom_content_height)
            + cursor_to(cursor_cols)
        )

        self.extra_lines_under_prompt = bottom_content_height
        self.height = height(output)

    def check_cursor_pos(self) -> None:
        """Re-home the cursor if the line editor moved it without a render."""
        cursor_pos = self.line_editor.get_cursor_pos()
        if cursor_pos[1] != self.cursor_pos[1]:
            self.write(cursor_to(cursor_pos[1]))
        self.cursor_pos = cursor_pos

    def done(self, clear_content: bool = False) -> None:
        """Release the screen: keep or erase the frame, show the cursor."""
        self.line_editor.set_prompt("")

        output = cursor_down(self.extra_lines_under_prompt)
        output += erase_lines(self.height) if clear_content else "\n"
        output += CURSOR_SHOW
        self.write(output)

        self.extra_lines_under_prompt = 0
        self.height = 0
        self.line_editor.close()
