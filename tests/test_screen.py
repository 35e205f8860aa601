"""Tests for pi.prompts.screen -- in-place frame rendering."""

from __future__ import annotations

from pi.prompts.ansi import CURSOR_SHOW, cursor_down, cursor_to, cursor_up, erase_lines
from pi.prompts.line_editor import LineEditor
from pi.prompts.screen import ScreenManager, height, last_line

from .virtual_terminal import VirtualTerminal


def _screen(columns: int = 80) -> tuple[ScreenManager, LineEditor, VirtualTerminal]:
    terminal = VirtualTerminal(columns=columns)
    rl = LineEditor(columns=lambda: terminal.columns)
    return ScreenManager(terminal, rl), rl, terminal


class TestHelpers:
    def test_height(self) -> None:
        assert height("a") == 1
        assert height("a\nb\nc") == 3

    def test_last_line(self) -> None:
        assert last_line("a\nb") == "b"


class TestRender:
    def test_first_frame_is_one_write(self) -> None:
        screen, _, terminal = _screen()
        screen.render("? Pick\n  one")
        assert terminal.write_count == 1
        assert terminal.get_screen() == "? Pick\n  one"
        assert screen.height == 2

    def test_next_frame_erases_previous_rows(self) -> None:
        screen, _, terminal = _screen()
        screen.render("line 1\nline 2")
        terminal.clear_buffer()
        screen.render("only")
        assert terminal.output.startswith(erase_lines(2))
        assert terminal.get_screen() == "only"
        assert screen.height == 1

    def test_cursor_follows_prompt_line(self) -> None:
        screen, rl, terminal = _screen()
        rl.write("Jo")
        screen.render("? Name Jo")
        assert rl.prompt == "? Name "
        assert terminal.output.endswith(cursor_to(9))

    def test_bottom_content_is_placed_under_cursor(self) -> None:
        screen, _, terminal = _screen()
        screen.render("? q", "> error")
        assert terminal.get_screen() == "? q\n> error"
        assert terminal.output.endswith(cursor_up(1) + cursor_to(3))
        assert screen.extra_lines_under_prompt == 1

        terminal.clear_buffer()
        screen.render("? q")
        assert terminal.output.startswith(cursor_down(1) + erase_lines(2))
        assert screen.extra_lines_under_prompt == 0

    def test_long_lines_are_broken_to_width(self) -> None:
        screen, _, terminal = _screen(columns=10)
        screen.render("a" * 25)
        assert terminal.get_screen() == "aaaaaaaaaa\naaaaaaaaaa\naaaaa"
        assert screen.height == 3

    def test_check_cursor_pos_rehomes_cursor(self) -> None:
        screen, rl, terminal = _screen()
        screen.render("? x")
        terminal.clear_buffer()
        rl.write("ab")
        screen.check_cursor_pos()
        assert terminal.output == cursor_to(5)

    def test_check_cursor_pos_noop_when_unchanged(self) -> None:
        screen, _, terminal = _screen()
        screen.render("? x")
        terminal.clear_buffer()
        screen.check_cursor_pos()
        assert terminal.output == ""


class TestDone:
    def test_keeps_frame_by_default(self) -> None:
        screen, rl, terminal = _screen()
        screen.render("? done")
        terminal.clear_buffer()
        screen.done()
        assert terminal.output == "\n" + CURSOR_SHOW
        assert rl.closed
        assert terminal.get_screen() == ""

    def test_clear_content_erases_frame(self) -> None:
        screen, _, terminal = _screen()
        screen.render("a\nb\nc")
        terminal.clear_buffer()
        screen.done(clear_content=True)
        assert terminal.output == erase_lines(3) + CURSOR_SHOW
        assert screen.height == 0
