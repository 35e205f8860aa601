"""Tests for pi.prompts.utils -- ANSI stripping, widths and line breaking."""

from __future__ import annotations

from pi.prompts.utils import AnsiCodeTracker, break_lines, extract_ansi_code, strip_ansi, visible_width


# ---------------------------------------------------------------------------
# strip_ansi / visible_width
# ---------------------------------------------------------------------------


class TestStripAnsi:
    def test_removes_sgr(self) -> None:
        assert strip_ansi("\x1b[1mbold\x1b[22m") == "bold"

    def test_removes_cursor_movement(self) -> None:
        assert strip_ansi("\x1b[2K\x1b[1A\x1b[Gtext\x1b[?25l") == "text"

    def test_removes_osc_hyperlink(self) -> None:
        assert strip_ansi("\x1b]8;;http://x\x07link\x1b]8;;\x07") == "link"

    def test_plain_text_unchanged(self) -> None:
        assert strip_ansi("plain") == "plain"


class TestVisibleWidth:
    """Measure the visible terminal width of text."""

    def test_plain_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty_string(self) -> None:
        assert visible_width("") == 0

    def test_ansi_codes_do_not_count(self) -> None:
        assert visible_width("\x1b[36mhi\x1b[39m") == 2

    def test_wide_cjk_characters_count_as_two(self) -> None:
        assert visible_width("A世B") == 4

    def test_tab_counts_as_three_spaces(self) -> None:
        assert visible_width("\t") == 3

    def test_combining_mark_is_zero_width(self) -> None:
        assert visible_width("é") == 1


# ---------------------------------------------------------------------------
# extract_ansi_code / AnsiCodeTracker
# ---------------------------------------------------------------------------


class TestExtractAnsiCode:
    def test_csi_at_position(self) -> None:
        assert extract_ansi_code("a\x1b[31mb", 1) == ("\x1b[31m", 5)

    def test_not_an_escape(self) -> None:
        assert extract_ansi_code("abc", 0) is None

    def test_incomplete_sequence(self) -> None:
        assert extract_ansi_code("\x1b[31", 0) is None


class TestAnsiCodeTracker:
    def test_tracks_attributes_and_colours(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[1m")
        tracker.process("\x1b[31m")
        assert tracker.has_active_codes()
        assert tracker.get_active_codes() == "\x1b[1m\x1b[31m"

    def test_specific_resets(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[1;31m")
        tracker.process("\x1b[22m")
        tracker.process("\x1b[39m")
        assert not tracker.has_active_codes()

    def test_full_reset(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[4;44m")
        tracker.process("\x1b[0m")
        assert tracker.get_active_codes() == ""

    def test_extended_colour(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[38;5;208m")
        assert tracker.fg_color == "\x1b[38;5;208m"


# ---------------------------------------------------------------------------
# break_lines
# ---------------------------------------------------------------------------


class TestBreakLines:
    """Content is re-flowed so no row exceeds the terminal width."""

    def test_short_lines_unchanged(self) -> None:
        assert break_lines("one\ntwo", 80) == "one\ntwo"

    def test_wraps_at_space(self) -> None:
        assert break_lines("hello world", 5) == "hello\nworld"

    def test_wraps_at_last_space_in_row(self) -> None:
        assert break_lines("foo barbaz", 7) == "foo\nbarbaz"

    def test_hard_splits_long_words(self) -> None:
        assert break_lines("abcdefgh", 3) == "abc\ndef\ngh"

    def test_trailing_spaces_trimmed(self) -> None:
        assert break_lines("text   ", 80) == "text"

    def test_styles_reopened_after_break(self) -> None:
        rows = break_lines("\x1b[31mabcdef\x1b[39m", 3).split("\n")
        assert [strip_ansi(row) for row in rows] == ["abc", "def"]
        assert rows[1].startswith("\x1b[31m")

    def test_every_row_fits(self) -> None:
        text = "the quick brown fox jumps over the lazy dog " * 3
        for row in break_lines(text, 10).split("\n"):
            assert visible_width(row) <= 10

    def test_zero_width_is_noop(self) -> None:
        assert break_lines("abc", 0) == "abc"
