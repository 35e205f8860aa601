"""Terminal text utilities: ANSI stripping, width measurement, line breaking.

Every width computation here treats escape sequences (CSI, OSC, APC) as
zero-width, so styled prompt content measures the same as its plain text.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Regex patterns for ANSI / OSC / APC sequences
# ---------------------------------------------------------------------------

_STRIP_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"  # CSI (SGR, cursor movement, private modes)
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"  # OSC
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"  # APC
)

_RESET = "\x1b[0m"

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def strip_ansi(text: str) -> str:
    """Remove every escape sequence from *text*."""
    return _STRIP_RE.sub("", text)


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    # Emoji presentation, ZWJ sequences, skin tones and flags are double width
    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    Escape sequences are ignored and tabs count as 3 columns.
    """
    if not text:
        return 0

    stripped = strip_ansi(text)
    if not stripped:
        return 0
    stripped = stripped.replace("\t", "   ")

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(stripped):
        total += _grapheme_width(g)

    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# extract_ansi_code
# ---------------------------------------------------------------------------


def extract_ansi_code(text: str, pos: int) -> tuple[str, int] | None:
    """Extract an escape sequence starting at *pos* in *text*.

    Returns ``(code, length)`` or ``None`` if *pos* does not start a complete
    CSI, OSC or APC sequence.
    """
    if pos + 1 >= len(text) or text[pos] != "\x1b":
        return None

    next_ch = text[pos + 1]

    if next_ch == "[":
        i = pos + 2
        # Parameter bytes, then intermediates, then one final byte
        while i < len(text) and "0" <= text[i] <= "?":
            i += 1
        while i < len(text) and " " <= text[i] <= "/":
            i += 1
        if i < len(text) and "@" <= text[i] <= "~":
            code = text[pos : i + 1]
            return (code, len(code))
        return None

    if next_ch in ("]", "_"):
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch == "\x07":
                code = text[pos : i + 1]
                return (code, len(code))
            if ch == "\x1b" and i + 1 < len(text) and text[i + 1] == "\\":
                code = text[pos : i + 2]
                return (code, len(code))
            i += 1
        return None

    return None


# ---------------------------------------------------------------------------
# AnsiCodeTracker
# ---------------------------------------------------------------------------


class AnsiCodeTracker:
    """Track active SGR state so it can be re-applied after a line break."""

    _ATTRIBUTES = {
        1: "bold",
        2: "dim",
        3: "italic",
        4: "underline",
        7: "inverse",
        9: "strikethrough",
    }
    _RESETS = {
        22: ("bold", "dim"),
        23: ("italic",),
        24: ("underline",),
        27: ("inverse",),
        29: ("strikethrough",),
    }

    def __init__(self) -> None:
        self._attrs: dict[str, str] = {}
        self.fg_color: str | None = None
        self.bg_color: str | None = None

    def process(self, code: str) -> None:
        """Update tracked state from an SGR sequence like ``\\x1b[1;31m``."""
        if not code.startswith("\x1b[") or not code.endswith("m"):
            return

        params_str = code[2:-1]
        if not params_str:
            self.clear()
            return

        params = params_str.split(";")
        i = 0
        while i < len(params):
            p = params[i]
            val = int(p) if p.isdigit() else 0

            if val == 0:
                self.clear()
            elif val in self._ATTRIBUTES:
                self._attrs[self._ATTRIBUTES[val]] = f"\x1b[{val}m"
            elif val in self._RESETS:
                for name in self._RESETS[val]:
                    self._attrs.pop(name, None)
            elif 30 <= val <= 37 or 90 <= val <= 97:
                self.fg_color = f"\x1b[{val}m"
            elif 40 <= val <= 47 or 100 <= val <= 107:
                self.bg_color = f"\x1b[{val}m"
            elif val in (38, 48):
                # 256-colour (5;N) or RGB (2;R;G;B) extended colours
                mode = params[i + 1] if i + 1 < len(params) else ""
                span = 2 if mode == "5" else 4 if mode == "2" else 0
                if span and i + span < len(params):
                    colour = "\x1b[" + ";".join(params[i : i + span + 1]) + "m"
                    if val == 38:
                        self.fg_color = colour
                    else:
                        self.bg_color = colour
                    i += span
            elif val == 39:
                self.fg_color = None
            elif val == 49:
                self.bg_color = None

            i += 1

    def clear(self) -> None:
        self._attrs.clear()
        self.fg_color = None
        self.bg_color = None

    def get_active_codes(self) -> str:
        """Return a string of ANSI codes that reactivate the current state."""
        parts = list(self._attrs.values())
        if self.fg_color is not None:
            parts.append(self.fg_color)
        if self.bg_color is not None:
            parts.append(self.bg_color)
        return "".join(parts)

    def has_active_codes(self) -> bool:
        return bool(self._attrs) or self.fg_color is not None or self.bg_color is not None


# ---------------------------------------------------------------------------
# break_lines
# ---------------------------------------------------------------------------


def break_lines(content: str, width: int) -> str:
    """Force line returns so no row of *content* exceeds *width* columns.

    Words wrap at spaces when possible and are hard-split otherwise. Escape
    sequences are preserved and do not count towards the width; active styles
    are closed at each forced break and reopened on the continuation row.
    Trailing whitespace is trimmed from every produced row.
    """
    if width <= 0:
        return content

    tracker = AnsiCodeTracker()
    rows: list[str] = []
    for line in content.split("\n"):
        rows.extend(row.rstrip(" ") for row in _wrap_single_line(line, width, tracker))
    return "\n".join(rows)


def _wrap_single_line(
    line: str,
    width: int,
    tracker: AnsiCodeTracker,
) -> list[str]:
    """Wrap a single line (no embedded newlines) to *width* columns."""
    if not line:
        return [""]

    if visible_width(line) <= width:
        # Keep tracker state in sync for following lines
        for code in _STRIP_RE.findall(line):
            tracker.process(code)
        return [line]

    result_lines: list[str] = []
    current_line: list[str] = []
    current_width = 0

    prefix = tracker.get_active_codes()
    if prefix:
        current_line.append(prefix)

    i = 0
    while i < len(line):
        extracted = extract_ansi_code(line, i)
        if extracted is not None:
            code, length = extracted
            tracker.process(code)
            current_line.append(code)
            i += length
            continue

        ch = line[i]
        if ch == "\t":
            ch_text = "   "
            ch_width = 3
        else:
            ch_text = ch
            ch_width = _grapheme_width(ch)

        if current_width + ch_width > width and current_width > 0:
            break_result = None if ch == " " else _find_word_break(current_line)

            if break_result is not None:
                before, after = break_result
                if tracker.has_active_codes():
                    before += _RESET
                result_lines.append(before)

                current_line = []
                active = tracker.get_active_codes()
                if active:
                    current_line.append(active)
                if after:
                    current_line.append(after)
                current_width = visible_width(after)
            else:
                finished = "".join(current_line)
                if tracker.has_active_codes():
                    finished += _RESET
                result_lines.append(finished)
                current_line = []
                active = tracker.get_active_codes()
                if active:
                    current_line.append(active)
                current_width = 0

            # The space that triggered the break is consumed by it
            if ch == " ":
                i += 1
                continue

        current_line.append(ch_text)
        current_width += ch_width
        i += 1

    result_lines.append("".join(current_line))
    return result_lines


def _find_word_break(parts: list[str]) -> tuple[str, str] | None:
    """Split accumulated *parts* at the last visible space.

    Returns ``(before, after)`` with the space dropped, or ``None`` when the
    row holds a single word that must be hard-split.
    """
    joined = "".join(parts)
    stripped = strip_ansi(joined)
    last_space = stripped.rfind(" ")

    if last_space <= 0 or not stripped[:last_space].strip():
        return None

    visible_idx = 0
    i = 0
    while i < len(joined):
        extracted = extract_ansi_code(joined, i)
        if extracted is not None:
            i += extracted[1]
            continue
        if visible_idx == last_space:
            return (joined[:i], joined[i + 1 :])
        visible_idx += 1
        i += 1

    return None
