"""Keypress events, raw-input parsing and key classifiers.

Raw terminal input is split into individual sequences with
``split_sequences`` and turned into ``KeypressEvent`` objects by
``parse_keypress``. Prompts never look at raw bytes: they ask the
``is_*_key`` predicates, which understand the optional vim/emacs
keybinding profiles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

Keybinding = Literal["vim", "emacs"]


@dataclass(frozen=True)
class KeypressEvent:
    """One decoded keystroke.

    ``name`` is a lowercase key name (``"up"``, ``"enter"``, ``"a"``,
    ``"3"``); ``sequence`` is the raw input that produced it.
    """

    name: str
    ctrl: bool = False
    shift: bool = False
    meta: bool = False
    sequence: str = ""


# ---------------------------------------------------------------------------
# Escape sequence tables
# ---------------------------------------------------------------------------

ESC = "\x1b"

# Final byte / tilde number -> key name, shared by CSI and SS3 forms
_CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "E": "clear",
    "F": "end",
    "H": "home",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageup",
    "6": "pagedown",
    "7": "home",
    "8": "end",
    "15": "f5",
    "17": "f6",
    "18": "f7",
    "19": "f8",
    "20": "f9",
    "21": "f10",
    "23": "f11",
    "24": "f12",
}

# xterm modifier parameter: 1 + (shift | alt << 1 | ctrl << 2)
_MOD_SHIFT = 1
_MOD_ALT = 2
_MOD_CTRL = 4


# ---------------------------------------------------------------------------
# Sequence splitting
# ---------------------------------------------------------------------------


def _sequence_end(data: str, start: int) -> int:
    """Return the index just past the escape sequence beginning at *start*."""
    n = len(data)
    i = start + 1
    if i >= n:
        return n

    ch = data[i]
    if ch == "[":
        i += 1
        # Legacy function keys: ESC [ [ A
        if i < n and data[i] == "[":
            return min(i + 2, n)
        while i < n and "0" <= data[i] <= "?":
            i += 1
        while i < n and " " <= data[i] <= "/":
            i += 1
        return min(i + 1, n)
    if ch == "O":
        return min(i + 2, n)
    if ch == ESC:
        # ESC ESC [ A is alt+arrow on some terminals
        if i + 1 < n and data[i + 1] in "[O":
            return _sequence_end(data, i)
        return i + 1
    return i + 1


def split_sequences(data: str) -> list[str]:
    """Split a chunk of raw input into one string per keystroke.

    Escape sequences stay intact; everything else is one character each.
    A lone trailing ``ESC`` is kept as its own sequence (the escape key).
    """
    sequences: list[str] = []
    i = 0
    while i < len(data):
        if data[i] == ESC:
            end = _sequence_end(data, i)
            sequences.append(data[i:end])
            i = end
        else:
            sequences.append(data[i])
            i += 1
    return sequences


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _apply_modifier(name: str, param: str, sequence: str, meta: bool) -> KeypressEvent:
    mod = (int(param) - 1) if param.isdigit() and int(param) > 0 else 0
    return KeypressEvent(
        name=name,
        ctrl=bool(mod & _MOD_CTRL),
        shift=bool(mod & _MOD_SHIFT),
        meta=meta or bool(mod & _MOD_ALT),
        sequence=sequence,
    )


def _parse_escape(seq: str) -> KeypressEvent:
    meta = False
    body = seq[1:]
    if body.startswith(ESC) and len(body) > 1:
        meta = True
        body = body[1:]

    if not body:
        return KeypressEvent(name="escape", meta=meta, sequence=seq)

    if body[0] == "O" and len(body) >= 2:
        final = body[-1]
        name = _CSI_LETTER_KEYS.get(final, "undefined")
        return _apply_modifier(name, body[1:-1], seq, meta)

    if body[0] == "[" and len(body) >= 2:
        if body.startswith("[["):
            name = {"A": "f1", "B": "f2", "C": "f3", "D": "f4", "E": "f5"}.get(
                body[2:3], "undefined"
            )
            return KeypressEvent(name=name, meta=meta, sequence=seq)

        final = body[-1]
        params = body[1:-1].split(";")
        if final == "~":
            name = _CSI_TILDE_KEYS.get(params[0], "undefined")
            return _apply_modifier(name, params[1] if len(params) > 1 else "", seq, meta)
        if final == "Z":
            return KeypressEvent(name="tab", shift=True, meta=meta, sequence=seq)
        name = _CSI_LETTER_KEYS.get(final, "undefined")
        return _apply_modifier(name, params[1] if len(params) > 1 else "", seq, meta)

    # ESC + single character: meta modifier
    inner = _parse_single(body[0], seq)
    return KeypressEvent(
        name=inner.name,
        ctrl=inner.ctrl,
        shift=inner.shift,
        meta=True,
        sequence=seq,
    )


def _parse_single(ch: str, sequence: str) -> KeypressEvent:
    if ch == "\r":
        return KeypressEvent(name="return", sequence=sequence)
    if ch == "\n":
        return KeypressEvent(name="enter", sequence=sequence)
    if ch == "\t":
        return KeypressEvent(name="tab", sequence=sequence)
    if ch in ("\x7f", "\x08"):
        return KeypressEvent(name="backspace", sequence=sequence)
    if ch == ESC:
        return KeypressEvent(name="escape", sequence=sequence)
    if ch == " ":
        return KeypressEvent(name="space", sequence=sequence)
    if ch == "\x00":
        return KeypressEvent(name="space", ctrl=True, sequence=sequence)

    code = ord(ch)
    if 1 <= code <= 26:
        return KeypressEvent(name=chr(code + ord("a") - 1), ctrl=True, sequence=sequence)
    if "a" <= ch <= "z":
        return KeypressEvent(name=ch, sequence=sequence)
    if "A" <= ch <= "Z":
        return KeypressEvent(name=ch.lower(), shift=True, sequence=sequence)
    return KeypressEvent(name=ch, sequence=sequence)


def parse_keypress(sequence: str) -> KeypressEvent:
    """Decode one sequence (as produced by ``split_sequences``)."""
    if sequence.startswith(ESC) and len(sequence) > 1:
        return _parse_escape(sequence)
    if len(sequence) == 1:
        return _parse_single(sequence, sequence)
    # Multi-character text that is not an escape (e.g. pasted); name it by content
    return KeypressEvent(name=sequence, sequence=sequence)


def parse_keypresses(data: str) -> list[KeypressEvent]:
    return [parse_keypress(seq) for seq in split_sequences(data)]


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def is_up_key(key: KeypressEvent, keybindings: Iterable[Keybinding] = ()) -> bool:
    bindings = set(keybindings)
    return (
        key.name == "up"
        or ("vim" in bindings and key.name == "k" and not key.ctrl)
        or ("emacs" in bindings and key.ctrl and key.name == "p")
    )


def is_down_key(key: KeypressEvent, keybindings: Iterable[Keybinding] = ()) -> bool:
    bindings = set(keybindings)
    return (
        key.name == "down"
        or ("vim" in bindings and key.name == "j" and not key.ctrl)
        or ("emacs" in bindings and key.ctrl and key.name == "n")
    )


def is_space_key(key: KeypressEvent) -> bool:
    return key.name == "space"


def is_backspace_key(key: KeypressEvent) -> bool:
    return key.name == "backspace"


def is_tab_key(key: KeypressEvent) -> bool:
    return key.name == "tab"


def is_number_key(key: KeypressEvent) -> bool:
    return len(key.name) == 1 and key.name in "1234567890"


def is_enter_key(key: KeypressEvent) -> bool:
    return key.name in ("enter", "return")
