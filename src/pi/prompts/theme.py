"""Prompt themes.

A theme is a tree of dataclasses holding strings and styling callables.
Prompts extend the base ``Theme`` with their own fields and build the
effective theme with ``make_theme(default, user_overrides)``, where the
overrides are (possibly nested, partial) dictionaries.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar

from pi.prompts import ansi
from pi.prompts.errors import ValidationError

# "idle", "loading", "done", or any custom status a prompt defines
Status = str

ThemeT = TypeVar("ThemeT")


def _default_keys_help_tip(keys: list[tuple[str, str]]) -> str | None:
    return ansi.dim(" • ").join(f"{ansi.bold(key)} {ansi.dim(action)}" for key, action in keys)


@dataclass
class Spinner:
    """Frames shown in place of the prefix while a prompt is loading."""

    interval: float = 0.08
    frames: list[str] = field(
        default_factory=lambda: [
            ansi.yellow(frame) for frame in ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
        ]
    )


@dataclass
class ThemeStyle:
    answer: Callable[[str], str] = ansi.cyan
    message: Callable[[str, Status], str] = lambda text, status: ansi.bold(text)
    error: Callable[[str], str] = lambda text: ansi.red(f"> {text}")
    default_answer: Callable[[str], str] = lambda text: ansi.dim(f"({text})")
    help: Callable[[str], str] = ansi.dim
    highlight: Callable[[str], str] = ansi.cyan
    key: Callable[[str], str] = lambda text: ansi.cyan(ansi.bold(f"<{text}>"))
    keys_help_tip: Callable[[list[tuple[str, str]]], str | None] = _default_keys_help_tip


@dataclass
class Theme:
    # A single string, or one string per status ("loading" uses the spinner)
    prefix: str | dict[str, str] = field(
        default_factory=lambda: {"idle": ansi.blue("?"), "done": ansi.green(ansi.TICK)}
    )
    spinner: Spinner = field(default_factory=Spinner)
    style: ThemeStyle = field(default_factory=ThemeStyle)


# ---------------------------------------------------------------------------
# make_theme
# ---------------------------------------------------------------------------


def _merge(target: Any, overrides: Mapping[str, Any]) -> Any:
    names = {f.name for f in dataclasses.fields(target)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in names:
            raise ValidationError(f"Unknown theme option: {key!r}")
        current = getattr(target, key)
        if dataclasses.is_dataclass(current) and isinstance(value, Mapping):
            value = _merge(current, value)
        elif isinstance(current, dict) and isinstance(value, Mapping):
            value = {**current, **value}
        changes[key] = value
    return dataclasses.replace(target, **changes)


def make_theme(base: ThemeT, *overrides: Mapping[str, Any] | None) -> ThemeT:
    """Deep-merge partial *overrides* onto *base* and return a new theme.

    Nested dictionaries merge into the matching nested dataclass; any other
    value replaces the field. ``None`` overrides are skipped.
    """
    theme = base
    for override in overrides:
        if override:
            theme = _merge(theme, override)
    return theme


def resolve_prefix(theme: Theme, status: Status) -> str:
    """Prefix text for a non-loading *status*, falling back to ``idle``."""
    prefix = theme.prefix
    if isinstance(prefix, str):
        return prefix
    return prefix.get(status, prefix.get("idle", ""))
