"""Input prompt - free text with default, prefill, pattern and validation."""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Pattern, Union

from pi.prompts.hooks import use_effect, use_keypress, use_state
from pi.prompts.keys import KeypressEvent, is_backspace_key, is_enter_key, is_tab_key
from pi.prompts.line_editor import LineEditor
from pi.prompts.prefix import use_prefix
from pi.prompts.prompt import create_prompt
from pi.prompts.theme import Theme, make_theme

Transformer = Callable[..., str]
Validator = Callable[[str], Union[bool, str, Awaitable[Union[bool, str]]]]


@dataclass
class InputTheme(Theme):
    # "keep" puts the rejected value back in the line, "clear" empties it
    validation_failure_mode: str = "keep"


@dataclass
class InputConfig:
    message: Any
    default: str | None = None
    # "tab" inserts the default on tab, "editable" pre-fills the line with it
    prefill: str = "tab"
    required: bool = False
    transformer: Transformer | None = None
    validate: Validator | None = None
    pattern: str | Pattern[str] | None = None
    pattern_error: str | None = None
    theme: Mapping[str, Any] | None = None


def _matches(pattern: str | Pattern[str] | None, value: str) -> bool:
    if pattern is None:
        return True
    return re.search(pattern, value) is not None


def input_view(config: InputConfig, done: Callable[[str], None]) -> tuple[str, str]:
    theme = make_theme(InputTheme(), config.theme)
    status, set_status = use_state("idle")
    default_value, set_default_value = use_state(config.default or "")
    error, set_error = use_state(None)
    value, set_value = use_state("")
    prefix = use_prefix(status, theme)

    async def submit(rl: LineEditor) -> None:
        answer = value or default_value
        set_status("loading")

        if config.required and not answer:
            is_valid: bool | str = "You must provide a value"
        elif config.validate is not None:
            is_valid = config.validate(answer)
            if inspect.isawaitable(is_valid):
                is_valid = await is_valid
        else:
            is_valid = True

        if not _matches(config.pattern, answer):
            is_valid = config.pattern_error or "Invalid input update"

        if is_valid is True:
            set_value(answer)
            set_status("done")
            done(answer)
            return

        if theme.validation_failure_mode == "clear":
            set_value("")
        else:
            # The line was cleared on enter; put the rejected value back
            rl.write(value)
        set_error(is_valid or "You must provide a valid value")
        set_status("idle")

    def on_keypress(key: KeypressEvent, rl: LineEditor):
        if status != "idle":
            return None

        if is_enter_key(key):
            return submit(rl)

        if is_backspace_key(key) and not value:
            set_default_value("")
        elif is_tab_key(key) and not value:
            set_default_value("")
            rl.clear_line()
            rl.write(default_value)
            set_value(default_value)
        else:
            set_value(rl.line)
            if not _matches(config.pattern, rl.line):
                set_error(config.pattern_error or "Invalid input")
            else:
                set_error(None)
        return None

    use_keypress(on_keypress)

    def prefill(rl: LineEditor) -> None:
        if config.prefill == "editable" and default_value:
            rl.write(default_value)
            set_value(default_value)

    use_effect(prefill, ())

    message = theme.style.message(config.message, status)
    formatted_value = value
    if config.transformer is not None:
        formatted_value = config.transformer(value, is_final=status == "done")
    elif status == "done":
        formatted_value = theme.style.answer(value)

    default_str = None
    if default_value and status != "done" and not value:
        default_str = theme.style.default_answer(default_value)

    return (
        " ".join(part for part in (prefix, message, default_str, formatted_value) if part is not None),
        theme.style.error(error) if error else "",
    )


input_prompt = create_prompt(input_view, InputConfig)
