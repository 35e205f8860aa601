"""Confirm prompt - a yes/no question with a default answer."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pi.prompts.hooks import use_keypress, use_state
from pi.prompts.keys import KeypressEvent, is_enter_key
from pi.prompts.line_editor import LineEditor
from pi.prompts.prefix import use_prefix
from pi.prompts.prompt import create_prompt
from pi.prompts.theme import Theme, make_theme

_YES_RE = re.compile(r"^y(es)?", re.IGNORECASE)


def _default_transformer(answer: bool) -> str:
    return "yes" if answer else "no"


@dataclass
class ConfirmConfig:
    message: Any
    default: bool = True
    transformer: Callable[[bool], str] = _default_transformer
    theme: Mapping[str, Any] | None = None


def confirm_view(config: ConfirmConfig, done: Callable[[bool], None]) -> str:
    theme = make_theme(Theme(), config.theme)
    status, set_status = use_state("idle")
    value, set_value = use_state("")
    prefix = use_prefix(status, theme)

    def on_keypress(key: KeypressEvent, rl: LineEditor) -> None:
        if is_enter_key(key):
            answer = config.default is not False
            if value:
                answer = _YES_RE.match(value) is not None
            set_value(config.transformer(answer))
            set_status("done")
            done(answer)
        else:
            set_value(rl.line)

    use_keypress(on_keypress)

    message = theme.style.message(config.message, status)
    if status == "done":
        formatted_value = theme.style.answer(value)
        default_value = ""
    else:
        formatted_value = value
        default_value = theme.style.default_answer("y/N" if config.default is False else "Y/n")

    return " ".join(part for part in (prefix, message, default_value, formatted_value) if part)


confirm_prompt = create_prompt(confirm_view, ConfirmConfig)
