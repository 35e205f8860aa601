"""Password prompt - the input prompt with the typed value masked."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pi.prompts import ansi
from pi.prompts.components.input import InputConfig, Validator, input_view
from pi.prompts.errors import ValidationError
from pi.prompts.prompt import create_prompt


@dataclass
class PasswordConfig:
    message: Any
    # False hides the input entirely, True masks with "*", a string masks with itself
    mask: bool | str = False
    validate: Validator | None = None
    theme: Mapping[str, Any] | None = None
    transformer: Callable[..., str] | None = None


def password_view(config: PasswordConfig, done: Callable[[str], None]) -> tuple[str, str]:
    if config.transformer is not None:
        raise ValidationError(
            "Password prompts do not support a custom transformer function. "
            "Use the input prompt instead."
        )

    mask = "*" if config.mask is True else config.mask

    def transformer(value: str, is_final: bool = False) -> str:
        if mask:
            return str(mask) * len(value)
        if not is_final:
            return ansi.dim("[input is masked]")
        return ""

    # Never display a default, it would leak the secret
    input_config = InputConfig(
        message=config.message,
        validate=config.validate,
        theme=config.theme,
        transformer=transformer,
    )
    return input_view(input_config, done)


password_prompt = create_prompt(password_view, PasswordConfig)
