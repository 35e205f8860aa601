"""Ready-made prompts built on the hook engine."""

from pi.prompts.components.checkbox import (
    CheckboxChoice,
    CheckboxConfig,
    CheckboxTheme,
    checkbox_prompt,
    checkbox_view,
)
from pi.prompts.components.confirm import ConfirmConfig, confirm_prompt, confirm_view
from pi.prompts.components.input import InputConfig, InputTheme, input_prompt, input_view
from pi.prompts.components.password import PasswordConfig, password_prompt, password_view
from pi.prompts.components.select import (
    Choice,
    SelectConfig,
    SelectTheme,
    select_prompt,
    select_view,
)

__all__ = [
    "Choice",
    "SelectConfig",
    "SelectTheme",
    "select_prompt",
    "select_view",
    "CheckboxChoice",
    "CheckboxConfig",
    "CheckboxTheme",
    "checkbox_prompt",
    "checkbox_view",
    "InputConfig",
    "InputTheme",
    "input_prompt",
    "input_view",
    "PasswordConfig",
    "password_prompt",
    "password_view",
    "ConfirmConfig",
    "confirm_prompt",
    "confirm_view",
]
