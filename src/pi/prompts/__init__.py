"""pi-prompts: Interactive terminal prompts built on positional hooks."""

# Ready-made prompts (re-exported from components package)
from pi.prompts.components import (
    CheckboxChoice,
    CheckboxConfig,
    CheckboxTheme,
    Choice,
    ConfirmConfig,
    InputConfig,
    InputTheme,
    PasswordConfig,
    SelectConfig,
    SelectTheme,
    checkbox_prompt,
    confirm_prompt,
    input_prompt,
    password_prompt,
    select_prompt,
)

# Errors
from pi.prompts.errors import (
    AbortPromptError,
    CancelPromptError,
    ExitPromptError,
    HookError,
    PromptError,
    ValidationError,
)

# Hook engine
from pi.prompts.hook_engine import HookStore, get_store
from pi.prompts.hooks import (
    Ref,
    use_effect,
    use_keypress,
    use_line_editor,
    use_memo,
    use_ref,
    use_settings,
    use_state,
)

# Keyboard input handling
from pi.prompts.keys import (
    KeypressEvent,
    is_backspace_key,
    is_down_key,
    is_enter_key,
    is_number_key,
    is_space_key,
    is_tab_key,
    is_up_key,
    parse_keypress,
)
from pi.prompts.line_editor import LineEditor

# Pagination
from pi.prompts.pagination import Layout, render_page, use_pagination
from pi.prompts.prefix import use_prefix

# Lifecycle
from pi.prompts.prompt import PromptContext, PromptSession, create_prompt
from pi.prompts.screen import ScreenManager
from pi.prompts.separator import Separator

# Settings
from pi.prompts.settings import PromptSettings, get_settings, set_settings

# Terminal interface and implementations
from pi.prompts.terminal import ProcessTerminal, Terminal

# Themes
from pi.prompts.theme import Spinner, Theme, ThemeStyle, make_theme

# Utilities
from pi.prompts.utils import break_lines, strip_ansi, visible_width

__all__ = [
    # Components
    "CheckboxChoice",
    "CheckboxConfig",
    "CheckboxTheme",
    "Choice",
    "ConfirmConfig",
    "InputConfig",
    "InputTheme",
    "PasswordConfig",
    "SelectConfig",
    "SelectTheme",
    "checkbox_prompt",
    "confirm_prompt",
    "input_prompt",
    "password_prompt",
    "select_prompt",
    # Errors
    "AbortPromptError",
    "CancelPromptError",
    "ExitPromptError",
    "HookError",
    "PromptError",
    "ValidationError",
    # Hooks
    "HookStore",
    "Ref",
    "get_store",
    "use_effect",
    "use_keypress",
    "use_line_editor",
    "use_memo",
    "use_prefix",
    "use_ref",
    "use_settings",
    "use_state",
    # Keys
    "KeypressEvent",
    "is_backspace_key",
    "is_down_key",
    "is_enter_key",
    "is_number_key",
    "is_space_key",
    "is_tab_key",
    "is_up_key",
    "parse_keypress",
    # Line editor
    "LineEditor",
    # Pagination
    "Layout",
    "render_page",
    "use_pagination",
    # Lifecycle
    "PromptContext",
    "PromptSession",
    "create_prompt",
    # Screen
    "ScreenManager",
    "Separator",
    # Settings
    "PromptSettings",
    "get_settings",
    "set_settings",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Themes
    "Spinner",
    "Theme",
    "ThemeStyle",
    "make_theme",
    # Utilities
    "break_lines",
    "strip_ansi",
    "visible_width",
]
