"""Library-wide settings with environment-derived defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw == "1"


@dataclass
class PromptSettings:
    """Timing and behaviour knobs shared by every prompt session.

    Durations are in seconds.
    """

    # Debounce before the provisional loading view for async messages
    loading_delay: float = field(
        default_factory=lambda: _env_float("PI_PROMPTS_LOADING_DELAY", 0.5)
    )
    # Debounce before use_prefix swaps the status icon for the spinner
    spinner_delay: float = field(
        default_factory=lambda: _env_float("PI_PROMPTS_SPINNER_DELAY", 0.3)
    )
    # How long typed search input lingers in the line editor
    search_timeout: float = field(
        default_factory=lambda: _env_float("PI_PROMPTS_SEARCH_TIMEOUT", 0.7)
    )
    strict_hooks: bool = field(
        default_factory=lambda: _env_flag("PI_PROMPTS_STRICT_HOOKS", __debug__)
    )
    clear_prompt_on_done: bool = field(
        default_factory=lambda: _env_flag("PI_PROMPTS_CLEAR_ON_DONE", False)
    )
    write_log: str = field(
        default_factory=lambda: os.environ.get("PI_PROMPTS_WRITE_LOG", "")
    )


_global_settings: PromptSettings | None = None


def get_settings() -> PromptSettings:
    global _global_settings
    if _global_settings is None:
        _global_settings = PromptSettings()
    return _global_settings


def set_settings(settings: PromptSettings | None) -> None:
    """Replace the global settings; ``None`` re-reads the environment lazily."""
    global _global_settings
    _global_settings = settings
