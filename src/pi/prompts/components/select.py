"""Select prompt - pick one entry from a scrollable list of choices."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence, Union, cast

from pi.prompts import ansi
from pi.prompts.errors import ValidationError
from pi.prompts.hooks import use_effect, use_keypress, use_memo, use_ref, use_settings, use_state
from pi.prompts.keys import (
    KeypressEvent,
    Keybinding,
    is_backspace_key,
    is_down_key,
    is_enter_key,
    is_number_key,
    is_up_key,
)
from pi.prompts.line_editor import LineEditor
from pi.prompts.pagination import Layout, find_selectable, move_active, selectable_at, use_pagination
from pi.prompts.prefix import use_prefix
from pi.prompts.prompt import create_prompt
from pi.prompts.separator import Separator
from pi.prompts.theme import Theme, ThemeStyle, make_theme

# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------


@dataclass
class Choice:
    """A selectable entry. ``disabled`` may be a string shown as the reason."""

    value: Any
    name: str | None = None
    description: str | None = None
    short: str | None = None
    disabled: bool | str = False

    def __post_init__(self) -> None:
        if self.name is None:
            self.name = str(self.value)
        if self.short is None:
            self.short = self.name


ChoiceLike = Union[str, Choice, Separator, Mapping[str, Any]]
Item = Union[Choice, Separator]


def normalize_choices(choices: Sequence[ChoiceLike]) -> list[Item]:
    items: list[Item] = []
    for choice in choices:
        if isinstance(choice, (Separator, Choice)):
            items.append(choice)
        elif isinstance(choice, str):
            items.append(Choice(value=choice))
        else:
            items.append(Choice(**choice))
    return items


def is_selectable(item: Item) -> bool:
    return isinstance(item, Choice) and not item.disabled


def selectable_bounds(items: Sequence[Item], prompt_name: str) -> tuple[int, int]:
    if not any(is_selectable(item) for item in items):
        raise ValidationError(
            f"[{prompt_name} prompt] No selectable choices. All choices are disabled."
        )
    return (
        find_selectable(items, is_selectable),
        find_selectable(items, is_selectable, reverse=True),
    )


# ---------------------------------------------------------------------------
# Theme and config
# ---------------------------------------------------------------------------


@dataclass
class SelectIcon:
    cursor: str = ansi.POINTER


@dataclass
class SelectStyle(ThemeStyle):
    disabled: Callable[[str], str] = lambda text: ansi.dim(f"- {text}")
    description: Callable[[str], str] = ansi.cyan


@dataclass
class SelectTheme(Theme):
    icon: SelectIcon = field(default_factory=SelectIcon)
    style: SelectStyle = field(default_factory=SelectStyle)
    # "hidden" or "number"
    index_mode: str = "hidden"
    keybindings: tuple[Keybinding, ...] = ()


@dataclass
class SelectConfig:
    message: Any
    choices: Sequence[ChoiceLike]
    page_size: int = 7
    loop: bool = True
    default: Any = None
    theme: Mapping[str, Any] | None = None


# ---------------------------------------------------------------------------
# View
# ---------------------------------------------------------------------------


def select_view(config: SelectConfig, done: Callable[[Any], None]) -> str:
    theme = make_theme(SelectTheme(), config.theme)
    keybindings = theme.keybindings
    status, set_status = use_state("idle")
    prefix = use_prefix(status, theme)
    search_timeout: Any = use_ref(None)
    search_delay = use_settings().search_timeout

    # j/k would be swallowed by type-ahead search, so vim bindings disable it
    search_enabled = "vim" not in keybindings

    items = use_memo(lambda: normalize_choices(config.choices), (config.choices,))
    bounds = use_memo(lambda: selectable_bounds(items, "select"), (items,))

    def find_default() -> int:
        if config.default is None:
            return -1
        for index, item in enumerate(items):
            if isinstance(item, Choice) and is_selectable(item) and item.value == config.default:
                return index
        return -1

    default_index = use_memo(find_default, (config.default, items))
    active, set_active = use_state(bounds[0] if default_index == -1 else default_index)
    selected = cast(Choice, items[active])

    def cancel_search_timer() -> None:
        if search_timeout.current is not None:
            search_timeout.current.cancel()
            search_timeout.current = None

    def clear_line_later(rl: LineEditor) -> None:
        loop = asyncio.get_running_loop()
        search_timeout.current = loop.call_later(search_delay, rl.clear_line)

    def on_keypress(key: KeypressEvent, rl: LineEditor) -> None:
        cancel_search_timer()

        if is_enter_key(key):
            set_status("done")
            done(selected.value)
        elif is_up_key(key, keybindings) or is_down_key(key, keybindings):
            rl.clear_line()
            offset = -1 if is_up_key(key, keybindings) else 1
            set_active(move_active(items, active, offset, is_selectable, loop=config.loop))
        elif is_number_key(key) and rl.line.isdigit():
            position = selectable_at(items, int(rl.line), is_selectable)
            if position != -1:
                set_active(position)
            clear_line_later(rl)
        elif is_backspace_key(key):
            rl.clear_line()
        elif search_enabled and rl.line:
            search_term = rl.line.lower()
            for index, item in enumerate(items):
                if is_selectable(item) and str(item.name).lower().startswith(search_term):
                    set_active(index)
                    break
            clear_line_later(rl)

    use_keypress(on_keypress)
    use_effect(lambda _rl: cancel_search_timer, ())

    numbers: dict[int, int] = {}
    for index, item in enumerate(items):
        if is_selectable(item):
            numbers[index] = len(numbers) + 1

    def render_item(layout: Layout[Item]) -> str:
        item = layout.item
        if isinstance(item, Separator):
            return f" {item.separator}"

        index_label = ""
        if theme.index_mode == "number" and layout.index in numbers:
            index_label = f"{numbers[layout.index]}. "

        if item.disabled:
            disabled_label = item.disabled if isinstance(item.disabled, str) else "(disabled)"
            return theme.style.disabled(f"{index_label}{item.name} {disabled_label}")

        if layout.is_active:
            return theme.style.highlight(f"{theme.icon.cursor} {index_label}{item.name}")
        return f"  {index_label}{item.name}"

    page = use_pagination(
        items,
        active,
        render_item,
        page_size=config.page_size,
        loop=config.loop,
    )

    message = theme.style.message(config.message, status)

    if status == "done":
        return " ".join(part for part in (prefix, message, theme.style.answer(selected.short)) if part)

    help_line = theme.style.keys_help_tip([("↑↓", "navigate"), ("⏎", "select")])
    description = theme.style.description(selected.description) if selected.description else ""

    lines = "\n".join(
        part
        for part in (" ".join(p for p in (prefix, message) if p), page, " ", description, help_line)
        if part
    ).rstrip()

    return f"{lines}{ansi.CURSOR_HIDE}"


select_prompt = create_prompt(select_view, SelectConfig)
