"""Checkbox prompt - toggle any number of entries and submit the selection."""

from __future__ import annotations

import dataclasses
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Sequence, Union

from pi.prompts import ansi
from pi.prompts.components.select import Choice, selectable_bounds
from pi.prompts.hooks import use_keypress, use_memo, use_state
from pi.prompts.keys import (
    KeypressEvent,
    Keybinding,
    is_down_key,
    is_enter_key,
    is_number_key,
    is_space_key,
    is_up_key,
)
from pi.prompts.line_editor import LineEditor
from pi.prompts.pagination import Layout, move_active, selectable_at, use_pagination
from pi.prompts.prefix import use_prefix
from pi.prompts.prompt import create_prompt
from pi.prompts.separator import Separator
from pi.prompts.theme import Theme, ThemeStyle, make_theme


@dataclass
class CheckboxChoice(Choice):
    checked: bool = False
    # Shown instead of ``name`` while checked
    checked_name: str | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.checked_name is None:
            self.checked_name = self.name


ChoiceLike = Union[str, Choice, Separator, Mapping[str, Any]]
Item = Union[CheckboxChoice, Separator]
Validator = Callable[[list[CheckboxChoice]], Union[bool, str, Awaitable[Union[bool, str]]]]


def normalize_choices(choices: Sequence[ChoiceLike]) -> list[Item]:
    items: list[Item] = []
    for choice in choices:
        if isinstance(choice, (Separator, CheckboxChoice)):
            items.append(choice)
        elif isinstance(choice, Choice):
            items.append(CheckboxChoice(**dataclasses.asdict(choice)))
        elif isinstance(choice, str):
            items.append(CheckboxChoice(value=choice))
        else:
            items.append(CheckboxChoice(**choice))
    return items


def is_selectable(item: Item) -> bool:
    return isinstance(item, CheckboxChoice) and not item.disabled


def is_checked(item: Item) -> bool:
    return is_selectable(item) and item.checked


def toggle(item: Item) -> Item:
    if isinstance(item, CheckboxChoice) and is_selectable(item):
        return dataclasses.replace(item, checked=not item.checked)
    return item


def check(item: Item, checked: bool) -> Item:
    if isinstance(item, CheckboxChoice) and is_selectable(item):
        return dataclasses.replace(item, checked=checked)
    return item


def _render_selected_choices(selected: list[CheckboxChoice], _all: list[Item]) -> str:
    return ", ".join(str(choice.short) for choice in selected)


# ---------------------------------------------------------------------------
# Theme and config
# ---------------------------------------------------------------------------


@dataclass
class CheckboxIcon:
    checked: str = ansi.green(ansi.CIRCLE_FILLED)
    unchecked: str = ansi.CIRCLE
    cursor: str = ansi.POINTER


@dataclass
class CheckboxStyle(ThemeStyle):
    disabled_choice: Callable[[str], str] = lambda text: ansi.dim(f"- {text}")
    render_selected_choices: Callable[[list[CheckboxChoice], list[Item]], str] = (
        _render_selected_choices
    )
    description: Callable[[str], str] = ansi.cyan


@dataclass
class CheckboxTheme(Theme):
    icon: CheckboxIcon = field(default_factory=CheckboxIcon)
    style: CheckboxStyle = field(default_factory=CheckboxStyle)
    keybindings: tuple[Keybinding, ...] = ()


@dataclass
class CheckboxConfig:
    message: Any
    choices: Sequence[ChoiceLike]
    page_size: int = 7
    loop: bool = True
    required: bool = False
    validate: Validator | None = None
    theme: Mapping[str, Any] | None = None
    # Set a shortcut to None to disable it
    shortcuts: Mapping[str, str | None] = field(
        default_factory=lambda: {"all": "a", "invert": "i"}
    )


# ---------------------------------------------------------------------------
# View
# ---------------------------------------------------------------------------


def checkbox_view(config: CheckboxConfig, done: Callable[[list[Any]], None]) -> str:
    shortcuts = {"all": "a", "invert": "i", **config.shortcuts}
    theme = make_theme(CheckboxTheme(), config.theme)
    keybindings = theme.keybindings
    status, set_status = use_state("idle")
    prefix = use_prefix(status, theme)
    items, set_items = use_state(lambda: normalize_choices(config.choices))
    bounds = use_memo(lambda: selectable_bounds(items, "checkbox"), (items,))
    active, set_active = use_state(bounds[0])
    error, set_error = use_state(None)

    async def submit() -> None:
        selection = [item for item in items if isinstance(item, CheckboxChoice) and is_checked(item)]
        is_valid: bool | str = True
        if config.validate is not None:
            is_valid = config.validate(list(selection))
            if inspect.isawaitable(is_valid):
                is_valid = await is_valid

        if config.required and not selection:
            set_error("At least one choice must be selected")
        elif is_valid is True:
            set_status("done")
            done([choice.value for choice in selection])
        else:
            set_error(is_valid or "You must select a valid value")

    def on_keypress(key: KeypressEvent, rl: LineEditor):
        if is_enter_key(key):
            return submit()

        if is_up_key(key, keybindings) or is_down_key(key, keybindings):
            offset = -1 if is_up_key(key, keybindings) else 1
            set_active(move_active(items, active, offset, is_selectable, loop=config.loop))
        elif is_space_key(key):
            set_error(None)
            set_items([toggle(item) if i == active else item for i, item in enumerate(items)])
        elif shortcuts["all"] and key.name == shortcuts["all"]:
            select_all = any(
                isinstance(item, CheckboxChoice) and is_selectable(item) and not item.checked
                for item in items
            )
            set_items([check(item, select_all) for item in items])
        elif shortcuts["invert"] and key.name == shortcuts["invert"]:
            set_items([toggle(item) for item in items])
        elif is_number_key(key):
            position = selectable_at(items, int(key.name), is_selectable)
            if position != -1:
                set_active(position)
                set_items([toggle(item) if i == position else item for i, item in enumerate(items)])
        return None

    use_keypress(on_keypress)

    description: str | None = None

    def render_item(layout: Layout[Item]) -> str:
        nonlocal description
        item = layout.item
        if isinstance(item, Separator):
            return f" {item.separator}"

        if item.disabled:
            disabled_label = item.disabled if isinstance(item.disabled, str) else "(disabled)"
            return theme.style.disabled_choice(f"{item.name} {disabled_label}")

        if layout.is_active:
            description = item.description

        checkbox = theme.icon.checked if item.checked else theme.icon.unchecked
        name = item.checked_name if item.checked else item.name
        cursor = theme.icon.cursor if layout.is_active else " "
        text = f"{cursor}{checkbox} {name}"
        return theme.style.highlight(text) if layout.is_active else text

    page = use_pagination(
        items,
        active,
        render_item,
        page_size=config.page_size,
        loop=config.loop,
    )

    message = theme.style.message(config.message, status)

    if status == "done":
        selection = [item for item in items if isinstance(item, CheckboxChoice) and is_checked(item)]
        answer = theme.style.answer(theme.style.render_selected_choices(selection, list(items)))
        return " ".join(part for part in (prefix, message, answer) if part)

    keys = [("↑↓", "navigate"), ("space", "select")]
    if shortcuts["all"]:
        keys.append((shortcuts["all"], "all"))
    if shortcuts["invert"]:
        keys.append((shortcuts["invert"], "invert"))
    keys.append(("⏎", "submit"))
    help_line = theme.style.keys_help_tip(keys)

    lines = "\n".join(
        part
        for part in (
            " ".join(p for p in (prefix, message) if p),
            page,
            " ",
            theme.style.description(description) if description else "",
            theme.style.error(error) if error else "",
            help_line,
        )
        if part
    ).rstrip()

    return f"{lines}{ansi.CURSOR_HIDE}"


checkbox_prompt = create_prompt(checkbox_view, CheckboxConfig)
