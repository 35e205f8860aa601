"""Windowed rendering of long, variable-height item lists.

``lines`` lays out a page of at most ``page_size`` rows with the active
item at a requested row. Where that row is comes from one of two
positioning strategies:

* ``finite`` clamps the window to the list bounds and centres the active
  item once it is past the first half page;
* ``infinite`` treats the list as a ring and only lets the active row
  drift forward (never past the middle), so wrapping around does not make
  the window jump.

``move_active``, ``find_selectable`` and ``selectable_at`` implement the
cursor movement rules shared by list prompts: separators and disabled
entries are skipped and never consume a number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from pi.prompts.errors import ValidationError
from pi.prompts.hook_engine import get_store
from pi.prompts.hooks import use_ref
from pi.prompts.utils import break_lines

T = TypeVar("T")


@dataclass(frozen=True)
class Layout(Generic[T]):
    """An item about to be rendered as part of a page."""

    item: T
    index: int
    is_active: bool


@dataclass
class PaginationState:
    """Window position carried from one render to the next."""

    position: int = 0
    last_active: int = 0


RenderItem = Callable[[Layout[T]], str]
IsSelectable = Callable[[T], bool]


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def _rotate(count: int, items: Sequence[T]) -> list[T]:
    size = len(items)
    if size == 0:
        return []
    offset = count % size
    return list(items[offset:]) + list(items[:offset])


def lines(
    items: Sequence[T],
    width: int,
    render_item: RenderItem[T],
    active: int,
    position: int,
    page_size: int,
) -> list[str]:
    """Render a page of at most *page_size* rows.

    The active item is drawn starting at row *position* (moved up if its
    rows would overflow the page); the page is then filled downward with the
    items that follow and upward with the ones that precede it, wrapping
    around the list.
    """
    return _layout_page(items, width, render_item, active, position, page_size)[0]


def _layout_page(
    items: Sequence[T],
    width: int,
    render_item: RenderItem[T],
    active: int,
    position: int,
    page_size: int,
) -> tuple[list[str], int]:
    if not items or page_size <= 0:
        return [], 0

    requested = position
    layouts = [Layout(item, index, index == active) for index, item in enumerate(items)]
    layouts_in_page = _rotate(active - requested, layouts)[:page_size]

    def render_at(index: int) -> list[str]:
        if index < 0 or index >= len(layouts_in_page):
            return []
        return break_lines(render_item(layouts_in_page[index]), width).split("\n")

    page: list[str | None] = [None] * page_size

    active_rows = render_at(requested)[:page_size]
    if requested + len(active_rows) <= page_size:
        position = requested
    else:
        position = page_size - len(active_rows)
    page[position : position + len(active_rows)] = active_rows

    # Fill the page under the active item
    row = position + len(active_rows)
    layout_index = requested + 1
    while row < page_size and layout_index < len(layouts_in_page):
        for line in render_at(layout_index):
            page[row] = line
            row += 1
            if row >= page_size:
                break
        layout_index += 1

    # Fill the page over the active item
    row = position - 1
    layout_index = requested - 1
    while row >= 0 and layout_index >= 0:
        for line in reversed(render_at(layout_index)):
            page[row] = line
            row -= 1
            if row < 0:
                break
        layout_index -= 1

    return [line for line in page if line is not None], position


# ---------------------------------------------------------------------------
# Positioning strategies
# ---------------------------------------------------------------------------


def finite(active: int, page_size: int, total: int) -> int:
    """Row of the active item for a bounded (non-looping) list."""
    middle = page_size // 2
    if total <= page_size or active < middle:
        return active
    if active >= total - middle:
        return active + page_size - total
    return middle


def infinite(
    active: int,
    last_active: int,
    total: int,
    page_size: int,
    pointer: int,
) -> int:
    """Row of the active item for a looping list.

    The row only advances when the active index moved forward by less than
    a page, and never beyond the middle of the page.
    """
    if total <= page_size:
        return active
    if last_active < active and active - last_active < page_size:
        return min(page_size // 2, pointer + active - last_active)
    return pointer


def render_page(
    items: Sequence[T],
    active: int,
    render_item: RenderItem[T],
    page_size: int,
    width: int,
    state: PaginationState,
    loop: bool = True,
) -> tuple[str, int]:
    """Advance *state* for *active* and render the page.

    Returns the page text and the row at which the active item is drawn.
    """
    if loop:
        position = infinite(
            active=active,
            last_active=state.last_active,
            total=len(items),
            page_size=page_size,
            pointer=state.position,
        )
    else:
        position = finite(active=active, page_size=page_size, total=len(items))

    state.position = position
    state.last_active = active

    rows, position = _layout_page(
        items=items,
        width=width,
        render_item=render_item,
        active=active,
        position=position,
        page_size=page_size,
    )
    return "\n".join(rows), position


def use_pagination(
    items: Sequence[T],
    active: int,
    render_item: RenderItem[T],
    page_size: int,
    loop: bool = True,
) -> str:
    """Hook form of ``render_page``; the window state lives in a ref."""
    state = use_ref(PaginationState())
    width = get_store().line_editor.columns
    page, _ = render_page(
        items,
        active,
        render_item,
        page_size=page_size,
        width=width,
        state=state.current,
        loop=loop,
    )
    return page


# ---------------------------------------------------------------------------
# Cursor movement over selectable entries
# ---------------------------------------------------------------------------


def find_selectable(
    items: Sequence[T],
    is_selectable: IsSelectable[T],
    reverse: bool = False,
) -> int:
    """Index of the first (or last) selectable entry.

    Raises ``ValidationError`` when no entry is selectable.
    """
    indices = range(len(items) - 1, -1, -1) if reverse else range(len(items))
    for index in indices:
        if is_selectable(items[index]):
            return index
    raise ValidationError("No selectable choices. All choices are disabled.")


def move_active(
    items: Sequence[T],
    active: int,
    offset: int,
    is_selectable: IsSelectable[T],
    loop: bool = True,
) -> int:
    """Step from *active* by *offset* (``-1`` or ``1``) to the next selectable entry.

    Without *loop* the cursor stays put at the first and last selectable
    entries. Raises ``ValidationError`` when no entry is selectable.
    """
    first = find_selectable(items, is_selectable)
    last = find_selectable(items, is_selectable, reverse=True)

    if not loop and ((offset < 0 and active <= first) or (offset > 0 and active >= last)):
        return active

    step = 1 if offset > 0 else -1
    total = len(items)
    index = active
    for _ in range(total):
        index = (index + step) % total
        if is_selectable(items[index]):
            return index
    return active


def selectable_at(
    items: Sequence[T],
    number: int,
    is_selectable: IsSelectable[T],
) -> int:
    """Index of the *number*-th (1-based) selectable entry, or ``-1``."""
    if number < 1:
        return -1
    seen = 0
    for index, item in enumerate(items):
        if is_selectable(item):
            seen += 1
            if seen == number:
                return index
    return -1
