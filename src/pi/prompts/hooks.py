"""Hook primitives: state, ref, memo, effect and keypress subscription.

All hooks must be called from inside a view function, unconditionally and
in the same order on every render.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

from pi.prompts.hook_engine import EffectCallback, Pointer, get_store, with_pointer
from pi.prompts.keys import KeypressEvent
from pi.prompts.line_editor import LineEditor
from pi.prompts.settings import PromptSettings

T = TypeVar("T")

KeypressHandler = Callable[[KeypressEvent, LineEditor], "Awaitable[None] | None"]

_SCALARS = (int, float, complex, str, bytes, bool, type(None))


def is_same(a: object, b: object) -> bool:
    """Identity comparison, with value equality for immutable scalars."""
    if a is b:
        return True
    return type(a) is type(b) and isinstance(a, _SCALARS) and a == b


def deps_changed(previous: Sequence[object], current: Sequence[object]) -> bool:
    if len(previous) != len(current):
        return True
    return any(not is_same(old, new) for old, new in zip(previous, current))


# ---------------------------------------------------------------------------
# use_state / use_ref
# ---------------------------------------------------------------------------


def use_state(default: T | Callable[[], T]) -> tuple[T, Callable[[T], None]]:
    """Return ``(value, set_value)`` for this call-site's state slot.

    A callable *default* is treated as a factory and invoked only when the
    slot is first allocated. ``set_value`` ignores values identical to the
    current one.
    """

    def cb(pointer: Pointer[T]) -> tuple[T, Callable[[T], None]]:
        store = pointer.store

        def set_state(new_value: T) -> None:
            if is_same(pointer.get(), new_value):
                return
            pointer.set(new_value)
            store.handle_change()

        if pointer.initialized:
            return pointer.get(), set_state

        value = default() if callable(default) else default
        pointer.set(value)
        return value, set_state

    return with_pointer(cb)


@dataclass
class Ref(Generic[T]):
    current: T


def use_ref(initial: T) -> Ref[T]:
    """Return a mutable box whose identity is stable across renders."""
    return use_state(lambda: Ref(initial))[0]


# ---------------------------------------------------------------------------
# use_memo / use_effect
# ---------------------------------------------------------------------------


def use_memo(fn: Callable[[], T], deps: Sequence[object]) -> T:
    """Return ``fn()``, recomputed only when *deps* changed."""

    def cb(pointer: Pointer[tuple[T, tuple[object, ...]]]) -> T:
        if pointer.initialized:
            value, previous = pointer.get()
            if not deps_changed(previous, deps):
                return value

        value = fn()
        pointer.set((value, tuple(deps)))
        return value

    return with_pointer(cb)


def use_effect(cb: EffectCallback, deps: Sequence[object]) -> None:
    """Run *cb* after the render commits whenever *deps* changed.

    *cb* receives the line editor and may return a cleanup callable, which
    runs before the next invocation and when the session ends.
    """

    def slot(pointer: Pointer[tuple[object, ...]]) -> None:
        if not pointer.initialized or deps_changed(pointer.get(), deps):
            pointer.store.queue_effect(pointer.index, cb)
        pointer.set(tuple(deps))

    with_pointer(slot)


# ---------------------------------------------------------------------------
# use_keypress / use_line_editor
# ---------------------------------------------------------------------------


def use_keypress(handler: KeypressHandler) -> None:
    """Subscribe *handler* to keypresses for the lifetime of the session.

    One listener is attached per call-site; the latest *handler* is always
    the one invoked. State changes made by a synchronous handler are
    batched into a single re-render. Coroutine handlers run as session
    tasks.
    """
    store = get_store()
    signal = use_ref(handler)
    signal.current = handler

    def subscribe(rl: LineEditor) -> Callable[[], None]:
        ignore = False

        def on_keypress(event: KeypressEvent) -> None:
            if ignore:
                return
            result = signal.current(event, rl)
            if inspect.isawaitable(result):
                store.track(result)

        remove = rl.add_listener(store.with_updates(on_keypress))

        def cleanup() -> None:
            nonlocal ignore
            ignore = True
            remove()

        return cleanup

    use_effect(subscribe, ())


def use_line_editor() -> LineEditor:
    return get_store().line_editor


def use_settings() -> PromptSettings:
    return get_store().settings
