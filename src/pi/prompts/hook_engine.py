"""Hook store, render cycle and effect scheduler.

A ``HookStore`` is created per prompt session. Hooks address their slot by
call order: every render resets ``index`` to zero and each hook call claims
the next slot through ``with_pointer``. The store is only reachable through
``get_store()`` while one of its render cycles is executing; callbacks that
outlive a render (state setters, keypress handlers, timers) capture the
store directly instead.

State changes are coalesced in two ways:

* inside ``with_updates`` (keypress handlers, the effect flush) any number
  of changes produce a single synchronous re-render when the batch ends;
* outside a batch the store is marked dirty and one render is requested on
  the next event-loop tick, the way ``TUI.request_render`` works in
  ``pi-tui``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, TypeVar

from pi.prompts.errors import HookError, ValidationError
from pi.prompts.settings import PromptSettings, get_settings

if TYPE_CHECKING:
    from pi.prompts.line_editor import LineEditor

logger = logging.getLogger(__name__)

T = TypeVar("T")

Cleanup = Callable[[], None]
EffectCallback = Callable[["LineEditor"], "Cleanup | None"]

_current_store: ContextVar[HookStore | None] = ContextVar(
    "pi_prompts_hook_store", default=None
)


# ---------------------------------------------------------------------------
# Pointer
# ---------------------------------------------------------------------------


@dataclass
class Pointer(Generic[T]):
    """Handle on one positional hook slot."""

    store: HookStore
    index: int

    @property
    def initialized(self) -> bool:
        return self.index < len(self.store.hooks)

    def get(self) -> T:
        return self.store.hooks[self.index]

    def set(self, value: T) -> None:
        hooks = self.store.hooks
        if self.index < len(hooks):
            hooks[self.index] = value
        else:
            hooks.append(value)


# ---------------------------------------------------------------------------
# HookStore
# ---------------------------------------------------------------------------


class HookStore:
    """Positional state slots, effect queue and cleanups for one session."""

    def __init__(
        self,
        line_editor: LineEditor,
        *,
        settings: PromptSettings | None = None,
        strict: bool | None = None,
    ) -> None:
        self.line_editor = line_editor
        self.settings = settings if settings is not None else get_settings()
        self.hooks: list[Any] = []
        self.hooks_cleanup: dict[int, Cleanup] = {}
        self.hooks_effect: list[Callable[[], None]] = []
        self.index: int = 0
        self.closed: bool = False
        self.strict = self.settings.strict_hooks if strict is None else strict

        # Called with any exception raised from a deferred render or a
        # background keypress task; the lifecycle controller rejects with it.
        self.on_error: Callable[[BaseException], None] | None = None

        self._render: Callable[[], None] | None = None
        self._batch_depth: int = 0
        self._dirty: bool = False
        self._render_requested: bool = False
        self._slot_count: int | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    # -- render cycle -----------------------------------------------------

    def cycle(self, render: Callable[[], None]) -> None:
        """Install *render* as the session's render function and run it once."""
        self._render = render
        self.rerender()

    def rerender(self) -> None:
        """Run one render cycle with this store active."""
        if self.closed or self._render is None:
            return
        self._dirty = False
        token = _current_store.set(self)
        try:
            self.index = 0
            self._render()
        finally:
            _current_store.reset(token)

    def verify_slot_count(self) -> None:
        """Check that this render used as many hooks as the previous one."""
        if self._slot_count is not None and self.index != self._slot_count:
            logger.debug(
                "Hook slot count changed between renders: %d -> %d",
                self._slot_count,
                self.index,
            )
            if self.strict:
                raise HookError(
                    f"Rendered {self.index} hooks but the previous render used "
                    f"{self._slot_count}; hooks must be called in the same order "
                    "on every render"
                )
        self._slot_count = self.index

    def handle_change(self) -> None:
        """Record a state change and make sure a render follows it."""
        if self.closed:
            return
        self._dirty = True
        if self._batch_depth > 0:
            return
        self.request_render()

    def request_render(self) -> None:
        """Schedule a render on the next event-loop tick (coalesced)."""
        if self._render_requested:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop -- render synchronously
            self._guarded_rerender()
            return
        self._render_requested = True
        loop.call_soon(self._do_render_tick)

    def _do_render_tick(self) -> None:
        self._render_requested = False
        if self._dirty:
            self._guarded_rerender()

    def _guarded_rerender(self) -> None:
        try:
            self.rerender()
        except Exception as exc:
            self._report(exc)

    # -- batching ---------------------------------------------------------

    def with_updates(self, fn: Callable[..., T]) -> Callable[..., T]:
        """Wrap *fn* so the state changes it makes cause one re-render."""

        def wrapped(*args: Any, **kwargs: Any) -> T:
            self._batch_depth += 1
            try:
                result = fn(*args, **kwargs)
            finally:
                self._batch_depth -= 1
            if self._batch_depth == 0 and self._dirty:
                self.rerender()
            return result

        return wrapped

    # -- effect scheduler -------------------------------------------------

    def queue_effect(self, index: int, cb: EffectCallback) -> None:
        """Queue *cb* to run after the current render is on screen."""

        def effect() -> None:
            previous = self.hooks_cleanup.pop(index, None)
            if previous is not None:
                previous()

            result = cb(self.line_editor)
            if inspect.isawaitable(result):
                close = getattr(result, "close", None)
                if close is not None:
                    close()
                raise ValidationError(
                    "use_effect return value must be a cleanup function or nothing."
                )
            if result is not None:
                if not callable(result):
                    raise ValidationError(
                        "use_effect return value must be a cleanup function or nothing."
                    )
                self.hooks_cleanup[index] = result

        self.hooks_effect.append(effect)

    def run_effects(self) -> None:
        """Flush queued effects inside a single update batch."""

        def flush() -> None:
            effects, self.hooks_effect = self.hooks_effect, []
            for effect in effects:
                effect()

        self.with_updates(flush)()

    def clear_all(self) -> None:
        """Run every outstanding cleanup once, in slot order, and stop rendering.

        Safe to call more than once. All cleanups run even if one raises; the
        first error is re-raised afterwards.
        """
        self.closed = True
        self.hooks_effect.clear()

        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

        cleanups = [self.hooks_cleanup[i] for i in sorted(self.hooks_cleanup)]
        self.hooks_cleanup.clear()

        first_error: BaseException | None = None
        for cleanup in cleanups:
            try:
                cleanup()
            except Exception as exc:
                logger.debug("Hook cleanup raised", exc_info=True)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    # -- background work --------------------------------------------------

    def track(self, awaitable: Awaitable[Any]) -> asyncio.Task[Any]:
        """Run *awaitable* as a task owned by this session."""
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._report(exc)

    def _report(self, exc: BaseException) -> None:
        if self.on_error is not None:
            self.on_error(exc)
        else:
            raise exc


# ---------------------------------------------------------------------------
# Render-context access
# ---------------------------------------------------------------------------


def get_store() -> HookStore:
    """Return the store whose render is executing, or raise ``HookError``."""
    store = _current_store.get()
    if store is None:
        raise HookError("Hook functions can only be called from within a prompt")
    return store


def with_pointer(cb: Callable[[Pointer[Any]], T]) -> T:
    """Invoke *cb* with a pointer on the next hook slot, then advance."""
    store = get_store()
    pointer: Pointer[Any] = Pointer(store, store.index)
    try:
        return cb(pointer)
    finally:
        store.index += 1


def handle_change() -> None:
    get_store().handle_change()


def line_editor() -> LineEditor:
    return get_store().line_editor
