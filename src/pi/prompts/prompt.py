"""Prompt lifecycle controller.

``create_prompt(view, config_cls)`` turns a view function into a prompt
function. Calling the prompt starts a ``PromptSession``: the terminal is
taken over, the view is rendered, keypresses drive re-renders, and the
session settles exactly once with the value passed to ``done`` or with one
of the cancellation errors. Whatever the outcome, the same teardown runs:
effect cleanups, listener and signal handler removal, cursor restore and
terminal release.

Example::

    @dataclass
    class AskConfig:
        message: str

    def ask_view(config: AskConfig, done):
        use_keypress(lambda key, rl: done(True) if is_enter_key(key) else None)
        return f"{config.message} (press enter)"

    ask = create_prompt(ask_view, AskConfig)
    answer = await ask(message="Ready?")
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
import signal
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Callable, Generator, Generic, TypeVar, Union

from pi.prompts import ansi
from pi.prompts.errors import AbortPromptError, CancelPromptError, ExitPromptError
from pi.prompts.hook_engine import HookStore
from pi.prompts.line_editor import LineEditor
from pi.prompts.screen import ScreenManager
from pi.prompts.settings import PromptSettings, get_settings
from pi.prompts.terminal import ProcessTerminal, Terminal
from pi.prompts.theme import Theme

logger = logging.getLogger(__name__)

V = TypeVar("V")
C = TypeVar("C")

ViewResult = Union[str, "tuple[str, str | None]"]
View = Callable[[C, Callable[[V], None]], ViewResult]

_EXIT_SIGNALS = tuple(
    sig
    for sig in (
        getattr(signal, "SIGINT", None),
        getattr(signal, "SIGTERM", None),
        getattr(signal, "SIGHUP", None),
    )
    if sig is not None
)


# ---------------------------------------------------------------------------
# Context and session
# ---------------------------------------------------------------------------


@dataclass
class PromptContext:
    """Per-session options that are not part of a prompt's own config."""

    terminal: Terminal | None = None
    # Setting the event aborts the session with AbortPromptError
    abort_event: asyncio.Event | None = None
    # Erase the prompt instead of leaving the final frame on screen
    clear_prompt_on_done: bool | None = None
    settings: PromptSettings | None = None


class PromptSession(Generic[V]):
    """Handle on a running prompt; await it for the answer."""

    def __init__(self, result: asyncio.Future[V], cancel: Callable[[], None]) -> None:
        self._result = result
        self._cancel = cancel

    def __await__(self) -> Generator[Any, None, V]:
        return self._result.__await__()

    def cancel(self) -> None:
        """Reject the session with ``CancelPromptError`` (no-op once settled)."""
        self._cancel()

    @property
    def status(self) -> str:
        """``"pending"``, ``"fulfilled"`` or ``"rejected"``."""
        if not self._result.done():
            return "pending"
        if self._result.cancelled() or self._result.exception() is not None:
            return "rejected"
        return "fulfilled"


# ---------------------------------------------------------------------------
# create_prompt
# ---------------------------------------------------------------------------


def _build_config(config_cls: type[C] | None, config: C | None, kwargs: dict[str, Any]) -> Any:
    if config is None:
        return config_cls(**kwargs) if config_cls is not None else SimpleNamespace(**kwargs)
    if kwargs:
        if dataclasses.is_dataclass(config):
            return dataclasses.replace(config, **kwargs)
        for key, value in kwargs.items():
            setattr(config, key, value)
    return config


def _with_message(config: Any, message: Any) -> Any:
    if dataclasses.is_dataclass(config) and not isinstance(config, type):
        return dataclasses.replace(config, message=message)
    setattr(config, "message", message)
    return config


def create_prompt(
    view: View[C, V],
    config_cls: type[C] | None = None,
) -> Callable[..., PromptSession[V]]:
    """Build a prompt function from *view*.

    The returned callable accepts a ready config object, keyword arguments
    for *config_cls*, or both (keywords override fields of the object), plus
    an optional ``context``. It must be called with an event loop running.
    """

    def prompt(
        config: C | None = None,
        context: PromptContext | None = None,
        **kwargs: Any,
    ) -> PromptSession[V]:
        loop = asyncio.get_running_loop()
        context = context if context is not None else PromptContext()
        settings = context.settings if context.settings is not None else get_settings()
        clear_on_done = (
            context.clear_prompt_on_done
            if context.clear_prompt_on_done is not None
            else settings.clear_prompt_on_done
        )
        resolved_config = _build_config(config_cls, config, kwargs)

        outcome: asyncio.Future[V] = loop.create_future()

        def resolve(value: V) -> None:
            if not outcome.done():
                outcome.set_result(value)

        def reject(error: BaseException) -> None:
            if not outcome.done():
                logger.debug("Prompt rejected: %s", type(error).__name__)
                outcome.set_exception(error)

        def cancel() -> None:
            reject(CancelPromptError())

        abort_event = context.abort_event
        if abort_event is not None and abort_event.is_set():
            reject(AbortPromptError())
            return PromptSession(outcome, cancel)

        terminal = context.terminal if context.terminal is not None else ProcessTerminal()
        line_editor = LineEditor(
            columns=lambda: terminal.columns,
            on_interrupt=lambda: reject(
                ExitPromptError("User force closed the prompt with SIGINT")
            ),
        )
        screen = ScreenManager(terminal, line_editor)
        store = HookStore(line_editor, settings=settings)
        store.on_error = reject
        cleanups: list[Callable[[], None]] = []
        ready = False
        done_called = False

        # -- input ------------------------------------------------------------

        def on_input(data: str) -> None:
            # Keystrokes that arrive before the first render are dropped
            if not ready or outcome.done():
                return
            try:
                line_editor.feed(data)
            except Exception as exc:
                reject(exc)

        def on_resize() -> None:
            if ready:
                store.handle_change()

        terminal.start(on_input, on_resize)
        logger.debug("Prompt started with %s", type(resolved_config).__name__)

        remove_cursor_check = line_editor.add_listener(lambda _key: screen.check_cursor_pos())
        cleanups.append(remove_cursor_check)

        # -- cancellation surfaces --------------------------------------------

        if abort_event is not None:
            watcher = loop.create_task(abort_event.wait())

            def on_abort(task: asyncio.Task[Any]) -> None:
                if not task.cancelled():
                    reject(AbortPromptError())

            watcher.add_done_callback(on_abort)
            cleanups.append(watcher.cancel)

        def on_exit_signal(sig: signal.Signals) -> None:
            reject(ExitPromptError(f"User force closed the prompt with {sig.name}"))

        for sig in _EXIT_SIGNALS:
            try:
                loop.add_signal_handler(sig, on_exit_signal, sig)
            except (NotImplementedError, RuntimeError, ValueError):
                # Not supported on this loop/platform, or not the main thread
                continue
            logger.debug("Installed %s handler", sig.name)
            cleanups.append(lambda sig=sig: loop.remove_signal_handler(sig))

        # -- rendering --------------------------------------------------------

        def done(value: V) -> None:
            nonlocal done_called
            if done_called:
                return
            done_called = True
            # Resolve after the current render has been committed
            loop.call_soon(resolve, value)

        def render() -> None:
            if outcome.done():
                return
            try:
                next_view = view(resolved_config, done)
                store.verify_slot_count()
                if isinstance(next_view, str):
                    content, bottom_content = next_view, ""
                else:
                    content, bottom_content = next_view[0], next_view[1] or ""
                screen.render(content, bottom_content)
                store.run_effects()
            except Exception as exc:
                reject(exc)

        def start() -> None:
            nonlocal ready
            store.cycle(render)
            ready = True

        message = getattr(resolved_config, "message", None)
        if callable(message):
            message = message()
            if not inspect.isawaitable(message):
                resolved_config = _with_message(resolved_config, message)

        if inspect.isawaitable(message):
            pending_message = message

            def show_loading() -> None:
                if not outcome.done():
                    frame = Theme().spinner.frames[0]
                    screen.render(f"{frame} {ansi.dim('Loading...')}{ansi.CURSOR_HIDE}")

            async def setup() -> None:
                nonlocal resolved_config
                loading = loop.call_later(settings.loading_delay, show_loading)
                try:
                    resolved = await pending_message
                finally:
                    loading.cancel()
                resolved_config = _with_message(resolved_config, resolved)
                start()

            setup_task = loop.create_task(setup())

            def on_setup_done(task: asyncio.Task[None]) -> None:
                if not task.cancelled() and task.exception() is not None:
                    reject(task.exception())

            setup_task.add_done_callback(on_setup_done)
            cleanups.append(setup_task.cancel)
        else:
            start()

        # -- teardown ---------------------------------------------------------

        def teardown() -> None:
            try:
                store.clear_all()
            finally:
                for cleanup in reversed(cleanups):
                    cleanup()
                screen.done(clear_content=clear_on_done)
                terminal.stop()
                if outcome.done() and not outcome.cancelled() and outcome.exception() is None:
                    logger.debug("Prompt finished: fulfilled")
                else:
                    logger.debug("Prompt finished: rejected")

        async def settle() -> V:
            try:
                return await outcome
            finally:
                teardown()

        return PromptSession(loop.create_task(settle()), cancel)

    return prompt
