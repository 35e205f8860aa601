"""Status prefix with a debounced loading spinner."""

from __future__ import annotations

import asyncio

from pi.prompts.hooks import use_effect, use_settings, use_state
from pi.prompts.line_editor import LineEditor
from pi.prompts.theme import Status, Theme, resolve_prefix


def use_prefix(status: Status = "idle", theme: Theme | None = None) -> str:
    """Return the prefix for *status*.

    While ``status == "loading"`` the idle prefix is kept for
    ``spinner_delay`` seconds and then replaced by the spinner, which
    advances one frame every ``theme.spinner.interval`` seconds. Timers are
    cancelled when the status changes or the prompt ends.
    """
    theme = theme if theme is not None else Theme()
    spinner = theme.spinner
    spinner_delay = use_settings().spinner_delay
    show_loader, set_show_loader = use_state(False)
    tick, set_tick = use_state(0)

    def on_status(_rl: LineEditor):
        if status != "loading":
            set_show_loader(False)
            return None

        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None
        frame = -1

        def advance() -> None:
            nonlocal handle, frame
            frame += 1
            set_tick(frame % len(spinner.frames))
            handle = loop.call_later(spinner.interval, advance)

        def start() -> None:
            nonlocal handle
            set_show_loader(True)
            handle = loop.call_later(spinner.interval, advance)

        handle = loop.call_later(spinner_delay, start)

        def cleanup() -> None:
            if handle is not None:
                handle.cancel()

        return cleanup

    use_effect(on_status, (status,))

    if show_loader and spinner.frames:
        return spinner.frames[tick % len(spinner.frames)]

    # Before the spinner shows, loading displays like idle
    return resolve_prefix(theme, "idle" if status == "loading" else status)
