"""Exception types raised by prompt sessions and the hook engine."""

from __future__ import annotations


class PromptError(Exception):
    """Base class for every error raised by ``pi.prompts``."""

    default_message = ""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class CancelPromptError(PromptError):
    """The session was cancelled programmatically via ``PromptSession.cancel``."""

    default_message = "Prompt was canceled"


class AbortPromptError(PromptError):
    """The session's abort event was signalled."""

    default_message = "Prompt was aborted"

    def __init__(self, message: str | None = None, cause: object = None) -> None:
        super().__init__(message)
        self.cause = cause


class ExitPromptError(PromptError):
    """The process was interrupted or asked to terminate while prompting."""


class HookError(PromptError):
    """A hook was used outside of a render, or hook order changed between renders."""


class ValidationError(PromptError):
    """A prompt or hook contract was violated (bad effect return, no choices, ...)."""
