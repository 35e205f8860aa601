"""Non-selectable list entry used to group choices."""

from __future__ import annotations

from pi.prompts import ansi


class Separator:
    type = "separator"

    def __init__(self, separator: str | None = None) -> None:
        self.separator = separator or ansi.dim(ansi.LINE * 14)

    def __repr__(self) -> str:
        return f"Separator({self.separator!r})"

    @staticmethod
    def is_separator(choice: object) -> bool:
        return getattr(choice, "type", None) == "separator"
