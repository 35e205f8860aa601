"""Tests for pi.prompts.theme and pi.prompts.separator."""

from __future__ import annotations

import pytest

from pi.prompts import ansi
from pi.prompts.components.select import SelectTheme
from pi.prompts.errors import ValidationError
from pi.prompts.separator import Separator
from pi.prompts.theme import Theme, make_theme, resolve_prefix
from pi.prompts.utils import strip_ansi


class TestMakeTheme:
    def test_no_overrides_returns_defaults(self) -> None:
        theme = make_theme(Theme())
        assert theme.prefix == {"idle": ansi.blue("?"), "done": ansi.green(ansi.TICK)}

    def test_none_override_is_skipped(self) -> None:
        base = Theme()
        assert make_theme(base, None) is base

    def test_nested_style_override(self) -> None:
        theme = make_theme(Theme(), {"style": {"answer": str.upper}})
        assert theme.style.answer("yes") == "YES"
        # Untouched callables keep their defaults
        assert strip_ansi(theme.style.error("bad")) == "> bad"

    def test_prefix_dict_is_merged(self) -> None:
        theme = make_theme(Theme(), {"prefix": {"idle": "?"}})
        assert theme.prefix["idle"] == "?"
        assert theme.prefix["done"] == ansi.green(ansi.TICK)

    def test_prefix_string_replaces(self) -> None:
        theme = make_theme(Theme(), {"prefix": ">"})
        assert resolve_prefix(theme, "idle") == ">"
        assert resolve_prefix(theme, "done") == ">"

    def test_prompt_specific_fields(self) -> None:
        theme = make_theme(SelectTheme(), {"icon": {"cursor": ">"}, "index_mode": "number"})
        assert theme.icon.cursor == ">"
        assert theme.index_mode == "number"

    def test_base_is_not_mutated(self) -> None:
        base = Theme()
        make_theme(base, {"prefix": {"idle": "!"}})
        assert base.prefix["idle"] == ansi.blue("?")

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(ValidationError, match="Unknown theme option"):
            make_theme(Theme(), {"colour": "red"})

    def test_overrides_apply_in_order(self) -> None:
        theme = make_theme(Theme(), {"prefix": "a"}, {"prefix": "b"})
        assert theme.prefix == "b"


class TestResolvePrefix:
    def test_known_status(self) -> None:
        assert resolve_prefix(Theme(), "done") == ansi.green(ansi.TICK)

    def test_unknown_status_falls_back_to_idle(self) -> None:
        assert resolve_prefix(Theme(), "custom") == ansi.blue("?")


class TestKeysHelpTip:
    def test_joins_keys_and_actions(self) -> None:
        tip = Theme().style.keys_help_tip([("↑↓", "navigate"), ("⏎", "select")])
        assert strip_ansi(tip) == "↑↓ navigate • ⏎ select"


class TestSeparator:
    def test_default_line(self) -> None:
        assert strip_ansi(Separator().separator) == "─" * 14

    def test_custom_text(self) -> None:
        assert Separator("-- fruit --").separator == "-- fruit --"

    def test_is_separator(self) -> None:
        assert Separator.is_separator(Separator())
        assert not Separator.is_separator("separator")
        assert not Separator.is_separator({"value": 1})
