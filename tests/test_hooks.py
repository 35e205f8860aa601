"""Tests for the hook engine and hook primitives.

Views are mounted directly on a ``HookStore`` with the same render step the
prompt controller uses (view, slot-count check, effect flush). No event loop
is running, so state changes outside a batch re-render synchronously.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from pi.prompts.errors import HookError, ValidationError
from pi.prompts.hook_engine import HookStore, get_store
from pi.prompts.hooks import (
    is_same,
    use_effect,
    use_keypress,
    use_memo,
    use_ref,
    use_settings,
    use_state,
)
from pi.prompts.line_editor import LineEditor
from pi.prompts.settings import PromptSettings


def _mount(view: Callable[[], Any], strict: bool = True) -> tuple[HookStore, LineEditor, list[Any]]:
    rl = LineEditor()
    store = HookStore(rl, settings=PromptSettings(), strict=strict)
    frames: list[Any] = []

    def render() -> None:
        frames.append(view())
        store.verify_slot_count()
        store.run_effects()

    store.cycle(render)
    return store, rl, frames


# ---------------------------------------------------------------------------
# Render context
# ---------------------------------------------------------------------------


class TestRenderContext:
    def test_hooks_outside_render_raise(self) -> None:
        with pytest.raises(HookError, match="within a prompt"):
            use_state(0)

    def test_get_store_inside_render(self) -> None:
        seen: list[HookStore] = []
        store, _, _ = _mount(lambda: seen.append(get_store()))
        assert seen == [store]

    def test_store_not_reachable_after_render(self) -> None:
        _mount(lambda: None)
        with pytest.raises(HookError):
            get_store()


# ---------------------------------------------------------------------------
# use_state / use_ref / use_memo
# ---------------------------------------------------------------------------


class TestUseState:
    def test_setter_rerenders_with_new_value(self) -> None:
        setters: list[Callable[[int], None]] = []

        def view() -> int:
            value, set_value = use_state(1)
            setters.append(set_value)
            return value

        _, _, frames = _mount(view)
        setters[-1](2)
        assert frames == [1, 2]

    def test_setting_same_value_does_not_rerender(self) -> None:
        setters: list[Callable[[str], None]] = []

        def view() -> str:
            value, set_value = use_state("same")
            setters.append(set_value)
            return value

        _, _, frames = _mount(view)
        setters[-1]("same")
        assert frames == ["same"]

    def test_callable_default_is_a_factory(self) -> None:
        calls: list[int] = []
        setters: list[Callable[[list[int]], None]] = []

        def factory() -> list[int]:
            calls.append(1)
            return [1, 2]

        def view() -> list[int]:
            value, set_value = use_state(factory)
            setters.append(set_value)
            return value

        _, _, frames = _mount(view)
        setters[-1]([3])
        assert calls == [1]
        assert frames == [[1, 2], [3]]

    def test_slots_are_independent(self) -> None:
        def view() -> tuple[str, str]:
            a, _ = use_state("a")
            b, _ = use_state("b")
            return a, b

        _, _, frames = _mount(view)
        assert frames == [("a", "b")]


class TestUseRef:
    def test_identity_is_stable(self) -> None:
        refs: list[Any] = []
        setters: list[Callable[[int], None]] = []

        def view() -> None:
            refs.append(use_ref(0))
            _, set_value = use_state(0)
            setters.append(set_value)

        _mount(view)
        refs[0].current = 42
        setters[-1](1)
        assert refs[1] is refs[0]
        assert refs[1].current == 42


class TestUseMemo:
    def test_recomputes_only_when_deps_change(self) -> None:
        calls: list[int] = []
        setters: dict[str, Callable[[int], None]] = {}

        def view() -> int:
            dep, set_dep = use_state(1)
            other, set_other = use_state(0)
            setters.update(dep=set_dep, other=set_other)

            def compute() -> int:
                calls.append(dep)
                return dep * 10

            return use_memo(compute, (dep,))

        _, _, frames = _mount(view)
        setters["other"](5)
        setters["dep"](2)
        assert calls == [1, 2]
        assert frames == [10, 10, 20]

    def test_is_same_semantics(self) -> None:
        assert is_same(1, 1)
        assert is_same("a", "a")
        assert not is_same(1, 1.0)
        assert not is_same([1], [1])
        items = [1]
        assert is_same(items, items)


# ---------------------------------------------------------------------------
# use_effect and the effect scheduler
# ---------------------------------------------------------------------------


class TestUseEffect:
    def test_runs_after_render_and_on_dep_change(self) -> None:
        log: list[str] = []
        setters: dict[str, Callable[[int], None]] = {}

        def view() -> None:
            dep, set_dep = use_state(0)
            other, set_other = use_state(0)
            setters.update(dep=set_dep, other=set_other)

            def effect(_rl: LineEditor) -> Callable[[], None]:
                log.append(f"run {dep}")
                return lambda: log.append(f"cleanup {dep}")

            use_effect(effect, (dep,))
            log.append("render")

        _mount(view)
        setters["other"](1)
        setters["dep"](1)
        assert log == ["render", "run 0", "render", "render", "cleanup 0", "run 1"]

    def test_effect_receives_line_editor(self) -> None:
        received: list[LineEditor] = []

        def view() -> None:
            use_effect(lambda rl: received.append(rl) and None, ())

        _, rl, _ = _mount(view)
        assert received == [rl]

    def test_effect_state_change_rerenders_once(self) -> None:
        def view() -> int:
            value, set_value = use_state(0)
            use_effect(lambda _rl: set_value(1), ())
            return value

        _, _, frames = _mount(view)
        assert frames == [0, 1]

    def test_async_effect_is_rejected(self) -> None:
        async def effect(_rl: LineEditor) -> None:
            return None

        with pytest.raises(ValidationError, match="cleanup function"):
            _mount(lambda: use_effect(effect, ()))

    def test_non_callable_return_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _mount(lambda: use_effect(lambda _rl: 42, ()))

    def test_clear_all_runs_cleanups_in_slot_order_once(self) -> None:
        log: list[str] = []

        def view() -> None:
            use_effect(lambda _rl: lambda: log.append("first"), ())
            use_effect(lambda _rl: lambda: log.append("second"), ())

        store, _, _ = _mount(view)
        store.clear_all()
        store.clear_all()
        assert log == ["first", "second"]

    def test_clear_all_reraises_first_error_after_running_all(self) -> None:
        log: list[str] = []

        def boom() -> None:
            raise RuntimeError("boom")

        def view() -> None:
            use_effect(lambda _rl: boom, ())
            use_effect(lambda _rl: lambda: log.append("second"), ())

        store, _, _ = _mount(view)
        with pytest.raises(RuntimeError, match="boom"):
            store.clear_all()
        assert log == ["second"]

    def test_no_render_after_clear_all(self) -> None:
        setters: list[Callable[[int], None]] = []

        def view() -> int:
            value, set_value = use_state(0)
            setters.append(set_value)
            return value

        store, _, frames = _mount(view)
        store.clear_all()
        setters[-1](1)
        assert frames == [0]


# ---------------------------------------------------------------------------
# Batching and slot-count checks
# ---------------------------------------------------------------------------


class TestBatching:
    def test_with_updates_renders_once(self) -> None:
        setters: dict[str, Callable[[int], None]] = {}

        def view() -> tuple[int, int]:
            a, set_a = use_state(0)
            b, set_b = use_state(0)
            setters.update(a=set_a, b=set_b)
            return a, b

        store, _, frames = _mount(view)

        def update() -> None:
            setters["a"](1)
            setters["b"](2)

        store.with_updates(update)()
        assert frames == [(0, 0), (1, 2)]

    def test_no_change_no_render(self) -> None:
        store, _, frames = _mount(lambda: use_state(0)[0])
        store.with_updates(lambda: None)()
        assert frames == [0]


class TestSlotCount:
    def test_strict_mode_raises_on_changed_hook_count(self) -> None:
        flags = {"extra": False}

        def view() -> None:
            use_state(0)
            if flags["extra"]:
                use_state(1)

        store, _, _ = _mount(view, strict=True)
        flags["extra"] = True
        with pytest.raises(HookError, match="same order"):
            store.rerender()

    def test_lenient_mode_only_logs(self) -> None:
        flags = {"extra": False}

        def view() -> None:
            use_state(0)
            if flags["extra"]:
                use_state(1)

        store, _, _ = _mount(view, strict=False)
        flags["extra"] = True
        store.rerender()


# ---------------------------------------------------------------------------
# use_keypress / use_settings
# ---------------------------------------------------------------------------


class TestUseKeypress:
    def test_handler_sees_latest_state(self) -> None:
        def view() -> int:
            count, set_count = use_state(0)

            def on_key(key, rl) -> None:
                if key.name == "a":
                    set_count(count + 1)

            use_keypress(on_key)
            return count

        _, rl, frames = _mount(view)
        rl.feed("aab")
        assert frames == [0, 1, 2]

    def test_changes_in_one_keypress_are_batched(self) -> None:
        def view() -> tuple[int, int]:
            a, set_a = use_state(0)
            b, set_b = use_state(0)

            def on_key(key, rl) -> None:
                set_a(a + 1)
                set_b(b + 1)

            use_keypress(on_key)
            return a, b

        _, rl, frames = _mount(view)
        rl.feed("x")
        assert frames == [(0, 0), (1, 1)]

    def test_listener_removed_on_clear_all(self) -> None:
        store, rl, _ = _mount(lambda: use_keypress(lambda key, rl: None))
        assert rl.listener_count == 1
        store.clear_all()
        assert rl.listener_count == 0

    def test_single_subscription_across_renders(self) -> None:
        setters: list[Callable[[int], None]] = []

        def view() -> None:
            _, set_value = use_state(0)
            setters.append(set_value)
            use_keypress(lambda key, rl: None)

        _, rl, _ = _mount(view)
        setters[-1](1)
        setters[-1](2)
        assert rl.listener_count == 1


class TestUseSettings:
    def test_returns_store_settings(self) -> None:
        settings = PromptSettings(search_timeout=1.5)
        rl = LineEditor()
        store = HookStore(rl, settings=settings)
        seen: list[PromptSettings] = []
        store.cycle(lambda: seen.append(use_settings()))
        assert seen == [settings]


# ---------------------------------------------------------------------------
# Effects keyed on refs
# ---------------------------------------------------------------------------


class TestRefDependency:
    def test_effect_on_ref_current_runs_once(self) -> None:
        runs: list[int] = []

        def view() -> int:
            count, set_count = use_state(0)
            ref = use_ref("stable")
            use_effect(lambda _rl: runs.append(1) and None, (ref.current,))
            use_keypress(lambda key, rl: set_count(count + 1))
            return count

        _, rl, frames = _mount(view)
        rl.feed("abcd")
        assert frames == [0, 1, 2, 3, 4]
        assert runs == [1]
