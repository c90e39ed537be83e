import pytest

from line_engine.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeyStroke,
    KeymapConflictError,
    KeymapRegistry,
    WhenClause,
)
from line_engine.keymaps.defaults import (
    DEFAULT_BINDINGS,
    EMACS_BINDINGS,
    load_default_keymaps,
)


def make_action(action_id: str = "edit.test") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_sequence(*keys: str) -> KeySequence:
    return KeySequence.from_strings(*keys)


def make_binding(
    *,
    binding_id: str,
    mode: str = "emacs",
    sequence: KeySequence | None = None,
    action_id: str = "edit.test",
    when: tuple[WhenClause, ...] = (),
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=sequence or make_sequence("ctrl+x", "ctrl+u"),
        action_id=action_id,
        when=when,
    )


def test_key_stroke_parse_normalizes_modifiers() -> None:
    stroke = KeyStroke.parse("Control+Meta+Left")

    assert stroke.key == "left"
    assert stroke.modifiers == ("alt", "ctrl")
    assert stroke.token == "alt+ctrl+left"


def test_key_stroke_parse_literal_plus_and_case() -> None:
    assert KeyStroke.parse("+").token == "+"
    assert KeyStroke.parse("ctrl++").token == "ctrl++"
    assert KeyStroke.parse("F").token == "F"
    assert KeyStroke.parse("<Esc>").token == "esc"

    with pytest.raises(ValueError):
        KeyStroke.parse("")


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="emacs.ctrl-x_ctrl-u")

    registry.register_binding(binding)

    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings(mode="emacs")) == [binding]
    assert registry.bindings_for_action("edit.test") == (binding,)


def test_register_binding_requires_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="orphan"))


def test_register_action_twice_needs_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    with pytest.raises(ValueError):
        registry.register_action(make_action())

    registry.register_action(make_action(), replace=True)
    assert registry.stats().action_count == 1


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="emacs.undo"))

    with pytest.raises(KeymapConflictError) as excinfo:
        registry.register_binding(make_binding(binding_id="emacs.undo.duplicate"))

    assert [b.id for b in excinfo.value.conflicts] == ["emacs.undo"]
    assert "ctrl+x ctrl+u" in str(excinfo.value)


def test_same_keys_in_other_mode_do_not_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    registry.register_binding(make_binding(binding_id="emacs.one"))
    registry.register_binding(make_binding(binding_id="insert.one", mode="insert"))

    assert registry.stats().modes == ("emacs", "insert")


def test_register_binding_non_overlapping_when() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding_default = make_binding(binding_id="default")
    binding_multiline = make_binding(
        binding_id="multiline",
        when=(WhenClause("multiline"),),
    )
    binding_single = make_binding(
        binding_id="single",
        when=(WhenClause.parse("!multiline"),),
    )

    registry.register_binding(binding_default)
    registry.register_binding(binding_multiline)
    registry.register_binding(binding_single)

    assert registry.stats().binding_count == 3


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]


def test_update_binding_changes_sequence() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)

    updated = registry.update_binding(
        "binding", sequence=make_sequence("ctrl+_"), description="undo"
    )

    assert updated.sequence.tokens == ("ctrl+_",)
    assert updated.description == "undo"
    assert registry.get_binding("binding") == updated


def test_unregister_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)
    before = registry.revision()

    removed = registry.unregister_binding("binding")

    assert removed == binding
    assert registry.stats().binding_count == 0
    assert registry.revision() == before + 1
    assert registry.unregister_binding("binding") is None


def test_load_default_keymaps_registers_every_mode() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    stats = registry.stats()
    assert stats.modes == ("emacs", "insert", "normal")
    assert stats.binding_count == len(DEFAULT_BINDINGS)
    assert registry.get_binding("emacs.ctrl-w").action_id == "edit.cut_word_left"
    assert registry.get_binding("normal.d_d").sequence.tokens == ("d", "d")


def test_load_default_keymaps_mode_filter() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, modes=("emacs",))

    assert registry.stats().modes == ("emacs",)
    assert registry.stats().binding_count == len(EMACS_BINDINGS)


def test_load_default_keymaps_timeout_override() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, default_sequence_timeout_ms=1500)

    binding = registry.get_binding("normal.i")
    assert binding.sequence.timeout_ms == 1500


def test_load_default_keymaps_include_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(
        registry,
        include_actions=("core.enter_insert",),
        include_bindings=("normal.i",),
    )

    assert registry.stats().binding_count == 1
    assert registry.get_binding("normal.i").action_id == "core.enter_insert"


def test_load_default_keymaps_skips_bindings_of_excluded_actions() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, exclude_actions=("core.submit_line",))

    assert not registry.has_action("core.submit_line")
    assert registry.bindings_for_action("core.submit_line") == ()


def test_load_default_keymaps_per_mode_override() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="normal.i",
        mode="normal",
        sequence=KeySequence.from_strings("o"),
        action_id="core.enter_insert",
    )

    load_default_keymaps(
        registry,
        per_mode_overrides={"normal": (custom_binding,)},
    )

    binding = registry.get_binding("normal.i")
    assert binding.sequence.tokens == ("o",)


def test_load_default_keymaps_override_must_match_mode() -> None:
    registry = KeymapRegistry()
    stray = Binding(
        id="insert.o",
        mode="insert",
        sequence=KeySequence.from_strings("o"),
        action_id="core.enter_insert",
    )

    with pytest.raises(ValueError):
        load_default_keymaps(registry, per_mode_overrides={"normal": (stray,)})


def test_registry_override_sequence_timeouts_mode_scope() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    before = registry.revision()

    registry.override_sequence_timeouts(timeout_ms=2200, mode="normal")

    assert registry.get_binding("normal.i").sequence.timeout_ms == 2200
    assert registry.get_binding("emacs.ctrl-a").sequence.timeout_ms == 1000
    assert registry.revision() == before + 1


def test_registry_override_sequence_timeouts_binding_subset() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)

    registry.override_sequence_timeouts(
        timeout_ms=1800,
        binding_ids=["insert.esc"],
    )

    assert registry.get_binding("insert.esc").sequence.timeout_ms == 1800

    with pytest.raises(ValueError):
        registry.override_sequence_timeouts(timeout_ms=0)
