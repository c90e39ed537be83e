"""Built-in Emacs and Vi keymaps."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from line_engine.actions import core as core_actions
from line_engine.actions.edit import edit_action
from line_engine.editor import EditKind, takes_argument

from .models import ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

EMACS = "emacs"
NORMAL = "normal"
INSERT = "insert"


def _edit_actions() -> tuple[ActionRef, ...]:
    return tuple(
        ActionRef(
            id=f"edit.{kind.value}",
            handler=edit_action(kind),
            description=kind.value.replace("_", " ").capitalize(),
        )
        for kind in EditKind
        if not takes_argument(kind)
    )


DEFAULT_ACTIONS: tuple[ActionRef, ...] = _edit_actions() + (
    ActionRef(
        id="core.enter_insert",
        handler=core_actions.enter_insert_mode,
        description="Enter insert mode",
    ),
    ActionRef(
        id="core.append",
        handler=core_actions.append_after_cursor,
        description="Enter insert mode after the cursor",
    ),
    ActionRef(
        id="core.insert_line_start",
        handler=core_actions.insert_at_line_start,
        description="Enter insert mode at the start of the line",
    ),
    ActionRef(
        id="core.append_line_end",
        handler=core_actions.append_at_line_end,
        description="Enter insert mode at the end of the line",
    ),
    ActionRef(
        id="core.exit_to_normal",
        handler=core_actions.exit_to_normal_mode,
        description="Return to normal mode",
    ),
    ActionRef(
        id="core.submit_line",
        handler=core_actions.submit_line,
        description="Submit the buffer",
    ),
    ActionRef(
        id="vi.change_to_line_end",
        handler=edit_action(EditKind.CUT_TO_LINE_END, switch_to=INSERT),
        description="Cut to the end of the line and enter insert mode",
    ),
    ActionRef(
        id="vi.substitute_char",
        handler=edit_action(EditKind.DELETE, switch_to=INSERT),
        description="Delete the grapheme under the cursor and enter insert mode",
    ),
)

# Actions that wait for the character to search for.
DEFAULT_ACTIONS += tuple(
    ActionRef(
        id=f"search.{kind.value}",
        handler=core_actions.await_char(kind),
        description=f"{kind.value.replace('_', ' ').capitalize()} the next typed character",
    )
    for kind in (
        EditKind.MOVE_RIGHT_UNTIL,
        EditKind.MOVE_RIGHT_BEFORE,
        EditKind.MOVE_LEFT_UNTIL,
        EditKind.MOVE_LEFT_BEFORE,
        EditKind.CUT_RIGHT_UNTIL,
        EditKind.CUT_RIGHT_BEFORE,
        EditKind.CUT_LEFT_UNTIL,
        EditKind.CUT_LEFT_BEFORE,
    )
)


def _bind(mode: str, keys: str, action_id: str, description: str = "") -> Binding:
    """``keys`` is a space separated sequence such as ``"d f"`` or ``"ctrl+w"``."""

    slug = keys.replace(" ", "_").replace("+", "-")
    return Binding(
        id=f"{mode}.{slug}",
        mode=mode,
        sequence=KeySequence.from_strings(*keys.split(" ")),
        action_id=action_id,
        description=description,
        source="defaults",
    )


def _shared_line_keys(mode: str) -> tuple[Binding, ...]:
    """Keys that behave the same in Emacs and Vi insert mode."""

    return (
        _bind(mode, "enter", "core.submit_line", "Submit the buffer"),
        _bind(mode, "shift+enter", "edit.insert_newline", "Insert a newline"),
        _bind(mode, "backspace", "edit.backspace", "Delete the grapheme left"),
        _bind(mode, "delete", "edit.delete", "Delete the grapheme right"),
        _bind(mode, "left", "edit.move_left", "Move left"),
        _bind(mode, "right", "edit.move_right", "Move right"),
        _bind(mode, "up", "edit.move_line_up", "Move up a line"),
        _bind(mode, "down", "edit.move_line_down", "Move down a line"),
        _bind(mode, "home", "edit.move_to_line_start", "Move to the line start"),
        _bind(mode, "end", "edit.move_to_line_end", "Move to the line end"),
        _bind(mode, "ctrl+left", "edit.move_word_left", "Move a word left"),
        _bind(mode, "ctrl+right", "edit.move_word_right", "Move a word right"),
        _bind(mode, "ctrl+w", "edit.cut_word_left", "Cut the word left"),
        _bind(mode, "ctrl+u", "edit.cut_from_line_start", "Cut to the line start"),
    )


EMACS_BINDINGS: tuple[Binding, ...] = _shared_line_keys(EMACS) + (
    _bind(EMACS, "ctrl+a", "edit.move_to_line_start"),
    _bind(EMACS, "ctrl+e", "edit.move_to_line_end"),
    _bind(EMACS, "ctrl+b", "edit.move_left"),
    _bind(EMACS, "ctrl+f", "edit.move_right"),
    _bind(EMACS, "ctrl+p", "edit.move_line_up"),
    _bind(EMACS, "ctrl+n", "edit.move_line_down"),
    _bind(EMACS, "alt+b", "edit.move_word_left"),
    _bind(EMACS, "alt+f", "edit.move_word_right"),
    _bind(EMACS, "alt+<", "edit.move_to_start"),
    _bind(EMACS, "alt+>", "edit.move_to_end"),
    _bind(EMACS, "ctrl+d", "edit.delete"),
    _bind(EMACS, "ctrl+h", "edit.backspace"),
    _bind(EMACS, "alt+backspace", "edit.backspace_word"),
    _bind(EMACS, "alt+d", "edit.cut_word_right"),
    _bind(EMACS, "ctrl+k", "edit.cut_to_line_end"),
    _bind(EMACS, "ctrl+y", "edit.paste_cut_buffer_before"),
    _bind(EMACS, "ctrl+l", "edit.clear"),
    _bind(EMACS, "alt+u", "edit.uppercase_word"),
    _bind(EMACS, "alt+l", "edit.lowercase_word"),
    _bind(EMACS, "alt+c", "edit.capitalize_char"),
    _bind(EMACS, "ctrl+t", "edit.swap_graphemes"),
    _bind(EMACS, "alt+t", "edit.swap_words"),
    _bind(EMACS, "ctrl+z", "edit.undo"),
    _bind(EMACS, "ctrl+_", "edit.undo"),
    _bind(EMACS, "ctrl+g", "edit.redo"),
)

NORMAL_BINDINGS: tuple[Binding, ...] = (
    _bind(NORMAL, "enter", "core.submit_line", "Submit the buffer"),
    _bind(NORMAL, "i", "core.enter_insert", "Enter insert mode"),
    _bind(NORMAL, "a", "core.append", "Append after the cursor"),
    _bind(NORMAL, "I", "core.insert_line_start", "Insert at the line start"),
    _bind(NORMAL, "A", "core.append_line_end", "Append at the line end"),
    _bind(NORMAL, "h", "edit.move_left"),
    _bind(NORMAL, "l", "edit.move_right"),
    _bind(NORMAL, "k", "edit.move_line_up"),
    _bind(NORMAL, "j", "edit.move_line_down"),
    _bind(NORMAL, "left", "edit.move_left"),
    _bind(NORMAL, "right", "edit.move_right"),
    _bind(NORMAL, "up", "edit.move_line_up"),
    _bind(NORMAL, "down", "edit.move_line_down"),
    _bind(NORMAL, "w", "edit.move_word_right"),
    _bind(NORMAL, "b", "edit.move_word_left"),
    _bind(NORMAL, "0", "edit.move_to_line_start"),
    _bind(NORMAL, "$", "edit.move_to_line_end"),
    _bind(NORMAL, "g g", "edit.move_to_start"),
    _bind(NORMAL, "G", "edit.move_to_end"),
    _bind(NORMAL, "x", "edit.delete"),
    _bind(NORMAL, "X", "edit.backspace"),
    _bind(NORMAL, "s", "vi.substitute_char"),
    _bind(NORMAL, "D", "edit.cut_to_line_end"),
    _bind(NORMAL, "C", "vi.change_to_line_end"),
    _bind(NORMAL, "d d", "edit.cut_current_line"),
    _bind(NORMAL, "d w", "edit.cut_word_right"),
    _bind(NORMAL, "d b", "edit.cut_word_left"),
    _bind(NORMAL, "d 0", "edit.cut_from_line_start"),
    _bind(NORMAL, "d $", "edit.cut_to_line_end"),
    _bind(NORMAL, "p", "edit.paste_cut_buffer_after"),
    _bind(NORMAL, "P", "edit.paste_cut_buffer_before"),
    _bind(NORMAL, "~", "edit.capitalize_char"),
    _bind(NORMAL, "u", "edit.undo"),
    _bind(NORMAL, "ctrl+r", "edit.redo"),
    _bind(NORMAL, "f", "search.move_right_until"),
    _bind(NORMAL, "t", "search.move_right_before"),
    _bind(NORMAL, "F", "search.move_left_until"),
    _bind(NORMAL, "T", "search.move_left_before"),
    _bind(NORMAL, "d f", "search.cut_right_until"),
    _bind(NORMAL, "d t", "search.cut_right_before"),
    _bind(NORMAL, "d F", "search.cut_left_until"),
    _bind(NORMAL, "d T", "search.cut_left_before"),
)

INSERT_BINDINGS: tuple[Binding, ...] = _shared_line_keys(INSERT) + (
    _bind(INSERT, "esc", "core.exit_to_normal", "Leave insert mode"),
)

DEFAULT_BINDINGS: tuple[Binding, ...] = EMACS_BINDINGS + NORMAL_BINDINGS + INSERT_BINDINGS


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    modes: Sequence[str] | None = None,
    extra_bindings: Iterable[Binding] | None = None,
    default_sequence_timeout_ms: int | None = None,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register the built-in actions and the bindings of ``modes`` (all by default)."""

    allowed_actions = _build_filters(include_actions, exclude_actions)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)
    wanted_modes = set(modes) if modes is not None else None

    for action in DEFAULT_ACTIONS:
        if _selected(action.id, allowed_actions):
            registry.register_action(action, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if wanted_modes is not None and binding.mode not in wanted_modes:
            continue
        if not _selected(binding.id, allowed_bindings):
            continue
        if not registry.has_action(binding.action_id):
            continue
        registry.register_binding(
            _binding_with_timeout(binding, default_sequence_timeout_ms),
            replace=replace,
        )

    for binding in extra_bindings or ():
        registry.register_binding(binding, replace=replace)

    for mode, bindings in (per_mode_overrides or {}).items():
        for binding in bindings:
            if binding.mode != mode:
                raise ValueError(
                    f"Override binding '{binding.id}' must target mode '{mode}'"
                )
            registry.register_binding(binding, replace=True)


def _binding_with_timeout(binding: Binding, timeout_ms: int | None) -> Binding:
    if timeout_ms is None:
        return binding
    return replace(
        binding, sequence=KeySequence(binding.sequence.strokes, timeout_ms=timeout_ms)
    )


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    return (set(include) if include else None), set(exclude or ())


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    return item_id not in exclude


__all__ = [
    "DEFAULT_ACTIONS",
    "DEFAULT_BINDINGS",
    "EMACS_BINDINGS",
    "INSERT_BINDINGS",
    "NORMAL_BINDINGS",
    "load_default_keymaps",
]
