"""Helpers shared by keymap-driven modes."""

from __future__ import annotations

from typing import Mapping, MutableMapping, Optional, cast

from line_engine.keymaps import KeymapResolver, KeyStroke

from .base_mode import KeyInput, ModeContext

_TEXT_BLOCKING_MODIFIERS = frozenset({"ctrl", "alt", "super"})


def key_to_token(key: KeyInput) -> str:
    """Keymap token for ``key``; shift is implied by the case of a typed character."""

    modifiers = key.modifiers
    if len(key.key) == 1:
        modifiers = tuple(m for m in modifiers if m.lower() != "shift")
    return KeyStroke(key.key, modifiers).token


def printable_text(key: KeyInput) -> Optional[str]:
    """Text ``key`` would insert, or ``None`` for control keys and chords."""

    if not key.text or not key.text.isprintable():
        return None
    if _TEXT_BLOCKING_MODIFIERS.intersection(m.lower() for m in key.modifiers):
        return None
    return key.text


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


def keymap_flag_context(context: ModeContext) -> Mapping[str, bool]:
    flags = context.extras.setdefault("keymap_flags", {})
    return cast(Mapping[str, bool], flags)


def update_flag(context: ModeContext, key: str, value: bool) -> None:
    flags = cast(
        MutableMapping[str, bool], context.extras.setdefault("keymap_flags", {})
    )
    flags[key] = value


__all__ = [
    "key_to_token",
    "keymap_flag_context",
    "printable_text",
    "require_keymap_resolver",
    "update_flag",
]
