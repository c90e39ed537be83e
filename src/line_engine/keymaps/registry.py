"""Registry holding keymap actions and the bindings that trigger them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Optional, Sequence

from line_engine.runtime.telemetry import span

from .models import ActionRef, Binding, KeySequence

LOGGER_NAME = "line_engine.keymaps"


@dataclass(slots=True)
class RegistryStats:
    action_count: int
    binding_count: int
    modes: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """Raised when a binding would shadow another one in the same context."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        conflicts_tuple = tuple(conflicts)
        super().__init__(
            f"Binding '{binding.id}' ({binding.mode}: {binding.key_signature}) "
            f"conflicts with {[b.id for b in conflicts_tuple]}"
        )
        self.binding = binding
        self.conflicts = conflicts_tuple


class KeymapRegistry:
    """Owns action references and bindings, indexed by mode and key signature.

    Every change to the bindings bumps ``revision()`` so resolvers know when to
    rebuild their tries.
    """

    def __init__(self, *, logger_name: str | None = LOGGER_NAME) -> None:
        self._logger_name = logger_name
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        # mode -> key signature -> binding ids
        self._index: Dict[str, Dict[str, set[str]]] = {}
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def has_action(self, action_id: str) -> bool:
        return action_id in self._actions

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with span(
            "keymaps::register_action",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"action_id": action.id},
        ):
            if action.id in self._actions and not replace:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            self._require_action(binding, handle)

            conflicts = self.detect_conflicts(binding, ignore=(binding.id,))
            if conflicts and not replace:
                handle.add_metadata("conflicts", ",".join(b.id for b in conflicts))
                raise KeymapConflictError(binding, conflicts)
            if binding.id in self._bindings and not replace:
                raise ValueError(f"Binding id '{binding.id}' already registered")

            for stale in conflicts:
                self._drop(stale)
            if binding.id in self._bindings:
                self._drop(self._bindings[binding.id])
            self._store(binding)
            self._revision += 1
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with span(
            "keymaps::unregister_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ):
            binding = self._bindings.get(binding_id)
            if binding is None:
                return None
            self._drop(binding)
            self._revision += 1
            return binding

    def update_binding(self, binding_id: str, **changes: object) -> Binding:
        """Apply ``dataclasses.replace`` changes to a registered binding."""

        with span(
            "keymaps::update_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ) as handle:
            current = self.get_binding(binding_id)
            updated = replace(current, **changes)
            self._require_action(updated, handle)

            conflicts = self.detect_conflicts(updated, ignore=(binding_id,))
            if conflicts:
                handle.add_metadata("conflicts", ",".join(b.id for b in conflicts))
                raise KeymapConflictError(updated, conflicts)

            self._drop(current)
            self._store(updated)
            self._revision += 1
            return updated

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for binding_ids in self._index.get(mode, {}).values():
            for binding_id in sorted(binding_ids):
                yield self._bindings[binding_id]

    def bindings_for_action(self, action_id: str) -> tuple[Binding, ...]:
        return tuple(b for b in self._bindings.values() if b.action_id == action_id)

    def override_sequence_timeouts(
        self,
        *,
        timeout_ms: int,
        mode: Optional[str] = None,
        binding_ids: Optional[Iterable[str]] = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        if binding_ids is not None:
            targets = [self.get_binding(binding_id) for binding_id in binding_ids]
        else:
            targets = list(self.iter_bindings(mode))
        if not targets:
            return

        for binding in targets:
            sequence = KeySequence(binding.sequence.strokes, timeout_ms=timeout_ms)
            self._bindings[binding.id] = replace(binding, sequence=sequence)
        self._revision += 1

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            modes=tuple(sorted(self._index)),
        )

    def detect_conflicts(
        self, binding: Binding, *, ignore: Sequence[str] | None = None
    ) -> list[Binding]:
        ignored = set(ignore or ())
        same_keys = self._index.get(binding.mode, {}).get(binding.key_signature, set())
        return [
            self._bindings[other_id]
            for other_id in sorted(same_keys)
            if other_id not in ignored
            and _contexts_overlap(binding, self._bindings[other_id])
        ]

    def _require_action(self, binding: Binding, handle: object) -> None:
        if binding.action_id not in self._actions:
            handle.add_metadata("missing_action", binding.action_id)  # type: ignore[attr-defined]
            raise KeyError(
                f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
            )

    def _store(self, binding: Binding) -> None:
        self._bindings[binding.id] = binding
        signatures = self._index.setdefault(binding.mode, {})
        signatures.setdefault(binding.key_signature, set()).add(binding.id)

    def _drop(self, binding: Binding) -> None:
        self._bindings.pop(binding.id, None)
        signatures = self._index.get(binding.mode)
        if signatures is None:
            return
        bucket = signatures.get(binding.key_signature)
        if bucket is not None:
            bucket.discard(binding.id)
            if not bucket:
                del signatures[binding.key_signature]
        if not signatures:
            del self._index[binding.mode]


def _contexts_overlap(left: Binding, right: Binding) -> bool:
    """Two bindings clash unless their ``when`` clauses tell them apart."""

    if not left.when and not right.when:
        return True
    if not left.when or not right.when:
        return False
    return dict(left.when_map) == dict(right.when_map)


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
]
