"""Trie-based keymap resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Mapping, Optional, Sequence

from line_engine.runtime.telemetry import span

from .models import ActionRef, Binding, KeyStroke
from .registry import LOGGER_NAME, KeymapRegistry

ResolutionStatus = Literal["match", "pending", "miss"]


@dataclass(slots=True)
class TrieNode:
    bindings: list[Binding] = field(default_factory=list)
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children))

    def shortest_timeout(self) -> Optional[int]:
        """Smallest sequence timeout among bindings below this node."""

        timeouts: list[int] = []
        stack = list(self.children.values())
        while stack:
            node = stack.pop()
            timeouts.extend(b.sequence.timeout_ms for b in node.bindings)
            stack.extend(node.children.values())
        return min(timeouts) if timeouts else None


@dataclass(slots=True)
class KeymapTrie:
    mode: str
    revision: int
    root: TrieNode = field(default_factory=TrieNode)

    def add_binding(self, binding: Binding) -> None:
        node = self.root
        for token in binding.sequence.tokens:
            node = node.child(token)
        node.bindings.append(binding)

    def walk(self, tokens: Sequence[str]) -> tuple[Optional[TrieNode], int]:
        node = self.root
        for consumed, token in enumerate(tokens):
            child = node.children.get(token)
            if child is None:
                return None, consumed
            node = child
        return node, len(tokens)


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    binding: Binding
    action: ActionRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of resolving a (possibly partial) key sequence."""

    status: ResolutionStatus
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


def normalize_tokens(tokens: Sequence[str]) -> tuple[str, ...]:
    return tuple(KeyStroke.parse(token).token for token in tokens)


class KeymapResolver:
    """Resolves key sequences against a per-mode trie built from a registry.

    Tries are cached per mode and rebuilt when the registry revision moves.
    A node holding a binding wins over a longer sequence through it; a node
    with only children reports ``pending`` along with the shortest timeout of
    the sequences that could still complete.
    """

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = LOGGER_NAME
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, KeymapTrie] = {}

    @property
    def registry(self) -> KeymapRegistry:
        return self._registry

    def resolve(
        self,
        mode: str,
        tokens: Sequence[str],
        *,
        context: Optional[Mapping[str, bool]] = None,
    ) -> ResolutionResult:
        flags = context or {}
        normalized = normalize_tokens(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "keys": " ".join(normalized)},
        ) as handle:
            trie = self._trie_for(mode)
            node, consumed = trie.walk(normalized)
            if node is None or node is trie.root:
                handle.add_metadata("status", "miss")
                return ResolutionResult(status="miss", consumed=consumed)

            match = self._select_match(node, flags)
            if match is not None:
                handle.add_metadata("status", "match")
                handle.add_metadata("binding_id", match.binding.id)
                return ResolutionResult(status="match", match=match, consumed=consumed)

            if node.children:
                timeout_ms = node.shortest_timeout()
                handle.add_metadata("status", "pending")
                return ResolutionResult(
                    status="pending",
                    consumed=consumed,
                    next_expected=node.next_tokens(),
                    timeout_ms=timeout_ms,
                )

            handle.add_metadata("status", "miss")
            return ResolutionResult(status="miss", consumed=consumed)

    def reset(self, mode: Optional[str] = None) -> None:
        if mode is None:
            self._tries.clear()
        else:
            self._tries.pop(mode, None)

    def _trie_for(self, mode: str) -> KeymapTrie:
        revision = self._registry.revision()
        trie = self._tries.get(mode)
        if trie is None or trie.revision != revision:
            trie = KeymapTrie(mode=mode, revision=revision)
            for binding in self._registry.iter_bindings(mode):
                trie.add_binding(binding)
            self._tries[mode] = trie
        return trie

    def _select_match(
        self, node: TrieNode, flags: Mapping[str, bool]
    ) -> Optional[ResolutionMatch]:
        candidates = sorted(
            (b for b in node.bindings if b.allows(flags)),
            key=lambda b: (-b.priority, b.id),
        )
        if not candidates:
            return None
        binding = candidates[0]
        return ResolutionMatch(
            binding=binding, action=self._registry.get_action(binding.action_id)
        )


__all__ = [
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
    "normalize_tokens",
]
