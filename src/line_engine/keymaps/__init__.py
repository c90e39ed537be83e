"""Declarative keymaps: key strokes, bindings, registry and resolver.

The built-in Emacs and Vi bindings live in ``line_engine.keymaps.defaults``;
they reference the editing actions, so they are imported on demand.
"""

from .models import ActionRef, Binding, KeySequence, KeyStroke, WhenClause
from .registry import KeymapConflictError, KeymapRegistry, RegistryStats
from .resolver import KeymapResolver, ResolutionMatch, ResolutionResult

__all__ = [
    "ActionRef",
    "Binding",
    "KeySequence",
    "KeyStroke",
    "WhenClause",
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
]
