"""Patch engine merging module edits back into whole documents."""

from .engine import (
    DomPatch,
    MarkerScopedPatch,
    PatchEngine,
    PatchRequest,
    PatchResult,
    PatchStrategy,
    SnippetPatch,
)

__all__ = [
    "DomPatch",
    "MarkerScopedPatch",
    "PatchEngine",
    "PatchRequest",
    "PatchResult",
    "PatchStrategy",
    "SnippetPatch",
]
