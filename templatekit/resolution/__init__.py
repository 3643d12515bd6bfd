"""Module resolution strategies and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import Resolution, ResolutionContext, ResolutionStrategy, should_be_module
from .registry import ModuleRegistry
from .strategies import (
    DataModuleIdStrategy,
    DivStrategy,
    IdStrategy,
    LineModuleStrategy,
    PositionStrategy,
    SelectorStrategy,
    SnippetStrategy,
    TagStrategy,
)

_ENTRY_POINT_GROUP = "templatekit.resolvers"

# Chain order: the first strategy that yields a usable element wins.
_BUILTIN_FACTORIES: dict[str, Callable[[], ResolutionStrategy]] = {
    "id": IdStrategy,
    "data-module-id": DataModuleIdStrategy,
    "selector": SelectorStrategy,
    "snippet": SnippetStrategy,
    "line-module": LineModuleStrategy,
    "tag": TagStrategy,
    "div": DivStrategy,
    "position": PositionStrategy,
}


def discover_strategies(enabled: Sequence[str] | None = None) -> List[ResolutionStrategy]:
    """Return instantiated strategies in chain order, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    strategies: List[ResolutionStrategy] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], ResolutionStrategy]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, ResolutionStrategy):
            raise TypeError(f"Strategy factory for '{name}' did not return a ResolutionStrategy")
        strategies.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load resolver entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> ResolutionStrategy:
            return _coerce_strategy(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown resolution strategies requested: {missing}")

    return strategies


def _coerce_strategy(obj: object) -> ResolutionStrategy:
    if isinstance(obj, ResolutionStrategy):
        return obj
    if isinstance(obj, type) and issubclass(obj, ResolutionStrategy):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, ResolutionStrategy):
            return instance
    raise TypeError("Resolver entry point must be a ResolutionStrategy subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ModuleRegistry",
    "Resolution",
    "ResolutionContext",
    "ResolutionStrategy",
    "discover_strategies",
    "should_be_module",
]
