"""Discovery of postprocessor plugins through pluggy."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from functools import lru_cache

import pluggy

from ..config import ExportSettings
from .hooks import ENTRY_POINT_GROUP, PLUGIN_NAMESPACE, PostprocessorHookSpec
from .types import PostprocessorContribution

PostprocessorRegistry = dict[str, PostprocessorContribution]


class PluginRegistrationError(RuntimeError):
    """Raised when a plugin cannot be registered or offers malformed contributions."""


def create_plugin_manager(*, load_entry_points: bool = True) -> pluggy.PluginManager:
    manager = pluggy.PluginManager(PLUGIN_NAMESPACE)
    manager.add_hookspecs(PostprocessorHookSpec)
    if load_entry_points:
        manager.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
    return manager


def _builtin_plugin_modules() -> tuple[object, ...]:
    from . import builtin

    return (builtin,)


@lru_cache(maxsize=1)
def get_plugin_manager() -> pluggy.PluginManager:
    """Return the shared manager holding entry-point and bundled plugins."""

    manager = create_plugin_manager()
    for plugin in _builtin_plugin_modules():
        try:
            manager.register(plugin)
        except pluggy.PluginValidationError as exc:
            raise PluginRegistrationError(str(exc)) from exc
    return manager


def reset_plugin_manager_cache() -> None:
    """Forget the shared manager so the next lookup discovers plugins again."""

    get_plugin_manager.cache_clear()


def load_postprocessor_contributions(
    settings: ExportSettings | None = None,
) -> PostprocessorRegistry:
    """Map lowercased postprocessor names to the contributions offering them.

    Raises
    ------
    PluginRegistrationError
        If a hook returns something other than contributions, or two
        contributions share a name (names compare case-insensitively).
    """

    results = get_plugin_manager().hook.postprocessors(settings=settings or ExportSettings())

    registry: PostprocessorRegistry = {}
    for contribution in _flatten(results):
        key = contribution.name.lower()
        existing = registry.get(key)
        if existing is not None:
            raise PluginRegistrationError(
                f"Duplicate postprocessor name '{contribution.name}' "
                f"(already offered as '{existing.name}')."
            )
        registry[key] = contribution
    return registry


def _flatten(results: Iterable[object]) -> Iterator[PostprocessorContribution]:
    for result in results:
        if not result:
            continue
        if isinstance(result, PostprocessorContribution):
            yield result
            continue
        if isinstance(result, (str, bytes)) or not isinstance(result, Iterable):
            raise PluginRegistrationError(
                f"postprocessors hook returned {type(result).__name__}, "
                "expected PostprocessorContribution items"
            )
        for item in result:
            if not isinstance(item, PostprocessorContribution):
                raise PluginRegistrationError(
                    f"Expected PostprocessorContribution, got {type(item).__name__}"
                )
            yield item


__all__ = [
    "PluginRegistrationError",
    "PostprocessorRegistry",
    "create_plugin_manager",
    "get_plugin_manager",
    "load_postprocessor_contributions",
    "reset_plugin_manager_cache",
]
