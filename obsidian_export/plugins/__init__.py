"""obsidian-export plugin infrastructure based on pluggy."""

from __future__ import annotations

from .hooks import ENTRY_POINT_GROUP, PLUGIN_NAMESPACE, hookimpl, hookspec
from .manager import (
    PluginRegistrationError,
    get_plugin_manager,
    load_postprocessor_contributions,
    reset_plugin_manager_cache,
)
from .types import PostprocessorContribution

__all__ = [
    "ENTRY_POINT_GROUP",
    "PLUGIN_NAMESPACE",
    "PluginRegistrationError",
    "PostprocessorContribution",
    "get_plugin_manager",
    "hookimpl",
    "hookspec",
    "load_postprocessor_contributions",
    "reset_plugin_manager_cache",
]
