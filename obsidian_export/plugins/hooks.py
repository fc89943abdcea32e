"""Pluggy namespace, markers and hook specifications for postprocessor plugins.

A plugin is any module or object with a ``postprocessors`` hook
implementation. Installed distributions expose theirs through the
``obsidian_export.plugins`` entry-point group::

    [project.entry-points."obsidian_export.plugins"]
    my_plugin = "my_package.plugin"
"""

from __future__ import annotations

from collections.abc import Iterable

import pluggy

from ..config import ExportSettings
from .types import PostprocessorContribution

PLUGIN_NAMESPACE = "obsidian_export"
ENTRY_POINT_GROUP = "obsidian_export.plugins"

hookspec = pluggy.HookspecMarker(PLUGIN_NAMESPACE)
hookimpl = pluggy.HookimplMarker(PLUGIN_NAMESPACE)


class PostprocessorHookSpec:
    @hookspec
    def postprocessors(self, settings: ExportSettings) -> Iterable[PostprocessorContribution]:
        """Return the named postprocessors this plugin offers.

        A single contribution may be returned instead of an iterable.
        ``settings`` holds the options of the current run.
        """


__all__ = [
    "ENTRY_POINT_GROUP",
    "PLUGIN_NAMESPACE",
    "PostprocessorHookSpec",
    "hookimpl",
    "hookspec",
]
