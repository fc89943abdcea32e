"""Postprocessors shipped with obsidian-export."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .context import Context
from .markdown import HardBreak, MarkdownEvents, SoftBreak
from .pipeline import PostprocessorResult

if TYPE_CHECKING:  # pragma: no cover - type check only
    from .config import ExporterConfig


def softbreaks_to_hardbreaks(
    context: Context,
    events: MarkdownEvents,
    config: "ExporterConfig",
) -> PostprocessorResult:
    """Turn every soft line break into a hard one, like Obsidian's strict line breaks."""

    for index, event in enumerate(events):
        if isinstance(event, SoftBreak):
            events[index] = HardBreak()
    return PostprocessorResult.CONTINUE


def yaml_includer(
    context: Context,
    events: MarkdownEvents,
    config: "ExporterConfig",
) -> PostprocessorResult:
    """Skip notes whose front matter does not set the inclusion key to ``true``."""

    key = config.yaml_inclusion_key
    if not key:
        return PostprocessorResult.CONTINUE
    if context.frontmatter.get(key) is True:
        return PostprocessorResult.CONTINUE
    return PostprocessorResult.STOP_AND_SKIP_NOTE


__all__ = ["softbreaks_to_hardbreaks", "yaml_includer"]
