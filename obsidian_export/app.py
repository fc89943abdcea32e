"""Build a configured exporter from user settings."""

from __future__ import annotations

from pathlib import Path

from .config import ExporterConfig, ExportSettings, InvalidConfigError
from .exporter import Exporter
from .pipeline import Postprocessor
from .plugins import (
    PluginRegistrationError,
    PostprocessorContribution,
    load_postprocessor_contributions,
)
from .plugins.builtin import SOFTBREAKS_TO_HARDBREAKS, YAML_INCLUDER
from .walker import WalkOptions


def build_exporter(source: Path, destination: Path, settings: ExportSettings) -> Exporter:
    """Translate ``settings`` into an :class:`Exporter` ready to run.

    Built-in switches are expanded into registry names first, followed by
    the explicitly requested postprocessors, in order.
    """

    try:
        registry = load_postprocessor_contributions(settings)
    except PluginRegistrationError as exc:
        raise InvalidConfigError(str(exc)) from exc

    note_names: list[str] = []
    embed_names: list[str] = []
    if settings.inclusion_key:
        note_names.append(YAML_INCLUDER)
        if settings.exclude_embeds_by_frontmatter:
            embed_names.append(YAML_INCLUDER)
    if settings.hard_linebreaks:
        note_names.append(SOFTBREAKS_TO_HARDBREAKS)
    note_names.extend(settings.postprocessors)
    embed_names.extend(settings.embed_postprocessors)

    config = ExporterConfig(
        frontmatter_strategy=settings.frontmatter,
        recursive_embeds=settings.recursive_embeds,
        flat_layout=settings.flat_output,
        start_at=settings.start_at,
        yaml_inclusion_key=settings.inclusion_key,
        recursion_limit=settings.recursion_limit,
        walk_options=WalkOptions(
            ignore_filename=settings.ignore_file,
            hidden=settings.hidden,
            git=settings.git,
        ),
        note_postprocessors=_lookup(registry, note_names),
        embed_postprocessors=_lookup(registry, embed_names),
    )
    return Exporter(source, destination, config)


def _lookup(
    registry: dict[str, PostprocessorContribution], names: list[str]
) -> list[Postprocessor]:
    resolved: list[Postprocessor] = []
    for name in names:
        contribution = registry.get(name.lower())
        if contribution is None:
            available = ", ".join(sorted(registry))
            raise InvalidConfigError(
                f"Unknown postprocessor: {name}. Available: {available}."
            )
        resolved.append(contribution.postprocessor)
    return resolved


__all__ = ["build_exporter"]
