"""Postprocessors bundled with obsidian-export, exposed as a plugin."""

from __future__ import annotations

from ..config import ExportSettings
from ..postprocessors import softbreaks_to_hardbreaks, yaml_includer
from .hooks import hookimpl
from .types import PostprocessorContribution

SOFTBREAKS_TO_HARDBREAKS = "softbreaks-to-hardbreaks"
YAML_INCLUDER = "yaml-includer"


@hookimpl
def postprocessors(settings: ExportSettings) -> tuple[PostprocessorContribution, ...]:
    return (
        PostprocessorContribution(
            name=SOFTBREAKS_TO_HARDBREAKS,
            postprocessor=softbreaks_to_hardbreaks,
            description="Convert soft line breaks to hard line breaks",
        ),
        PostprocessorContribution(
            name=YAML_INCLUDER,
            postprocessor=yaml_includer,
            description="Only keep notes whose inclusion key is set to true",
        ),
    )


__all__ = ["SOFTBREAKS_TO_HARDBREAKS", "YAML_INCLUDER", "postprocessors"]
