"""Type definitions for obsidian-export plugin contracts."""

from __future__ import annotations

from dataclasses import dataclass

from ..pipeline import Postprocessor


@dataclass(slots=True, frozen=True)
class PostprocessorContribution:
    """A named postprocessor offered by a plugin."""

    name: str
    postprocessor: Postprocessor
    description: str = ""


__all__ = ["PostprocessorContribution"]
