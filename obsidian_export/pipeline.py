"""Ordered postprocessor chains and their control-flow outcomes."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol, Sequence

from loguru import logger

from .context import Context
from .errors import PostprocessorError
from .markdown import MarkdownEvents

if TYPE_CHECKING:  # pragma: no cover - type check only
    from .config import ExporterConfig


class PostprocessorResult(Enum):
    """Outcome returned by every postprocessor."""

    CONTINUE = "continue"
    STOP_HERE = "stop_here"
    STOP_AND_SKIP_NOTE = "stop_and_skip_note"


class Postprocessor(Protocol):
    """Callable that may mutate the context and events of one note in place."""

    def __call__(
        self,
        context: Context,
        events: MarkdownEvents,
        config: "ExporterConfig",
    ) -> PostprocessorResult:  # pragma: no cover - Protocol
        """Transform the note and report how the chain should proceed."""


def run_postprocessors(
    postprocessors: Sequence[Postprocessor],
    context: Context,
    events: MarkdownEvents,
    config: "ExporterConfig",
) -> PostprocessorResult:
    """Invoke ``postprocessors`` in order until one of them stops the chain.

    Returns ``CONTINUE`` when every postprocessor continued, otherwise the
    stopping result. Callers treat ``STOP_HERE`` like ``CONTINUE``.
    """

    for position, postprocessor in enumerate(postprocessors):
        result = postprocessor(context, events, config)
        if not isinstance(result, PostprocessorResult):
            name = getattr(postprocessor, "__name__", repr(postprocessor))
            raise PostprocessorError(
                f"Postprocessor #{position} ({name}) returned {result!r} "
                "instead of a PostprocessorResult"
            )
        if result is PostprocessorResult.CONTINUE:
            continue
        logger.debug(f"{context.current_file}: postprocessor #{position} returned {result.name}")
        return result
    return PostprocessorResult.CONTINUE


__all__ = ["Postprocessor", "PostprocessorResult", "run_postprocessors"]
