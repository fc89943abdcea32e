"""Recursive expansion of ``![[embed]]`` references."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable

from loguru import logger

from .context import Context
from .errors import CycleDetected, RecursionLimitExceeded
from .markdown import End, Link, MarkdownEvents, Reference, Start, TagKind, Text, WikiLink
from .paths import is_note
from .references import LinkResolver

# Runs the full pipeline for an embedded note. Receives the note's path, the
# ancestry trace (already containing that path) and the root note's path.
# Returns None when an embed postprocessor skipped the note.
EmbedRunner = Callable[[Path, list[Path], Path], MarkdownEvents | None]


class EmbedOutcome(str, Enum):
    SPLICED = "spliced"
    SKIPPED = "skipped"
    LITERAL = "literal"
    LINKED = "linked"


class EmbedExpander:
    """Replace embed references with the content of the notes they name.

    Embeds are handled left to right. A nested note is expanded completely
    (its own embeds first) before it is spliced into its parent. ``trace``
    is the ancestry stack from the root note down to the note whose events
    are being expanded.
    """

    def __init__(
        self,
        resolver: LinkResolver,
        run_embedded: EmbedRunner,
        *,
        recursive: bool = True,
        recursion_limit: int = 10,
    ) -> None:
        self.resolver = resolver
        self.run_embedded = run_embedded
        self.recursive = recursive
        self.recursion_limit = recursion_limit

    def expand(self, events: MarkdownEvents, context: Context, trace: list[Path]) -> None:
        index = 0
        while index < len(events):
            event = events[index]
            if not isinstance(event, WikiLink) or not event.is_embed:
                index += 1
                continue

            outcome, replacement = self.expand_one(event.reference, context, trace)
            logger.debug(f"{context.current_file}: embed '{event.reference.raw}' {outcome.value}")
            if outcome is EmbedOutcome.LITERAL:
                index += 1
                continue
            events[index : index + 1] = replacement
            index += len(replacement)

    def expand_one(
        self, reference: Reference, context: Context, trace: list[Path]
    ) -> tuple[EmbedOutcome, MarkdownEvents]:
        resolution = self.resolver.resolve(context.current_file, reference)
        if resolution.path is None:
            return EmbedOutcome.LITERAL, []
        target = resolution.path

        if not is_note(target):
            image = self.resolver.image_for(reference, target, context)
            return EmbedOutcome.LINKED, [image]
        if not self.recursive:
            link = self.resolver.link_for(reference, target, context)
            return EmbedOutcome.LINKED, [link]

        if target in trace:
            raise CycleDetected([*trace, target])
        if len(trace) + 1 > self.recursion_limit:
            raise RecursionLimitExceeded([*trace, target])

        trace.append(target)
        try:
            embedded = self.run_embedded(target, trace, context.root_file)
        finally:
            trace.pop()

        if embedded is None:
            return EmbedOutcome.SKIPPED, []
        if reference.heading and not reference.is_block_reference:
            embedded = extract_section(embedded, reference.heading, target)
        return EmbedOutcome.SPLICED, embedded


def extract_section(events: MarkdownEvents, heading: str, path: Path) -> MarkdownEvents:
    """Return the events of the section titled ``heading``.

    The section runs from the heading up to the next heading of the same or
    a higher level. The whole note is returned when no heading matches.
    """

    wanted = heading.strip().lower()
    start: int | None = None
    level = 0
    for index, event in enumerate(events):
        if not isinstance(event, Start) or event.tag.kind is not TagKind.HEADING:
            continue
        if start is not None:
            if event.tag.level <= level:
                return events[start:index]
            continue
        if _heading_text(events, index).strip().lower() == wanted:
            start = index
            level = event.tag.level

    if start is None:
        logger.warning(f"{path}: heading '{heading}' not found, embedding the whole note")
        return events
    return events[start:]


def _heading_text(events: MarkdownEvents, start: int) -> str:
    parts: list[str] = []
    for event in events[start + 1 :]:
        if isinstance(event, End):
            break
        if isinstance(event, (Text, Link)):
            parts.append(event.text)
        elif isinstance(event, WikiLink):
            parts.append(event.reference.display())
    return "".join(parts)


__all__ = ["EmbedExpander", "EmbedOutcome", "EmbedRunner", "extract_section"]
