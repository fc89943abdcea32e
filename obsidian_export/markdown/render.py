"""Serialize an event stream back to markdown text."""

from __future__ import annotations

from typing import Iterable

from .events import (
    Code,
    End,
    Event,
    FootnoteReference,
    HardBreak,
    Image,
    Link,
    SoftBreak,
    Start,
    TagKind,
    Text,
    WikiLink,
)


class _Writer:
    def __init__(self) -> None:
        self._chunks: list[str] = []
        # Set after a block closes; inline content that follows (text after a
        # spliced embed) is moved into a block of its own.
        self._after_block = False
        # Set while a heading prefix is the last thing written.
        self._bare_heading = False

    def write(self, text: str) -> None:
        if text:
            self._chunks.append(text)
            self._bare_heading = False

    def heading(self, level: int) -> None:
        self._chunks.append("#" * level + " ")
        self._bare_heading = True

    def inline(self, text: str) -> None:
        if self._after_block:
            self.block_break()
            text = text.lstrip()
        self.write(text)

    def line_break(self, text: str) -> None:
        if not self._after_block:
            self.write(text)

    def block_break(self) -> None:
        # A heading whose only content is a spliced block has nothing to say.
        if self._bare_heading:
            self._chunks.pop()
            self._bare_heading = False
        self._after_block = False
        self._trim()
        if self._chunks:
            self._chunks.append("\n\n")

    def close_block(self) -> None:
        self._after_block = True
        self._bare_heading = False

    def getvalue(self) -> str:
        self._trim()
        if not self._chunks:
            return ""
        return "".join(self._chunks) + "\n"

    def _trim(self) -> None:
        while self._chunks:
            last = self._chunks[-1].rstrip(" \t\n")
            if last:
                self._chunks[-1] = last
                return
            self._chunks.pop()


def serialize(events: Iterable[Event]) -> str:
    """Return markdown for ``events``; non-empty output ends with a newline."""

    writer = _Writer()
    for event in events:
        if isinstance(event, Start):
            writer.block_break()
            tag = event.tag
            if tag.kind is TagKind.HEADING:
                writer.heading(tag.level)
            elif tag.kind is TagKind.CODE_BLOCK:
                writer.write(tag.fence + "\n")
            elif tag.kind is TagKind.FOOTNOTE_DEFINITION:
                writer.write(f"[^{tag.label}]: ")
        elif isinstance(event, End):
            if event.tag.kind is TagKind.CODE_BLOCK:
                writer.write(event.tag.closing)
            writer.close_block()
        elif isinstance(event, Text):
            writer.inline(event.text)
        elif isinstance(event, SoftBreak):
            writer.line_break("\n")
        elif isinstance(event, HardBreak):
            writer.line_break("  \n")
        else:
            writer.inline(render_inline(event))
    return writer.getvalue()


def render_inline(event: Event) -> str:
    """Render a single inline event that carries its own markup."""

    if isinstance(event, Code):
        return f"{event.delimiter}{event.code}{event.delimiter}"
    if isinstance(event, WikiLink):
        prefix = "!" if event.is_embed else ""
        return f"{prefix}[[{event.reference.raw}]]"
    if isinstance(event, Link):
        return f"[{event.text}]({event.destination})"
    if isinstance(event, Image):
        return f"![{event.text}]({event.destination})"
    if isinstance(event, FootnoteReference):
        return f"[^{event.label}]"
    if isinstance(event, Text):
        return event.text
    raise TypeError(f"Cannot render {type(event).__name__} inline")


__all__ = ["render_inline", "serialize"]
