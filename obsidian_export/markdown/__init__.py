"""Markdown event stream: parsing, vocabulary and serialization."""

from __future__ import annotations

from .events import (
    Code,
    End,
    Event,
    FootnoteReference,
    HardBreak,
    Image,
    Link,
    MarkdownEvents,
    Reference,
    SoftBreak,
    Start,
    Tag,
    TagKind,
    Text,
    WikiLink,
)
from .parser import parse, parse_inline
from .render import render_inline, serialize

__all__ = [
    "Code",
    "End",
    "Event",
    "FootnoteReference",
    "HardBreak",
    "Image",
    "Link",
    "MarkdownEvents",
    "Reference",
    "SoftBreak",
    "Start",
    "Tag",
    "TagKind",
    "Text",
    "WikiLink",
    "parse",
    "parse_inline",
    "render_inline",
    "serialize",
]
