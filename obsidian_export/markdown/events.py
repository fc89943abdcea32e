"""Event vocabulary shared by the parser, the serializer and postprocessors."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union


class TagKind(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    CODE_BLOCK = "code_block"
    FOOTNOTE_DEFINITION = "footnote_definition"


@dataclass(frozen=True, slots=True)
class Tag:
    """Block span carried by matching ``Start``/``End`` events.

    ``level`` is only meaningful for headings, ``label`` for footnote
    definitions, ``fence``/``closing`` for fenced code blocks (the raw
    opening and closing fence lines; ``closing`` is empty when the block
    runs to the end of the note).
    """

    kind: TagKind
    level: int = 0
    label: str = ""
    fence: str = ""
    closing: str = ""


_ALIAS_SPLIT_RE = re.compile(r"\\?\|")


@dataclass(frozen=True, slots=True)
class Reference:
    """A parsed ``[[target#heading|alias]]`` token."""

    raw: str
    target: str
    heading: str | None = None
    alias: str | None = None
    embed: bool = False

    @classmethod
    def parse(cls, raw: str, *, embed: bool = False) -> "Reference":
        parts = _ALIAS_SPLIT_RE.split(raw, maxsplit=1)
        alias = parts[1].strip() if len(parts) == 2 else ""
        target, _, heading = parts[0].partition("#")
        return cls(
            raw=raw,
            target=target.strip(),
            heading=heading.strip() or None,
            alias=alias or None,
            embed=embed,
        )

    @property
    def is_block_reference(self) -> bool:
        return self.heading is not None and self.heading.startswith("^")

    def display(self) -> str:
        """Text shown for the reference when rendered as a regular link."""

        if self.alias:
            return self.alias
        if self.heading and self.target:
            return f"{self.target} > {self.heading}"
        return self.target or (self.heading or "")


@dataclass(slots=True)
class Text:
    text: str


@dataclass(slots=True)
class Code:
    code: str
    delimiter: str = "`"


@dataclass(frozen=True, slots=True)
class SoftBreak:
    pass


@dataclass(frozen=True, slots=True)
class HardBreak:
    pass


@dataclass(frozen=True, slots=True)
class Start:
    tag: Tag


@dataclass(frozen=True, slots=True)
class End:
    tag: Tag


@dataclass(slots=True)
class Link:
    text: str
    destination: str


@dataclass(slots=True)
class Image:
    text: str
    destination: str


@dataclass(slots=True)
class WikiLink:
    reference: Reference

    @property
    def is_embed(self) -> bool:
        return self.reference.embed


@dataclass(slots=True)
class FootnoteReference:
    label: str


Event = Union[
    Text,
    Code,
    SoftBreak,
    HardBreak,
    Start,
    End,
    Link,
    Image,
    WikiLink,
    FootnoteReference,
]

MarkdownEvents = list[Event]

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
]
