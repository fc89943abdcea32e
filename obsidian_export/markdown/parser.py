"""Lex Obsidian-flavoured markdown into a flat event stream."""

from __future__ import annotations

import re

from .events import (
    Code,
    End,
    Event,
    FootnoteReference,
    HardBreak,
    MarkdownEvents,
    Reference,
    SoftBreak,
    Start,
    Tag,
    TagKind,
    Text,
    WikiLink,
)

_FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_HEADING_RE = re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
_FOOTNOTE_DEF_RE = re.compile(r"^\[\^(?P<label>[^\]\s]+)\]:[ \t]?(?P<text>.*)$")

# Order matters: code spans hide anything inside them.
_INLINE_RE = re.compile(
    r"(?P<ticks>`+)(?P<code>.+?)(?P=ticks)"
    r"|(?P<bang>!)?\[\[(?P<wikilink>[^\[\]\n]+?)\]\]"
    r"|\[\^(?P<footnote>[^\]\s]+)\]"
)

PARAGRAPH = Tag(TagKind.PARAGRAPH)


def parse(body: str) -> MarkdownEvents:
    """Return the event stream for ``body`` (frontmatter already removed)."""

    lines = body.splitlines()
    events: MarkdownEvents = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            events.extend(_block(PARAGRAPH, paragraph))
            paragraph.clear()

    index = 0
    while index < len(lines):
        line = lines[index]
        index += 1

        fence = _FENCE_RE.match(line)
        if fence and not (fence.group("fence")[0] == "`" and "`" in fence.group("info")):
            flush()
            index = _code_block(lines, index, line, fence.group("fence"), events)
            continue

        if not line.strip():
            flush()
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            flush()
            tag = Tag(TagKind.HEADING, level=len(heading.group("hashes")))
            events.extend(_block(tag, [heading.group("text") or ""]))
            continue

        footnote = _FOOTNOTE_DEF_RE.match(line)
        if footnote:
            flush()
            block_lines = [footnote.group("text")]
            # Indented lines continue the definition.
            while index < len(lines) and lines[index][:1] in (" ", "\t") and lines[index].strip():
                block_lines.append(lines[index])
                index += 1
            tag = Tag(TagKind.FOOTNOTE_DEFINITION, label=footnote.group("label"))
            events.extend(_block(tag, block_lines))
            continue

        paragraph.append(line)

    flush()
    return events


def parse_inline(text: str) -> list[Event]:
    """Split a single line into inline events."""

    events: list[Event] = []
    position = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > position:
            events.append(Text(text[position : match.start()]))
        if match.group("ticks"):
            events.append(Code(match.group("code"), delimiter=match.group("ticks")))
        elif match.group("wikilink") is not None:
            embed = match.group("bang") is not None
            events.append(WikiLink(Reference.parse(match.group("wikilink"), embed=embed)))
        else:
            events.append(FootnoteReference(match.group("footnote")))
        position = match.end()
    if position < len(text):
        events.append(Text(text[position:]))
    return events


def _block(tag: Tag, lines: list[str]) -> MarkdownEvents:
    events: MarkdownEvents = [Start(tag)]
    last = len(lines) - 1
    for number, line in enumerate(lines):
        if number == last:
            events.extend(parse_inline(line.rstrip()))
            break
        if line.endswith("  "):
            events.extend(parse_inline(line.rstrip()))
            events.append(HardBreak())
        elif line.endswith("\\"):
            events.extend(parse_inline(line[:-1]))
            events.append(HardBreak())
        else:
            events.extend(parse_inline(line))
            events.append(SoftBreak())
    events.append(End(tag))
    return events


def _code_block(
    lines: list[str], index: int, opening: str, fence: str, events: MarkdownEvents
) -> int:
    closing_re = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")
    content: list[str] = []
    closing = ""
    while index < len(lines):
        line = lines[index]
        index += 1
        if closing_re.match(line):
            closing = line
            break
        content.append(line)

    tag = Tag(TagKind.CODE_BLOCK, fence=opening, closing=closing)
    events.append(Start(tag))
    if content:
        events.append(Text("\n".join(content) + "\n"))
    events.append(End(tag))
    return index


__all__ = ["parse", "parse_inline"]
