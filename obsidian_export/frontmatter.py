"""Front matter splitting, strategy resolution and rendering."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .errors import ParseError

FRONTMATTER_DELIM = "---"

Frontmatter = dict[str, Any]


class FrontmatterStrategy(str, Enum):
    """Whether exported notes carry a YAML front matter block."""

    ALWAYS = "always"
    NEVER = "never"
    AUTO = "auto"


def split_frontmatter(raw: bytes | str, *, path: Path | None = None) -> tuple[Frontmatter, str]:
    """Split ``raw`` note content into its front matter mapping and body.

    A block is only recognised when the very first line is ``---``. The block
    must be closed by another ``---`` line and hold a YAML mapping with
    string keys (or nothing at all); anything else raises :class:`ParseError`.
    """

    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(path, f"Note is not valid UTF-8: {exc}") from exc
    else:
        text = raw

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FRONTMATTER_DELIM:
        return {}, text

    closing_index = next(
        (idx for idx in range(1, len(lines)) if lines[idx].rstrip() == FRONTMATTER_DELIM),
        None,
    )
    if closing_index is None:
        raise ParseError(path, "Front matter block is opened but never closed")

    metadata_block = "".join(lines[1:closing_index])
    body = "".join(lines[closing_index + 1 :])

    try:
        loaded = yaml.safe_load(metadata_block)
    except yaml.YAMLError as exc:
        raise ParseError(path, f"Invalid YAML in front matter: {exc}") from exc

    if loaded is None:
        return {}, body
    if not isinstance(loaded, dict):
        raise ParseError(
            path,
            f"Front matter must be a mapping, got {type(loaded).__name__}",
        )
    for key in loaded:
        if not isinstance(key, str):
            raise ParseError(
                path,
                f"Front matter keys must be strings, got {type(key).__name__} key {key!r}",
            )
    return loaded, body


def resolve_frontmatter(
    strategy: FrontmatterStrategy, frontmatter: Frontmatter
) -> Frontmatter | None:
    """Return the mapping to emit for ``strategy``, or ``None`` to omit it."""

    if strategy is FrontmatterStrategy.ALWAYS:
        return frontmatter
    if strategy is FrontmatterStrategy.NEVER:
        return None
    return frontmatter if frontmatter else None


def render_document(frontmatter: Frontmatter | None, body: str) -> str:
    if frontmatter is None:
        return body
    if frontmatter:
        payload = yaml.safe_dump(
            frontmatter,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        ).strip()
        block = f"{FRONTMATTER_DELIM}\n{payload}\n{FRONTMATTER_DELIM}\n"
    else:
        block = f"{FRONTMATTER_DELIM}\n{FRONTMATTER_DELIM}\n"
    if body:
        return f"{block}\n{body}"
    return block


__all__ = [
    "FRONTMATTER_DELIM",
    "Frontmatter",
    "FrontmatterStrategy",
    "render_document",
    "resolve_frontmatter",
    "split_frontmatter",
]
