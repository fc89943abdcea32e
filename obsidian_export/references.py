"""Resolve wikilinks to vault files and rewrite them as relative links."""

from __future__ import annotations

import os
import re
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable
from urllib.parse import quote

from loguru import logger

from .context import Context
from .markdown import Image, Link, MarkdownEvents, Reference, WikiLink
from .paths import NOTE_SUFFIX, OutputPathMapper, sort_key


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of looking up a reference target in the vault.

    ``path`` is set for resolved and ambiguous outcomes; ``candidates`` lists
    every matching file in preference order.
    """

    status: ResolutionStatus
    path: Path | None = None
    candidates: tuple[Path, ...] = ()

    @property
    def found(self) -> bool:
        return self.path is not None


# Obsidian's image size syntax: ![[pic.png|100]] or ![[pic.png|100x200]].
_SIZE_HINT_RE = re.compile(r"^\d+(?:x\d+)?$")


def slugify(value: str) -> str:
    value = value.strip().lower()
    slug = re.sub(r"[^\w]+", "-", value)
    return slug.strip("-")


class VaultIndex:
    """Case-insensitive lookup of vault files by name or path suffix."""

    def __init__(self, files: Iterable[Path]) -> None:
        self.files: tuple[Path, ...] = tuple(sorted(files, key=sort_key))
        self._by_name: dict[str, list[Path]] = defaultdict(list)
        for path in self.files:
            self._by_name[path.name.lower()].append(path)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def lookup(self, target: str, current_file: Path) -> Resolution:
        """Find the file ``target`` refers to from within ``current_file``.

        An empty target refers to the current note. Otherwise the target must
        equal a vault-relative path or be a ``/``-separated suffix of one,
        with or without the ``.md`` extension. Several matches are settled by
        preferring the shortest path, then lexicographic order.
        """

        needle = target.replace("\\", "/").strip().strip("/").lower()
        if not needle:
            return Resolution(ResolutionStatus.RESOLVED, current_file, (current_file,))

        matches: set[Path] = set()
        for key in (needle, needle + NOTE_SUFFIX):
            name = key.rsplit("/", 1)[-1]
            for path in self._by_name.get(name, ()):
                posix = path.as_posix().lower()
                if posix == key or posix.endswith("/" + key):
                    matches.add(path)

        if not matches:
            return Resolution(ResolutionStatus.UNRESOLVED)
        candidates = tuple(sorted(matches, key=sort_key))
        if len(candidates) == 1:
            return Resolution(ResolutionStatus.RESOLVED, candidates[0], candidates)
        return Resolution(ResolutionStatus.AMBIGUOUS, candidates[0], candidates)


class LinkResolver:
    """Turns references into concrete vault paths and relative links.

    Links are made relative to the destination of the root note, since that
    is the file the content of every embedded note ends up in.
    """

    def __init__(self, index: VaultIndex, mapper: OutputPathMapper) -> None:
        self.index = index
        self.mapper = mapper

    def resolve(self, current_file: Path, reference: Reference) -> Resolution:
        resolution = self.index.lookup(reference.target, current_file)
        if resolution.status is ResolutionStatus.AMBIGUOUS:
            others = ", ".join(str(path) for path in resolution.candidates[1:])
            logger.info(
                f"{current_file}: '{reference.target}' is ambiguous; "
                f"using {resolution.path} over {others}"
            )
        elif resolution.status is ResolutionStatus.UNRESOLVED:
            kind = "embed" if reference.embed else "link"
            logger.warning(
                f"{current_file}: unable to resolve {kind} '{reference.raw}', left as text"
            )
        return resolution

    def rewrite_links(self, events: MarkdownEvents, context: Context) -> None:
        """Replace resolvable plain wikilinks in ``events`` with markdown links."""

        for index, event in enumerate(events):
            if not isinstance(event, WikiLink) or event.is_embed:
                continue
            resolution = self.resolve(context.current_file, event.reference)
            if resolution.path is not None:
                events[index] = self.link_for(event.reference, resolution.path, context)

    def link_for(self, reference: Reference, target: Path, context: Context) -> Link:
        return Link(
            text=reference.display(),
            destination=self.destination_for(reference, target, context),
        )

    def image_for(self, reference: Reference, target: Path, context: Context) -> Image:
        alias = reference.alias
        if alias and _SIZE_HINT_RE.match(alias):
            logger.debug(f"{context.current_file}: dropping size hint '{alias}' for {target}")
            alias = None
        return Image(
            text=alias or target.name,
            destination=self.destination_for(reference, target, context),
        )

    def destination_for(self, reference: Reference, target: Path, context: Context) -> str:
        """Relative, percent-encoded link from the root note to ``target``."""

        origin = self.mapper.map(context.root_file)
        relative = os.path.relpath(self.mapper.map(target), start=origin.parent)
        destination = quote(Path(relative).as_posix(), safe="/")
        if reference.heading:
            if reference.is_block_reference:
                fragment = reference.heading
            else:
                fragment = slugify(reference.heading)
            destination = f"{destination}#{fragment}"
        return destination


__all__ = [
    "LinkResolver",
    "Resolution",
    "ResolutionStatus",
    "VaultIndex",
    "slugify",
]
