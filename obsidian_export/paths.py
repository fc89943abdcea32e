"""Map vault-relative source paths to export destinations."""

from __future__ import annotations

import hashlib
import os
from collections import defaultdict
from enum import Enum
from pathlib import Path
from typing import Iterable

NOTE_SUFFIX = ".md"


class OutputLayout(str, Enum):
    HIERARCHY = "hierarchy"
    FLAT = "flat"


def is_note(path: Path) -> bool:
    return path.suffix.lower() == NOTE_SUFFIX


def sort_key(path: Path) -> tuple[int, str]:
    """Shortest path first, then lexicographic order."""

    posix = path.as_posix()
    return len(posix), posix


class OutputPathMapper:
    """Compute destination paths on demand.

    Under the flat layout several sources may share a file name. The first
    source of such a group by :func:`sort_key` keeps the name; the others get
    a hash of their vault-relative path appended to the stem. The hash is
    widened for the whole group until no generated name clashes with another
    generated name or with a real file name of the vault, so the result
    depends only on the vault contents and never on export order.

    Under the hierarchy layout with ``start_at``, paths are taken relative to
    it. Files outside ``start_at`` (link and embed targets that are not
    exported themselves) map through ``..`` and so never share a destination
    with an exported file.
    """

    def __init__(
        self,
        destination: Path,
        vault_files: Iterable[Path],
        *,
        layout: OutputLayout = OutputLayout.HIERARCHY,
        start_at: Path | None = None,
    ) -> None:
        self.destination = destination
        self.layout = layout
        files = list(vault_files)
        self._by_name: dict[str, list[Path]] = defaultdict(list)
        for path in files:
            self._by_name[self._flat_name(path).lower()].append(path)
        for group in self._by_name.values():
            group.sort(key=sort_key)
        # A file start_at exports that single note into the destination root.
        self._base = start_at.parent if start_at in files else start_at
        self._assigned: dict[Path, Path] = {}
        self._claimed: dict[Path, Path] = {}

    def map(self, source: Path) -> Path:
        """Return the destination for the vault-relative ``source`` path."""

        cached = self._assigned.get(source)
        if cached is not None:
            return cached

        if self.layout is OutputLayout.FLAT:
            target = self.destination / self._flat_target(source)
        else:
            target = self.destination / self._normalize(self._relative_to_base(source))

        owner = self._claimed.setdefault(target, source)
        if owner != source:
            raise ValueError(
                f"'{source}' and '{owner}' would both be exported to '{target}'"
            )
        self._assigned[source] = target
        return target

    def _relative_to_base(self, source: Path) -> Path:
        if self._base is None:
            return source
        return Path(os.path.relpath(source.as_posix(), self._base.as_posix()))

    def _flat_target(self, source: Path) -> str:
        name = self._flat_name(source)
        group = self._by_name.get(name.lower(), [source])
        if group[0] == source or source not in group:
            return name
        renamed = group[1:]
        for width in range(8, 41):
            candidates = {
                member: self._hashed_name(member, width) for member in renamed
            }
            lowered = {candidate.lower() for candidate in candidates.values()}
            if len(lowered) == len(renamed) and lowered.isdisjoint(self._by_name):
                return candidates[source]
        raise ValueError(f"No free flat destination for '{source}'")

    @classmethod
    def _hashed_name(cls, source: Path, width: int) -> str:
        name = Path(cls._flat_name(source))
        digest = hashlib.sha1(source.as_posix().encode("utf-8")).hexdigest()[:width]
        return f"{name.stem}-{digest}{name.suffix}"

    @classmethod
    def _flat_name(cls, source: Path) -> str:
        return cls._normalize(Path(source.name)).name

    @staticmethod
    def _normalize(path: Path) -> Path:
        if is_note(path):
            return path.with_suffix(NOTE_SUFFIX)
        return path


__all__ = ["NOTE_SUFFIX", "OutputLayout", "OutputPathMapper", "is_note", "sort_key"]
