"""Per-note state handed to postprocessors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .frontmatter import Frontmatter


@dataclass(slots=True)
class Context:
    """State of one pipeline invocation (a root note or an embedded note).

    ``frontmatter`` always belongs to ``current_file``. ``destination`` is
    where a root note is written; postprocessors may change it. It is
    computed for embedded notes too but never consulted for them.
    """

    current_file: Path
    root_file: Path
    destination: Path
    frontmatter: Frontmatter = field(default_factory=dict)

    @property
    def is_root_note(self) -> bool:
        return self.current_file == self.root_file


__all__ = ["Context"]
