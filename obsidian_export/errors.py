"""Error types raised while exporting a vault."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ExportError(RuntimeError):
    """Raised when exporting notes fails."""


class ParseError(ExportError):
    """Raised when a note's frontmatter or body cannot be parsed."""

    def __init__(self, path: Path | None, message: str) -> None:
        location = f"{path}: " if path is not None else ""
        super().__init__(f"{location}{message}")
        self.path = path
        self.message = message


class RecursionLimitExceeded(ExportError):
    """Raised when embeds nest deeper than the configured recursion limit.

    ``file_tree`` holds the chain of vault-relative paths from the root note
    down to the embed that could not be expanded.
    """

    def __init__(self, file_tree: Sequence[Path]) -> None:
        self.file_tree: tuple[Path, ...] = tuple(file_tree)
        chain = " -> ".join(str(path) for path in self.file_tree)
        super().__init__(f"{self._reason}: {chain}")

    _reason = "Embeds exceed the maximum nesting limit"


class CycleDetected(RecursionLimitExceeded):
    """Raised when a note (transitively) embeds one of its own ancestors."""

    _reason = "Embeds form a cycle"


class PostprocessorError(ExportError):
    """Raised when a postprocessor violates its calling contract."""


class FileExportError(ExportError):
    """Wraps any failure that aborted the export of a single note."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        super().__init__(f"Failed to export '{path}': {cause}")
        self.path = path
        self.cause = cause


__all__ = [
    "CycleDetected",
    "ExportError",
    "FileExportError",
    "ParseError",
    "PostprocessorError",
    "RecursionLimitExceeded",
]
