"""Enumerate the files of a vault, honouring hidden, ignore-file and git rules."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

DEFAULT_IGNORE_FILENAME = ".export-ignore"


@dataclass(frozen=True, slots=True)
class WalkOptions:
    """Controls which vault files are considered for export."""

    ignore_filename: str = DEFAULT_IGNORE_FILENAME
    hidden: bool = False
    git: bool = True


@dataclass(frozen=True, slots=True)
class IgnoreRule:
    """One line of an ignore file, scoped to the directory that holds it."""

    base: Path
    pattern: str
    negate: bool = False
    directory_only: bool = False
    anchored: bool = False

    @classmethod
    def parse(cls, base: Path, line: str) -> "IgnoreRule | None":
        text = line.strip()
        if not text or text.startswith("#"):
            return None
        negate = text.startswith("!")
        if negate:
            text = text[1:]
        directory_only = text.endswith("/")
        text = text.rstrip("/")
        anchored = text.startswith("/") or "/" in text
        text = text.lstrip("/")
        if not text:
            return None
        return cls(
            base=base,
            pattern=text,
            negate=negate,
            directory_only=directory_only,
            anchored=anchored,
        )

    def matches(self, path: Path, *, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        try:
            relative = path.relative_to(self.base).as_posix()
        except ValueError:
            return False
        if self.anchored:
            return fnmatchcase(relative, self.pattern)
        return fnmatchcase(path.name, self.pattern)


def load_ignore_rules(path: Path) -> list[IgnoreRule]:
    """Read ignore rules from ``path``; a missing file yields no rules."""

    if not path.is_file():
        return []
    rules = []
    for line in path.read_text(encoding="utf-8").splitlines():
        rule = IgnoreRule.parse(path.parent, line)
        if rule is not None:
            rules.append(rule)
    return rules


def is_ignored(path: Path, rules: Iterable[IgnoreRule], *, is_dir: bool) -> bool:
    """Apply ``rules`` in order; the last matching rule wins."""

    ignored = False
    for rule in rules:
        if rule.matches(path, is_dir=is_dir):
            ignored = not rule.negate
    return ignored


class GitIgnoreFilter:
    """Ask git which paths are ignored inside a work tree."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def ignored(self, paths: list[Path]) -> set[Path]:
        if not paths:
            return set()
        payload = "\0".join(path.as_posix() for path in paths) + "\0"
        try:
            process = subprocess.run(
                ["git", "check-ignore", "--stdin", "-z"],
                cwd=self.root,
                input=payload,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.debug("git executable not found; .gitignore rules are not applied")
            return set()

        # Exit status 1 means nothing matched; anything above that means the
        # source is not inside a work tree.
        if process.returncode == 1:
            return set()
        if process.returncode != 0:
            stderr = process.stderr.strip()
            logger.debug(f"git check-ignore unavailable for {self.root}: {stderr}")
            return set()
        return {Path(item) for item in process.stdout.split("\0") if item}


def walk_vault(root: Path, options: WalkOptions | None = None) -> Iterator[Path]:
    """Yield vault-relative paths of all exportable files under ``root``.

    Paths are produced in sorted order so repeated runs see the vault the
    same way.
    """

    options = options or WalkOptions()
    candidates = list(_walk(root, root, [], options))
    if options.git:
        ignored = GitIgnoreFilter(root).ignored(candidates)
        if ignored:
            logger.debug(f"Skipping {len(ignored)} file(s) ignored by git")
        candidates = [path for path in candidates if path not in ignored]
    yield from candidates


def _walk(
    root: Path,
    directory: Path,
    inherited: list[IgnoreRule],
    options: WalkOptions,
) -> Iterator[Path]:
    rules = inherited + load_ignore_rules(directory / options.ignore_filename)
    for entry in sorted(directory.iterdir(), key=lambda item: item.name):
        if entry.name in (options.ignore_filename, ".git"):
            continue
        if not options.hidden and entry.name.startswith("."):
            continue
        is_dir = entry.is_dir()
        if is_ignored(entry, rules, is_dir=is_dir):
            continue
        if is_dir:
            yield from _walk(root, entry, rules, options)
        elif entry.is_file():
            yield entry.relative_to(root)


__all__ = [
    "DEFAULT_IGNORE_FILENAME",
    "GitIgnoreFilter",
    "IgnoreRule",
    "WalkOptions",
    "is_ignored",
    "load_ignore_rules",
    "walk_vault",
]
