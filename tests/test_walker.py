from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest
from obsidian_export.walker import IgnoreRule, WalkOptions, is_ignored, walk_vault


def _walk(root: Path, **options) -> list[str]:
    return [path.as_posix() for path in walk_vault(root, WalkOptions(**options))]


def test_walk_is_sorted_and_relative(write_vault) -> None:
    vault = write_vault({"b.md": "", "a/z.md": "", "a/c.png": b""})

    assert _walk(vault, git=False) == ["a/c.png", "a/z.md", "b.md"]


def test_hidden_entries_are_skipped_by_default(write_vault) -> None:
    vault = write_vault({".obsidian/app.json": "{}", ".draft.md": "", "note.md": ""})

    assert _walk(vault, git=False) == ["note.md"]
    assert _walk(vault, git=False, hidden=True) == [
        ".draft.md",
        ".obsidian/app.json",
        "note.md",
    ]


def test_ignore_file_patterns(write_vault) -> None:
    vault = write_vault(
        {
            ".export-ignore": "*.tmp\n# comment\ndrafts/\n/top.md\n!keep.tmp\n",
            "a.tmp": "",
            "keep.tmp": "",
            "top.md": "",
            "sub/top.md": "",
            "drafts/d.md": "",
            "note.md": "",
        }
    )

    assert _walk(vault, git=False) == ["keep.tmp", "note.md", "sub/top.md"]


def test_nested_ignore_file_applies_to_its_directory(write_vault) -> None:
    vault = write_vault(
        {
            "sub/.export-ignore": "private.md\n",
            "sub/private.md": "",
            "private.md": "",
        }
    )

    assert _walk(vault, git=False) == ["private.md"]


def test_custom_ignore_filename(write_vault) -> None:
    vault = write_vault({"skip.txt": "a.md\n", "a.md": "", "b.md": ""})

    assert _walk(vault, git=False, ignore_filename="skip.txt") == ["b.md"]


def test_ignore_rule_parsing() -> None:
    base = Path("/vault")

    assert IgnoreRule.parse(base, "   ") is None
    assert IgnoreRule.parse(base, "# note") is None
    rule = IgnoreRule.parse(base, "!logs/")
    assert rule == IgnoreRule(base, "logs", negate=True, directory_only=True)
    assert IgnoreRule.parse(base, "a/b.md").anchored


def test_last_matching_rule_wins() -> None:
    base = Path("/vault")
    rules = [IgnoreRule.parse(base, "*.md"), IgnoreRule.parse(base, "!keep.md")]

    assert is_ignored(Path("/vault/x.md"), rules, is_dir=False)
    assert not is_ignored(Path("/vault/keep.md"), rules, is_dir=False)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_gitignore_rules_are_honoured(write_vault) -> None:
    vault = write_vault({".gitignore": "ignored.md\n", "ignored.md": "", "kept.md": ""})
    subprocess.run(["git", "init", "-q"], cwd=vault, check=True)

    assert _walk(vault) == ["kept.md"]
    assert _walk(vault, git=False) == ["ignored.md", "kept.md"]


def test_outside_git_work_tree_nothing_is_filtered(write_vault) -> None:
    vault = write_vault({"a.md": ""})

    assert _walk(vault, git=True) == ["a.md"]
