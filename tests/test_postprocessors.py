from __future__ import annotations

from pathlib import Path

import pytest
from obsidian_export import (
    Context,
    Exporter,
    ExporterConfig,
    MarkdownEvents,
    PostprocessorResult,
)
from obsidian_export.markdown import HardBreak, SoftBreak, Text
from obsidian_export.postprocessors import softbreaks_to_hardbreaks, yaml_includer

NOTE = """
---
is_root_note: true
---

# Note

This is foo.

![[Embedded]]
"""

EMBEDDED = """
---
is_root_note: false
---

Embedded foo.
"""


@pytest.fixture
def vault(write_vault) -> Path:
    return write_vault({"Note.md": NOTE, "Embedded.md": EMBEDDED})


def foo_to_bar(context: Context, events: MarkdownEvents, config) -> PostprocessorResult:
    for event in events:
        if isinstance(event, Text):
            event.text = event.text.replace("foo", "bar")
    return PostprocessorResult.CONTINUE


def append_frontmatter(context: Context, events: MarkdownEvents, config) -> PostprocessorResult:
    context.frontmatter["foo"] = "bar"
    return PostprocessorResult.CONTINUE


def stop_here(context, events, config) -> PostprocessorResult:
    return PostprocessorResult.STOP_HERE


def skip_note(context, events, config) -> PostprocessorResult:
    return PostprocessorResult.STOP_AND_SKIP_NOTE


def test_note_postprocessor_sees_spliced_embeds(vault: Path, output_dir: Path) -> None:
    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(foo_to_bar)

    report = exporter.run()

    assert report.ok
    assert (output_dir / "Note.md").read_text(encoding="utf-8") == (
        "---\nis_root_note: true\n---\n\n# Note\n\nThis is bar.\n\nEmbedded bar.\n"
    )
    assert (output_dir / "Embedded.md").read_text(encoding="utf-8") == (
        "---\nis_root_note: false\n---\n\nEmbedded bar.\n"
    )


def test_postprocessor_can_extend_frontmatter(vault: Path, output_dir: Path) -> None:
    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(append_frontmatter)

    exporter.run()

    assert (output_dir / "Note.md").read_text(encoding="utf-8").startswith(
        "---\nis_root_note: true\nfoo: bar\n---\n"
    )


def test_frontmatter_added_to_plain_note_is_emitted(write_vault, output_dir: Path) -> None:
    vault = write_vault({"Plain.md": "Body\n"})
    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(append_frontmatter)

    exporter.run()

    assert (output_dir / "Plain.md").read_text(encoding="utf-8") == (
        "---\nfoo: bar\n---\n\nBody\n"
    )


def test_plain_note_without_additions_has_no_frontmatter(
    write_vault, output_dir: Path
) -> None:
    vault = write_vault({"Plain.md": "Body\n"})
    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(foo_to_bar)

    exporter.run()

    assert (output_dir / "Plain.md").read_text(encoding="utf-8") == "Body\n"


def test_embedded_frontmatter_changes_are_discarded(vault: Path, output_dir: Path) -> None:
    exporter = Exporter(vault, output_dir)
    exporter.add_embed_postprocessor(append_frontmatter)

    exporter.run()

    assert "foo: bar" not in (output_dir / "Note.md").read_text(encoding="utf-8")


def test_stop_here_skips_remaining_postprocessors(vault: Path, output_dir: Path) -> None:
    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(stop_here)
    exporter.add_postprocessor(foo_to_bar)

    report = exporter.run()

    assert len(report.written) == 2
    assert "This is foo." in (output_dir / "Note.md").read_text(encoding="utf-8")


def test_stop_and_skip_note_writes_nothing(vault: Path, output_dir: Path) -> None:
    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(skip_note)
    exporter.add_postprocessor(foo_to_bar)

    report = exporter.run()

    assert report.written == []
    assert report.skipped == [Path("Embedded.md"), Path("Note.md")]
    assert list(output_dir.iterdir()) == []


def test_skipped_embed_contributes_nothing(vault: Path, output_dir: Path) -> None:
    exporter = Exporter(vault, output_dir)
    exporter.add_embed_postprocessor(skip_note)

    exporter.run()

    assert (output_dir / "Note.md").read_text(encoding="utf-8") == (
        "---\nis_root_note: true\n---\n\n# Note\n\nThis is foo.\n"
    )
    # Embed postprocessors never run for root notes.
    assert (output_dir / "Embedded.md").exists()


def test_embed_postprocessor_changes_spliced_content(vault: Path, output_dir: Path) -> None:
    exporter = Exporter(vault, output_dir)
    exporter.add_embed_postprocessor(foo_to_bar)

    exporter.run()

    note = (output_dir / "Note.md").read_text(encoding="utf-8")
    assert "This is foo." in note
    assert "Embedded bar." in note
    assert "Embedded foo." in (output_dir / "Embedded.md").read_text(encoding="utf-8")


def test_postprocessor_can_change_destination(vault: Path, output_dir: Path) -> None:
    def move(context: Context, events, config) -> PostprocessorResult:
        if context.current_file == Path("Note.md"):
            context.destination = context.destination.with_name("MovedNote.md")
        return PostprocessorResult.CONTINUE

    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(move)

    report = exporter.run()

    assert (output_dir / "MovedNote.md").exists()
    assert not (output_dir / "Note.md").exists()
    assert output_dir / "MovedNote.md" in report.written


def test_context_distinguishes_root_and_embedded_notes(vault: Path, output_dir: Path) -> None:
    seen_root: list[tuple[Path, bool, object]] = []
    seen_embed: list[tuple[Path, Path, bool, object]] = []

    def record_root(context: Context, events, config) -> PostprocessorResult:
        seen_root.append(
            (context.current_file, context.is_root_note, context.frontmatter["is_root_note"])
        )
        return PostprocessorResult.CONTINUE

    def record_embed(context: Context, events, config) -> PostprocessorResult:
        seen_embed.append(
            (
                context.current_file,
                context.root_file,
                context.is_root_note,
                context.frontmatter["is_root_note"],
            )
        )
        return PostprocessorResult.CONTINUE

    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(record_root)
    exporter.add_embed_postprocessor(record_embed)

    exporter.run()

    assert seen_root == [
        (Path("Embedded.md"), True, False),
        (Path("Note.md"), True, True),
    ]
    assert seen_embed == [(Path("Embedded.md"), Path("Note.md"), False, False)]


def test_softbreaks_to_hardbreaks_rewrites_every_soft_break() -> None:
    events: MarkdownEvents = [Text("a"), SoftBreak(), Text("b"), SoftBreak(), Text("c")]
    context = Context(Path("n.md"), Path("n.md"), Path("out/n.md"))

    result = softbreaks_to_hardbreaks(context, events, ExporterConfig())

    assert result is PostprocessorResult.CONTINUE
    assert events == [Text("a"), HardBreak(), Text("b"), HardBreak(), Text("c")]


def test_softbreaks_to_hardbreaks_export(write_vault, output_dir: Path) -> None:
    vault = write_vault({"Note.md": "line one\nline two\n"})
    exporter = Exporter(vault, output_dir)
    exporter.add_postprocessor(softbreaks_to_hardbreaks)

    exporter.run()

    assert (output_dir / "Note.md").read_text(encoding="utf-8") == "line one  \nline two\n"


@pytest.mark.parametrize(
    "frontmatter, expected",
    [
        ({"export": True}, PostprocessorResult.CONTINUE),
        ({"export": False}, PostprocessorResult.STOP_AND_SKIP_NOTE),
        ({"export": "true"}, PostprocessorResult.STOP_AND_SKIP_NOTE),
        ({}, PostprocessorResult.STOP_AND_SKIP_NOTE),
    ],
)
def test_yaml_includer_requires_boolean_true(frontmatter, expected) -> None:
    context = Context(Path("n.md"), Path("n.md"), Path("out/n.md"), frontmatter)
    config = ExporterConfig(yaml_inclusion_key="export")

    assert yaml_includer(context, [], config) is expected


def test_yaml_includer_without_key_includes_everything() -> None:
    context = Context(Path("n.md"), Path("n.md"), Path("out/n.md"))

    assert yaml_includer(context, [], ExporterConfig()) is PostprocessorResult.CONTINUE


@pytest.fixture
def inclusion_vault(write_vault) -> Path:
    return write_vault(
        {
            "included.md": "---\nexport: true\n---\n\nIncluded.\n\n![[excluded]]\n\n![[plain]]\n",
            "excluded.md": "---\nexport: false\n---\n\nExcluded.\n",
            "quoted.md": "---\nexport: 'true'\n---\n\nQuoted.\n",
            "plain.md": "Plain.\n",
        }
    )


def test_yaml_inclusion_for_root_notes(inclusion_vault: Path, output_dir: Path) -> None:
    config = ExporterConfig(yaml_inclusion_key="export", note_postprocessors=[yaml_includer])

    report = Exporter(inclusion_vault, output_dir, config).run()

    assert [path.name for path in report.written] == ["included.md"]
    assert sorted(path.name for path in report.skipped) == ["excluded.md", "plain.md", "quoted.md"]
    assert (output_dir / "included.md").read_text(encoding="utf-8") == (
        "---\nexport: true\n---\n\nIncluded.\n\nExcluded.\n\nPlain.\n"
    )


def test_yaml_inclusion_for_embedded_notes(inclusion_vault: Path, output_dir: Path) -> None:
    config = ExporterConfig(
        yaml_inclusion_key="export",
        note_postprocessors=[yaml_includer],
        embed_postprocessors=[yaml_includer],
    )

    Exporter(inclusion_vault, output_dir, config).run()

    assert (output_dir / "included.md").read_text(encoding="utf-8") == (
        "---\nexport: true\n---\n\nIncluded.\n"
    )
