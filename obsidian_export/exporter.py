"""Export a vault of linked notes to portable markdown."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .config import ExporterConfig
from .context import Context
from .embeds import EmbedExpander
from .errors import ExportError, FileExportError
from .frontmatter import render_document, resolve_frontmatter, split_frontmatter
from .markdown import MarkdownEvents, parse, serialize
from .paths import OutputLayout, OutputPathMapper, is_note
from .pipeline import Postprocessor, PostprocessorResult, run_postprocessors
from .references import LinkResolver, VaultIndex
from .walker import walk_vault


@dataclass(slots=True)
class ProcessedNote:
    """A note that made it through its postprocessor chain."""

    context: Context
    events: MarkdownEvents


@dataclass(slots=True)
class _RunState:
    mapper: OutputPathMapper
    resolver: LinkResolver
    expander: EmbedExpander


@dataclass(slots=True)
class ExportReport:
    """Per-file outcomes of one :meth:`Exporter.run`."""

    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    copied: list[Path] = field(default_factory=list)
    errors: list[FileExportError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class Exporter:
    """Convert every note under ``source`` into standard markdown under ``destination``."""

    def __init__(
        self,
        source: Path,
        destination: Path,
        config: ExporterConfig | None = None,
    ) -> None:
        self.source = Path(source)
        self.destination = Path(destination)
        self.config = config or ExporterConfig()
        self._run_state: _RunState | None = None

    def add_postprocessor(self, postprocessor: Postprocessor) -> None:
        """Append a postprocessor to the chain run for every exported note."""

        self.config.note_postprocessors.append(postprocessor)

    def add_embed_postprocessor(self, postprocessor: Postprocessor) -> None:
        """Append a postprocessor to the chain run for every embedded note."""

        self.config.embed_postprocessors.append(postprocessor)

    # -- Public API ----------------------------------------------------------

    def run(self) -> ExportReport:
        """Export all notes; failures are collected per file in the report."""

        if not self.source.is_dir():
            raise ExportError(f"Source '{self.source}' is not a directory")
        start_at = self.config.start_at
        if start_at is not None and not (self.source / start_at).exists():
            raise ExportError(f"Start path '{start_at}' does not exist in '{self.source}'")

        vault_files = list(walk_vault(self.source, self.config.walk_options))
        self._prepare(vault_files)
        self.destination.mkdir(parents=True, exist_ok=True)

        report = ExportReport()
        for path in vault_files:
            if not self._is_export_root(path):
                continue
            try:
                if not is_note(path):
                    report.copied.append(self.copy_attachment(path))
                    continue
                written = self.export_note(path)
            except FileExportError as exc:
                logger.error(str(exc))
                report.errors.append(exc)
                continue
            if written is None:
                report.skipped.append(path)
            else:
                report.written.append(written)

        logger.info(
            f"Exported {len(report.written)} notes, copied {len(report.copied)} files, "
            f"skipped {len(report.skipped)}, {len(report.errors)} failed"
        )
        return report

    def export_note(self, path: Path) -> Path | None:
        """Export the vault-relative note ``path``.

        Returns the written file, or ``None`` when a postprocessor skipped the
        note. Any failure is raised as :class:`FileExportError`, and in that
        case nothing is written.
        """

        try:
            note = self.process_note(
                path,
                trace=[path],
                root_file=path,
                postprocessors=self.config.note_postprocessors,
            )
            if note is None:
                logger.info(f"Skipped {path}")
                return None

            frontmatter = resolve_frontmatter(
                self.config.frontmatter_strategy, note.context.frontmatter
            )
            document = render_document(frontmatter, serialize(note.events))
            target = note.context.destination
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(document, encoding="utf-8")
        except FileExportError:
            raise
        except Exception as exc:
            raise FileExportError(path, exc) from exc

        logger.debug(f"Wrote {path} -> {target}")
        return target

    def copy_attachment(self, path: Path) -> Path:
        try:
            target = self._state().mapper.map(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.source / path, target)
        except Exception as exc:
            raise FileExportError(path, exc) from exc
        return target

    def process_note(
        self,
        path: Path,
        *,
        trace: list[Path],
        root_file: Path,
        postprocessors: list[Postprocessor],
    ) -> ProcessedNote | None:
        """Run the full pipeline for one note, root or embedded.

        Reads and splits the note, expands its embeds, rewrites its links and
        runs ``postprocessors``. Returns ``None`` when the chain asked to skip
        the note.
        """

        state = self._state()
        raw = (self.source / path).read_bytes()
        frontmatter, body = split_frontmatter(raw, path=path)
        events = parse(body)
        context = Context(
            current_file=path,
            root_file=root_file,
            destination=state.mapper.map(path),
            frontmatter=frontmatter,
        )

        state.expander.expand(events, context, trace)
        state.resolver.rewrite_links(events, context)

        result = run_postprocessors(postprocessors, context, events, self.config)
        if result is PostprocessorResult.STOP_AND_SKIP_NOTE:
            return None
        return ProcessedNote(context=context, events=events)

    # -- Internals -----------------------------------------------------------

    def _prepare(self, vault_files: list[Path]) -> None:
        layout = OutputLayout.FLAT if self.config.flat_layout else OutputLayout.HIERARCHY
        mapper = OutputPathMapper(
            self.destination,
            vault_files,
            layout=layout,
            start_at=self.config.start_at,
        )
        resolver = LinkResolver(VaultIndex(vault_files), mapper)
        expander = EmbedExpander(
            resolver,
            self._run_embedded,
            recursive=self.config.recursive_embeds,
            recursion_limit=self.config.recursion_limit,
        )
        self._run_state = _RunState(mapper=mapper, resolver=resolver, expander=expander)

    def _run_embedded(
        self, path: Path, trace: list[Path], root_file: Path
    ) -> MarkdownEvents | None:
        note = self.process_note(
            path,
            trace=trace,
            root_file=root_file,
            postprocessors=self.config.embed_postprocessors,
        )
        return None if note is None else note.events

    def _is_export_root(self, path: Path) -> bool:
        start_at = self.config.start_at
        if start_at is None or start_at in (Path(""), Path(".")):
            return True
        return path == start_at or start_at in path.parents

    def _state(self) -> _RunState:
        if self._run_state is None:
            raise ExportError("Exporter.run() has not prepared the vault yet")
        return self._run_state


__all__ = ["ExportReport", "Exporter", "ProcessedNote"]
