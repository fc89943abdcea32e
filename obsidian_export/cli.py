"""Command line interface for obsidian-export."""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path
from typing import Any, Sequence

import click
from loguru import logger

from . import __version__
from .app import build_exporter
from .config import ConfigError, ExportSettings, load_config
from .errors import ExportError, FileExportError, RecursionLimitExceeded
from .frontmatter import FrontmatterStrategy
from .plugins import PluginRegistrationError, load_postprocessor_contributions

CONTEXT_SETTINGS: dict[str, Any] = {"help_option_names": ["-h", "--help"]}
LOG_LEVELS = ("WARNING", "INFO", "DEBUG")


class ObsidianExportCliError(click.ClickException):
    """Shared Click exception wrapper for CLI failures."""


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "-V", "--version", prog_name="obsidian-export")
@click.argument(
    "source",
    type=click.Path(path_type=Path, file_okay=False),
    required=False,
)
@click.argument(
    "destination",
    type=click.Path(path_type=Path, file_okay=False),
    required=False,
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Read defaults from the [export] table of this TOML file.",
)
@click.option("--start-at", type=click.Path(path_type=Path), help="Only export notes under this sub-path.")
@click.option(
    "--frontmatter",
    "frontmatter",
    type=click.Choice([strategy.value for strategy in FrontmatterStrategy], case_sensitive=False),
    default=None,
    help="Frontmatter strategy (default: auto).",
)
@click.option("--ignore-file", default=None, help="Read ignore patterns from files with this name.")
@click.option("--hidden", is_flag=True, help="Export hidden files.")
@click.option("--no-git", is_flag=True, help="Disable git integration.")
@click.option("--no-recursive-embeds", is_flag=True, help="Don't process embeds recursively.")
@click.option(
    "--hard-linebreaks",
    is_flag=True,
    help="Convert soft line breaks to hard line breaks (Obsidian's 'Strict line breaks').",
)
@click.option(
    "--front-matter-inclusion-key",
    "inclusion_key",
    default=None,
    help="Only include notes with this front matter key set to 'true'.",
)
@click.option(
    "--exclude-embeds-by-frontmatter",
    is_flag=True,
    help="Also drop embedded notes that lack the inclusion key.",
)
@click.option(
    "--flat-output-structure",
    "flat_output",
    is_flag=True,
    help="Export every note directly into DESTINATION.",
)
@click.option(
    "--recursion-limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum depth of nested embeds (default: 10).",
)
@click.option(
    "--postprocessor",
    "postprocessors",
    multiple=True,
    metavar="NAME",
    help="Run a registered postprocessor on every note (repeatable).",
)
@click.option(
    "--embed-postprocessor",
    "embed_postprocessors",
    multiple=True,
    metavar="NAME",
    help="Run a registered postprocessor on every embedded note (repeatable).",
)
@click.option(
    "--list-postprocessors",
    is_flag=True,
    help="List available postprocessors and exit.",
)
@click.option("-v", "--verbose", count=True, help="Increase log output (repeatable).")
@click.pass_context
def cli(
    ctx: click.Context,
    source: Path | None,
    destination: Path | None,
    config_path: Path | None,
    start_at: Path | None,
    frontmatter: str | None,
    ignore_file: str | None,
    hidden: bool,
    no_git: bool,
    no_recursive_embeds: bool,
    hard_linebreaks: bool,
    inclusion_key: str | None,
    exclude_embeds_by_frontmatter: bool,
    flat_output: bool,
    recursion_limit: int | None,
    postprocessors: tuple[str, ...],
    embed_postprocessors: tuple[str, ...],
    list_postprocessors: bool,
    verbose: int,
) -> None:
    """Export the Obsidian vault at SOURCE as standard markdown into DESTINATION."""

    _configure_logging(verbose)

    try:
        settings = load_config(config_path) if config_path is not None else ExportSettings()
    except ConfigError as exc:
        raise ObsidianExportCliError(str(exc)) from exc

    if list_postprocessors:
        _echo_postprocessors(settings)
        ctx.exit(0)

    if source is None or destination is None:
        raise click.UsageError("SOURCE and DESTINATION are required.")
    if not source.is_dir():
        raise ObsidianExportCliError(f"Source '{source}' is not a directory.")

    settings = dataclasses.replace(
        settings,
        frontmatter=FrontmatterStrategy(frontmatter.lower()) if frontmatter else settings.frontmatter,
        recursive_embeds=settings.recursive_embeds and not no_recursive_embeds,
        flat_output=flat_output or settings.flat_output,
        hard_linebreaks=hard_linebreaks or settings.hard_linebreaks,
        start_at=start_at if start_at is not None else settings.start_at,
        inclusion_key=inclusion_key or settings.inclusion_key,
        exclude_embeds_by_frontmatter=(
            exclude_embeds_by_frontmatter or settings.exclude_embeds_by_frontmatter
        ),
        ignore_file=ignore_file or settings.ignore_file,
        hidden=hidden or settings.hidden,
        git=settings.git and not no_git,
        recursion_limit=recursion_limit or settings.recursion_limit,
        postprocessors=settings.postprocessors + postprocessors,
        embed_postprocessors=settings.embed_postprocessors + embed_postprocessors,
    )

    try:
        exporter = build_exporter(source, destination, settings)
        report = exporter.run()
    except (ConfigError, ExportError) as exc:
        raise ObsidianExportCliError(str(exc)) from exc

    for error in report.errors:
        _echo_file_error(error)

    click.echo(
        f"Exported {len(report.written)} notes to {destination}"
        + (f" ({len(report.errors)} failed)" if report.errors else "")
    )
    if report.errors:
        ctx.exit(1)


def _configure_logging(verbose: int) -> None:
    level = LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)]
    logger.remove()
    logger.add(sys.stderr, level=level, format="{level}: {message}")
    logger.enable("obsidian_export")


def _echo_postprocessors(settings: ExportSettings) -> None:
    try:
        registry = load_postprocessor_contributions(settings)
    except PluginRegistrationError as exc:
        raise ObsidianExportCliError(str(exc)) from exc

    if not registry:
        click.echo("No postprocessors are available.")
        return
    click.echo("Available postprocessors:\n")
    for name in sorted(registry):
        description = registry[name].description
        if description:
            click.echo(f"  - {name}: {description}")
        else:
            click.echo(f"  - {name}")


def _echo_file_error(error: FileExportError) -> None:
    cause = error.cause
    if not isinstance(cause, RecursionLimitExceeded):
        click.echo(f"Error: {error}", err=True)
        return

    click.echo(
        f"Error: '{error.path}' exceeds the maximum nesting limit of embeds",
        err=True,
    )
    click.echo("\nFile tree:", err=True)
    for depth, path in enumerate(cause.file_tree):
        click.echo(f"  {'  ' * depth}-> {path}", err=True)
    click.echo(
        "\nHint: Ensure notes are non-recursive, or specify --no-recursive-embeds "
        "to break cycles",
        err=True,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = list(argv) if argv is not None else None
    try:
        return cli.main(args=args, prog_name="obsidian-export", standalone_mode=False) or 0
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1


__all__ = ["cli", "main", "ObsidianExportCliError"]
