"""Configuration for export runs."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .frontmatter import FrontmatterStrategy
from .walker import DEFAULT_IGNORE_FILENAME, WalkOptions

if TYPE_CHECKING:  # pragma: no cover - type check only
    from .pipeline import Postprocessor

DEFAULT_RECURSION_LIMIT = 10
CONFIG_SECTION = "export"


class ConfigError(RuntimeError):
    """Base error for configuration related issues."""


class MissingConfigError(ConfigError):
    """Raised when the configuration file cannot be found."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Configuration file not found at {path}")
        self.path = path


class InvalidConfigError(ConfigError):
    """Raised when the configuration file holds malformed values."""


@dataclass(slots=True)
class ExporterConfig:
    """Settings read by the exporter and handed to every postprocessor.

    The postprocessor lists are fixed once a run starts.
    """

    frontmatter_strategy: FrontmatterStrategy = FrontmatterStrategy.AUTO
    recursive_embeds: bool = True
    flat_layout: bool = False
    start_at: Path | None = None
    yaml_inclusion_key: str | None = None
    recursion_limit: int = DEFAULT_RECURSION_LIMIT
    walk_options: WalkOptions = field(default_factory=WalkOptions)
    note_postprocessors: list["Postprocessor"] = field(default_factory=list)
    embed_postprocessors: list["Postprocessor"] = field(default_factory=list)


@dataclass(slots=True)
class ExportSettings:
    """User-facing options, as read from a TOML file or the command line.

    Postprocessors are referenced by their registered names.
    """

    frontmatter: FrontmatterStrategy = FrontmatterStrategy.AUTO
    recursive_embeds: bool = True
    flat_output: bool = False
    hard_linebreaks: bool = False
    start_at: Path | None = None
    inclusion_key: str | None = None
    exclude_embeds_by_frontmatter: bool = False
    ignore_file: str = DEFAULT_IGNORE_FILENAME
    hidden: bool = False
    git: bool = True
    recursion_limit: int = DEFAULT_RECURSION_LIMIT
    postprocessors: tuple[str, ...] = ()
    embed_postprocessors: tuple[str, ...] = ()
    source_path: Path | None = None


def load_config(path: Path) -> ExportSettings:
    """Load export settings from the ``[export]`` table of a TOML file.

    Raises
    ------
    MissingConfigError
        If the file cannot be found.
    InvalidConfigError
        If the file is not valid TOML or holds malformed values.
    """

    config_path = path.expanduser()
    if not config_path.exists():
        raise MissingConfigError(config_path)

    try:
        with config_path.open("rb") as fh:
            raw = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

    section = raw.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise InvalidConfigError(f"'{CONFIG_SECTION}' must be a table")

    settings = ExportSettings(source_path=config_path)

    frontmatter_raw = section.get("frontmatter")
    if frontmatter_raw is not None:
        try:
            settings.frontmatter = FrontmatterStrategy(str(frontmatter_raw).lower())
        except ValueError as exc:
            raise InvalidConfigError(
                "'frontmatter' must be one of: always, never, auto"
            ) from exc

    for key in (
        "recursive_embeds",
        "flat_output",
        "hard_linebreaks",
        "exclude_embeds_by_frontmatter",
        "hidden",
        "git",
    ):
        if key in section:
            setattr(settings, key, _require_bool(section, key))

    start_at = _optional_str(section, "start_at")
    if start_at:
        settings.start_at = Path(start_at)

    settings.inclusion_key = _optional_str(section, "inclusion_key") or None

    ignore_file = _optional_str(section, "ignore_file")
    if ignore_file is not None:
        if not ignore_file.strip():
            raise InvalidConfigError("'ignore_file' must be a non-empty string")
        settings.ignore_file = ignore_file.strip()

    if "recursion_limit" in section:
        limit = section["recursion_limit"]
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise InvalidConfigError("'recursion_limit' must be a positive integer")
        settings.recursion_limit = limit

    settings.postprocessors = _name_list(section, "postprocessors")
    settings.embed_postprocessors = _name_list(section, "embed_postprocessors")
    return settings


def _require_bool(section: dict[str, Any], key: str) -> bool:
    value = section[key]
    if not isinstance(value, bool):
        raise InvalidConfigError(f"'{key}' must be a boolean")
    return value


def _optional_str(section: dict[str, Any], key: str) -> str | None:
    value = section.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidConfigError(f"'{key}' must be a string when provided")
    return value


def _name_list(section: dict[str, Any], key: str) -> tuple[str, ...]:
    value = section.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidConfigError(f"'{key}' must be a list of strings")
    names = tuple(item.strip() for item in value)
    if any(not name for name in names):
        raise InvalidConfigError(f"'{key}' must not contain empty names")
    return names


__all__ = [
    "CONFIG_SECTION",
    "ConfigError",
    "DEFAULT_RECURSION_LIMIT",
    "ExportSettings",
    "ExporterConfig",
    "InvalidConfigError",
    "MissingConfigError",
    "load_config",
]
