"""Export Obsidian vaults to portable, standard markdown."""

from __future__ import annotations

from loguru import logger

from .config import ExporterConfig
from .context import Context
from .errors import (
    CycleDetected,
    ExportError,
    FileExportError,
    ParseError,
    PostprocessorError,
    RecursionLimitExceeded,
)
from .exporter import ExportReport, Exporter
from .frontmatter import FrontmatterStrategy
from .markdown import MarkdownEvents
from .pipeline import Postprocessor, PostprocessorResult
from .walker import WalkOptions

__version__ = "0.1.0"

# Library code stays quiet unless the application opts in.
logger.disable(__name__)

__all__ = [
    "Context",
    "CycleDetected",
    "ExportError",
    "ExportReport",
    "Exporter",
    "ExporterConfig",
    "FileExportError",
    "FrontmatterStrategy",
    "MarkdownEvents",
    "ParseError",
    "Postprocessor",
    "PostprocessorError",
    "PostprocessorResult",
    "RecursionLimitExceeded",
    "WalkOptions",
    "__version__",
]
