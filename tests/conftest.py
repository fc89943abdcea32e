"""Shared fixtures for exporter tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest
from loguru import logger

from obsidian_export.plugins import manager as plugin_manager

VaultWriter = Callable[[dict[str, "str | bytes"]], Path]


@pytest.fixture(autouse=True)
def reset_global_state():
    """Keep loguru sinks and the plugin cache from leaking between tests."""

    plugin_manager.reset_plugin_manager_cache()
    yield
    plugin_manager.reset_plugin_manager_cache()
    logger.remove()
    logger.disable("obsidian_export")


@pytest.fixture
def write_vault(tmp_path: Path) -> VaultWriter:
    """Return a helper that writes ``{relative path: content}`` into a vault."""

    root = tmp_path / "vault"

    def _write(files: dict[str, str | bytes]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for name, content in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return root

    return _write


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"
