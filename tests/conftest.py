"""Shared fixtures for autocoffee tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from autocoffee.config import AutocoffeeConfig, save_config
from autocoffee.project import CONFIG_DIR, CONFIG_FILE

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    """A temporary directory simulating a workspace folder."""
    ws = tmp_path / "ws"
    (ws / "src").mkdir(parents=True)
    return ws


@pytest.fixture
def initialized_workspace(workspace_dir: Path) -> Path:
    """A workspace with .autocoffee/config.toml writing to $/dist/."""
    config = AutocoffeeConfig()
    config.compile.output = "$/dist/"
    save_config(config, workspace_dir / CONFIG_DIR / CONFIG_FILE)
    return workspace_dir


@pytest.fixture
def coffee_file(workspace_dir: Path) -> Path:
    """A small CoffeeScript source without an inline directive."""
    f = workspace_dir / "src" / "main.coffee"
    f.write_text("square = (x) -> x * x\n", encoding="utf-8")
    return f
