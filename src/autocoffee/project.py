"""Project manager for autocoffee.

Handles workspace initialization, configuration lookup, and workspace root
discovery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from autocoffee.config import AutocoffeeConfig, default_config, load_config, save_config
from autocoffee.exceptions import ProjectError

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "ProjectManager",
    "ProjectStatus",
]

logger = logging.getLogger(__name__)

CONFIG_DIR = ".autocoffee"
CONFIG_FILE = "config.toml"


@dataclass
class ProjectStatus:
    """Summary of a workspace's autocoffee setup."""

    initialized: bool
    root: Path
    source_count: int
    config: AutocoffeeConfig


class ProjectManager:
    """Manages the .autocoffee/ directory of one workspace folder."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or Path.cwd()

    @property
    def config_dir(self) -> Path:
        return self.root / CONFIG_DIR

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE

    @property
    def is_initialized(self) -> bool:
        return self.config_path.is_file()

    def init(
        self,
        output: str | None = None,
        bare: bool | None = None,
        compress: bool | None = None,
        source_map: bool | None = None,
        inline_map: bool | None = None,
        header: bool | None = None,
    ) -> Path:
        """Create .autocoffee/config.toml, keeping existing values.

        Only the options passed explicitly are overwritten. Safe to call on
        an already-initialized workspace.

        Returns the config file path.
        """
        if self.root.exists() and not self.root.is_dir():
            raise ProjectError(f"Workspace root is not a directory: {self.root}")

        self.config_dir.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            config = load_config(self.config_path)
            logger.info("Existing config found at %s", self.config_path)
        else:
            config = default_config()

        overrides = {
            "output": output,
            "bare": bare,
            "compress": compress,
            "source_map": source_map,
            "inline_map": inline_map,
            "header": header,
        }
        for key, value in overrides.items():
            if value is not None:
                setattr(config.compile, key, value)

        save_config(config, self.config_path)
        logger.info("Initialized autocoffee workspace at %s", self.root)
        return self.config_path

    def load(self) -> AutocoffeeConfig:
        """Return the workspace configuration, or defaults when there is none.

        Raises:
            ConfigError: If the config file exists but cannot be read.
        """
        if not self.config_path.exists():
            logger.debug("No config at %s, using defaults", self.config_path)
            return default_config()
        return load_config(self.config_path)

    def status(self) -> ProjectStatus:
        """Get current workspace status."""
        config = self.load()
        return ProjectStatus(
            initialized=self.is_initialized,
            root=self.root,
            source_count=len(self.find_sources(config)),
            config=config,
        )

    def find_sources(self, config: AutocoffeeConfig | None = None) -> list[Path]:
        """Find compilable source files, skipping ignored directories."""
        config = config or self.load()
        ignored = set(config.watch.ignore)
        return sorted(
            f
            for f in self.root.rglob(f"*{config.watch.extension}")
            if f.is_file() and not ignored.intersection(f.relative_to(self.root).parts)
        )

    @staticmethod
    def find_project_root(start: Path | None = None) -> Path | None:
        """Walk up from start directory to find a .autocoffee/ directory.

        Returns the workspace root (parent of .autocoffee/) or None if not found.
        """
        current = (start or Path.cwd()).resolve()
        if current.is_file():
            current = current.parent
        while True:
            if (current / CONFIG_DIR).is_dir():
                return current
            parent = current.parent
            if parent == current:
                return None
            current = parent
