"""Configuration system for autocoffee.

Manages per-workspace configuration via .autocoffee/config.toml with typed
dataclasses and sensible defaults for all values.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import tomli_w

if sys.version_info >= (3, 12):
    import tomllib
else:
    import tomli as tomllib

from autocoffee.exceptions import ConfigError
from autocoffee.types import CompileParams

if TYPE_CHECKING:
    from pathlib import Path

_T = TypeVar("_T")

__all__ = [
    "AutocoffeeConfig",
    "CompileConfig",
    "CompilerConfig",
    "MinifierConfig",
    "WatchConfig",
    "default_config",
    "load_config",
    "save_config",
]

logger = logging.getLogger(__name__)


@dataclass
class CompileConfig:
    """[compile] section — workspace defaults used when a file has no directive."""

    output: str = ""
    compress: bool = False
    bare: bool = True
    header: bool = False
    inline_map: bool = False
    source_map: bool = False

    def to_params(self) -> CompileParams:
        return CompileParams(
            output=self.output or None,
            bare=self.bare,
            compress=self.compress,
            source_map=self.source_map,
            inline_map=self.inline_map,
            header=self.header,
        )


@dataclass
class CompilerConfig:
    """[compiler] section."""

    provider: str = "coffee"
    command: str = "coffee"
    timeout: int = 30


@dataclass
class MinifierConfig:
    """[minifier] section."""

    provider: str = "rjsmin"
    command: str = "terser"
    timeout: int = 30
    keep_bang_comments: bool = False


@dataclass
class WatchConfig:
    """[watch] section."""

    extension: str = ".coffee"
    ignore: list[str] = field(
        default_factory=lambda: [".git", ".hg", ".svn", ".autocoffee", "node_modules"]
    )


@dataclass
class AutocoffeeConfig:
    """Root configuration combining all sections."""

    compile: CompileConfig = field(default_factory=CompileConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    minifier: MinifierConfig = field(default_factory=MinifierConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)


def default_config() -> AutocoffeeConfig:
    """Return a config with all default values."""
    return AutocoffeeConfig()


_SECTIONS: dict[str, type] = {
    "compile": CompileConfig,
    "compiler": CompilerConfig,
    "minifier": MinifierConfig,
    "watch": WatchConfig,
}


def _config_to_dict(config: AutocoffeeConfig) -> dict[str, object]:
    """Convert AutocoffeeConfig to a nested dict suitable for TOML serialization."""
    return {name: dict(vars(getattr(config, name))) for name in _SECTIONS}


def save_config(config: AutocoffeeConfig, path: Path) -> None:
    """Save configuration to a TOML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _config_to_dict(config)
    try:
        with path.open("wb") as f:
            tomli_w.dump(data, f)
        logger.info("Saved config to %s", path)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise ConfigError(f"Failed to save config to {path}: {e}") from e


def _load_section(cls: type[_T], data: object) -> _T:
    """Load a dataclass section from a dict, ignoring unknown keys."""
    if not isinstance(data, dict):
        raise ConfigError(f"Section [{cls.__name__}] must be a table, got {type(data).__name__}")
    known_fields = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
    filtered = {k: v for k, v in data.items() if k in known_fields}
    return cls(**filtered)


def load_config(path: Path) -> AutocoffeeConfig:
    """Load configuration from a TOML file.

    Missing sections or keys get default values.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_bytes()
        data = tomllib.loads(raw.decode("utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    config = AutocoffeeConfig()
    for name, cls in _SECTIONS.items():
        if name in data:
            setattr(config, name, _load_section(cls, data[name]))

    logger.info("Loaded config from %s", path)
    return config
