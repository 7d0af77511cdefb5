"""Custom exception hierarchy for autocoffee."""

__all__ = [
    "AutocoffeeError",
    "CompileError",
    "ConfigError",
    "MinifyError",
    "OutputPathError",
    "PluginError",
    "ProjectError",
    "WatchError",
]


class AutocoffeeError(Exception):
    """Base exception for all autocoffee errors."""


class ConfigError(AutocoffeeError):
    """Raised when configuration loading or validation fails."""


class ProjectError(AutocoffeeError):
    """Raised when project initialization or discovery fails."""


class OutputPathError(AutocoffeeError):
    """Raised when a resolved output directory escapes the workspace root."""

    def __init__(self, output_dir: str, workspace_root: str) -> None:
        super().__init__(f"Output Dir is not valid {output_dir}")
        self.output_dir = output_dir
        self.workspace_root = workspace_root


class CompileError(AutocoffeeError):
    """Raised when the external compiler fails."""


class MinifyError(AutocoffeeError):
    """Raised when the external minifier fails."""


class PluginError(AutocoffeeError):
    """Raised when provider lookup or registration fails."""


class WatchError(AutocoffeeError):
    """Raised when the filesystem watcher cannot be started."""
