"""Host event interface and the auto-compile façade.

A host (the filesystem watcher, the CLI, or an editor bridge) reports
lifecycle events through :class:`WorkspaceEvents`. :class:`AutoCompiler` is
the one implementation: it owns the workspace folders, the per-workspace
configuration cache and the reentrancy/shutdown state, and hands each save
to a :class:`~autocoffee.pipeline.CompilePipeline`.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from autocoffee.directive import parse_directive
from autocoffee.exceptions import AutocoffeeError, ConfigError
from autocoffee.pipeline import CompilePipeline, FileWriter
from autocoffee.project import ProjectManager
from autocoffee.registry import default_registry
from autocoffee.types import CompileRequest

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from autocoffee.config import AutocoffeeConfig
    from autocoffee.notify import Notifier
    from autocoffee.registry import ProviderRegistry
    from autocoffee.types import CompileOutcome, SavedDocument
    from autocoffee.workspace import WorkspaceFolders

__all__ = ["AutoCompiler", "CompilerState", "WorkspaceEvents"]

logger = logging.getLogger(__name__)


class CompilerState(Enum):
    IDLE = "idle"
    RELOADING_CONFIG = "reloading_config"


class WorkspaceEvents(ABC):
    """Lifecycle callbacks a host delivers, one at a time."""

    @abstractmethod
    def on_save(self, document: SavedDocument) -> CompileOutcome | None:
        """A file was saved with the given full text."""

    @abstractmethod
    def on_configuration_changed(self) -> None:
        """Workspace configuration may have changed."""

    @abstractmethod
    def on_workspace_folders_changed(
        self,
        added: Iterable[str | Path],
        removed: Iterable[str | Path] = (),
    ) -> None:
        """Workspace folders were opened or closed."""

    @abstractmethod
    def deactivate(self) -> None:
        """The host is shutting down; later events must be ignored."""


def _load_workspace_config(root: str) -> AutocoffeeConfig:
    return ProjectManager(Path(root)).load()


class AutoCompiler(WorkspaceEvents):
    """Compiles saved source files into their resolved output paths.

    Saves are ignored once :meth:`deactivate` has run, and while a
    configuration lookup is in progress. Configuration is cached per
    workspace root until the host reports a configuration or folder change.
    """

    def __init__(
        self,
        workspace: WorkspaceFolders,
        notifier: Notifier,
        *,
        registry: ProviderRegistry = default_registry,
        config_loader: Callable[[str], AutocoffeeConfig] = _load_workspace_config,
        pipeline_factory: Callable[[AutocoffeeConfig], CompilePipeline] | None = None,
    ) -> None:
        self.workspace = workspace
        self.notifier = notifier
        self._registry = registry
        self._config_loader = config_loader
        self._pipeline_factory = pipeline_factory or self._build_pipeline
        self._configs: dict[str, AutocoffeeConfig] = {}
        self._state = CompilerState.IDLE
        self._shutdown = threading.Event()

    @property
    def state(self) -> CompilerState:
        return self._state

    @property
    def is_deactivated(self) -> bool:
        return self._shutdown.is_set()

    def read_config(self, root: str) -> AutocoffeeConfig | None:
        """Return the configuration for a workspace root.

        Returns ``None`` when the configuration cannot be read, or when called
        while another lookup is already running.
        """
        if self._state is CompilerState.RELOADING_CONFIG:
            return None
        cached = self._configs.get(root)
        if cached is not None:
            return cached

        self._state = CompilerState.RELOADING_CONFIG
        try:
            config = self._config_loader(root)
        except ConfigError as e:
            logger.warning("Configuration unavailable for %s: %s", root, e)
            return None
        finally:
            self._state = CompilerState.IDLE

        self._configs[root] = config
        return config

    def on_save(self, document: SavedDocument) -> CompileOutcome | None:
        if self._shutdown.is_set() or self._state is not CompilerState.IDLE:
            return None

        root = self.workspace.root_for(document.path)
        config = self.read_config(root)
        if config is None:
            return None

        if not document.path.strip().endswith(config.watch.extension):
            logger.debug("Ignoring %s: not a %s file", document.path, config.watch.extension)
            return None

        request = CompileRequest(
            source_path=document.path,
            workspace_root=root,
            text=document.text,
            inline_params=parse_directive(document.text, document.path),
            workspace_config=config.compile.to_params(),
        )

        try:
            pipeline = self._pipeline_factory(config)
        except AutocoffeeError as e:
            self.notifier.error(str(e))
            return None
        return pipeline.run(request)

    def on_configuration_changed(self) -> None:
        logger.info("Configuration changed, dropping %d cached config(s)", len(self._configs))
        self._configs.clear()

    def on_workspace_folders_changed(
        self,
        added: Iterable[str | Path],
        removed: Iterable[str | Path] = (),
    ) -> None:
        for folder in self.workspace.remove(removed):
            self._configs.pop(folder, None)
        for folder in self.workspace.add(added):
            self._configs.pop(folder, None)

    def deactivate(self) -> None:
        if self._shutdown.is_set():
            return
        self._shutdown.set()
        self.notifier.info("Extension deactivated")

    def _build_pipeline(self, config: AutocoffeeConfig) -> CompilePipeline:
        compiler = self._registry.create("compiler", config.compiler.provider, config)
        minifier = self._registry.create("minifier", config.minifier.provider, config)
        return CompilePipeline(
            compiler=compiler,
            minifier=minifier,
            notifier=self.notifier,
            writer=FileWriter(self.notifier, self.workspace),
        )
