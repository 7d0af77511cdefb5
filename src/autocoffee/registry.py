"""Compiler and minifier lookup for autocoffee.

The ``[compiler] provider`` and ``[minifier] provider`` settings name a
service; this module turns those names into instances. The built-in
``coffee`` compiler and the ``rjsmin``/``terser`` minifiers register
themselves when :mod:`autocoffee.compile` and :mod:`autocoffee.minify` are
imported.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

from autocoffee.exceptions import PluginError

if TYPE_CHECKING:
    from collections.abc import Callable

    from autocoffee.config import AutocoffeeConfig

__all__ = ["ProviderRegistry", "default_registry"]

logger = logging.getLogger(__name__)

_BUILTIN_MODULES = ("autocoffee.compile", "autocoffee.minify")


class ProviderRegistry:
    """Named factories for the services a save event needs.

    Factories are grouped by service kind, ``"compiler"`` or ``"minifier"``,
    and receive the workspace's :class:`~autocoffee.config.AutocoffeeConfig`
    so each workspace gets services built from its own settings.

    With ``auto_discover=True`` the built-in provider packages are imported
    the first time the registry is queried.

    Usage::

        registry = ProviderRegistry()
        registry.register("minifier", "rjsmin", RJSMinMinifier)
        minifier = registry.create("minifier", config.minifier.provider, config)
    """

    def __init__(self, *, auto_discover: bool = False) -> None:
        self._factories: dict[str, dict[str, Callable[..., Any]]] = {}
        self._auto_discover = auto_discover
        self._discovered = False

    def register(self, category: str, name: str, factory: Callable[..., Any]) -> None:
        """Add a factory under *category*/*name*.

        Raises:
            PluginError: If the name is already taken in that category.
        """
        providers = self._factories.setdefault(category, {})
        if name in providers:
            raise PluginError(f"Provider '{name}' already registered in category '{category}'")
        providers[name] = factory
        logger.debug("Registered provider %s/%s", category, name)

    def create(self, category: str, name: str, config: AutocoffeeConfig) -> Any:
        """Build the service configured for a workspace.

        Raises:
            PluginError: If no factory is registered under *category*/*name*,
                typically a misspelled ``provider`` setting.
        """
        factory = self._lookup(category, name)
        logger.info("Creating %s '%s'", category, name)
        return factory(config)

    def list_providers(self, category: str) -> list[str]:
        self._ensure_discovered()
        return sorted(self._factories.get(category, {}))

    def has_provider(self, category: str, name: str) -> bool:
        self._ensure_discovered()
        return name in self._factories.get(category, {})

    def _lookup(self, category: str, name: str) -> Callable[..., Any]:
        self._ensure_discovered()
        providers = self._factories.get(category)
        if providers is None:
            raise PluginError(
                f"Unknown provider category '{category}'. Available: {sorted(self._factories)}"
            )
        if name not in providers:
            raise PluginError(
                f"Unknown provider '{name}' in category '{category}'. "
                f"Available: {sorted(providers)}"
            )
        return providers[name]

    def _ensure_discovered(self) -> None:
        if self._discovered or not self._auto_discover:
            return
        self._discovered = True
        for module in _BUILTIN_MODULES:
            importlib.import_module(module)


default_registry = ProviderRegistry(auto_discover=True)
