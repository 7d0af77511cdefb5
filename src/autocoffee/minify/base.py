"""Abstract base class for JavaScript minifiers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autocoffee.types import MinifyResult

__all__ = ["BaseMinifier"]


class BaseMinifier(ABC):
    """Base class for all minifier services."""

    @abstractmethod
    def minify(self, code: str) -> MinifyResult:
        """Minify JavaScript source.

        Raises:
            MinifyError: If the code cannot be minified.
        """
