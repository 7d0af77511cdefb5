"""Abstract base class for source compilers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autocoffee.types import CompileOptions, CompilerResult

__all__ = ["BaseCompiler"]

logger = logging.getLogger(__name__)


class BaseCompiler(ABC):
    """Base class for all compiler services.

    Subclasses turn the full text of a saved source file into JavaScript and,
    when requested, a source map.
    """

    @abstractmethod
    def compile(self, text: str, options: CompileOptions, filename: str) -> CompilerResult:
        """Compile source text.

        Args:
            text: Full text of the source file.
            options: Bare/header/source map flags.
            filename: Base name of the source file, used in messages and maps.

        Returns:
            Compiled code and an optional source map.

        Raises:
            CompileError: If compilation fails.
        """
