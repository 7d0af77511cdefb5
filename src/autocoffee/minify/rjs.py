"""In-process minifier using rjsmin."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import rjsmin

from autocoffee.exceptions import MinifyError
from autocoffee.minify.base import BaseMinifier
from autocoffee.types import MinifyResult

if TYPE_CHECKING:
    from autocoffee.config import AutocoffeeConfig

__all__ = ["RJSMinMinifier"]

logger = logging.getLogger(__name__)


class RJSMinMinifier(BaseMinifier):
    """Strips comments and whitespace without renaming identifiers.

    Default minifier: needs no external tooling.
    """

    def __init__(self, config: AutocoffeeConfig | None = None) -> None:
        self._keep_bang_comments = config.minifier.keep_bang_comments if config else False

    def minify(self, code: str) -> MinifyResult:
        try:
            minified = rjsmin.jsmin(code, keep_bang_comments=self._keep_bang_comments)
        except (TypeError, ValueError) as e:
            raise MinifyError(f"rjsmin failed: {e}") from e
        logger.info("Minified %d → %d chars", len(code), len(minified))
        return MinifyResult(code=minified)
