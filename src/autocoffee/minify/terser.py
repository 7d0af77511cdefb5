"""Minifier backed by the ``terser`` command line tool."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import TYPE_CHECKING

from autocoffee.exceptions import MinifyError
from autocoffee.minify.base import BaseMinifier
from autocoffee.types import MinifyResult

if TYPE_CHECKING:
    from autocoffee.config import AutocoffeeConfig

__all__ = ["TerserMinifier"]

logger = logging.getLogger(__name__)


class TerserMinifier(BaseMinifier):
    """Compresses and mangles code by piping it through terser.

    Config fields used::

        [minifier]
        provider = "terser"
        command = "terser"      # or "npx terser"
        timeout = 30
    """

    def __init__(self, config: AutocoffeeConfig) -> None:
        self._command = shlex.split(config.minifier.command)
        self._timeout = config.minifier.timeout

        if not self._command:
            raise MinifyError("minifier.command must not be empty")

    def minify(self, code: str) -> MinifyResult:
        args = [*self._command, "--compress", "--mangle"]
        try:
            proc = subprocess.run(
                args,
                input=code,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise MinifyError(f"Minifier command not found: {self._command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise MinifyError(f"Minifier timed out after {self._timeout}s") from e

        if proc.returncode != 0:
            message = proc.stderr.strip()
            raise MinifyError(message or f"{self._command[0]} exited with {proc.returncode}")

        logger.info("Minified %d → %d chars via terser", len(code), len(proc.stdout))
        return MinifyResult(code=proc.stdout)
