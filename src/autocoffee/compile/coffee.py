"""CoffeeScript compiler backed by the ``coffee`` command line tool.

The source text is compiled from a scratch directory so the editor's
current buffer is used rather than whatever is on disk, and so the CLI's own
output files never land in the workspace.
"""

from __future__ import annotations

import json
import logging
import re
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from autocoffee.compile.base import BaseCompiler
from autocoffee.exceptions import CompileError
from autocoffee.types import CompilerResult, SourceMap

if TYPE_CHECKING:
    from autocoffee.config import AutocoffeeConfig
    from autocoffee.types import CompileOptions

__all__ = ["CoffeeScriptCompiler"]

logger = logging.getLogger(__name__)

_MAP_COMMENT_RE = re.compile(r"\n*(?://# source(?:Mapping)?URL=[^\n]*\n?)+\s*\Z")


class CoffeeScriptCompiler(BaseCompiler):
    """Compiler service wrapping ``coffee --compile``.

    Config fields used::

        [compiler]
        provider = "coffee"
        command = "coffee"      # may include a launcher, e.g. "npx coffee"
        timeout = 30
    """

    def __init__(self, config: AutocoffeeConfig) -> None:
        self._command = shlex.split(config.compiler.command)
        self._timeout = config.compiler.timeout

        if not self._command:
            raise CompileError("compiler.command must not be empty")

    def build_command(self, source: Path, out_dir: Path, options: CompileOptions) -> list[str]:
        """Return the argv used to compile *source* into *out_dir*."""
        args = [*self._command, "--compile", "--output", str(out_dir)]
        if options.bare:
            args.append("--bare")
        if not options.header:
            args.append("--no-header")
        if options.inline_map:
            args.append("--inline-map")
        elif options.source_map:
            args.append("--map")
        args.append(str(source))
        return args

    def compile(self, text: str, options: CompileOptions, filename: str) -> CompilerResult:
        """Compile *text* with the CoffeeScript CLI.

        Raises:
            CompileError: If the CLI is missing, times out, or reports an error.
        """
        with tempfile.TemporaryDirectory(prefix="autocoffee-") as tmp:
            tmp_dir = Path(tmp)
            source = tmp_dir / filename
            out_dir = tmp_dir / "out"
            source.write_text(text, encoding="utf-8")

            self._run(self.build_command(source, out_dir, options), filename)

            js_path = out_dir / (source.stem + ".js")
            try:
                js = js_path.read_text(encoding="utf-8")
            except OSError as e:
                raise CompileError(f"Compiler produced no output for {filename}") from e

            source_map = None
            if options.source_map and not options.inline_map:
                source_map = self._read_map(out_dir, source.stem, filename)
                js = _MAP_COMMENT_RE.sub("\n", js)

        logger.info("Compiled %s (%d chars)", filename, len(js))
        return CompilerResult(js=js, source_map=source_map)

    def _run(self, args: list[str], filename: str) -> None:
        logger.debug("Running %s", shlex.join(args))
        try:
            proc = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CompileError(
                f"Compiler command not found: {self._command[0]}. Is CoffeeScript installed?"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise CompileError(f"Compiling {filename} timed out after {self._timeout}s") from e

        if proc.returncode != 0:
            message = (proc.stderr or proc.stdout).strip()
            raise CompileError(message or f"{self._command[0]} exited with {proc.returncode}")

    @staticmethod
    def _read_map(out_dir: Path, stem: str, filename: str) -> SourceMap | None:
        # CoffeeScript 2 writes name.js.map, CoffeeScript 1 writes name.map
        for candidate in (out_dir / f"{stem}.js.map", out_dir / f"{stem}.map"):
            if not candidate.exists():
                continue
            try:
                data = json.loads(candidate.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise CompileError(f"Compiler wrote an unreadable source map for {filename}") from e
            return SourceMap(data=data)
        logger.warning("No source map produced for %s", filename)
        return None
