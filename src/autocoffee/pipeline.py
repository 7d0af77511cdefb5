"""Compile-and-write pipeline for a single save event.

resolve output → compile → write map → minify → append map comment → write
"""

from __future__ import annotations

import json
import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from autocoffee.directive import to_boolean_value, to_string_value
from autocoffee.exceptions import OutputPathError
from autocoffee.resolver import fix_path, resolve_output
from autocoffee.types import CompileOptions, CompileOutcome

if TYPE_CHECKING:
    from autocoffee.compile.base import BaseCompiler
    from autocoffee.minify.base import BaseMinifier
    from autocoffee.notify import Notifier
    from autocoffee.types import CompileParams, CompileRequest, ResolvedOutput
    from autocoffee.workspace import WorkspaceFolders

__all__ = ["ERROR_PREFIX", "CompilePipeline", "FileWriter", "compile_options"]

logger = logging.getLogger(__name__)

ERROR_PREFIX = "[CoffeeScript] "


def compile_options(params: CompileParams) -> CompileOptions:
    """Coerce compile parameters into compiler flags. ``bare`` defaults on."""
    return CompileOptions(
        bare=to_boolean_value(params.bare, True),
        header=to_boolean_value(params.header, False),
        inline_map=to_boolean_value(params.inline_map, False),
        source_map=to_boolean_value(params.source_map, False),
    )


class FileWriter:
    """Writes compiled files, reporting failures instead of raising them.

    Directory creation and the write itself are reported separately, each
    with the operating system's message.
    """

    def __init__(self, notifier: Notifier, workspace: WorkspaceFolders | None = None) -> None:
        self._notifier = notifier
        self._workspace = workspace

    def write(self, path: str, content: str) -> bool:
        """Write *content* to *path*. Returns whether the file was written."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._notifier.error(to_string_value(e))
            return False

        try:
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            self._notifier.error(to_string_value(e))
            return False

        self._notifier.success(f"Compiled coffee script to {self._display(path)}")
        return True

    def _display(self, path: str) -> str:
        if self._workspace is None:
            return fix_path(path)
        return self._workspace.display_path(path)


class CompilePipeline:
    """Runs one compile request against injected services.

    Usage::

        pipeline = CompilePipeline(
            compiler=CoffeeScriptCompiler(config),
            minifier=RJSMinMinifier(config),
            notifier=ConsoleNotifier(),
        )
        pipeline.run(request)
    """

    def __init__(
        self,
        compiler: BaseCompiler,
        minifier: BaseMinifier,
        notifier: Notifier,
        writer: FileWriter | None = None,
    ) -> None:
        self.compiler = compiler
        self.minifier = minifier
        self.notifier = notifier
        self.writer = writer or FileWriter(notifier)

    def run(self, request: CompileRequest) -> CompileOutcome | None:
        """Compile and write one saved file.

        Never raises: every failure becomes a single error notification and
        ``None`` is returned. A source map written before a later failure is
        left in place.
        """
        params = request.params
        try:
            resolved = resolve_output(request.source_path, request.workspace_root, params.output)
        except OutputPathError as e:
            self.notifier.error(str(e))
            return None

        try:
            return self._compile_and_write(request, params, resolved)
        except Exception as e:
            logger.error("Failed to compile %s: %s", request.source_path, e)
            self.notifier.error(f"{ERROR_PREFIX}{to_string_value(e)}")
            return None

    def _compile_and_write(
        self,
        request: CompileRequest,
        params: CompileParams,
        resolved: ResolvedOutput,
    ) -> CompileOutcome:
        source_name = posixpath.basename(fix_path(request.source_path))
        options = compile_options(params)

        result = self.compiler.compile(request.text, options, source_name)

        map_written = False
        if result.source_map is not None and not options.inline_map:
            generated = result.source_map.generate(
                generated_file=resolved.output_file_name,
                source_files=[source_name],
            )
            if generated:
                map_written = self.writer.write(resolved.source_map_file, json.dumps(generated))

        js = to_string_value(result.js)
        if to_boolean_value(params.compress, False):
            js = self.minifier.minify(js).code

        if options.source_map and not options.inline_map:
            js += (
                f"\n\n//# sourceMappingURL={resolved.source_map_file_name}"
                "\n//# sourceURL=coffeescript"
            )

        written = self.writer.write(resolved.output_file, js)
        logger.info("Compiled %s → %s", request.source_path, resolved.output_file)
        return CompileOutcome(
            resolved=resolved,
            output_written=written,
            source_map_written=map_written,
        )
