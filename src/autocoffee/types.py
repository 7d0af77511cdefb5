"""Data contracts for autocoffee.

Frozen dataclasses that flow through a single save event:
  SavedDocument → CompileRequest → ResolvedOutput → CompilerResult → written
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "CompileOptions",
    "CompileOutcome",
    "CompileParams",
    "CompileRequest",
    "CompilerResult",
    "MinifyResult",
    "ResolvedOutput",
    "SavedDocument",
    "SourceMap",
]


@dataclass(frozen=True)
class SavedDocument:
    """A file the host reports as saved, with its full current text."""

    path: str
    text: str


@dataclass(frozen=True)
class CompileParams:
    """Per-save compile options taken from a single source.

    ``None`` means "not given"; the pipeline applies defaults when coercing.
    """

    output: str | None = None
    bare: bool | None = None
    compress: bool | None = None
    source_map: bool | None = None
    inline_map: bool | None = None
    header: bool | None = None


@dataclass(frozen=True)
class CompileRequest:
    """Everything known about one save event."""

    source_path: str
    workspace_root: str
    text: str = ""
    inline_params: CompileParams | None = None
    workspace_config: CompileParams | None = None

    @property
    def params(self) -> CompileParams:
        """Effective parameters for this save.

        An inline directive replaces the workspace configuration wholesale.
        Keys it does not name keep the directive parser's defaults; they are
        never filled in from the configuration.
        """
        if self.inline_params is not None:
            return self.inline_params
        return self.workspace_config or CompileParams()


@dataclass(frozen=True)
class ResolvedOutput:
    """Destination of a compiled file, always inside the workspace root."""

    output_dir: str
    output_file_name: str
    source_map_file_name: str

    @property
    def output_file(self) -> str:
        return posixpath.join(self.output_dir, self.output_file_name)

    @property
    def source_map_file(self) -> str:
        return posixpath.join(self.output_dir, self.source_map_file_name)


@dataclass(frozen=True)
class CompileOptions:
    """Flags handed to the compiler service."""

    bare: bool = True
    header: bool = False
    inline_map: bool = False
    source_map: bool = False


@dataclass(frozen=True)
class SourceMap:
    """A v3 source map as produced by the compiler."""

    data: dict[str, Any] = field(default_factory=dict)

    def generate(self, generated_file: str, source_files: list[str]) -> dict[str, Any]:
        """Return a serializable map pointing at the given file names."""
        generated = dict(self.data)
        generated.setdefault("version", 3)
        generated["file"] = generated_file
        generated["sourceRoot"] = ""
        generated["sources"] = list(source_files)
        return generated


@dataclass(frozen=True)
class CompilerResult:
    """Compiled JavaScript plus an optional source map."""

    js: str
    source_map: SourceMap | None = None


@dataclass(frozen=True)
class MinifyResult:
    code: str


@dataclass(frozen=True)
class CompileOutcome:
    """What a successful pipeline run wrote."""

    resolved: ResolvedOutput
    output_written: bool
    source_map_written: bool = False
