"""Tests for autocoffee.pipeline — compile, minify and write one save."""

from __future__ import annotations

import json
from pathlib import Path

from autocoffee.compile.base import BaseCompiler
from autocoffee.exceptions import CompileError
from autocoffee.minify.base import BaseMinifier
from autocoffee.notify import Notifier, Severity
from autocoffee.pipeline import ERROR_PREFIX, CompilePipeline, FileWriter, compile_options
from autocoffee.resolver import fix_path
from autocoffee.types import (
    CompileOptions,
    CompileParams,
    CompileRequest,
    CompilerResult,
    MinifyResult,
    SourceMap,
)
from autocoffee.workspace import WorkspaceFolders

_JS = "var square;\n\nsquare = function(x) {\n  return x * x;\n};\n"


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        super().__init__()
        self.messages: list[tuple[Severity, str]] = []

    def _show(self, severity: Severity, message: str) -> None:
        self.messages.append((severity, message))

    def of(self, severity: Severity) -> list[str]:
        return [m for s, m in self.messages if s is severity]


class FakeCompiler(BaseCompiler):
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, CompileOptions, str]] = []

    def compile(self, text: str, options: CompileOptions, filename: str) -> CompilerResult:
        self.calls.append((text, options, filename))
        if self.error is not None:
            raise self.error
        source_map = None
        if options.source_map and not options.inline_map:
            source_map = SourceMap({"version": 3, "mappings": "AAAA", "sources": ["tmp"]})
        return CompilerResult(js=_JS, source_map=source_map)


class FakeMinifier(BaseMinifier):
    def __init__(self) -> None:
        self.calls = 0

    def minify(self, code: str) -> MinifyResult:
        self.calls += 1
        return MinifyResult(code="var square=function(x){return x*x};")


def _pipeline(compiler=None, notifier=None, workspace=None):
    notifier = notifier or RecordingNotifier()
    return CompilePipeline(
        compiler=compiler or FakeCompiler(),
        minifier=FakeMinifier(),
        notifier=notifier,
        writer=FileWriter(notifier, workspace),
    )


def _request(root: Path, params: CompileParams | None = None, *, inline: bool = False):
    source = fix_path(str(root / "src" / "main.coffee"))
    return CompileRequest(
        source_path=source,
        workspace_root=fix_path(str(root)),
        text="square = (x) -> x * x\n",
        inline_params=params if inline else None,
        workspace_config=None if inline else params,
    )


class TestCompileOptions:
    def test_bare_defaults_on(self):
        assert compile_options(CompileParams()) == CompileOptions(bare=True)

    def test_explicit_values(self):
        params = CompileParams(bare=False, header=True, source_map=True, inline_map=True)
        assert compile_options(params) == CompileOptions(
            bare=False, header=True, source_map=True, inline_map=True
        )


class TestPipelineSuccess:
    def test_writes_into_configured_output(self, workspace_dir: Path):
        pipeline = _pipeline(workspace=WorkspaceFolders([workspace_dir]))
        outcome = pipeline.run(_request(workspace_dir, CompileParams(output="$/dist/")))

        assert outcome is not None
        assert outcome.output_written
        out = workspace_dir / "dist" / "main.js"
        assert out.read_text(encoding="utf-8") == _JS
        assert not (workspace_dir / "dist" / "main.js.map").exists()
        assert pipeline.notifier.of(Severity.SUCCESS) == ["Compiled coffee script to dist/main.js"]

    def test_default_output_beside_source(self, workspace_dir: Path):
        pipeline = _pipeline()
        pipeline.run(_request(workspace_dir))
        assert (workspace_dir / "src" / "main.js").exists()

    def test_compiler_receives_text_and_options(self, workspace_dir: Path):
        compiler = FakeCompiler()
        _pipeline(compiler).run(_request(workspace_dir, CompileParams(bare=False)))
        text, options, filename = compiler.calls[0]
        assert text == "square = (x) -> x * x\n"
        assert options.bare is False
        assert filename == "main.coffee"

    def test_compress_minifies(self, workspace_dir: Path):
        pipeline = _pipeline()
        pipeline.run(_request(workspace_dir, CompileParams(compress=True)))
        assert pipeline.minifier.calls == 1
        out = (workspace_dir / "src" / "main.js").read_text(encoding="utf-8")
        assert out == "var square=function(x){return x*x};"

    def test_no_compress_skips_minifier(self, workspace_dir: Path):
        pipeline = _pipeline()
        pipeline.run(_request(workspace_dir))
        assert pipeline.minifier.calls == 0


class TestSourceMaps:
    def test_map_file_and_comment(self, workspace_dir: Path):
        pipeline = _pipeline()
        outcome = pipeline.run(
            _request(workspace_dir, CompileParams(output="$/dist/", source_map=True))
        )

        assert outcome is not None
        assert outcome.source_map_written
        data = json.loads((workspace_dir / "dist" / "main.js.map").read_text(encoding="utf-8"))
        assert data["file"] == "main.js"
        assert data["sources"] == ["main.coffee"]
        assert data["sourceRoot"] == ""
        js = (workspace_dir / "dist" / "main.js").read_text(encoding="utf-8")
        assert js.endswith(
            "\n\n//# sourceMappingURL=main.js.map\n//# sourceURL=coffeescript"
        )

    def test_comment_follows_minified_code(self, workspace_dir: Path):
        pipeline = _pipeline()
        pipeline.run(_request(workspace_dir, CompileParams(source_map=True, compress=True)))
        js = (workspace_dir / "src" / "main.js").read_text(encoding="utf-8")
        assert js.startswith("var square=function(x){return x*x};\n\n//# sourceMappingURL=")

    def test_inline_map_writes_no_map_file(self, workspace_dir: Path):
        pipeline = _pipeline()
        outcome = pipeline.run(
            _request(workspace_dir, CompileParams(source_map=True, inline_map=True))
        )
        assert outcome is not None
        assert not outcome.source_map_written
        assert not (workspace_dir / "src" / "main.js.map").exists()
        js = (workspace_dir / "src" / "main.js").read_text(encoding="utf-8")
        assert "sourceMappingURL" not in js


class TestPipelineErrors:
    def test_traversal_reported_and_nothing_written(self, workspace_dir: Path):
        pipeline = _pipeline()
        outcome = pipeline.run(
            _request(workspace_dir, CompileParams(output="../../etc/"), inline=True)
        )
        assert outcome is None
        errors = pipeline.notifier.of(Severity.ERROR)
        assert len(errors) == 1
        assert errors[0].startswith("Output Dir is not valid")
        assert pipeline.compiler.calls == []

    def test_compile_error_prefixed(self, workspace_dir: Path):
        compiler = FakeCompiler(CompileError("main.coffee:1:5: error: unexpected ->"))
        pipeline = _pipeline(compiler)
        assert pipeline.run(_request(workspace_dir)) is None
        assert pipeline.notifier.of(Severity.ERROR) == [
            f"{ERROR_PREFIX}main.coffee:1:5: error: unexpected ->"
        ]
        assert not (workspace_dir / "src" / "main.js").exists()

    def test_unexpected_error_prefixed(self, workspace_dir: Path):
        pipeline = _pipeline(FakeCompiler(RuntimeError()))
        assert pipeline.run(_request(workspace_dir)) is None
        assert pipeline.notifier.of(Severity.ERROR) == [f"{ERROR_PREFIX}RuntimeError"]

    def test_unwritable_directory_reported(self, workspace_dir: Path):
        (workspace_dir / "dist").write_text("a file, not a directory", encoding="utf-8")
        pipeline = _pipeline()
        outcome = pipeline.run(_request(workspace_dir, CompileParams(output="$/dist/")))

        assert outcome is not None
        assert not outcome.output_written
        assert len(pipeline.notifier.of(Severity.ERROR)) == 1
        assert pipeline.notifier.of(Severity.SUCCESS) == []


class TestFileWriter:
    def test_success_without_workspace_shows_full_path(self, tmp_path: Path):
        notifier = RecordingNotifier()
        target = fix_path(str(tmp_path / "out" / "a.js"))
        assert FileWriter(notifier).write(target, "x")
        assert notifier.of(Severity.SUCCESS) == [f"Compiled coffee script to {target}"]

    def test_write_failure_reported(self, tmp_path: Path):
        notifier = RecordingNotifier()
        (tmp_path / "a.js").mkdir()
        assert not FileWriter(notifier).write(str(tmp_path / "a.js"), "x")
        assert notifier.error_count == 1
