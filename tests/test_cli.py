"""Tests for autocoffee.cli module."""

from __future__ import annotations

from typing import TYPE_CHECKING

from typer.testing import CliRunner

from autocoffee import __version__
from autocoffee.cli import app
from autocoffee.compile.coffee import CoffeeScriptCompiler
from autocoffee.config import load_config
from autocoffee.exceptions import CompileError
from autocoffee.project import CONFIG_DIR, CONFIG_FILE
from autocoffee.types import CompilerResult

if TYPE_CHECKING:
    from pathlib import Path

    import pytest

runner = CliRunner()


def _fake_compile(self, text, options, filename):
    return CompilerResult(js="var x = 1;\n")


class TestVersion:
    def test_prints_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestInit:
    def test_init_creates_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert (tmp_path / CONFIG_DIR / CONFIG_FILE).is_file()
        assert "Initialized" in result.output

    def test_init_with_options(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["init", "--output", "$/dist/", "--compress", "--no-bare"])
        assert result.exit_code == 0
        config = load_config(tmp_path / CONFIG_DIR / CONFIG_FILE)
        assert config.compile.output == "$/dist/"
        assert config.compile.compress is True
        assert config.compile.bare is False

    def test_init_error_shows_friendly_message(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        def _fail_init(*_a: object, **_kw: object) -> None:
            raise OSError("Permission denied")

        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("autocoffee.cli.ProjectManager.init", _fail_init)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert "Failed to initialize" in result.output


class TestConfig:
    def test_shows_defaults_when_uninitialized(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "showing defaults" in result.output
        assert "rjsmin" in result.output

    def test_shows_configured_output(
        self, initialized_workspace: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(initialized_workspace)
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "$/dist/" in result.output
        assert "showing defaults" not in result.output


class TestResolve:
    def test_uses_config(self, initialized_workspace: Path, coffee_file: Path):
        result = runner.invoke(app, ["resolve", str(coffee_file)])
        assert result.exit_code == 0
        assert "config" in result.output

    def test_uses_inline_directive(self, initialized_workspace: Path, coffee_file: Path):
        coffee_file.write_text("# out: build/$1.js\nx = 1\n", encoding="utf-8")
        result = runner.invoke(app, ["resolve", str(coffee_file)])
        assert result.exit_code == 0
        assert "inline directive" in result.output

    def test_traversal_rejected(self, initialized_workspace: Path, coffee_file: Path):
        coffee_file.write_text("# out: ../../../etc/\nx = 1\n", encoding="utf-8")
        result = runner.invoke(app, ["resolve", str(coffee_file)])
        assert result.exit_code == 1
        assert "not valid" in result.output


class TestCompile:
    def test_compiles_named_file(
        self,
        initialized_workspace: Path,
        coffee_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setattr(CoffeeScriptCompiler, "compile", _fake_compile)
        result = runner.invoke(app, ["compile", str(coffee_file)])
        assert result.exit_code == 0
        assert "Compiled 1 of 1" in result.output
        out = initialized_workspace / "dist" / "main.js"
        assert out.read_text(encoding="utf-8") == "var x = 1;\n"

    def test_compiles_all_sources(
        self,
        initialized_workspace: Path,
        coffee_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        (initialized_workspace / "src" / "other.coffee").write_text("y = 2\n", encoding="utf-8")
        monkeypatch.setattr(CoffeeScriptCompiler, "compile", _fake_compile)
        monkeypatch.chdir(initialized_workspace)
        result = runner.invoke(app, ["compile"])
        assert result.exit_code == 0
        assert "Compiled 2 of 2" in result.output
        assert (initialized_workspace / "dist" / "other.js").exists()

    def test_compile_error_exit_code(
        self,
        initialized_workspace: Path,
        coffee_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def _fail(self, text, options, filename):
            raise CompileError("unexpected ->")

        monkeypatch.setattr(CoffeeScriptCompiler, "compile", _fail)
        result = runner.invoke(app, ["compile", str(coffee_file)])
        assert result.exit_code == 1
        assert "[CoffeeScript] unexpected ->" in result.output
        assert "Compiled 0 of 1" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["compile", str(tmp_path / "nope.coffee")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_no_sources(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["compile"])
        assert result.exit_code == 0
        assert "No source files found" in result.output
