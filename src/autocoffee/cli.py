"""CLI interface for autocoffee.

Typer-based command-line interface with Rich output formatting.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from autocoffee import __version__
from autocoffee.directive import parse_directive
from autocoffee.events import AutoCompiler
from autocoffee.exceptions import AutocoffeeError, OutputPathError
from autocoffee.notify import ConsoleNotifier
from autocoffee.project import ProjectManager
from autocoffee.resolver import fix_path, resolve_output
from autocoffee.types import SavedDocument
from autocoffee.watcher import WorkspaceWatcher
from autocoffee.workspace import WorkspaceFolders

__all__ = ["app"]

app = typer.Typer(
    name="autocoffee",
    help="Compile CoffeeScript on save into workspace-relative JavaScript.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


def _workspace_root(start: Path | None = None) -> Path:
    """Nearest directory holding .autocoffee/, else the current directory."""
    return ProjectManager.find_project_root(start) or Path.cwd()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show progress logging"),
    ] = False,
) -> None:
    """autocoffee command line."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def version() -> None:
    """Show autocoffee version."""
    console.print(f"autocoffee {__version__}")


@app.command()
def init(
    output: Annotated[
        str | None,
        typer.Option("--output", "-o", help="Output path template (e.g. $/dist/)"),
    ] = None,
    bare: Annotated[
        bool | None,
        typer.Option("--bare/--no-bare", help="Compile without the top-level function wrapper"),
    ] = None,
    compress: Annotated[
        bool | None,
        typer.Option("--compress/--no-compress", help="Minify compiled output"),
    ] = None,
    source_map: Annotated[
        bool | None,
        typer.Option("--source-map/--no-source-map", help="Write a .map file"),
    ] = None,
    inline_map: Annotated[
        bool | None,
        typer.Option("--inline-map/--no-inline-map", help="Embed the source map"),
    ] = None,
    header: Annotated[
        bool | None,
        typer.Option("--header/--no-header", help="Keep the 'Generated by' header"),
    ] = None,
) -> None:
    """Create .autocoffee/config.toml in the current directory."""
    pm = ProjectManager()
    try:
        config_path = pm.init(
            output=output,
            bare=bare,
            compress=compress,
            source_map=source_map,
            inline_map=inline_map,
            header=header,
        )
    except (AutocoffeeError, OSError) as e:
        console.print(f"[red]Failed to initialize:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Initialized autocoffee workspace[/green] at {pm.root}")
    console.print(f"\nCreated:\n  {config_path}")
    console.print("\nNext steps:")
    console.print("  autocoffee watch       Compile .coffee files as they are saved")
    console.print("  autocoffee compile     Compile files once")


@app.command(name="compile")
def compile_cmd(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(help="Source file(s) to compile"),
    ] = None,
) -> None:
    """Compile source files once, as if each had just been saved."""
    notifier = ConsoleNotifier(console)
    workspace = WorkspaceFolders()
    compiler = AutoCompiler(workspace, notifier)

    if not paths:
        root = _workspace_root()
        workspace.add([root])
        paths = ProjectManager(root).find_sources()
        if not paths:
            console.print("[yellow]No source files found.[/yellow]")
            raise typer.Exit(code=0)

    compiled = 0
    for path in paths:
        file_path = path.resolve()
        if not file_path.is_file():
            notifier.error(f"File not found: {path}")
            continue
        workspace.add([ProjectManager.find_project_root(file_path) or file_path.parent])
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            notifier.error(f"Cannot read {path}: {e}")
            continue
        outcome = compiler.on_save(SavedDocument(path=fix_path(str(file_path)), text=text))
        if outcome is not None and outcome.output_written:
            compiled += 1

    console.print(f"\nCompiled {compiled} of {len(paths)} file(s)")
    if notifier.error_count:
        raise typer.Exit(code=1)


@app.command()
def resolve(
    path: Annotated[Path, typer.Argument(help="Source file to resolve")],
) -> None:
    """Show where a source file would be compiled to, without compiling."""
    file_path = path.resolve()
    root = ProjectManager.find_project_root(file_path) or file_path.parent
    pm = ProjectManager(root)

    try:
        config = pm.load()
        text = file_path.read_text(encoding="utf-8") if file_path.is_file() else ""
    except (AutocoffeeError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    source = fix_path(str(file_path))
    inline = parse_directive(text, source)
    params = inline if inline is not None else config.compile.to_params()

    try:
        resolved = resolve_output(source, fix_path(str(root)), params.output)
    except OutputPathError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", style="bold")
    table.add_row("Workspace", fix_path(str(root)))
    table.add_row("Options from", "inline directive" if inline is not None else "config")
    table.add_row("Output", resolved.output_file)
    table.add_row("Source map", resolved.source_map_file)
    console.print(table)


@app.command()
def watch(
    folders: Annotated[
        list[Path] | None,
        typer.Argument(help="Workspace folder(s) to watch"),
    ] = None,
) -> None:
    """Watch workspace folders and compile source files as they are saved."""
    roots = [f.resolve() for f in folders] if folders else [_workspace_root()]
    for root in roots:
        if not root.is_dir():
            console.print(f"[red]Not a directory:[/red] {root}")
            raise typer.Exit(code=1)

    try:
        config = ProjectManager(roots[0]).load()
    except AutocoffeeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    notifier = ConsoleNotifier(console)
    compiler = AutoCompiler(WorkspaceFolders(roots), notifier)
    watcher = WorkspaceWatcher(
        compiler,
        roots,
        extension=config.watch.extension,
        ignore=config.watch.ignore,
    )

    try:
        watcher.start()
    except AutocoffeeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    for root in roots:
        console.print(f"Watching [bold]{root}[/bold] for {config.watch.extension} files")
    console.print("[dim]Press Ctrl+C to stop.[/dim]")
    try:
        watcher.run()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


@app.command(name="config")
def config_cmd() -> None:
    """Show the effective configuration of the current workspace."""
    pm = ProjectManager(_workspace_root())
    try:
        st = pm.status()
    except AutocoffeeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    if not st.initialized:
        console.print(
            "[yellow]No .autocoffee/config.toml found[/yellow], showing defaults. "
            "Run [bold]autocoffee init[/bold] to create one."
        )

    console.print(f"[bold]Workspace:[/bold] {st.root}")
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", style="bold")
    compile_section = st.config.compile
    table.add_row("output", compile_section.output or "(beside source)")
    table.add_row("bare", str(compile_section.bare).lower())
    table.add_row("compress", str(compile_section.compress).lower())
    table.add_row("source_map", str(compile_section.source_map).lower())
    table.add_row("inline_map", str(compile_section.inline_map).lower())
    table.add_row("header", str(compile_section.header).lower())
    table.add_row("compiler", f"{st.config.compiler.provider} ({st.config.compiler.command})")
    table.add_row("minifier", st.config.minifier.provider)
    table.add_row("sources", str(st.source_count))
    console.print(table)
