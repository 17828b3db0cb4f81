"""CLI commands using Typer."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from resilient_fs.context import AppContext

import typer

from resilient_fs import __version__
from resilient_fs.context import create_context
from resilient_fs.copying import copy_file_ensure_dir, copy_tree
from resilient_fs.directories import clear_directory, ensure, ensure_directory
from resilient_fs.display import Display
from resilient_fs.retry import absent_many, retry_move

app = typer.Typer(
    name="resilient-fs",
    help="Retrying, idempotent filesystem operations",
    no_args_is_help=True,
)

display = Display()

_config_path: Path | None = None


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        display.console.print(f"resilient-fs v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="YAML settings file")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Retrying, idempotent filesystem operations."""
    global _config_path
    _config_path = config
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _get_context(_context: AppContext | None) -> AppContext:
    """Return the injected context or build one from the global options."""
    if _context is not None:
        return _context
    try:
        return create_context(_config_path)
    except ValueError as e:
        display.show_error(f"Invalid settings: {e}")
        raise typer.Exit(1) from e


def _parse_mode(value: str | None, default: int) -> int:
    """Parse an octal permission string such as "755"."""
    if value is None:
        return default
    try:
        return int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"'{value}' is not an octal mode") from e


@app.command("ensure")
def ensure_cmd(
    path: Annotated[Path, typer.Argument(help="Directory to create")],
    mode: Annotated[str | None, typer.Option("--mode", "-m", help="Octal mode")] = None,
    _context=None,
) -> None:
    """Create a directory and its parents if missing."""
    ctx = _get_context(_context)
    dir_mode = _parse_mode(mode, ctx.settings.dir_mode)
    try:
        ensure_directory(path, dir_mode, ctx.filesystem)
    except OSError as e:
        display.show_error(str(e))
        raise typer.Exit(1) from e
    display.show_success(f"Directory {path} exists")


@app.command("rm")
def rm_cmd(
    paths: Annotated[list[Path], typer.Argument(help="Paths to remove")],
    _context=None,
) -> None:
    """Remove files or directory trees, retrying transient failures."""
    ctx = _get_context(_context)
    try:
        absent_many(paths, ctx.settings.remove_policy(), ctx.filesystem)
    except OSError as e:
        display.show_error(str(e))
        raise typer.Exit(1) from e
    display.show_success(f"Removed {len(paths)} path(s)")


@app.command("mv")
def mv_cmd(
    old: Annotated[Path, typer.Argument(help="Existing path")],
    new: Annotated[Path, typer.Argument(help="Destination path")],
    ensure_parent: Annotated[
        bool, typer.Option("--ensure-parent", "-p", help="Create destination directory")
    ] = False,
    _context=None,
) -> None:
    """Move a path, retrying transient failures."""
    ctx = _get_context(_context)
    try:
        if ensure_parent:
            ensure(os.path.dirname(new) or os.curdir, ctx.settings.dir_mode, ctx.filesystem)
        retry_move(old, new, ctx.settings.move_policy(), ctx.filesystem)
    except OSError as e:
        display.show_error(str(e))
        raise typer.Exit(1) from e
    display.show_success(f"Moved {old} to {new}")


@app.command("cp")
def cp_cmd(
    source: Annotated[Path, typer.Argument(help="File to copy")],
    dest: Annotated[Path, typer.Argument(help="Destination file")],
    mode: Annotated[
        str | None, typer.Option("--mode", "-m", help="Octal file mode (default: source's)")
    ] = None,
    dir_mode: Annotated[
        str | None, typer.Option("--dir-mode", help="Octal mode for created directories")
    ] = None,
    _context=None,
) -> None:
    """Copy a single file, creating the destination directory."""
    ctx = _get_context(_context)
    file_mode = _parse_mode(mode, 0)
    parent_mode = _parse_mode(dir_mode, ctx.settings.dir_mode)
    try:
        copy_file_ensure_dir(source, dest, file_mode, parent_mode, ctx.filesystem)
    except OSError as e:
        display.show_error(str(e))
        raise typer.Exit(1) from e
    display.show_success(f"Copied {source} to {dest}")


@app.command("copytree")
def copytree_cmd(
    source: Annotated[Path, typer.Argument(help="Directory to copy")],
    dest: Annotated[Path, typer.Argument(help="Destination directory")],
    mode: Annotated[
        str | None, typer.Option("--mode", "-m", help="Octal mode for every copied file")
    ] = None,
    _context=None,
) -> None:
    """Copy a directory tree, continuing past failed entries."""
    ctx = _get_context(_context)
    file_mode = _parse_mode(mode, 0)
    try:
        result = copy_tree(source, dest, file_mode, ctx.filesystem)
    except OSError as e:
        display.show_error(str(e))
        raise typer.Exit(1) from e

    if not result.success:
        display.show_copy_failures(result.failures)
        display.show_warning(
            f"Copied {len(result.copied)} file(s), {len(result.failures)} failed"
        )
        raise typer.Exit(1)
    display.show_success(f"Copied {len(result.copied)} file(s) to {dest}")


@app.command("digest")
def digest_cmd(
    paths: Annotated[list[Path], typer.Argument(help="Files to fingerprint")],
    _context=None,
) -> None:
    """Show digest, size and latency for each file."""
    ctx = _get_context(_context)
    table = display.new_identity_table()
    failed = False

    with ctx.new_identity() as ident:
        for path in paths:
            try:
                ident.compute(path)
            except OSError as e:
                display.show_error(str(e))
                failed = True
                continue
            display.add_identity_row(table, str(path), ident)

    display.console.print(table)
    if failed:
        raise typer.Exit(1)


@app.command("clear")
def clear_cmd(
    path: Annotated[Path, typer.Argument(help="Directory to empty")],
    _context=None,
) -> None:
    """Remove everything inside a directory."""
    ctx = _get_context(_context)
    try:
        clear_directory(path, ctx.settings.remove_policy(), ctx.filesystem)
    except OSError as e:
        display.show_error(str(e))
        raise typer.Exit(1) from e
    display.show_success(f"Cleared {path}")


if __name__ == "__main__":
    app()
