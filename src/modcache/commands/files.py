"""File and changelog commands for a single mod."""

from __future__ import annotations

from typing import Optional

import typer

from modcache.commands.common import app_context, emit_model
from modcache.data import Changelogs, CompoundKey, FileInfo, Files
from modcache.output import get_output, print_markup, print_table

GAME_HELP = "The game slug; defaults to the configured default game."


def files_command(
    ctx: typer.Context,
    mod_id: int = typer.Argument(help="The mod id."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """List the files available for a mod."""
    mod_files = _load_files(ctx, mod_id, game)
    if get_output().is_json:
        emit_model(mod_files)
        return
    rows = [
        [
            str(f.file_id),
            f.category_name or "",
            f.name,
            f.version,
            f"{f.size_kb} KB",
            f.uploaded_time,
        ]
        for f in mod_files.files
    ]
    print_table(["id", "category", "name", "version", "size", "uploaded"], rows)


def primary_file_command(
    ctx: typer.Context,
    mod_id: int = typer.Argument(help="The mod id."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show the primary file for a mod."""
    found = _load_files(ctx, mod_id, game).primary_file()
    _show_file(found)


def file_info_command(
    ctx: typer.Context,
    mod_id: int = typer.Argument(help="The mod id."),
    file_id: int = typer.Argument(help="The file id."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show one file for a mod by file id."""
    found = _load_files(ctx, mod_id, game).file_by_id(file_id)
    _show_file(found)


def changelogs_command(
    ctx: typer.Context,
    mod_id: int = typer.Argument(help="The mod id."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show the changelogs for a mod, one section per version."""
    app = app_context(ctx)
    key = CompoundKey(app.game_or_default(game), mod_id)
    changelogs = Changelogs.get(key, app.refresh, app.store, app.connect)
    if changelogs is None:
        print_markup("Nothing found.")
        raise typer.Exit(code=1)

    if get_output().is_json:
        emit_model(changelogs)
        return
    if not changelogs.versions:
        print_markup(f"No changelogs for {key}.")
        return
    for version, lines in changelogs.versions.items():
        print_markup(f"[bold]{version}[/bold]")
        for line in lines:
            print_markup(f"    {line}")


def _load_files(ctx: typer.Context, mod_id: int, game: Optional[str]) -> Files:
    app = app_context(ctx)
    key = CompoundKey(app.game_or_default(game), mod_id)
    mod_files = Files.get(key, app.refresh, app.store, app.connect)
    if mod_files is None:
        print_markup("Nothing found.")
        raise typer.Exit(code=1)
    return mod_files


def _show_file(found: Optional[FileInfo]) -> None:
    if found is None:
        print_markup("Nothing found.")
        raise typer.Exit(code=1)
    if get_output().is_json:
        emit_model(found)
        return
    print_markup(
        f"[green]{found.name}[/green] <[blue]{found.file_id}[/blue]>\n"
        f"version {found.version} ({found.category_name or 'uncategorized'})\n"
        f"{found.file_name}, {found.size_kb} KB, uploaded {found.uploaded_time}"
    )
    if found.description:
        print_markup(f"\n{found.description}")
