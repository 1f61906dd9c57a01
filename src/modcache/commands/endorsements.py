"""Endorsements command -- your opinions on mods, grouped by game."""

from __future__ import annotations

from typing import Optional

import typer

from modcache.commands.common import app_context, emit_model, pluralize_mod
from modcache.context import AppContext
from modcache.data import (
    CompoundKey,
    EndorsementList,
    EndorsementStatus,
    GameMetadata,
    ModInfo,
    UserEndorsement,
)
from modcache.output import format_response, get_output, print_markup, print_table, warning


def endorsements_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(
        None, help="Optionally filter displayed endorsements by this game."
    ),
) -> None:
    """Fetch the list of mods you have endorsed or abstained on."""
    app = app_context(ctx)
    opinions = EndorsementList.get(
        EndorsementList.list_key, app.refresh, app.store, app.connect
    )
    if opinions is None:
        warning("Something went wrong fetching endorsements. Rerun with -v for details.")
        raise typer.Exit(code=1)

    mapping = opinions.game_map()
    if game is not None:
        modlist = mapping.get(game)
        if not modlist:
            print_markup(f"No opinions expressed on mods for {game}.")
            return
        if get_output().is_json:
            format_response([m.model_dump(mode="json") for m in modlist])
            return
        _show_game(app, game, modlist)
        return

    if get_output().is_json:
        emit_model(opinions)
        return
    print_markup(
        f"\n{pluralize_mod(len(opinions.mods))} opinionated upon for "
        f"[blue]{len(mapping)}[/blue] games"
    )
    for slug in sorted(mapping):
        _show_game(app, slug, mapping[slug])


def _show_game(app: AppContext, game: str, modlist: list[UserEndorsement]) -> None:
    # Labels come from the cache only; listing opinions never costs a mod fetch.
    metadata = GameMetadata.local(game, app.store)
    label = metadata.name if metadata is not None else game
    print_markup(f"\n[blue]{len(modlist)}[/blue] opinions for [bold yellow]{label}[/bold yellow]")

    endorsed = [m for m in modlist if m.status != EndorsementStatus.ABSTAINED]
    abstained = [m for m in modlist if m.status == EndorsementStatus.ABSTAINED]
    for caption, group in (("endorsed", endorsed), ("abstained on", abstained)):
        print_markup(f"{caption} {pluralize_mod(len(group))}:")
        rows = []
        for opinion in group:
            mod_info = ModInfo.local(CompoundKey(game, opinion.mod_id), app.store)
            name = mod_info.display_name if mod_info else f"uncached mod id #{opinion.mod_id}"
            rows.append([opinion.status.symbol, name, opinion.url])
        if rows:
            print_table(["", "mod", "url"], rows)
