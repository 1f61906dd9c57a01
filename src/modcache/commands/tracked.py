"""Tracked-mods commands -- list tracked mods and fill the cache from them."""

from __future__ import annotations

from collections import defaultdict
from typing import Optional

import typer

from modcache.commands.common import (
    app_context,
    emit_model,
    emit_mods,
    lookup_game,
    pluralize_mod,
)
from modcache.context import AppContext
from modcache.data import CompoundKey, ModInfo, ModStatus, Tracked
from modcache.exceptions import ModcacheError, StorageError
from modcache.output import get_output, info, print_markup, print_table, warning


def tracked_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(
        None, help="Optionally, show tracked mods for this game in detail."
    ),
) -> None:
    """Fetch your list of tracked mods and show a by-game summary."""
    show_tracked(app_context(ctx), game)


def populate_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help="The game to populate."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", help="The number of API calls allowed before stopping."
    ),
) -> None:
    """Populate the local cache with mods tracked for a specific game."""
    app = app_context(ctx)
    populate(app, app.game_or_default(game), limit or app.config.populate.limit)


def update_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help="The game to update."),
) -> None:
    """Refresh your tracked mods and pull new ones to cache.

    Runs ``tracked`` then ``populate`` for the given game with refresh forced.
    """
    app = app_context(ctx)
    app.refresh = True
    show_tracked(app, None)
    populate(app, app.game_or_default(game), app.config.populate.limit)


def load_tracked(app: AppContext) -> Tracked:
    tracked = Tracked.get(Tracked.list_key, app.refresh, app.store, app.connect)
    if tracked is None:
        raise ModcacheError("Unable to fetch any tracked mods.")
    return tracked


def show_tracked(app: AppContext, game: Optional[str]) -> None:
    tracked = load_tracked(app)

    if game is None:
        if get_output().is_json:
            emit_model(tracked)
            return
        mapping = tracked.game_map()
        print_markup(
            f"\n[red]{len(tracked.mods)}[/red] mods tracked for "
            f"[blue]{len(mapping)}[/blue] games\n"
        )
        rows = [[str(len(ids)), slug] for slug, ids in sorted(mapping.items())]
        print_table(["mods", "game"], rows)
        return

    filtered = tracked.by_game(game)
    if not filtered:
        print_markup(f"You aren't tracking any mods for [bold yellow]{game}[/bold yellow]")
        return

    metadata = lookup_game(app, game)
    if metadata is None:
        return

    uncached = 0
    by_category: dict[int, list[ModInfo]] = defaultdict(list)
    unlisted: dict[ModStatus, list[ModInfo]] = defaultdict(list)
    for ref in filtered:
        mod_info = ModInfo.local(ref.key(), app.store)
        if mod_info is None:
            uncached += 1
        elif mod_info.status in (
            ModStatus.REMOVED,
            ModStatus.WASTEBINNED,
            ModStatus.UNDER_MODERATION,
        ):
            unlisted[mod_info.status].append(mod_info)
        else:
            by_category[mod_info.category_id].append(mod_info)

    if get_output().is_json:
        cached = [m for mods in by_category.values() for m in mods]
        cached += [m for mods in unlisted.values() for m in mods]
        emit_mods(cached)
        return

    for category_id in sorted(by_category):
        category = metadata.category_from_id(category_id)
        label = category.name if category else f"category id #{category_id}"
        emit_mods(
            sorted(by_category[category_id], key=lambda m: m.mod_id),
            caption=f"----- [magenta]{label}[/magenta]:",
        )

    print_markup(
        f"\nYou are tracking {pluralize_mod(len(filtered))} for "
        f"[bold yellow]{metadata.name}[/bold yellow]."
    )
    if uncached == 0:
        print_markup(f"All {pluralize_mod(len(filtered))} are in cache.")
    else:
        print_markup(f"{pluralize_mod(len(filtered) - uncached)} are in cache.")
        print_markup(f"Another {pluralize_mod(uncached)} not yet cached.")

    for status, caption in (
        (ModStatus.REMOVED, "removed"),
        (ModStatus.WASTEBINNED, "wastebinned by their authors"),
        (ModStatus.UNDER_MODERATION, "under moderation"),
    ):
        if unlisted[status]:
            emit_mods(
                unlisted[status],
                caption=f"\n{pluralize_mod(len(unlisted[status]))} {caption}:",
            )


def populate(app: AppContext, game: str, limit: int) -> int:
    """Cache the first *limit* tracked-but-uncached mods for *game*.

    Only fetches that return a mod count against *limit*.

    Returns:
        The number of mods fetched and cached.
    """
    if lookup_game(app, game) is None:
        warning(f"{game} can't be found on the Nexus! Bailing.")
        return 0

    tracked = load_tracked(app)
    filtered = tracked.by_game(game)
    if not get_output().is_json:
        print_markup(
            f"You are tracking [blue]{len(tracked.mods)}[/blue] mods total and "
            f"[blue]{len(filtered)}[/blue] for this game."
        )
        print_markup(f"Now iterating tracked mods, caching the first {limit} uncached found")

    fetches = 0
    fetched_mods: list[ModInfo] = []
    for ref in filtered:
        if fetches >= limit:
            break
        key = CompoundKey(ref.domain_name, ref.mod_id)
        if ModInfo.local(key, app.store) is not None:
            continue
        fetched = ModInfo.fetch_remote(key, app.connect)
        if fetched is None:
            info(f"   ! unable to find {key} for caching")
            continue
        fetches += 1
        try:
            fetched.store(app.store)
        except StorageError as exc:
            warning(f"Failed to cache {key}! {exc}")
        fetched_mods.append(fetched)
        if not get_output().is_json:
            print_markup(f"   {fetched.compact_info()} -> cache")

    if get_output().is_json:
        emit_mods(fetched_mods)
    return fetches
