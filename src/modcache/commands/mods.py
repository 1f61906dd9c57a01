"""Mod commands -- game metadata, single mods, and searches of the local cache.

Searches (``search``, ``by-name``, ``by-author``) and status listings
(``hidden``, ``removed``, ``wastebinned``) only read cached mods; run
``populate`` first to fill the cache. ``hidden`` shows only tracked mods and
re-fetches each one under ``--refresh``. The trending and latest lists always
ask the Nexus and merge each mod they return into the cache.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import typer

from modcache.commands.common import (
    app_context,
    emit_model,
    emit_mods,
    lookup_game,
    pluralize_mod,
)
from modcache.context import AppContext
from modcache.data import (
    CompoundKey,
    GameMetadata,
    ModInfo,
    ModStatus,
    SortKey,
    Tracked,
    sort_mods,
)
from modcache.output import get_output, print_markup, print_table

GAME_HELP = "The game slug; defaults to the configured default game."


def _sort_option() -> Any:
    return typer.Option(
        SortKey.ID, "--sort", "-s", case_sensitive=False, help="Sort by id, name, date, or author."
    )


def game_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show metadata for a game, including its mod categories."""
    app = app_context(ctx)
    metadata = lookup_game(app, app.game_or_default(game))
    if metadata is None:
        raise typer.Exit(code=1)

    if get_output().is_json:
        emit_model(metadata)
        return

    print_markup(
        f"[bold yellow]{metadata.name}[/bold yellow] ({metadata.domain_name}, id {metadata.id})\n"
        f"{metadata.nexusmods_url}\n"
        f"{metadata.mods} mods by {metadata.authors} authors; "
        f"{metadata.downloads} downloads"
    )
    cached = len(metadata.cached_mods(app.store))
    print_markup(f"{pluralize_mod(cached)} in the local cache.\n")
    rows = [[str(c.category_id), c.name] for c in metadata.categories]
    print_table(["id", "category"], rows, title="Categories")


def mods_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
    sort: SortKey = _sort_option(),
) -> None:
    """List every cached mod for a game."""
    _list_cached(ctx, game, sort, lambda meta, app: meta.cached_mods(app.store), "cached")


def mod_command(
    ctx: typer.Context,
    mod_id: int = typer.Argument(help="The mod id."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show full information about one mod, fetching it if not cached."""
    app = app_context(ctx)
    key = CompoundKey(app.game_or_default(game), mod_id)
    mod_info = ModInfo.get(key, app.refresh, app.store, app.connect)
    if mod_info is None:
        print_markup(f"No mod found with id [bold]{mod_id}[/bold] for {key.domain_name}.")
        raise typer.Exit(code=1)

    if get_output().is_json:
        emit_model(mod_info)
    else:
        print_markup(mod_info.full_info())


def search_command(
    ctx: typer.Context,
    text: str = typer.Argument(help="Text or regular expression to look for."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
    sort: SortKey = _sort_option(),
) -> None:
    """Search cached mods by name, summary, and author."""
    _list_cached(
        ctx,
        game,
        sort,
        lambda meta, app: meta.mods_match_text(text, app.store),
        f"matching [bold]{text}[/bold]",
    )


def by_name_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Text or regular expression to match names against."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
    sort: SortKey = _sort_option(),
) -> None:
    """Find cached mods with names matching the pattern."""
    _list_cached(
        ctx,
        game,
        sort,
        lambda meta, app: meta.mods_name_match(name, app.store),
        f"with names matching [bold]{name}[/bold]",
    )


def by_author_command(
    ctx: typer.Context,
    author: str = typer.Argument(help="Text or regular expression to match authors against."),
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
    sort: SortKey = _sort_option(),
) -> None:
    """Find cached mods by a given author."""
    _list_cached(
        ctx,
        game,
        sort,
        lambda meta, app: meta.mods_by_author(author, app.store),
        f"by [bold]{author}[/bold]",
    )


def hidden_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """List tracked mods the Nexus has hidden.

    Hidden mods can be unhidden, so with ``--refresh`` each one is
    re-fetched before it is shown.
    """
    app = app_context(ctx)
    slug = app.game_or_default(game)
    metadata = lookup_game(app, slug)
    if metadata is None:
        raise typer.Exit(code=1)

    mods = metadata.mods_with_status(ModStatus.HIDDEN, app.store)
    tracked = Tracked.get(Tracked.list_key, app.refresh, app.store, app.connect)
    if tracked is not None:
        tracked_ids = {ref.mod_id for ref in tracked.by_game(slug)}
        mods = [m for m in mods if m.mod_id in tracked_ids]
    if app.refresh:
        mods = [
            ModInfo.get(m.cache_key(), True, app.store, app.connect) or m for m in mods
        ]

    if not mods and not get_output().is_json:
        print_markup(
            f"No hidden but tracked mods in cache for [bold yellow]{metadata.name}[/bold yellow]."
        )
        return
    emit_mods(
        sort_mods(mods, SortKey.ID),
        caption=f"{pluralize_mod(len(mods))} hidden but tracked in cache for "
        f"[bold yellow]{metadata.name}[/bold yellow]:",
    )


def removed_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """List cached mods the Nexus has removed."""
    _list_status(ctx, game, ModStatus.REMOVED)


def wastebinned_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """List cached mods their authors have wastebinned."""
    _list_status(ctx, game, ModStatus.WASTEBINNED)


def trending_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show the mods trending on the Nexus right now."""
    _remote_list(ctx, game, lambda app, slug: app.nexus.trending(slug), "trending")


def latest_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show the mods most recently added to the Nexus."""
    _remote_list(ctx, game, lambda app, slug: app.nexus.latest_added(slug), "recently added")


def updated_command(
    ctx: typer.Context,
    game: Optional[str] = typer.Argument(None, help=GAME_HELP),
) -> None:
    """Show the mods most recently updated on the Nexus."""
    _remote_list(
        ctx, game, lambda app, slug: app.nexus.latest_updated(slug), "recently updated"
    )


# ------------------------------------------------------------------ #
# Private helpers
# ------------------------------------------------------------------ #


def _list_cached(
    ctx: typer.Context,
    game: Optional[str],
    sort: SortKey,
    query: Callable[[GameMetadata, AppContext], list[ModInfo]],
    description: str,
) -> None:
    app = app_context(ctx)
    metadata = lookup_game(app, app.game_or_default(game))
    if metadata is None:
        raise typer.Exit(code=1)

    mods = sort_mods(query(metadata, app), sort)
    if not mods and not get_output().is_json:
        print_markup(f"No {metadata.name} mods {description} found in the cache.")
        return
    emit_mods(
        mods,
        caption=f"Found {pluralize_mod(len(mods))} for "
        f"[bold yellow]{metadata.name}[/bold yellow] {description}:",
    )


def _list_status(ctx: typer.Context, game: Optional[str], status: ModStatus) -> None:
    _list_cached(
        ctx,
        game,
        SortKey.ID,
        lambda meta, app: meta.mods_with_status(status, app.store),
        f"marked {status.value}",
    )


def _remote_list(
    ctx: typer.Context,
    game: Optional[str],
    fetch: Callable[[AppContext, str], list[ModInfo]],
    description: str,
) -> None:
    app = app_context(ctx)
    slug = app.game_or_default(game)
    mods = [ModInfo.absorb(m, app.store) for m in fetch(app, slug)]
    emit_mods(mods, caption=f"{pluralize_mod(len(mods))} {description} for {slug}:")
