"""Mod action commands -- track, untrack, endorse, and abstain.

These change state on the Nexus and are never cached. Commands acting on
several mods report an HTTP error status for one mod and carry on with
the rest. Auth failures, rate limiting, exhausted quota and transport
errors stop the command.
"""

from __future__ import annotations

from typing import Optional

import typer

from modcache.commands.common import app_context, emit_model, lookup_game
from modcache.commands.tracked import load_tracked
from modcache.context import AppContext
from modcache.data import CompoundKey, EndorseResponse, ModInfo, ModStatus
from modcache.exceptions import AuthError, RemoteError
from modcache.output import error, get_output, print_markup, success


def track_command(
    ctx: typer.Context,
    mod_id: int = typer.Argument(help="The id of the mod to track."),
    game: Optional[str] = typer.Argument(None, help="The game the mod belongs to."),
) -> None:
    """Track a mod."""
    app = app_context(ctx)
    response = app.nexus.track(app.game_or_default(game), mod_id)
    if get_output().is_json:
        emit_model(response)
    else:
        print_markup(response.message)


def untrack_command(
    ctx: typer.Context,
    ids: list[int] = typer.Argument(help="The ids of the mods to untrack."),
    game: Optional[str] = typer.Option(
        None, "--game", "-g", help="The game the mods belong to."
    ),
) -> None:
    """Stop tracking one or more mods."""
    app = app_context(ctx)
    slug = app.game_or_default(game)
    for mod_id in ids:
        _untrack_one(app, slug, mod_id)


def untrack_removed_command(
    ctx: typer.Context,
    game: str = typer.Argument(help="The game to clean up."),
) -> None:
    """Untrack every tracked mod that was removed or wastebinned.

    Works from cached status only, so refresh first with ``update``.
    """
    app = app_context(ctx)
    metadata = lookup_game(app, game)
    if metadata is None:
        raise typer.Exit(code=1)

    tracked = {ref.mod_id for ref in load_tracked(app).by_game(game)}
    gone = metadata.mods_with_status(ModStatus.REMOVED, app.store)
    gone += metadata.mods_with_status(ModStatus.WASTEBINNED, app.store)
    count = 0
    for mod_info in gone:
        if mod_info.mod_id in tracked and _untrack_one(app, game, mod_info.mod_id):
            count += 1
    success(f"Untracked {count} removed or wastebinned mods for {metadata.name}.")


def endorse_command(
    ctx: typer.Context,
    game: str = typer.Argument(help="The game the mods belong to."),
    ids: list[int] = typer.Argument(help="The ids of the mods to endorse."),
) -> None:
    """Endorse one or more mods."""
    app = app_context(ctx)
    for mod_id in ids:
        try:
            response = app.nexus.endorse(game, mod_id, _cached_version(app, game, mod_id))
        except AuthError:
            raise
        except RemoteError as exc:
            error(f"Error endorsing {mod_id}: {exc}")
            continue
        _report_opinion(mod_id, response)


def abstain_command(
    ctx: typer.Context,
    game: str = typer.Argument(help="The game the mod belongs to."),
    mod_id: int = typer.Argument(help="The id of the mod to refuse to endorse."),
) -> None:
    """Abstain from endorsing a mod."""
    app = app_context(ctx)
    response = app.nexus.abstain(game, mod_id, _cached_version(app, game, mod_id))
    _report_opinion(mod_id, response)


# ------------------------------------------------------------------ #
# Private helpers
# ------------------------------------------------------------------ #


def _untrack_one(app: AppContext, game: str, mod_id: int) -> bool:
    try:
        response = app.nexus.untrack(game, mod_id)
    except AuthError:
        raise
    except RemoteError as exc:
        error(f"Error untracking {mod_id}: {exc}")
        return False
    if get_output().is_json:
        emit_model(response)
    else:
        print_markup(response.message or f"untracked [red]{mod_id}[/red]")
    return True


def _cached_version(app: AppContext, game: str, mod_id: int) -> str:
    # The endorse endpoints want the version being judged; use what we know.
    mod_info = ModInfo.local(CompoundKey(game, mod_id), app.store)
    return mod_info.version if mod_info is not None else ""


def _report_opinion(mod_id: int, response: EndorseResponse) -> None:
    if get_output().is_json:
        emit_model(response)
    else:
        print_markup(
            f"Endorsement status for mod {mod_id} is now "
            f"{response.status.value} {response.status.symbol}"
        )
