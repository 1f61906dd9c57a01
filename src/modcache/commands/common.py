"""Helpers shared by the command modules."""

from __future__ import annotations

from typing import Iterable, Optional

import typer
from pydantic import BaseModel

from modcache.context import AppContext
from modcache.data import GameMetadata, ModInfo
from modcache.output import format_response, get_output, print_markup


def app_context(ctx: typer.Context) -> AppContext:
    """Return the :class:`AppContext` installed by the root callback."""
    obj = ctx.find_root().obj
    if not isinstance(obj, AppContext):
        obj = AppContext()
        ctx.find_root().obj = obj
    return obj


def lookup_game(app: AppContext, game: str) -> Optional[GameMetadata]:
    """Fetch game metadata through the cache, reporting an unknown slug."""
    metadata = GameMetadata.get(game, app.refresh, app.store, app.connect)
    if metadata is None:
        print_markup(
            f"No game identified as [bold yellow]{game}[/bold yellow] found on the Nexus. "
            "Recheck the slug!"
        )
    return metadata


def emit_model(model: BaseModel) -> None:
    format_response(model.model_dump(mode="json"))


def emit_mods(mods: Iterable[ModInfo], caption: Optional[str] = None) -> None:
    """Print mods as JSON in ``--json`` mode, otherwise one compact line each."""
    mods = list(mods)
    if get_output().is_json:
        format_response([m.model_dump(mode="json") for m in mods])
        return
    if caption:
        print_markup(caption)
    for m in mods:
        print_markup(f"    {m.compact_info()}")


def pluralize_mod(count: int) -> str:
    return "one mod" if count == 1 else f"{count} mods"
