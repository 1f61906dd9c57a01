"""Account commands -- check the API key and quota."""

from __future__ import annotations

import typer

from modcache.commands.common import app_context, emit_model
from modcache.data import AuthenticatedUser
from modcache.output import get_output, print_markup, warning


def validate_command(ctx: typer.Context) -> None:
    """Test your Nexus API key; whoami.

    Always asks the Nexus, never the cache, and reports how many requests
    remain in the current hourly and daily windows.
    """
    app = app_context(ctx)
    user = AuthenticatedUser.get(AuthenticatedUser.user_key, True, app.store, app.connect)
    if user is None:
        warning("Something went wrong validating your API key.")
        raise typer.Exit(code=1)

    if get_output().is_json:
        emit_model(user)
        return

    nexus = app.nexus
    print_markup(
        f"You are logged in as:\n    [bold]{user.name}[/bold] <[yellow]{user.email}[/yellow]>\n"
        f"    https://www.nexusmods.com/users/{user.user_id}"
    )
    print_markup(
        f"\nYou have [bold]{nexus.remaining_hourly}[/bold] requests remaining this hour "
        f"and [bold]{nexus.remaining_daily}[/bold] for today."
    )
