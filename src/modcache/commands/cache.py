"""Cache commands -- inspect the local entity store."""

from __future__ import annotations

import typer

from modcache.commands.common import app_context
from modcache.output import format_response, get_output, print_markup, print_table

cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show how many records each cache bucket holds.

    Example::

        modcache cache stats
        modcache --json cache stats
    """
    stats = app_context(ctx).store.stats()
    if get_output().is_json:
        format_response(stats)
        return
    print_markup(f"Cache directory: {stats['directory']}")
    rows = [[name, str(count)] for name, count in stats["buckets"].items()]
    print_table(["bucket", "records"], rows)
