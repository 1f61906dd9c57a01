"""Typer application and CLI entry point for modcache.

This module wires together the top-level Typer application and registers
every built-in command. The root callback builds the global
:class:`~modcache.output.OutputManager` and the per-invocation
:class:`~modcache.context.AppContext` from the CLI flags.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, invokes the Typer app, and
maps :class:`~modcache.exceptions.ModcacheError` to its exit code.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`modcache.config`: Global configuration resolution.
    :mod:`modcache.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from modcache import __version__
from modcache.commands import account, actions, endorsements, files, mods, tracked
from modcache.commands.cache import cache_app
from modcache.commands.config import config_app
from modcache.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="modcache",
    help="Query the Nexus Mods API with a local cache of everything fetched.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

app.command("validate")(account.validate_command)
app.command("whoami", hidden=True)(account.validate_command)

app.command("tracked")(tracked.tracked_command)
app.command("populate")(tracked.populate_command)
app.command("update")(tracked.update_command)

app.command("game")(mods.game_command)
app.command("mods")(mods.mods_command)
app.command("mod")(mods.mod_command)
app.command("search")(mods.search_command)
app.command("by-name")(mods.by_name_command)
app.command("by-author")(mods.by_author_command)
app.command("hidden")(mods.hidden_command)
app.command("removed")(mods.removed_command)
app.command("wastebinned")(mods.wastebinned_command)
app.command("trending")(mods.trending_command)
app.command("latest")(mods.latest_command)
app.command("updated")(mods.updated_command)

app.command("track")(actions.track_command)
app.command("untrack")(actions.untrack_command)
app.command("untrack-removed")(actions.untrack_removed_command)
app.command("endorse")(actions.endorse_command)
app.command("abstain")(actions.abstain_command)

app.command("endorsements")(endorsements.endorsements_command)

app.command("files")(files.files_command)
app.command("primary-file")(files.primary_file_command)
app.command("file-info")(files.file_info_command)
app.command("changelogs")(files.changelogs_command)

app.add_typer(config_app, name="config", help="Configuration management.")
app.add_typer(cache_app, name="cache", help="Local cache administration.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"modcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="More diagnostics; repeat for debug output."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    refresh: bool = typer.Option(
        False, "--refresh", "-r", help="Re-validate cached data against the Nexus."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~modcache.output.OutputManager` from CLI
    flags and installs an :class:`~modcache.context.AppContext` as
    ``ctx.obj``. A context supplied by the caller (for instance through
    ``CliRunner.invoke(obj=...)``) is kept, with only ``refresh`` applied.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        verbose: Diagnostic verbosity; ``-v`` for info, ``-vv`` for debug.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        refresh: Re-validate cache hits with conditional requests.
        quiet: Suppress non-essential diagnostic output.
        no_color: Disable all colour and Rich markup.
    """
    from modcache.config import resolve_config
    from modcache.context import AppContext
    from modcache.output import OutputFormat, OutputManager, set_output

    cli_format = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    if isinstance(ctx.obj, AppContext):
        app_ctx = ctx.obj
        app_ctx.refresh = refresh or app_ctx.refresh
        fmt = OutputFormat(cli_format or OutputFormat.AUTO.value)
    else:
        config = resolve_config(cli_format)
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            fmt = OutputFormat.AUTO
        app_ctx = AppContext(config=config, refresh=refresh)
        ctx.obj = app_ctx

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbosity=verbose)
    )
    ctx.call_on_close(app_ctx.close)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from modcache.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``modcache`` console script.

    :class:`~modcache.exceptions.ModcacheError` instances cause a clean exit
    with the error's ``exit_code``. All other exceptions produce a crash log
    and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from modcache.exceptions import ModcacheError
        from modcache.output import error

        if isinstance(exc, ModcacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        error("Please report: https://github.com/ceejbot/modcache/issues")
        sys.exit(EXIT_GENERIC_FAILURE)
