"""Built-in CLI commands for modcache.

Each module holds the command functions for one area of the CLI:

* :mod:`~modcache.commands.account` -- validate the API key (``whoami``).
* :mod:`~modcache.commands.tracked` -- list tracked mods and populate the
  cache from them.
* :mod:`~modcache.commands.mods` -- game metadata, single mods, searches of
  the cache, and the trending/latest lists.
* :mod:`~modcache.commands.actions` -- track, untrack, endorse, abstain.
* :mod:`~modcache.commands.endorsements` -- your endorsement opinions.
* :mod:`~modcache.commands.files` -- files and changelogs for one mod.
* :mod:`~modcache.commands.config` -- view and modify global settings.
* :mod:`~modcache.commands.cache` -- inspect the local store.

Multi-command groups (``config``, ``cache``) export a :class:`typer.Typer`
sub-application; everything else is a plain function registered directly
on the root app by :mod:`modcache.app`.
"""
