"""modcache -- a caching command-line client for the Nexus Mods API.

Every metadata record fetched from the Nexus is kept in a local store and
re-validated with conditional requests, so repeated queries cost nothing
against the API quota and mods the Nexus later hides or removes stay
recognisable.

Typical workflow::

    export NEXUS_API_KEY=...
    modcache validate                      # check the key and quota
    modcache populate skyrimspecialedition --limit 50
    modcache search "armor" skyrimspecialedition

Modules:
    app: Typer application and CLI entry point.
    client: Rate limiter, HTTP transport, conditional fetcher, endpoints.
    store: Bucketed embedded key-value store.
    data: Cached entity types and the read-through cache protocol.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.4.0"
