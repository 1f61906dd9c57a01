"""Per-invocation state shared by every command.

One :class:`AppContext` is built in the root CLI callback and stored on the
Typer context. It owns the cache store and the Nexus client, creating each
on first use so that purely local commands never need an API key, and
closes both when the command finishes.
"""

from __future__ import annotations

from typing import Optional

from modcache.client.nexus import NexusClient
from modcache.config import resolve_api_key, resolve_store_dir
from modcache.models import GlobalConfig
from modcache.output import debug
from modcache.store import CacheStore


class AppContext:
    """Lazily constructed store and client plus the global flags.

    Args:
        config: The resolved configuration.
        refresh: Whether cache hits should be re-validated against the Nexus.
        store: Optional pre-built store (tests).
        nexus: Optional pre-built client (tests).
    """

    def __init__(
        self,
        config: Optional[GlobalConfig] = None,
        refresh: bool = False,
        store: Optional[CacheStore] = None,
        nexus: Optional[NexusClient] = None,
    ) -> None:
        self.config = config or GlobalConfig()
        self.refresh = refresh
        self._store = store
        self._nexus = nexus

    @property
    def store(self) -> CacheStore:
        if self._store is None:
            directory = resolve_store_dir(self.config)
            debug(f"Storing data in {directory}")
            self._store = CacheStore(directory)
        return self._store

    @property
    def nexus(self) -> NexusClient:
        if self._nexus is None:
            self._nexus = NexusClient.from_api_key(resolve_api_key(), self.config.request)
        return self._nexus

    def connect(self) -> NexusClient:
        """Return the Nexus client, building it on first use.

        Pass the bound method where a client factory is accepted so the API
        key is only required when a request is really made.
        """
        return self.nexus

    def game_or_default(self, game: Optional[str]) -> str:
        return game or self.config.default_game

    def close(self) -> None:
        if self._nexus is not None:
            self._nexus.close()
        if self._store is not None:
            self._store.close()
