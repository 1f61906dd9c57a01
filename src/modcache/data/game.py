"""Game metadata and the cached-mod queries scoped to one game."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from pydantic import BaseModel, Field, PrivateAttr

from modcache.data.cacheable import Cacheable
from modcache.data.keys import game_prefix
from modcache.data.modinfo import ModInfo, ModStatus

if TYPE_CHECKING:
    from modcache.client.nexus import NexusClient
    from modcache.store import CacheStore


class ModCategory(BaseModel):
    category_id: int
    name: str = ""
    parent_category: Any = None


class GameMetadata(BaseModel, Cacheable[str]):
    """The record returned by ``/v1/games/{game}.json``, keyed by domain slug."""

    bucket_name: ClassVar[str] = "games"

    domain_name: str = ""
    etag: str = ""
    id: int = 0
    name: str = ""
    genre: str = ""
    approved_date: int = 0
    authors: int = 0
    downloads: int = 0
    file_count: int = 0
    file_endorsements: int = 0
    file_views: int = 0
    mods: int = 0
    forum_url: str = ""
    nexusmods_url: str = ""
    categories: list[ModCategory] = Field(default_factory=list)

    _category_map: Optional[dict[int, ModCategory]] = PrivateAttr(default=None)

    def cache_key(self) -> str:
        return self.domain_name

    @classmethod
    def remote(
        cls, key: str, nexus: NexusClient, etag: Optional[str]
    ) -> tuple[Optional[GameMetadata], str]:
        return nexus.game(key, etag)

    def category_from_id(self, category_id: int) -> Optional[ModCategory]:
        if self._category_map is None:
            self._category_map = {c.category_id: c for c in self.categories}
        return self._category_map.get(category_id)

    # ------------------------------------------------------------------ #
    # Cached mods for this game
    # ------------------------------------------------------------------ #

    def cached_mods(self, store: CacheStore) -> list[ModInfo]:
        """Every cached mod for this game, sorted by name case-insensitively."""
        mods = ModInfo.list_by_prefix(game_prefix(self.domain_name), store)
        return sorted(mods, key=lambda m: m.name.casefold())

    def mods_name_match(self, pattern: str, store: CacheStore) -> list[ModInfo]:
        patt = _compile(pattern)
        return [m for m in self.cached_mods(store) if patt.search(m.name)]

    def mods_match_text(self, pattern: str, store: CacheStore) -> list[ModInfo]:
        """Mods whose name, summary, uploader, or author credit match *pattern*."""
        patt = _compile(pattern)
        return [
            m
            for m in self.cached_mods(store)
            if patt.search(m.name)
            or patt.search(m.summary)
            or patt.search(m.uploaded_by)
            or patt.search(m.author)
        ]

    def mods_by_author(self, pattern: str, store: CacheStore) -> list[ModInfo]:
        patt = _compile(pattern)
        return [
            m
            for m in self.cached_mods(store)
            if patt.search(m.uploaded_by) or patt.search(m.author)
        ]

    def mods_with_status(self, status: ModStatus, store: CacheStore) -> list[ModInfo]:
        return [m for m in self.cached_mods(store) if m.status == status]


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(pattern), re.IGNORECASE)
