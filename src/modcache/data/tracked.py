"""The user's tracked-mods list."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from pydantic import BaseModel, Field, model_validator

from modcache.data.cacheable import Cacheable
from modcache.data.keys import CompoundKey

if TYPE_CHECKING:
    from modcache.client.nexus import NexusClient


class ModReference(BaseModel):
    domain_name: str
    mod_id: int

    def key(self) -> CompoundKey:
        return CompoundKey(self.domain_name, self.mod_id)


class Tracked(BaseModel, Cacheable[str]):
    """Every mod the user tracks, across all games.

    The Nexus returns a bare JSON array; it is wrapped as ``mods`` here.
    """

    bucket_name: ClassVar[str] = "mod_ref_lists"
    list_key: ClassVar[str] = "tracked"

    mods: list[ModReference] = Field(default_factory=list)
    etag: str = ""

    @model_validator(mode="before")
    @classmethod
    def _wrap_array(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"mods": data}
        return data

    def cache_key(self) -> str:
        return self.list_key

    @classmethod
    def remote(
        cls, key: str, nexus: NexusClient, etag: Optional[str]
    ) -> tuple[Optional[Tracked], str]:
        return nexus.tracked(etag)

    def by_game(self, game: str) -> list[ModReference]:
        return [item for item in self.mods if item.domain_name == game]

    def game_map(self) -> dict[str, list[int]]:
        """Map each game slug to the ids of the mods tracked for it."""
        mapping: dict[str, list[int]] = defaultdict(list)
        for item in self.mods:
            mapping[item.domain_name].append(item.mod_id)
        return dict(mapping)


class TrackingResponse(BaseModel):
    """Reply to a track or untrack request."""

    message: str = ""
