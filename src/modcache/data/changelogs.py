"""Per-version changelog entries for one mod."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Optional

from pydantic import BaseModel, Field, model_validator

from modcache.data.cacheable import Cacheable
from modcache.data.keys import CompoundKey

if TYPE_CHECKING:
    from modcache.client.nexus import NexusClient


class Changelogs(BaseModel, Cacheable[CompoundKey]):
    """Changelog lines keyed by version string.

    The Nexus sends only the ``{version: [lines]}`` mapping; the game and mod
    id are stamped on after fetching so the record knows its own key.
    """

    bucket_name: ClassVar[str] = "changelogs"

    domain_name: str = ""
    mod_id: int = 0
    etag: str = ""
    versions: dict[str, list[str]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _wrap_versions(cls, data: Any) -> Any:
        if isinstance(data, dict) and "versions" not in data:
            return {"versions": data}
        if isinstance(data, list) and not data:
            return {"versions": {}}
        return data

    def cache_key(self) -> CompoundKey:
        return CompoundKey(self.domain_name, self.mod_id)

    @classmethod
    def remote(
        cls, key: CompoundKey, nexus: NexusClient, etag: Optional[str]
    ) -> tuple[Optional[Changelogs], str]:
        fetched, new_etag = nexus.changelogs(key.domain_name, key.mod_id, etag)
        if fetched is not None:
            fetched.domain_name = key.domain_name
            fetched.mod_id = key.mod_id
        return fetched, new_etag
