"""The user's endorsement opinions across all games."""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from pydantic import BaseModel, Field, model_validator

from modcache.data.cacheable import Cacheable

if TYPE_CHECKING:
    from modcache.client.nexus import NexusClient

NEXUS_WEB = "https://www.nexusmods.com"


class EndorsementStatus(str, Enum):
    ENDORSED = "Endorsed"
    UNDECIDED = "Undecided"
    ABSTAINED = "Abstained"

    @property
    def symbol(self) -> str:
        if self == EndorsementStatus.ENDORSED:
            return "\U0001f44d"
        if self == EndorsementStatus.UNDECIDED:
            return "\U0001f928"
        return "\U0001f6ab"


class UserEndorsement(BaseModel):
    domain_name: str
    mod_id: int
    status: EndorsementStatus = EndorsementStatus.UNDECIDED
    date: int = 0
    version: Optional[str] = None

    @property
    def url(self) -> str:
        return f"{NEXUS_WEB}/{self.domain_name}/mods/{self.mod_id}"


class EndorsementList(BaseModel, Cacheable[str]):
    """Every mod the user has endorsed or abstained on.

    The Nexus returns a bare JSON array; it is wrapped as ``mods`` here.
    """

    bucket_name: ClassVar[str] = "endorsements"
    list_key: ClassVar[str] = "endorsements"

    mods: list[UserEndorsement] = Field(default_factory=list)
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
    ) -> tuple[Optional[EndorsementList], str]:
        return nexus.endorsements(etag)

    def by_game(self, game: str) -> list[UserEndorsement]:
        return [item for item in self.mods if item.domain_name == game]

    def game_map(self) -> dict[str, list[UserEndorsement]]:
        mapping: dict[str, list[UserEndorsement]] = defaultdict(list)
        for item in self.mods:
            mapping[item.domain_name].append(item)
        return dict(mapping)


class EndorseResponse(BaseModel):
    """Reply to an endorse or abstain POST."""

    message: str = ""
    status: EndorsementStatus = EndorsementStatus.UNDECIDED
