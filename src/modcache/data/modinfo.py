"""Full mod records and the status-gated merge policy.

When the Nexus pulls a mod from public listing (hidden, removed,
wastebinned, or under moderation) it stops returning the descriptive
fields: name, summary, author and so on come back empty. A refresh must not
wipe the cached copies of those fields, because they are what lets the user
recognise the mod and decide whether to untrack it. :meth:`ModInfo.update`
therefore takes the fetched copy wholesale only for ``published`` and
``not_published`` mods, and otherwise copies just the status, the
last-updated time, and the ETag.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from pydantic import BaseModel, Field, RootModel, model_validator

from modcache.data.cacheable import Cacheable
from modcache.data.endorsement import EndorsementStatus
from modcache.data.keys import CompoundKey

if TYPE_CHECKING:
    from modcache.client.nexus import NexusClient

NEXUS_WEB = "https://www.nexusmods.com"


class ModStatus(str, Enum):
    """Publication state of a mod. Unknown values read as ``not_published``."""

    NOT_PUBLISHED = "not_published"
    PUBLISHED = "published"
    HIDDEN = "hidden"
    REMOVED = "removed"
    WASTEBINNED = "wastebinned"
    UNDER_MODERATION = "under_moderation"

    @classmethod
    def _missing_(cls, value: object) -> "ModStatus":
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return cls.NOT_PUBLISHED

    @property
    def is_listed(self) -> bool:
        """Whether the Nexus still returns full metadata for mods in this state."""
        return self in (ModStatus.NOT_PUBLISHED, ModStatus.PUBLISHED)


class ModAuthor(BaseModel):
    member_group_id: int = 0
    member_id: int = 0
    name: str = "Alan Smithee"


class ModEndorsement(BaseModel):
    endorse_status: EndorsementStatus = EndorsementStatus.UNDECIDED
    timestamp: Optional[int] = None
    version: Optional[str] = None


class ModInfo(BaseModel, Cacheable[CompoundKey]):
    """The full mod record returned by ``/v1/games/{game}/mods/{id}.json``."""

    bucket_name: ClassVar[str] = "mods"

    domain_name: str
    mod_id: int
    etag: str = ""

    name: str = ""
    summary: str = ""
    description: str = ""
    picture_url: Optional[str] = None
    version: str = ""
    author: str = ""
    uploaded_by: str = ""
    uploaded_users_profile_url: str = ""
    user: ModAuthor = Field(default_factory=ModAuthor)

    created_time: str = ""
    created_timestamp: int = 0
    updated_time: str = ""
    updated_timestamp: int = 0

    available: bool = False
    status: ModStatus = ModStatus.NOT_PUBLISHED
    allow_rating: bool = False
    category_id: int = 0
    contains_adult_content: bool = False
    endorsement: Optional[ModEndorsement] = None
    endorsement_count: int = 0
    game_id: int = 0
    uid: int = 0

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Pulled mods come back with nulls where text used to be.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def cache_key(self) -> CompoundKey:
        return CompoundKey(self.domain_name, self.mod_id)

    @classmethod
    def remote(
        cls, key: CompoundKey, nexus: NexusClient, etag: Optional[str]
    ) -> tuple[Optional[ModInfo], str]:
        return nexus.mod_by_id(key.domain_name, key.mod_id, etag)

    def update(self, other: ModInfo) -> ModInfo:
        """Merge a fresh copy, keeping descriptive fields for unlisted mods."""
        if other.status.is_listed:
            return other.model_copy(deep=True)
        merged = self.model_copy(deep=True)
        merged.status = other.status
        merged.updated_time = other.updated_time
        merged.updated_timestamp = other.updated_timestamp
        merged.etag = other.etag
        return merged

    # ------------------------------------------------------------------ #
    # Presentation helpers
    # ------------------------------------------------------------------ #

    @property
    def url(self) -> str:
        return f"{NEXUS_WEB}/{self.domain_name}/mods/{self.mod_id}"

    @property
    def display_name(self) -> str:
        return self.name or f"mod #{self.mod_id}"

    def compact_info(self) -> str:
        """One line of Rich markup summarising the mod and its status."""
        if self.status == ModStatus.REMOVED:
            line = f"! [red]REMOVED[/red] {self.display_name} (was id #{self.mod_id})"
        elif self.status == ModStatus.WASTEBINNED:
            line = f"! [red]WASTEBINNED[/red] {self.display_name} (was id #{self.mod_id})"
        else:
            line = f"[green]{self.display_name}[/green] <[blue]{self.mod_id}[/blue]>"
            if self.status == ModStatus.HIDDEN:
                line += " HIDDEN"
            elif self.status == ModStatus.NOT_PUBLISHED:
                line += " UNPUBLISHED"
            elif self.status == ModStatus.UNDER_MODERATION:
                line += " UNDER MODERATION"
        if self.endorsement is not None:
            line += f" {self.endorsement.endorse_status.symbol}"
        return line

    def full_info(self) -> str:
        return (
            f"[green]{self.display_name}[/green]\n"
            f"{self.version} @ {self.updated_time}\n"
            f"uploaded by {self.uploaded_by}\n"
            f"{self.url}\n\n"
            f"{self.summary}\n"
        )


class ModInfoList(RootModel[list[ModInfo]]):
    """A bulk list of full mod records, as returned by trending/latest lists."""

    def __iter__(self):  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)


# ---------------------------------------------------------------------- #
# Sorting
# ---------------------------------------------------------------------- #


class SortKey(str, Enum):
    """Orderings offered for mod listings. Unknown values fall back to ``id``."""

    ID = "id"
    NAME = "name"
    DATE = "date"
    AUTHOR = "author"

    @classmethod
    def _missing_(cls, value: object) -> "SortKey":
        return cls.ID


def sort_mods(mods: list[ModInfo], key: SortKey) -> list[ModInfo]:
    """Return *mods* ordered by *key*; name and author compare case-insensitively."""
    if key == SortKey.NAME:
        return sorted(mods, key=lambda m: m.name.casefold())
    if key == SortKey.DATE:
        return sorted(mods, key=lambda m: m.updated_timestamp)
    if key == SortKey.AUTHOR:
        return sorted(mods, key=lambda m: m.uploaded_by.casefold())
    return sorted(mods, key=lambda m: m.mod_id)
