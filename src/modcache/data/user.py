"""The user the API key belongs to."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Optional

from pydantic import BaseModel

from modcache.data.cacheable import Cacheable, NexusSource
from modcache.exceptions import StorageError
from modcache.output import info, warning

if TYPE_CHECKING:
    from modcache.client.nexus import NexusClient
    from modcache.store import CacheStore


class AuthenticatedUser(BaseModel, Cacheable[str]):
    """The ``/v1/users/validate.json`` record.

    Never served from cache: :meth:`get` always asks the Nexus, because
    answering "who am I" from stale data would hide a revoked key.
    """

    bucket_name: ClassVar[str] = "authed_users"
    user_key: ClassVar[str] = "authed_user"

    user_id: int = 0
    name: str = ""
    email: str = ""
    is_premium: bool = False
    is_supporter: bool = False
    profile_url: str = ""
    etag: str = ""

    def cache_key(self) -> str:
        return self.user_key

    @classmethod
    def remote(
        cls, key: str, nexus: NexusClient, etag: Optional[str]
    ) -> tuple[Optional[AuthenticatedUser], str]:
        return nexus.validate(), ""

    @classmethod
    def get(
        cls, key: str, refresh: bool, store: CacheStore, nexus: NexusSource
    ) -> Optional[AuthenticatedUser]:
        user = cls.fetch_remote(key, nexus)
        if user is None:
            return None
        try:
            user.store(store)
            info("stored authed user")
        except StorageError as exc:
            warning(f"failed to store authed user! {exc}")
        return user
