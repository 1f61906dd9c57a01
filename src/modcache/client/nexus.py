"""The Nexus Mods API endpoint client.

:class:`NexusClient` names every endpoint modcache uses and wires it to the
conditional fetcher (for cached resources) or the raw transport (for list
endpoints and state changes). Entity types call back into it from their
``remote`` hooks; nothing here touches the local store.
"""

from __future__ import annotations

from typing import Optional

from modcache.client.conditional import ConditionalFetcher
from modcache.client.ratelimit import RateLimiter
from modcache.client.transport import HttpTransport
from modcache.data.changelogs import Changelogs
from modcache.data.endorsement import EndorsementList, EndorseResponse
from modcache.data.files import Files
from modcache.data.game import GameMetadata
from modcache.data.modinfo import ModInfo, ModInfoList
from modcache.data.tracked import Tracked, TrackingResponse
from modcache.data.user import AuthenticatedUser
from modcache.exceptions import DeserializationError
from modcache.models import RequestConfig


class NexusClient:
    """Endpoint methods over a single quota-tracking transport.

    Conditional endpoints return ``(entity_or_None, etag)``; ``None`` means
    the Nexus answered ``304`` for the supplied ETag.

    Args:
        transport: The HTTP transport; owns the rate limiter.

    Example::

        with NexusClient.from_api_key(key) as nexus:
            game, etag = nexus.game("skyrimspecialedition")
    """

    def __init__(self, transport: HttpTransport) -> None:
        self.transport = transport
        self._fetcher = ConditionalFetcher(transport)

    @classmethod
    def from_api_key(
        cls, api_key: str, config: Optional[RequestConfig] = None
    ) -> NexusClient:
        return cls(HttpTransport(api_key, config=config))

    def __enter__(self) -> NexusClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    @property
    def limiter(self) -> RateLimiter:
        return self.transport.limiter

    @property
    def remaining_hourly(self) -> int:
        return self.limiter.hourly.remaining

    @property
    def remaining_daily(self) -> int:
        return self.limiter.daily.remaining

    # ------------------------------------------------------------------ #
    # Cached resources (conditional)
    # ------------------------------------------------------------------ #

    def game(
        self, game: str, etag: Optional[str] = None
    ) -> tuple[Optional[GameMetadata], str]:
        return self._fetcher.conditional_get(f"/v1/games/{game}.json", GameMetadata, etag)

    def mod_by_id(
        self, game: str, mod_id: int, etag: Optional[str] = None
    ) -> tuple[Optional[ModInfo], str]:
        return self._fetcher.conditional_get(
            f"/v1/games/{game}/mods/{mod_id}.json", ModInfo, etag
        )

    def tracked(self, etag: Optional[str] = None) -> tuple[Optional[Tracked], str]:
        return self._fetcher.conditional_get("/v1/user/tracked_mods.json", Tracked, etag)

    def endorsements(
        self, etag: Optional[str] = None
    ) -> tuple[Optional[EndorsementList], str]:
        return self._fetcher.conditional_get(
            "/v1/user/endorsements.json", EndorsementList, etag
        )

    def changelogs(
        self, game: str, mod_id: int, etag: Optional[str] = None
    ) -> tuple[Optional[Changelogs], str]:
        return self._fetcher.conditional_get(
            f"/v1/games/{game}/mods/{mod_id}/changelogs.json", Changelogs, etag
        )

    def files(
        self, game: str, mod_id: int, etag: Optional[str] = None
    ) -> tuple[Optional[Files], str]:
        return self._fetcher.conditional_get(
            f"/v1/games/{game}/mods/{mod_id}/files.json", Files, etag
        )

    # ------------------------------------------------------------------ #
    # Uncached resources
    # ------------------------------------------------------------------ #

    def validate(self) -> AuthenticatedUser:
        user, _ = self._fetcher.conditional_get("/v1/users/validate.json", AuthenticatedUser)
        if user is None:
            raise DeserializationError("Empty response from /v1/users/validate.json")
        return user

    def trending(self, game: str) -> list[ModInfo]:
        return self._mod_list(f"/v1/games/{game}/mods/trending.json")

    def latest_added(self, game: str) -> list[ModInfo]:
        return self._mod_list(f"/v1/games/{game}/mods/latest_added.json")

    def latest_updated(self, game: str) -> list[ModInfo]:
        return self._mod_list(f"/v1/games/{game}/mods/latest_updated.json")

    # ------------------------------------------------------------------ #
    # State changes
    # ------------------------------------------------------------------ #

    def track(self, game: str, mod_id: int) -> TrackingResponse:
        return self.transport.post(
            "/v1/user/tracked_mods.json",
            {"mod_id": mod_id},
            TrackingResponse,
            params={"domain_name": game},
        )

    def untrack(self, game: str, mod_id: int) -> TrackingResponse:
        return self.transport.delete(
            "/v1/user/tracked_mods.json",
            {"mod_id": mod_id},
            TrackingResponse,
            params={"domain_name": game},
        )

    def endorse(self, game: str, mod_id: int, version: str = "") -> EndorseResponse:
        return self.transport.post(
            f"/v1/games/{game}/mods/{mod_id}/endorse.json",
            {"version": version},
            EndorseResponse,
        )

    def abstain(self, game: str, mod_id: int, version: str = "") -> EndorseResponse:
        return self.transport.post(
            f"/v1/games/{game}/mods/{mod_id}/abstain.json",
            {"version": version},
            EndorseResponse,
        )

    def _mod_list(self, path: str) -> list[ModInfo]:
        mods, _ = self._fetcher.conditional_get(path, ModInfoList)
        return list(mods.root) if mods is not None else []
