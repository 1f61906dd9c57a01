"""The read-through / refresh-through cache protocol shared by every entity.

Each entity model mixes in :class:`Cacheable`, naming its bucket, its key,
and the Nexus call that fetches it. :meth:`Cacheable.get` then composes the
local store and the conditional fetcher:

1. Look the key up locally.
2. On a miss, fetch unconditionally; store and return what comes back.
3. On a hit without ``refresh``, return the local copy. No network call.
4. On a hit with ``refresh``, fetch conditionally with the local ETag. A
   ``304`` returns the local copy untouched and writes nothing; a fresh
   copy is merged via :meth:`Cacheable.update`, stored, and returned.

Storage failures never cost the caller data that was already fetched: a
failed read counts as a miss and a failed write is reported and ignored.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Generic,
    Optional,
    TypeVar,
    Union,
)

from pydantic import ValidationError

from modcache.data.keys import encode_key
from modcache.exceptions import NotFoundError, StorageError
from modcache.output import debug, info, warning

if TYPE_CHECKING:
    from typing import Self

    from modcache.client.nexus import NexusClient
    from modcache.store import CacheStore

K = TypeVar("K")

#: A client, or a zero-argument callable building one on demand.
NexusSource = Union["NexusClient", Callable[[], "NexusClient"]]


def resolve_client(nexus: NexusSource) -> NexusClient:
    """Return *nexus* itself, or the client its factory builds."""
    return nexus() if callable(nexus) else nexus


class Cacheable(Generic[K]):
    """Mixin for pydantic entity models stored in a :class:`CacheStore`.

    Subclasses must also derive from :class:`pydantic.BaseModel`, declare an
    ``etag: str`` field, set :attr:`bucket_name`, and implement
    :meth:`cache_key` and :meth:`remote`. :meth:`update` may be overridden
    to merge a freshly fetched copy into the cached one; the default takes
    the fetched copy wholesale.
    """

    bucket_name: ClassVar[str] = ""

    @abstractmethod
    def cache_key(self) -> K:
        """Return the key this entity is stored under."""

    @classmethod
    @abstractmethod
    def remote(
        cls, key: K, nexus: NexusClient, etag: Optional[str]
    ) -> tuple[Optional[Self], str]:
        """Call the Nexus endpoint for *key*, conditionally if *etag* is set.

        Returns:
            ``(entity_or_None, etag)`` as produced by
            :meth:`~modcache.client.conditional.ConditionalFetcher.conditional_get`.
        """

    def update(self, other: Self) -> Self:
        """Merge a freshly fetched copy into this cached one."""
        return other.model_copy(deep=True)

    # ------------------------------------------------------------------ #
    # Protocol
    # ------------------------------------------------------------------ #

    @classmethod
    def local(cls, key: K, store: CacheStore) -> Optional[Self]:
        """Look *key* up in the store without touching the network.

        Unreadable records and storage failures are reported and treated as
        a miss.
        """
        address = encode_key(key)
        try:
            raw = store.get(cls.bucket_name, address)
        except StorageError as exc:
            warning(f"{exc}; treating as a cache miss")
            return None
        if raw is None:
            return None
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            warning(f"Unreadable cached {cls.bucket_name}:{address}; treating as a cache miss")
            debug(str(exc))
            return None

    @classmethod
    def fetch_remote(
        cls, key: K, nexus: NexusSource, etag: Optional[str] = None
    ) -> Optional[Self]:
        """Fetch *key* from the Nexus.

        A client factory passed as *nexus* is only called here, so callers
        answered from the cache never need a client at all.

        Returns:
            The fresh entity stamped with its new ETag, or ``None`` when the
            Nexus reports it unchanged or does not know it.
        """
        try:
            fetched, new_etag = cls.remote(key, resolve_client(nexus), etag)
        except NotFoundError:
            info(f"    nexus has no {cls.bucket_name} record for {encode_key(key)}")
            return None
        if fetched is not None:
            fetched.etag = new_etag
        return fetched

    def store(self, store: CacheStore) -> None:
        """Serialise and write this entity under its own key.

        Raises:
            StorageError: If the write fails.
        """
        store.set(self.bucket_name, encode_key(self.cache_key()), self.model_dump_json())

    @classmethod
    def get(
        cls, key: K, refresh: bool, store: CacheStore, nexus: NexusSource
    ) -> Optional[Self]:
        """Return the entity for *key*, from cache when possible.

        Args:
            key: The entity's key.
            refresh: Re-validate a cache hit against the Nexus with a
                conditional GET.
            store: The local cache.
            nexus: The Nexus client, or a factory for it; only used on a
                miss or a refresh.
        """
        found = cls.local(key, store)
        if found is None:
            fetched = cls.fetch_remote(key, nexus, None)
            if fetched is None:
                info("    nexus gave us nothing")
                return None
            info("    first fetch of nexus data")
            fetched._store_or_warn(store)
            return fetched

        if not refresh:
            return found

        fetched = cls.fetch_remote(key, nexus, found.etag)
        if fetched is None:
            info("    no update; responding with cached")
            return found

        info("    refreshed nexus data")
        merged = found.update(fetched)
        merged._store_or_warn(store)
        return merged

    @classmethod
    def absorb(cls, fetched: Self, store: CacheStore) -> Self:
        """Merge an entity fetched outside :meth:`get` into the cache.

        Used for list endpoints that return full entities in bulk. The
        merge policy applies exactly as for a refresh.
        """
        found = cls.local(fetched.cache_key(), store)
        merged = found.update(fetched) if found is not None else fetched
        merged._store_or_warn(store)
        return merged

    @classmethod
    def list_by_prefix(cls, prefix: str, store: CacheStore) -> list[Self]:
        """Return every stored entity whose encoded key starts with *prefix*.

        Records that fail to deserialise are skipped. No ordering is
        guaranteed.
        """
        results = []
        for address, raw in store.iter_prefix(cls.bucket_name, prefix):
            try:
                results.append(cls.model_validate_json(raw))
            except ValidationError:
                debug(f"skipping unreadable {cls.bucket_name}:{address}")
        return results

    def _store_or_warn(self, store: CacheStore) -> None:
        try:
            self.store(store)
        except StorageError as exc:
            warning(f"Failed to store {self.bucket_name}:{encode_key(self.cache_key())}! {exc}")
        else:
            info("    cached nexus data")

    # Provided by pydantic.BaseModel and the etag field in concrete subclasses.
    if TYPE_CHECKING:
        etag: str

        @classmethod
        def model_validate_json(cls, data: Any) -> Self: ...

        def model_dump_json(self) -> str: ...

        def model_copy(self, *, deep: bool = False) -> Self: ...
