"""The embedded key-value store behind every cached entity.

Uses :mod:`diskcache` to persist JSON-serialised entities on the
filesystem. Each entity type gets its own *bucket*: a separate
:class:`diskcache.Cache` directory under the store root. Records never
expire; a write replaces whatever was stored under the same key.

Layout::

    <root>/
        games/
        mods/
        mod_ref_lists/
        endorsements/
        changelogs/
        files/
        authed_users/

Every failure from the underlying store surfaces as
:class:`~modcache.exceptions.StorageError`; callers decide whether that is
fatal.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Iterator, Optional

import diskcache

from modcache.exceptions import StorageError
from modcache.output import debug

BUCKETS = (
    "games",
    "mods",
    "mod_ref_lists",
    "endorsements",
    "changelogs",
    "files",
    "authed_users",
)

_STORE_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)


class CacheStore:
    """Bucketed persistent string-to-JSON store.

    Buckets are opened lazily on first use and stay open until
    :meth:`close`.

    Args:
        directory: Root directory for the store. Created if missing.

    Example::

        store = CacheStore("/tmp/modcache")
        store.set("games", "skyrimspecialedition", '{"name": "Skyrim SE"}')
        store.get("games", "skyrimspecialedition")
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._buckets: dict[str, diskcache.Cache] = {}

    @property
    def directory(self) -> Path:
        return self._directory

    def get(self, bucket: str, key: str) -> Optional[str]:
        """Return the serialised record stored under *key*, or ``None``.

        Raises:
            StorageError: If the bucket cannot be opened or read.
        """
        cache = self._bucket(bucket)
        try:
            return cache.get(key, default=None)
        except _STORE_ERRORS as exc:
            raise StorageError(f"Cannot read {bucket}/{key}: {exc}") from exc

    def set(self, bucket: str, key: str, value: str) -> None:
        """Write *value* under *key*, replacing any previous record.

        Raises:
            StorageError: If the bucket cannot be opened or written.
        """
        cache = self._bucket(bucket)
        try:
            cache.set(key, value)
        except _STORE_ERRORS as exc:
            raise StorageError(f"Cannot write {bucket}/{key}: {exc}") from exc
        debug(f"stored {bucket}:{key}")

    def iter_prefix(self, bucket: str, prefix: str) -> Iterator[tuple[str, str]]:
        """Yield ``(key, value)`` for every record whose key starts with *prefix*.

        Keys come back in the store's sort order; callers that care about
        ordering sort the decoded entities themselves. Records that vanish
        between listing and reading are skipped.

        Raises:
            StorageError: If the bucket cannot be opened or scanned.
        """
        cache = self._bucket(bucket)
        try:
            for key in cache.iterkeys():
                if not isinstance(key, str) or not key.startswith(prefix):
                    continue
                value = cache.get(key, default=None)
                if value is not None:
                    yield key, value
        except _STORE_ERRORS as exc:
            raise StorageError(f"Cannot scan {bucket} for {prefix!r}: {exc}") from exc

    def stats(self) -> dict[str, Any]:
        """Return the store directory and the record count of every bucket."""
        counts = {}
        for name in BUCKETS:
            try:
                counts[name] = len(self._bucket(name))
            except _STORE_ERRORS as exc:
                raise StorageError(f"Cannot count {name}: {exc}") from exc
        return {"directory": str(self._directory), "buckets": counts}

    def close(self) -> None:
        """Close every open bucket and release resources."""
        for cache in self._buckets.values():
            cache.close()
        self._buckets.clear()

    def __enter__(self) -> CacheStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _bucket(self, name: str) -> diskcache.Cache:
        if name not in BUCKETS:
            raise StorageError(f"Unknown bucket: {name}")
        cache = self._buckets.get(name)
        if cache is None:
            try:
                cache = diskcache.Cache(str(self._directory / name))
            except _STORE_ERRORS as exc:
                raise StorageError(f"Can't open bucket {name}: {exc}") from exc
            self._buckets[name] = cache
        return cache
