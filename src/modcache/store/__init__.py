"""On-disk entity storage for modcache.

This package provides :class:`CacheStore`, a bucketed key-value store built
on :mod:`diskcache`. Entities are written as JSON strings keyed by their
encoded cache key (see :mod:`modcache.data.keys`), one bucket per entity
type. The read-through protocol in :mod:`modcache.data.cacheable` is the
only writer.
"""

from modcache.store.store import BUCKETS, CacheStore

__all__ = ["BUCKETS", "CacheStore"]
