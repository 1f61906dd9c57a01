"""HTTP client layer for modcache.

Leaves first:

* :class:`RateLimiter` -- hourly/daily quota bookkeeping from response headers.
* :class:`HttpTransport` -- authenticated, quota-gated calls over :mod:`httpx`.
* :class:`ConditionalFetcher` -- ETag-conditional GETs.
* :class:`NexusClient` -- the named Nexus endpoints.

Example::

    from modcache.client import NexusClient

    with NexusClient.from_api_key(api_key) as nexus:
        mod, etag = nexus.mod_by_id("skyrimspecialedition", 12345)
"""

from modcache.client.conditional import ConditionalFetcher
from modcache.client.nexus import NexusClient
from modcache.client.ratelimit import QuotaWindow, RateLimiter
from modcache.client.transport import HttpTransport, RawResponse

__all__ = [
    "ConditionalFetcher",
    "HttpTransport",
    "NexusClient",
    "QuotaWindow",
    "RateLimiter",
    "RawResponse",
]
