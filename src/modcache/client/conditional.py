"""Conditional GETs keyed on ETags.

:class:`ConditionalFetcher` is the single place where the client avoids
re-downloading unchanged resources. Given a known ETag it sends
``If-None-Match``; a ``304`` comes back as ``(None, known_etag)`` and a
``200`` as ``(parsed_body, new_etag)``.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from pydantic import BaseModel

from modcache.client.transport import HttpTransport, parse_body
from modcache.output import debug

M = TypeVar("M", bound=BaseModel)


class ConditionalFetcher:
    """Perform ETag-conditional GETs over an :class:`HttpTransport`."""

    def __init__(self, transport: HttpTransport) -> None:
        self._transport = transport

    def conditional_get(
        self,
        path: str,
        model: type[M],
        known_etag: Optional[str] = None,
    ) -> tuple[Optional[M], str]:
        """Fetch *path*, parsing a fresh body into *model*.

        An empty *known_etag* is treated like ``None``: the resource was
        never fetched, or the Nexus does not version it, so the GET is
        unconditional.

        Returns:
            ``(None, known_etag)`` when the Nexus answered ``304``;
            otherwise ``(parsed, etag_from_response)``.

        Raises:
            DeserializationError: If a ``200`` body does not fit *model*.
        """
        etag = known_etag or None
        raw = self._transport.get(path, etag=etag)
        if raw.not_modified:
            debug(f"{path} not modified")
            return None, known_etag or ""
        return parse_body(raw.content, model, path), raw.etag
