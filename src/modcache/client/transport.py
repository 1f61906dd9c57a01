"""Rate-limit-aware HTTP transport for the Nexus API.

This module provides :class:`HttpTransport`, a thin wrapper around
:class:`httpx.Client` that:

- **Gates every call** on the :class:`~modcache.client.ratelimit.RateLimiter`
  before any traffic is sent.
- **Authenticates** with the ``apikey`` header and a fixed User-Agent.
- **Records quota headers and the ETag** from every response, including
  ``304`` and error responses.
- **Maps outcomes** to the :mod:`modcache.exceptions` taxonomy. A ``304``
  is a normal result, not an error.

No call is ever retried. A ``429``, an exhausted quota, or a network
failure goes straight back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from modcache.client.ratelimit import RateLimiter
from modcache.exceptions import (
    AuthError,
    DeserializationError,
    NotFoundError,
    RateLimitedError,
    RemoteError,
    TransportError,
)
from modcache.models import RequestConfig
from modcache.output import debug, warning

M = TypeVar("M", bound=BaseModel)

_CONNECT_TIMEOUT = 10.0


@dataclass
class RawResponse:
    """The normalised outcome of a successful or not-modified GET."""

    status_code: int
    etag: str
    content: bytes = b""

    @property
    def not_modified(self) -> bool:
        return self.status_code == 304


class HttpTransport:
    """Authenticated, quota-gated HTTP calls against the Nexus.

    The underlying :class:`httpx.Client` is created on first use unless one
    is supplied, and lives until :meth:`close`.

    Args:
        api_key: Personal Nexus API key sent as the ``apikey`` header.
        config: Base URL, timeouts, and User-Agent.
        limiter: Quota tracker shared by every call on this transport.
        client: Optional pre-built client, mainly for tests with
            :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[RequestConfig] = None,
        limiter: Optional[RateLimiter] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_key = api_key
        self._config = config or RequestConfig()
        self.limiter = limiter or RateLimiter()
        self._client = client

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def get(self, path: str, etag: Optional[str] = None) -> RawResponse:
        """Send a GET, conditional when *etag* is given.

        Returns:
            A :class:`RawResponse` with status 2xx or 304 and the
            response ETag (empty when the Nexus sent none).

        Raises:
            QuotaExhaustedError: Before sending, if a quota window is spent.
            RateLimitedError: On HTTP 429.
            AuthError: On HTTP 401 / 403.
            NotFoundError: On HTTP 404.
            RemoteError: On any other non-success status.
            TransportError: On connection, DNS, or timeout failures.
            DeserializationError: If the rate-limit headers are malformed.
        """
        headers = {"if-none-match": etag} if etag else {}
        response = self._send("GET", path, headers=headers)
        return RawResponse(
            status_code=response.status_code,
            etag=response.headers.get("etag", ""),
            content=response.content,
        )

    def post(
        self,
        path: str,
        form: dict[str, Any],
        model: type[M],
        params: Optional[dict[str, Any]] = None,
    ) -> M:
        """Send a form-encoded POST and parse the JSON reply into *model*."""
        response = self._send("POST", path, data=form, params=params)
        return parse_body(response.content, model, path)

    def delete(
        self,
        path: str,
        form: dict[str, Any],
        model: type[M],
        params: Optional[dict[str, Any]] = None,
    ) -> M:
        """Send a form-encoded DELETE and parse the JSON reply into *model*."""
        response = self._send("DELETE", path, data=form, params=params)
        return parse_body(response.content, model, path)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self._config.base_url,
                timeout=httpx.Timeout(
                    _CONNECT_TIMEOUT,
                    read=self._config.read_timeout,
                    write=self._config.write_timeout,
                ),
                follow_redirects=True,
            )
        return self._client

    def _send(
        self,
        method: str,
        path: str,
        headers: Optional[dict[str, str]] = None,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        self.limiter.allow_request()

        merged_headers = {
            "accept": "application/json",
            "apikey": self._api_key,
            "user-agent": self._config.user_agent,
        }
        merged_headers.update(headers or {})

        debug(f"{method} {path}")
        kwargs: dict[str, Any] = {"headers": merged_headers}
        if params:
            kwargs["params"] = params
        if data is not None:
            kwargs["data"] = data

        try:
            response = self._http().request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request to {path} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"Transport layer error for {path}: {exc}") from exc

        self.limiter.record_headers(response.headers)
        self._map_response_error(response)
        return response

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for any status other than 2xx and 304."""
        status = response.status_code
        if status == 304 or 200 <= status < 300:
            return

        body = response.text if response.content else ""
        if status == 429:
            warning("The Nexus has rate-limited you!")
            raise RateLimitedError("The Nexus rejected the request with HTTP 429 (rate limited)")
        if status in (401, 403):
            raise AuthError(status, body)
        if status == 404:
            raise NotFoundError(status, body)
        raise RemoteError(status, body)


def parse_body(content: bytes, model: type[M], what: str) -> M:
    """Validate a JSON body against *model*.

    Raises:
        DeserializationError: If the body is not JSON or has the wrong shape.
    """
    try:
        return model.model_validate_json(content)
    except ValidationError as exc:
        raise DeserializationError(f"Unexpected response shape from {what}: {exc}") from exc
