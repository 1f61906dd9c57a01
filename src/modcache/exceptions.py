"""Exception hierarchy for modcache.

All exceptions inherit from :class:`ModcacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`modcache.exit_codes`.
The top-level error handler in :func:`modcache.app.main` catches
``ModcacheError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ModcacheError              (exit 1)
    +-- ConfigError            (exit 1)
    +-- QuotaExhaustedError    (exit 8)
    +-- RateLimitedError       (exit 9)
    +-- RemoteError            (exit 5)
    |   +-- AuthError          (exit 3)
    |   +-- NotFoundError      (exit 4)
    +-- TransportError         (exit 6)
    +-- DeserializationError   (exit 7)
    +-- StorageError           (exit 10)

None of these are retried anywhere in the package. The CLI reports them and
stops.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from modcache.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_BAD_PAYLOAD,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_QUOTA_EXHAUSTED,
    EXIT_RATE_LIMITED,
    EXIT_REMOTE_ERROR,
    EXIT_STORAGE_ERROR,
)


class ModcacheError(Exception):
    """Base exception for all modcache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`modcache.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(ModcacheError):
    """Raised for configuration problems (missing API key, invalid config JSON)."""

    exit_code = EXIT_GENERIC_FAILURE


class QuotaExhaustedError(ModcacheError):
    """Raised before a request is sent when a quota window has no calls left.

    No network traffic happens when this is raised; waiting until
    ``reset_at`` is the only remedy.

    Args:
        window: ``"hourly"`` or ``"daily"``.
        limit: The window's total allowance as last reported by the Nexus.
        reset_at: When the window resets, if the Nexus has told us.
    """

    exit_code = EXIT_QUOTA_EXHAUSTED

    def __init__(self, window: str, limit: int, reset_at: Optional[datetime]):
        when = reset_at.isoformat() if reset_at else "the window resets"
        super().__init__(f"Past {window} API call limit of {limit}! Wait until {when}.")
        self.window = window
        self.limit = limit
        self.reset_at = reset_at


class RateLimitedError(ModcacheError):
    """Raised when the Nexus answers HTTP 429.

    Distinct from :class:`QuotaExhaustedError`: this means the server
    disagreed with our own quota bookkeeping.
    """

    exit_code = EXIT_RATE_LIMITED


class RemoteError(ModcacheError):
    """Raised for any non-success HTTP status not covered by a subclass.

    The message quotes at most :attr:`message_body_limit` characters of the
    body; :attr:`body` keeps all of it.

    Args:
        status: The HTTP status code.
        body: The response body text, kept verbatim for diagnosis.
    """

    exit_code = EXIT_REMOTE_ERROR
    message_body_limit = 500

    def __init__(self, status: int, body: str = ""):
        detail = f": {body[: self.message_body_limit]}" if body else ""
        super().__init__(f"The Nexus responded with HTTP {status}{detail}")
        self.status = status
        self.body = body


class AuthError(RemoteError):
    """Raised on HTTP 401 / 403 (invalid or revoked API key)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(RemoteError):
    """Raised on HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class TransportError(ModcacheError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class DeserializationError(ModcacheError):
    """Raised when a payload or rate-limit header does not match the expected shape.

    Usually means the Nexus API contract drifted. Never swallowed.
    """

    exit_code = EXIT_BAD_PAYLOAD


class StorageError(ModcacheError):
    """Raised when the on-disk cache cannot be opened, read, or written."""

    exit_code = EXIT_STORAGE_ERROR
