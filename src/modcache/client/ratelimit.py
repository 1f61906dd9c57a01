"""Hourly and daily request quota tracking.

The Nexus allows each API key a fixed number of calls per hour and per day,
and reports the current state of both windows in every response::

    x-rl-hourly-limit: 100
    x-rl-hourly-remaining: 97
    x-rl-hourly-reset: 2024-03-01T13:00:00+00:00
    x-rl-daily-limit: 2500
    x-rl-daily-remaining: 2431
    x-rl-daily-reset: 2024-03-02 00:00:00 +0000

:class:`RateLimiter` keeps the last reported values and refuses to let a
request go out once either window is spent. The state lives for the
process only; it is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional

from modcache.exceptions import DeserializationError, QuotaExhaustedError
from modcache.output import debug

DEFAULT_HOURLY_LIMIT = 100
DEFAULT_DAILY_LIMIT = 2500

_RESET_FORMATS = ("%Y-%m-%d %H:%M:%S %z", "%Y-%m-%dT%H:%M:%S%z")


@dataclass
class QuotaWindow:
    """One quota window as last reported by the Nexus."""

    name: str
    limit: int
    remaining: int
    reset_at: Optional[datetime] = None

    @property
    def exhausted(self) -> bool:
        return self.remaining < 1


class RateLimiter:
    """Gate outgoing requests against the hourly and daily quota windows.

    Starts from a simulated full allowance so the first request can go out
    before any headers have been seen.

    Args:
        hourly_limit: Initial hourly allowance.
        daily_limit: Initial daily allowance.
    """

    def __init__(
        self,
        hourly_limit: int = DEFAULT_HOURLY_LIMIT,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
    ) -> None:
        self.hourly = QuotaWindow("hourly", hourly_limit, hourly_limit)
        self.daily = QuotaWindow("daily", daily_limit, daily_limit)

    def allow_request(self) -> None:
        """Raise if either window has no calls left.

        Raises:
            QuotaExhaustedError: Naming the spent window and its reset time.
                The hourly window is checked first.
        """
        for window in (self.hourly, self.daily):
            if window.exhausted:
                raise QuotaExhaustedError(window.name, window.limit, window.reset_at)

    def record_headers(self, headers: Mapping[str, str]) -> None:
        """Overwrite window state from response headers.

        Every rate-limit header present replaces the stored value; the
        server is authoritative. All present headers are parsed before any
        are applied, so a malformed header leaves the limiter untouched.

        Raises:
            DeserializationError: If a counter is not an integer or a reset
                timestamp cannot be parsed.
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        updates: dict[tuple[str, str], object] = {}
        for window in ("hourly", "daily"):
            for field in ("limit", "remaining"):
                raw = lowered.get(f"x-rl-{window}-{field}")
                if raw is not None:
                    updates[(window, field)] = _parse_count(f"x-rl-{window}-{field}", raw)
            raw = lowered.get(f"x-rl-{window}-reset")
            if raw is not None:
                updates[(window, "reset_at")] = parse_reset(raw)

        if not updates:
            return

        for (name, field), value in updates.items():
            setattr(getattr(self, name), field, value)
        for window in (self.hourly, self.daily):
            window.remaining = min(window.remaining, window.limit)

        debug(
            f"quota: {self.hourly.remaining}/{self.hourly.limit} hourly, "
            f"{self.daily.remaining}/{self.daily.limit} daily"
        )


def _parse_count(name: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise DeserializationError(f"Malformed {name} header: {raw!r}") from exc
    if value < 0:
        raise DeserializationError(f"Negative {name} header: {raw!r}")
    return value


def parse_reset(raw: str) -> datetime:
    """Parse a reset timestamp into an aware UTC :class:`datetime`.

    Accepts RFC 3339 (``2024-03-01T13:00:00Z``) and the space-separated
    ``2024-03-01 13:00:00 +0000`` form.

    Raises:
        DeserializationError: If no known format matches.
    """
    text = raw.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _RESET_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        raise DeserializationError(f"Malformed rate-limit reset header: {raw!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
