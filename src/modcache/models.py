"""Pydantic configuration models for modcache.

These are serialised as JSON in the user's config directory and loaded by
:mod:`modcache.config`. Entity models mirroring Nexus API payloads live in
:mod:`modcache.data` alongside their caching behaviour.

All models use Pydantic v2. Unknown keys in a config file are ignored so
that older binaries can read newer config files.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


NEXUS_BASE = "https://api.nexusmods.com"
USER_AGENT = "modcache: github.com/ceejbot/modcache"
DEFAULT_GAME = "skyrimspecialedition"


class RequestConfig(BaseModel):
    """HTTP settings applied to every call made to the Nexus."""

    base_url: str = Field(default=NEXUS_BASE, description="Nexus API base URL")
    read_timeout: float = Field(default=50.0, description="Read timeout in seconds")
    write_timeout: float = Field(default=5.0, description="Write timeout in seconds")
    user_agent: str = Field(default=USER_AGENT, description="User-Agent header value")


class CacheConfig(BaseModel):
    """Location of the on-disk entity cache."""

    directory: Optional[str] = Field(
        default=None,
        description="Cache directory override; defaults to the XDG cache dir",
    )


class OutputConfig(BaseModel):
    """Default output format preferences."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class PopulateConfig(BaseModel):
    """Defaults for the ``populate`` and ``update`` commands."""

    limit: int = Field(
        default=50, description="Remote fetches allowed per populate run"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/modcache/config.json``.

    Loaded and saved by :func:`~modcache.config.load_global_config` and
    :func:`~modcache.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by environment variables or
    CLI flags. See :func:`~modcache.config.resolve_config`.
    """

    default_game: str = DEFAULT_GAME
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    populate: PopulateConfig = Field(default_factory=PopulateConfig)
