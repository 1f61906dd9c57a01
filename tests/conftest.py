"""Shared test fixtures for modcache.

Provides isolated config environments, a temporary cache store, output
state management, and a fake Nexus served through
:class:`httpx.MockTransport` that records every request it sees. These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from modcache.client import HttpTransport, NexusClient, RateLimiter
from modcache.output import OutputFormat, OutputManager, reset_output, set_output
from modcache.store import CacheStore


GAME = "skyrimspecialedition"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config, and clears the environment variables modcache reads.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("modcache.config._is_xdg_platform", lambda: True)

    for var in ["NEXUS_API_KEY", "NEXUS_CACHE_PATH", "MODCACHE_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Store fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def store(tmp_path: Path) -> CacheStore:
    """A fresh on-disk store under tmp_path, closed after the test."""
    cache_store = CacheStore(tmp_path / "store")
    yield cache_store
    cache_store.close()


# ---------------------------------------------------------------------------
# Fake Nexus
# ---------------------------------------------------------------------------


class FakeNexus:
    """Route table for :class:`httpx.MockTransport`.

    Each route holds a queue of canned responses; the last one repeats once
    the queue is down to it. Unrouted requests get a ``404``. Every request
    is recorded in :attr:`requests`.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        json: Any = None,
        status: int = 200,
        etag: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        method: str = "GET",
    ) -> "FakeNexus":
        response_headers = dict(headers or {})
        if etag is not None:
            response_headers["etag"] = etag
        route: dict[str, Any] = {"status_code": status, "headers": response_headers}
        if json is not None:
            route["json"] = json
        self.routes.setdefault((method, path), []).append(route)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "No Game Found"})
        route = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(**route)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def fake_nexus() -> FakeNexus:
    return FakeNexus()


def make_transport(
    handler: Any, limiter: Optional[RateLimiter] = None
) -> HttpTransport:
    """Build an :class:`HttpTransport` whose traffic goes to *handler*."""
    client = httpx.Client(
        base_url="https://api.nexusmods.com",
        transport=httpx.MockTransport(handler),
    )
    return HttpTransport("test-api-key", limiter=limiter, client=client)


@pytest.fixture
def nexus(fake_nexus: FakeNexus) -> NexusClient:
    """A :class:`NexusClient` talking to :func:`fake_nexus`."""
    client = NexusClient(make_transport(fake_nexus))
    yield client
    client.close()


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def mod_payload(mod_id: int = 12345, game: str = GAME, **overrides: Any) -> dict[str, Any]:
    """A mod record shaped like ``/v1/games/{game}/mods/{id}.json``."""
    payload: dict[str, Any] = {
        "domain_name": game,
        "mod_id": mod_id,
        "name": f"Mod {mod_id}",
        "summary": f"Summary of mod {mod_id}",
        "description": "A longer description.",
        "picture_url": None,
        "version": "1.0.0",
        "author": "Author Person",
        "uploaded_by": "uploader",
        "uploaded_users_profile_url": "https://www.nexusmods.com/users/1",
        "user": {"member_group_id": 3, "member_id": 1, "name": "uploader"},
        "created_time": "2023-01-01T00:00:00.000+00:00",
        "created_timestamp": 1672531200,
        "updated_time": "2023-06-01T00:00:00.000+00:00",
        "updated_timestamp": 1685577600,
        "available": True,
        "status": "published",
        "allow_rating": True,
        "category_id": 42,
        "contains_adult_content": False,
        "endorsement": None,
        "endorsement_count": 10,
        "game_id": 1704,
        "uid": 7318624808960,
    }
    payload.update(overrides)
    return payload


def game_payload(game: str = GAME, **overrides: Any) -> dict[str, Any]:
    """A game record shaped like ``/v1/games/{game}.json``."""
    payload: dict[str, Any] = {
        "id": 1704,
        "name": "Skyrim Special Edition",
        "domain_name": game,
        "genre": "RPG",
        "approved_date": 1477513187,
        "authors": 20000,
        "downloads": 5000000,
        "file_count": 300000,
        "file_endorsements": 100000,
        "file_views": 900000,
        "mods": 70000,
        "forum_url": "https://forums.nexusmods.com",
        "nexusmods_url": f"https://www.nexusmods.com/{game}",
        "categories": [
            {"category_id": 1, "name": game, "parent_category": False},
            {"category_id": 42, "name": "Armour", "parent_category": 1},
        ],
    }
    payload.update(overrides)
    return payload


def quota_headers(hourly: int = 99, daily: int = 2499) -> dict[str, str]:
    return {
        "x-rl-hourly-limit": "100",
        "x-rl-hourly-remaining": str(hourly),
        "x-rl-hourly-reset": "2024-03-01T13:00:00+00:00",
        "x-rl-daily-limit": "2500",
        "x-rl-daily-remaining": str(daily),
        "x-rl-daily-reset": "2024-03-02 00:00:00 +0000",
    }


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
