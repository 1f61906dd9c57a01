"""End-to-end command tests through Typer's CliRunner.

Each test injects an :class:`AppContext` carrying a temporary store and a
client wired to the fake Nexus, so commands run against canned responses
and a real on-disk cache.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from conftest import GAME, FakeNexus, game_payload, make_transport, mod_payload

from modcache import __version__
from modcache.app import app
from modcache.client import NexusClient
from modcache.context import AppContext
from modcache.data import CompoundKey, GameMetadata, ModInfo, ModStatus, Tracked
from modcache.exceptions import ConfigError, RateLimitedError, TransportError
from modcache.models import GlobalConfig, PopulateConfig
from modcache.store import CacheStore


@pytest.fixture
def app_ctx(fake_nexus: FakeNexus, store: CacheStore) -> AppContext:
    return AppContext(store=store, nexus=NexusClient(make_transport(fake_nexus)))


def _seed_mods(store: CacheStore, *payloads: dict) -> None:
    for payload in payloads:
        ModInfo.model_validate(payload).store(store)


def _tracked(*ids: int) -> list[dict]:
    return [{"domain_name": GAME, "mod_id": i} for i in ids]


class TestGlobalFlags:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_network_command_without_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["validate"])
        assert result.exit_code != 0
        assert isinstance(result.exception, ConfigError)

    def test_cached_listing_needs_no_key(
        self, cli_runner, isolated_config: Path, store: CacheStore
    ) -> None:
        GameMetadata.model_validate(game_payload()).store(store)
        _seed_mods(store, mod_payload(1, name="Offline Mod"))
        result = cli_runner.invoke(
            app, ["--json", "mods", GAME], obj=AppContext(store=store)
        )
        assert result.exit_code == 0, result.output
        assert [m["mod_id"] for m in json.loads(result.stdout)] == [1]



class TestValidate:
    def test_json(self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus) -> None:
        fake_nexus.add(
            "/v1/users/validate.json",
            json={"user_id": 7, "name": "modder", "email": "m@example.com"},
        )
        result = cli_runner.invoke(app, ["--json", "validate"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["name"] == "modder"

    def test_whoami_alias(self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus) -> None:
        fake_nexus.add("/v1/users/validate.json", json={"user_id": 7, "name": "modder"})
        result = cli_runner.invoke(app, ["whoami"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert "modder" in result.stdout


class TestMod:
    def test_fetches_then_serves_from_cache(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        fake_nexus.add(
            f"/v1/games/{GAME}/mods/12345.json", json=mod_payload(name="Cool Mod"), etag='"e"'
        )
        first = cli_runner.invoke(app, ["--json", "mod", "12345"], obj=app_ctx)
        assert first.exit_code == 0, first.output
        assert json.loads(first.stdout)["name"] == "Cool Mod"

        second = cli_runner.invoke(app, ["--json", "mod", "12345"], obj=app_ctx)
        assert second.exit_code == 0, second.output
        assert len(fake_nexus.requests) == 1

    def test_refresh_flag_sends_etag(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        _seed_mods(store, mod_payload(etag='"cached"'))
        fake_nexus.add(f"/v1/games/{GAME}/mods/12345.json", status=304)
        result = cli_runner.invoke(app, ["-r", "mod", "12345"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert fake_nexus.requests[0].headers["if-none-match"] == '"cached"'

    def test_unknown_mod(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(app, ["mod", "999"], obj=app_ctx)
        assert result.exit_code == 1
        assert "No mod found" in result.stdout


class TestSearches:
    @pytest.fixture(autouse=True)
    def _cached_game(self, fake_nexus: FakeNexus, store: CacheStore) -> None:
        fake_nexus.add(f"/v1/games/{GAME}.json", json=game_payload(), etag='"g"')
        _seed_mods(
            store,
            mod_payload(1, name="Zebra Armor", uploaded_by="alice"),
            mod_payload(2, name="Apple Armor", uploaded_by="bob"),
            mod_payload(3, name="Lost Thing", status="removed"),
            mod_payload(4, name="Binned", status="wastebinned"),
        )

    def _ids(self, stdout: str) -> list[int]:
        return [m["mod_id"] for m in json.loads(stdout)]

    def test_search_sorted_by_name(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(
            app, ["--json", "search", "armor", "--sort", "name"], obj=app_ctx
        )
        assert result.exit_code == 0, result.output
        assert self._ids(result.stdout) == [2, 1]

    def test_by_author(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(app, ["--json", "by-author", "ALICE"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert self._ids(result.stdout) == [1]

    def test_by_name_plain(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(app, ["by-name", "apple"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert "Apple Armor" in result.stdout
        assert "Zebra Armor" not in result.stdout

    def test_removed_and_wastebinned(self, cli_runner, app_ctx: AppContext) -> None:
        removed = cli_runner.invoke(app, ["--json", "removed"], obj=app_ctx)
        binned = cli_runner.invoke(app, ["--json", "wastebinned"], obj=app_ctx)
        assert self._ids(removed.stdout) == [3]
        assert self._ids(binned.stdout) == [4]

    def test_mods_lists_everything_cached(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(app, ["--json", "mods"], obj=app_ctx)
        assert self._ids(result.stdout) == [1, 2, 3, 4]

    def test_game_metadata_fetched_once(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus
    ) -> None:
        cli_runner.invoke(app, ["--json", "mods"], obj=app_ctx)
        cli_runner.invoke(app, ["--json", "removed"], obj=app_ctx)
        assert fake_nexus.paths() == [f"/v1/games/{GAME}.json"]

    def test_unknown_game(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(app, ["mods", "nosuchgame"], obj=app_ctx)
        assert result.exit_code == 1
        assert "No game identified" in result.stdout


class TestHidden:
    @pytest.fixture(autouse=True)
    def _hidden_mods(self, fake_nexus: FakeNexus, store: CacheStore) -> None:
        fake_nexus.add(f"/v1/games/{GAME}.json", json=game_payload())
        fake_nexus.add("/v1/user/tracked_mods.json", json=_tracked(1, 3))
        _seed_mods(
            store,
            mod_payload(1, status="hidden"),
            mod_payload(2, status="hidden"),
            mod_payload(3, status="published"),
        )

    def test_only_tracked_hidden_mods(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus
    ) -> None:
        result = cli_runner.invoke(app, ["--json", "hidden"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert [m["mod_id"] for m in json.loads(result.stdout)] == [1]
        assert f"/v1/games/{GAME}/mods/1.json" not in fake_nexus.paths()

    def test_refresh_refetches_each_mod(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        fake_nexus.add(
            f"/v1/games/{GAME}/mods/1.json",
            json=mod_payload(1, status="published", name="Back Again"),
            etag='"new"',
        )
        result = cli_runner.invoke(app, ["--json", "-r", "hidden"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        shown = json.loads(result.stdout)
        assert [(m["mod_id"], m["status"]) for m in shown] == [(1, "published")]
        assert ModInfo.local(CompoundKey(GAME, 1), store).status == ModStatus.PUBLISHED


class TestPopulate:
    def test_caches_first_uncached_up_to_limit(
        self, cli_runner, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        fake_nexus.add(f"/v1/games/{GAME}.json", json=game_payload())
        fake_nexus.add("/v1/user/tracked_mods.json", json=_tracked(1, 2, 3, 4, 5))
        for mod_id in (2, 3, 4, 5):
            fake_nexus.add(f"/v1/games/{GAME}/mods/{mod_id}.json", json=mod_payload(mod_id))
        _seed_mods(store, mod_payload(1))

        app_ctx = AppContext(
            config=GlobalConfig(populate=PopulateConfig(limit=2)),
            store=store,
            nexus=NexusClient(make_transport(fake_nexus)),
        )
        result = cli_runner.invoke(app, ["populate"], obj=app_ctx)

        assert result.exit_code == 0, result.output
        mod_fetches = [p for p in fake_nexus.paths() if "/mods/" in p]
        assert mod_fetches == [f"/v1/games/{GAME}/mods/2.json", f"/v1/games/{GAME}/mods/3.json"]
        assert ModInfo.local(CompoundKey(GAME, 3), store) is not None
        assert ModInfo.local(CompoundKey(GAME, 4), store) is None

    def test_missing_mods_do_not_count(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        fake_nexus.add(f"/v1/games/{GAME}.json", json=game_payload())
        fake_nexus.add("/v1/user/tracked_mods.json", json=_tracked(1, 2))
        fake_nexus.add(f"/v1/games/{GAME}/mods/2.json", json=mod_payload(2))

        result = cli_runner.invoke(app, ["populate", GAME, "--limit", "1"], obj=app_ctx)

        assert result.exit_code == 0, result.output
        assert ModInfo.local(CompoundKey(GAME, 2), store) is not None


class TestTracked:
    def test_summary(self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus) -> None:
        fake_nexus.add(
            "/v1/user/tracked_mods.json",
            json=_tracked(1, 2) + [{"domain_name": "fallout4", "mod_id": 9}],
        )
        result = cli_runner.invoke(app, ["tracked"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert "3 mods tracked for 2 games" in result.stdout

    def test_update_forces_refresh(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        cached = Tracked.model_validate(_tracked(1))
        cached.etag = '"t1"'
        cached.store(store)
        fake_nexus.add(f"/v1/games/{GAME}.json", json=game_payload())
        fake_nexus.add("/v1/user/tracked_mods.json", status=304)
        fake_nexus.add(f"/v1/games/{GAME}/mods/1.json", json=mod_payload(1))

        result = cli_runner.invoke(app, ["update"], obj=app_ctx)

        assert result.exit_code == 0, result.output
        tracked_calls = [
            r for r in fake_nexus.requests if r.url.path == "/v1/user/tracked_mods.json"
        ]
        assert tracked_calls[0].headers["if-none-match"] == '"t1"'
        assert ModInfo.local(CompoundKey(GAME, 1), store) is not None


class TestActions:
    def test_track(self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus) -> None:
        fake_nexus.add(
            "/v1/user/tracked_mods.json",
            method="POST",
            json={"message": "User 1 is now Tracking Mod: 5"},
        )
        result = cli_runner.invoke(app, ["track", "5"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert "Tracking Mod: 5" in result.stdout

    def test_untrack_reports_failures_and_continues(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus
    ) -> None:
        fake_nexus.add(
            "/v1/user/tracked_mods.json", method="DELETE", status=500, json={"error": "x"}
        )
        fake_nexus.add(
            "/v1/user/tracked_mods.json", method="DELETE", json={"message": "untracked 2"}
        )
        result = cli_runner.invoke(app, ["untrack", "1", "2", "--game", GAME], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert "untracked 2" in result.stdout
        assert len(fake_nexus.requests) == 2

    def test_untrack_stops_when_rate_limited(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus
    ) -> None:
        fake_nexus.add("/v1/user/tracked_mods.json", method="DELETE", status=429)
        result = cli_runner.invoke(
            app, ["untrack", "1", "2", "3", "--game", GAME], obj=app_ctx
        )
        assert result.exit_code != 0
        assert isinstance(result.exception, RateLimitedError)
        assert len(fake_nexus.requests) == 1

    def test_endorse_stops_on_transport_failure(
        self, cli_runner, store: CacheStore
    ) -> None:
        seen: list[httpx.Request] = []

        def unreachable(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        app_ctx = AppContext(store=store, nexus=NexusClient(make_transport(unreachable)))
        result = cli_runner.invoke(app, ["endorse", GAME, "1", "2"], obj=app_ctx)
        assert result.exit_code != 0
        assert isinstance(result.exception, TransportError)
        assert len(seen) == 1


    def test_untrack_removed(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        fake_nexus.add(f"/v1/games/{GAME}.json", json=game_payload())
        fake_nexus.add("/v1/user/tracked_mods.json", json=_tracked(1, 2, 3))
        fake_nexus.add("/v1/user/tracked_mods.json", method="DELETE", json={"message": "ok"})
        _seed_mods(
            store,
            mod_payload(1, status="removed"),
            mod_payload(2, status="published"),
            mod_payload(3, status="wastebinned"),
            mod_payload(4, status="removed"),
        )

        result = cli_runner.invoke(app, ["untrack-removed", GAME], obj=app_ctx)

        assert result.exit_code == 0, result.output
        deleted = sorted(
            r.content.decode() for r in fake_nexus.requests if r.method == "DELETE"
        )
        assert deleted == ["mod_id=1", "mod_id=3"]

    def test_endorse_sends_cached_version(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        _seed_mods(store, mod_payload(5, version="2.5"))
        fake_nexus.add(
            f"/v1/games/{GAME}/mods/5/endorse.json",
            method="POST",
            json={"message": "Updated", "status": "Endorsed"},
        )
        result = cli_runner.invoke(app, ["endorse", GAME, "5"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert fake_nexus.requests[0].content == b"version=2.5"
        assert "Endorsed" in result.stdout


class TestRemoteLists:
    def test_trending_merges_into_cache(
        self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus, store: CacheStore
    ) -> None:
        _seed_mods(store, mod_payload(1, name="Known Name"))
        fake_nexus.add(
            f"/v1/games/{GAME}/mods/trending.json",
            json=[
                {"domain_name": GAME, "mod_id": 1, "status": "hidden"},
                mod_payload(2, name="Hot New Mod"),
            ],
        )
        result = cli_runner.invoke(app, ["--json", "trending"], obj=app_ctx)

        assert result.exit_code == 0, result.output
        kept = ModInfo.local(CompoundKey(GAME, 1), store)
        assert kept is not None
        assert kept.name == "Known Name"
        assert kept.status == ModStatus.HIDDEN
        assert ModInfo.local(CompoundKey(GAME, 2), store) is not None


class TestFiles:
    @pytest.fixture(autouse=True)
    def _files(self, fake_nexus: FakeNexus) -> None:
        fake_nexus.add(
            f"/v1/games/{GAME}/mods/5/files.json",
            json={
                "files": [
                    {"file_id": 10, "name": "Main File", "is_primary": True, "version": "1"},
                    {"file_id": 11, "name": "Optional", "version": "1"},
                ],
                "file_updates": [],
            },
        )

    def test_primary_file(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(app, ["--json", "primary-file", "5"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["file_id"] == 10

    def test_file_info_missing(self, cli_runner, app_ctx: AppContext) -> None:
        result = cli_runner.invoke(app, ["file-info", "5", "99"], obj=app_ctx)
        assert result.exit_code == 1
        assert "Nothing found" in result.stdout

    def test_changelogs(self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus) -> None:
        fake_nexus.add(
            f"/v1/games/{GAME}/mods/5/changelogs.json", json={"1.1": ["Fixed the thing"]}
        )
        result = cli_runner.invoke(app, ["changelogs", "5"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert "Fixed the thing" in result.stdout


class TestEndorsements:
    def test_per_game(self, cli_runner, app_ctx: AppContext, fake_nexus: FakeNexus) -> None:
        fake_nexus.add(
            "/v1/user/endorsements.json",
            json=[
                {"domain_name": GAME, "mod_id": 1, "status": "Endorsed"},
                {"domain_name": "fallout4", "mod_id": 2, "status": "Abstained"},
            ],
        )
        result = cli_runner.invoke(app, ["--json", "endorsements", GAME], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert [e["mod_id"] for e in json.loads(result.stdout)] == [1]


class TestCacheAndConfig:
    def test_cache_stats(self, cli_runner, app_ctx: AppContext, store: CacheStore) -> None:
        _seed_mods(store, mod_payload(1), mod_payload(2))
        result = cli_runner.invoke(app, ["--json", "cache", "stats"], obj=app_ctx)
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["buckets"]["mods"] == 2

    def test_config_set_and_show(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "populate.limit", "7"])
        assert result.exit_code == 0, result.output

        shown = cli_runner.invoke(app, ["--json", "config", "show"])
        assert shown.exit_code == 0, shown.output
        assert json.loads(shown.stdout)["populate"]["limit"] == 7

    def test_config_set_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "nope.nothing", "1"])
        assert result.exit_code == 2

    def test_config_reset(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "default_game", "fallout4"])
        result = cli_runner.invoke(app, ["config", "reset", "--yes"])
        assert result.exit_code == 0, result.output
        shown = cli_runner.invoke(app, ["--json", "config", "show"])
        assert json.loads(shown.stdout)["default_game"] == GAME
