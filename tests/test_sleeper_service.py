"""Tests for Sleeper account browsing and player sync."""

import asyncio

import httpx
import pytest

from gameday.integrations.sleeper_api import SleeperAPIClient
from gameday.models.players import Player
from gameday.services.sleeper_service import SleeperService
from conftest import json_transport

ROSTERS = [
    {"roster_id": 1, "owner_id": "111111", "players": ["4046", "6794"], "starters": ["4046"]},
    {"roster_id": 2, "owner_id": "222222", "players": ["4984"], "starters": ["4984"]},
    {"roster_id": 3, "owner_id": "333333", "players": [], "starters": []},
    {"roster_id": 4, "owner_id": None, "players": [], "starters": []},
]

USERS = {
    "111111": {"user_id": "111111", "username": "zed", "display_name": "Zed"},
    "222222": {"user_id": "222222", "username": "amy", "display_name": None},
    "gridironguru": {"user_id": "999", "username": "gridironguru", "display_name": "Guru"},
}


def _sleeper(db=None, calls=None, state=None, players=None):
    def _handler(request):
        path = request.url.path.replace("/v1/", "", 1).lstrip("/")
        if calls is not None:
            calls.append(path)
        if path.startswith("user/") and path.endswith("/leagues/nfl/2025"):
            return 200, [{"league_id": "L1", "name": "Work League", "season": "2025"}]
        if path.startswith("user/"):
            user = USERS.get(path.split("/")[1])
            return (200, user) if user else (404, {"error": "not found"})
        if path == "league/L1/rosters":
            return 200, ROSTERS
        if path == "state/nfl":
            return 200, state or {"week": 3, "display_week": 3, "season": "2025",
                                  "season_type": "regular", "leg": 3, "extra": True}
        if path == "players/nfl":
            return 200, players or {}
        return 404, None

    client = SleeperAPIClient(transport=json_transport(_handler))
    client.backoff_seconds = 0
    return SleeperService(db, client=client)


class TestFindUser:

    def test_found(self):
        user = asyncio.run(_sleeper().find_user("gridironguru"))
        assert user == {"username": "gridironguru", "user_id": "999"}

    def test_not_found(self):
        assert asyncio.run(_sleeper().find_user("nobody")) is None

    def test_null_body(self):
        def _handler(request):
            return httpx.Response(200, content=b"null", headers={"content-type": "application/json"})

        service = SleeperService(client=SleeperAPIClient(transport=httpx.MockTransport(_handler)))
        assert asyncio.run(service.find_user("ghost")) is None


class TestLeagues:

    def test_user_leagues(self):
        leagues = asyncio.run(_sleeper().get_user_leagues("999", "2025"))
        assert leagues[0]["league_id"] == "L1"

    def test_member_roster(self):
        roster = asyncio.run(_sleeper().get_member_roster("L1", "222222"))
        assert roster["roster_id"] == 2
        assert asyncio.run(_sleeper().get_member_roster("L1", "nobody")) is None


class TestLeagueMembers:

    def test_members_sorted_with_fallback(self):
        calls = []
        members = asyncio.run(_sleeper(calls=calls).get_league_members("L1"))

        assert members == [
            {"user_id": "222222", "username": "amy", "display_name": None},
            {"user_id": "333333", "username": "User 3333", "display_name": None},
            {"user_id": "111111", "username": "zed", "display_name": "Zed"},
        ]
        # One lookup per owner; the ownerless roster is skipped
        assert sorted(c for c in calls if c.startswith("user/")) == ["user/111111", "user/222222", "user/333333"]

    def test_unreachable_owner_falls_back(self):
        def _handler(request):
            if request.url.path.endswith("/rosters"):
                return httpx.Response(200, json=[{"roster_id": 1, "owner_id": "12345678"}])
            raise httpx.ConnectError("down", request=request)

        client = SleeperAPIClient(transport=httpx.MockTransport(_handler))
        client.backoff_seconds = 0
        members = asyncio.run(SleeperService(client=client).get_league_members("L1"))

        assert members == [{"user_id": "12345678", "username": "User 5678", "display_name": None}]

    def test_rosters_failure_propagates(self):
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(_sleeper().get_league_members("missing"))


class TestNflState:

    def test_selected_fields_are_cached(self):
        calls = []
        service = _sleeper(calls=calls)

        first = asyncio.run(service.get_nfl_state())
        second = asyncio.run(service.get_nfl_state())

        assert first == {"week": 3, "display_week": 3, "season": "2025", "season_type": "regular", "leg": 3}
        assert second == first
        assert calls.count("state/nfl") == 1


class TestSyncPlayers:

    PLAYERS = {
        "4046": {"first_name": "Patrick", "last_name": "Mahomes", "position": "QB", "team": "KC",
                 "active": True, "fantasy_positions": ["QB"], "depth_chart_order": 1,
                 "search_rank": 10, "espn_id": 3139477},
        "6794": {"full_name": "Justin Jefferson", "first_name": "Justin", "last_name": "Jefferson",
                 "position": "WR", "team": "MIN", "active": True, "injury_status": "Questionable"},
        "DAL": {"first_name": "Dallas", "last_name": "Cowboys", "position": "DEF", "team": "DAL", "active": True},
    }

    def test_inserts_in_batches(self, db):
        service = _sleeper(db, players=self.PLAYERS)

        assert asyncio.run(service.sync_players(batch_size=2)) == 3

        mahomes = db.get(Player, "4046")
        assert mahomes.full_name == "Patrick Mahomes"
        assert mahomes.espn_id == "3139477"
        assert mahomes.fantasy_positions == ["QB"]
        assert db.get(Player, "6794").injury_status == "Questionable"
        assert db.query(Player).count() == 3

    def test_updates_existing_players(self, db):
        asyncio.run(_sleeper(db, players=self.PLAYERS).sync_players())

        traded = dict(self.PLAYERS)
        traded["6794"] = dict(self.PLAYERS["6794"], team="KC", injury_status=None)
        asyncio.run(_sleeper(db, players=traded).sync_players())

        jefferson = db.get(Player, "6794")
        assert jefferson.team == "KC"
        assert jefferson.injury_status is None
        assert db.query(Player).count() == 3

    def test_upstream_failure_propagates(self, db):
        def _handler(request):
            return httpx.Response(503, json={"error": "down"})

        client = SleeperAPIClient(transport=httpx.MockTransport(_handler))
        client.backoff_seconds = 0
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(SleeperService(db, client=client).sync_players())
