"""Tests for player queries, projected starters and roster ordering."""

import pytest

from gameday.models.players import Player
from gameday.services.player_service import PlayerService, STARTER_LIMITS


def _player(player_id, first, last, position, team, depth=None, rank=None, active=True, injury=None):
    return Player(
        player_id=player_id,
        full_name=f"{first} {last}",
        first_name=first,
        last_name=last,
        position=position,
        team=team,
        active=active,
        depth_chart_order=depth,
        search_rank=rank,
        injury_status=injury,
    )


@pytest.fixture
def players(db):
    rows = [
        _player("qb1", "Dak", "Prescott", "QB", "DAL", depth=1, rank=50),
        _player("qb2", "Cooper", "Rush", "QB", "DAL", depth=2, rank=400),
        _player("rb1", "Javonte", "Williams", "RB", "DAL", depth=1, rank=90),
        _player("rb2", "Miles", "Sanders", "RB", "DAL", depth=2, rank=200),
        _player("rb3", "Jaydon", "Blue", "RB", "DAL", depth=3, rank=300),
        _player("wr1", "CeeDee", "Lamb", "WR", "DAL", depth=1, rank=5),
        _player("wr2", "George", "Pickens", "WR", "DAL", depth=2, rank=60),
        _player("wr3", "Jalen", "Tolbert", "WR", "DAL", depth=3, rank=350),
        _player("te1", "Jake", "Ferguson", "TE", "DAL", depth=1, rank=120),
        _player("k1", "Brandon", "Aubrey", "K", "DAL", depth=1, rank=150),
        _player("wr_out", "Old", "Timer", "WR", "DAL", depth=1, rank=999, active=False),
        _player("wr_nodepth", "Practice", "Squad", "WR", "DAL", depth=None, rank=998),
        _player("qb_phi", "Jalen", "Hurts", "QB", "PHI", depth=1, rank=8),
        _player("fa", "Free", "Agent", "WR", None, rank=None, active=False),
        _player("WAS", "Washington", "Commanders", "DEF", "WAS", rank=500),
    ]
    db.add_all(rows)
    db.commit()
    return rows


class TestGetPlayers:

    def test_ordered_by_search_rank_then_last_name(self, db, players):
        result = PlayerService(db).get_players(team="dal", position="wr")
        assert [p.player_id for p in result] == ["wr1", "wr2", "wr3", "wr_nodepth", "wr_out"]

    def test_unranked_players_last(self, db, players):
        result = PlayerService(db).get_players()
        assert result[-1].player_id == "fa"

    def test_ids_filter_ignores_limit(self, db, players):
        ids = [p.player_id for p in players]
        assert len(PlayerService(db).get_players(ids=ids, limit=2)) == len(players)

    def test_limit_without_ids(self, db, players):
        assert len(PlayerService(db).get_players(limit=3)) == 3

    def test_active_filter(self, db, players):
        inactive = PlayerService(db).get_players(active=False)
        assert sorted(p.player_id for p in inactive) == ["fa", "wr_out"]

    def test_search_is_case_insensitive(self, db, players):
        result = PlayerService(db).get_players(search="JALEN")
        assert [p.player_id for p in result] == ["qb_phi", "wr3"]


class TestStarters:

    def test_limits_per_position(self, db, players):
        starters = PlayerService(db).get_team_starters("DAL")

        assert list(starters) == list(STARTER_LIMITS)
        assert [p.player_id for p in starters["QB"]] == ["qb1"]
        assert [p.player_id for p in starters["RB"]] == ["rb1", "rb2"]
        assert [p.player_id for p in starters["WR"]] == ["wr1", "wr2", "wr3"]
        assert [p.player_id for p in starters["TE"]] == ["te1"]
        assert [p.player_id for p in starters["K"]] == ["k1"]

    def test_both_sides(self, db, players):
        starters = PlayerService(db).get_starters("DAL", "PHI")
        assert [p.player_id for p in starters["away_team"]["QB"]] == ["qb_phi"]
        assert starters["away_team"]["RB"] == []
        assert [p.player_id for p in starters["home_team"]["QB"]] == ["qb1"]


class TestRosterView:

    def test_starters_first_then_position_then_name(self, db, players):
        roster = {
            "players": ["k1", "WAS", "wr2", "qb2", "rb1", "wr1", "unknown9999"],
            "starters": ["wr2", "rb1", "k1"],
        }
        rows = PlayerService(db).build_roster_view(roster)

        assert [r["player_id"] for r in rows] == ["rb1", "wr2", "k1", "qb2", "wr1", "WAS", "unknown9999"]
        assert [r["is_starter"] for r in rows] == [True, True, True, False, False, False, False]
        assert rows[-1]["name"] == "Player 9999"
        assert rows[-1]["position"] is None

    def test_empty_roster(self, db):
        assert PlayerService(db).build_roster_view({"players": None, "starters": None}) == []
