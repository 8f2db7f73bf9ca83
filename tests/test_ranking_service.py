"""Tests for TBD bucket ranking: feature building, response merging, fan-out isolation,
retry and caching against a mocked ranking endpoint."""

import asyncio
import json

import httpx
import pytest

from gameday.domain import GamePrediction, GroupPrediction, TeamRecord
from gameday.integrations.ranking_api import RankingAPIClient
from gameday.services.ranking_service import (
    RankingService,
    RankingUnavailableError,
    build_game_features,
    index_records,
    merge_predictions,
    parse_group_prediction,
)
from conftest import json_transport, make_game

SUN_EARLY = "Sun, September 7th at 1:00 PM EDT"


def _model_response(games, top_index=0, skipped=()):
    ids = [g.model_game_id for g in games]
    probabilities = [
        {"game_id": gid, "probability_all": 0.1 * (i + 1), "score": float(i), "probability": 0.2 * (i + 1)}
        for i, gid in enumerate(ids) if gid not in skipped
    ]
    return {
        "top_game_id": ids[top_index],
        "top_probability": 0.6,
        "probabilities": probabilities,
        "skipped": list(skipped),
        "local_enforced": False,
    }


def _service(team_configs, handler, calls=None):
    def _record(request):
        if calls is not None:
            calls.append(json.loads(request.content))
        return handler(request)

    client = RankingAPIClient(transport=json_transport(_record))
    client.backoff_seconds = 0
    return RankingService(team_configs, client=client)


@pytest.fixture
def bucket():
    return [
        make_game("NYG", "WSH", SUN_EARLY, "FOX", "1"),
        make_game("DAL", "PHI", SUN_EARLY, "FOX", "2"),
        make_game("KC", "BUF", SUN_EARLY, "FOX", "3"),
    ]


@pytest.fixture
def records():
    return [
        TeamRecord("PHI", 2025, wins=3, losses=1, ties=0, win_percentage=0.75),
        TeamRecord("DAL", 2025, wins=2, losses=1, ties=1, win_percentage=0.625),
    ]


class TestBuildGameFeatures:

    def test_local_divisional_matchup(self, team_configs, records):
        game = make_game("DAL", "PHI", SUN_EARLY, "FOX", week=3)
        features = build_game_features(game, index_records(records), team_configs)

        assert features == {
            "game_id": "2025W03-DAL@PHI",
            "home_team": "PHI",
            "away_team": "DAL",
            "home_win_pct_pre": 0.75,
            "away_win_pct_pre": 0.625,
            "home_wins_pre": 3,
            "away_wins_pre": 2,
            "is_local_team": 1,
            "is_in_state_team": 1,
            "divisional_matchup": 1,
        }

    def test_missing_records_and_configs_default_to_zero(self, team_configs):
        game = make_game("SEA", "ARI", SUN_EARLY, "FOX")
        features = build_game_features(game, {}, team_configs)

        assert features["home_win_pct_pre"] == 0
        assert features["away_wins_pre"] == 0
        assert features["is_local_team"] == 0
        assert features["is_in_state_team"] == 0
        assert features["divisional_matchup"] == 0

    def test_in_state_without_local(self, team_configs):
        game = make_game("HOU", "KC", SUN_EARLY, "CBS")
        features = build_game_features(game, {}, team_configs)
        assert features["is_in_state_team"] == 1
        assert features["is_local_team"] == 0
        assert features["divisional_matchup"] == 0


class TestParseGroupPrediction:

    def test_valid_body(self, bucket):
        prediction = parse_group_prediction(_model_response(bucket, top_index=1))
        assert prediction.top_game_id == bucket[1].model_game_id
        assert set(prediction.predictions) == {g.model_game_id for g in bucket}

    @pytest.mark.parametrize("body", [
        None,
        [],
        "nope",
        {"probabilities": [{"game_id": "x"}]},
        {"probabilities": [{"game_id": "x", "probability": "high", "score": 1, "probability_all": 1}]},
        {"top_game_id": 12345, "probabilities": [
            {"game_id": 12345, "probability": 0.5, "score": 1, "probability_all": 0.5}]},
        {"top_game_id": ["x"], "probabilities": []},
    ])
    def test_malformed_body(self, body):
        with pytest.raises(RankingUnavailableError):
            parse_group_prediction(body)


class TestMergePredictions:

    def test_exactly_one_top_pick(self, bucket):
        prediction = parse_group_prediction(_model_response(bucket, top_index=1))
        ranked = merge_predictions(bucket, prediction)

        assert [r.is_top_pick for r in ranked] == [False, True, False]
        assert ranked[0].prediction.probability == pytest.approx(0.2)
        assert ranked[0].prediction.score == 0.0
        assert ranked[2].prediction.probability == pytest.approx(0.6)
        assert ranked[2].prediction.score == 2.0

    def test_skipped_games_have_no_prediction(self, bucket):
        skipped = bucket[2].model_game_id
        prediction = parse_group_prediction(_model_response(bucket, skipped=[skipped]))
        ranked = merge_predictions(bucket, prediction)

        assert ranked[2].prediction is None
        assert ranked[0].prediction is not None

    def test_no_prediction(self, bucket):
        ranked = merge_predictions(bucket, None, {"2"})
        assert all(r.prediction is None and not r.is_top_pick for r in ranked)
        assert [r.local_override for r in ranked] == [False, True, False]

    def test_top_pick_is_never_recomputed(self, bucket):
        # The model may name a game whose probability is not the highest
        prediction = GroupPrediction(
            top_game_id=bucket[0].model_game_id,
            top_probability=0.1,
            predictions={
                bucket[0].model_game_id: GamePrediction(bucket[0].model_game_id, 0.1, 0.0, 0.1),
                bucket[1].model_game_id: GamePrediction(bucket[1].model_game_id, 0.9, 5.0, 0.9),
            },
        )
        ranked = merge_predictions(bucket[:2], prediction)
        assert [r.is_top_pick for r in ranked] == [True, False]


class TestRankGroup:

    def test_sends_one_batch(self, team_configs, bucket, records):
        calls = []
        service = _service(team_configs, lambda r: (200, _model_response(bucket)), calls)

        prediction = asyncio.run(service.rank_group(bucket, records))

        assert len(calls) == 1
        assert [g["game_id"] for g in calls[0]["games"]] == [g.model_game_id for g in bucket]
        assert prediction.top_game_id == bucket[0].model_game_id

    def test_retries_server_errors(self, team_configs, bucket, records):
        calls = []
        responses = [(503, {"error": "cold start"}), (200, _model_response(bucket))]
        service = _service(team_configs, lambda r: responses.pop(0), calls)

        prediction = asyncio.run(service.rank_group(bucket, records))

        assert len(calls) == 2
        assert prediction.top_game_id == bucket[0].model_game_id

    def test_gives_up_after_max_attempts(self, team_configs, bucket, records):
        calls = []
        service = _service(team_configs, lambda r: (500, {"error": "down"}), calls)

        with pytest.raises(RankingUnavailableError):
            asyncio.run(service.rank_group(bucket, records))
        assert len(calls) == service.client.max_attempts

    def test_client_errors_are_not_retried(self, team_configs, bucket, records):
        calls = []
        service = _service(team_configs, lambda r: (422, {"detail": "bad"}), calls)

        with pytest.raises(RankingUnavailableError):
            asyncio.run(service.rank_group(bucket, records))
        assert len(calls) == 1

    def test_unreachable_endpoint(self, team_configs, bucket, records):
        def _refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = RankingAPIClient(transport=httpx.MockTransport(_refuse))
        client.backoff_seconds = 0
        service = RankingService(team_configs, client=client)

        with pytest.raises(RankingUnavailableError):
            asyncio.run(service.rank_group(bucket, records))

    def test_results_are_cached_per_feature_batch(self, team_configs, bucket, records):
        calls = []
        service = _service(team_configs, lambda r: (200, _model_response(bucket)), calls)

        asyncio.run(service.rank_group(bucket, records))
        asyncio.run(service.rank_group(bucket, records))
        assert len(calls) == 1

        # A changed record is a different batch
        asyncio.run(service.rank_group(bucket, records[:1]))
        assert len(calls) == 2


class TestRankBuckets:

    def test_failing_bucket_does_not_affect_others(self, team_configs, records):
        early = [make_game("NYG", "WSH", SUN_EARLY, "FOX", "1"), make_game("KC", "BUF", SUN_EARLY, "FOX", "2")]
        late = [make_game("SEA", "SF", "Sun, September 7th at 4:25 PM EDT", "CBS", "3"),
                make_game("ARI", "NO", "Sun, September 7th at 4:25 PM EDT", "CBS", "4")]
        late_ids = {g.model_game_id for g in late}

        def _handler(request):
            games = json.loads(request.content)["games"]
            if {g["game_id"] for g in games} == late_ids:
                return 500, {"error": "boom"}
            return 200, _model_response(early, top_index=1)

        service = _service(team_configs, _handler)
        buckets = asyncio.run(service.rank_buckets({"FOX Early Games": early, "CBS Late Games": late}, records))

        assert [b.key for b in buckets] == ["FOX Early Games", "CBS Late Games"]
        fox, cbs = buckets
        assert fox.ranking_error is None
        assert [g.is_top_pick for g in fox.games] == [False, True]
        assert cbs.ranking_error
        assert all(g.prediction is None and not g.is_top_pick for g in cbs.games)
        assert all(b.is_tbd for b in buckets)

    def test_no_buckets(self, team_configs):
        service = _service(team_configs, lambda r: (200, {}))
        assert asyncio.run(service.rank_buckets({}, [])) == []
