import asyncio
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Set
import httpx
from fastapi import Depends
from gameday.config import settings
from gameday.domain import Bucket, Game, GamePrediction, GroupPrediction, RankedGame, TeamRecord
from gameday.integrations.ranking_api import RankingAPIClient
from gameday.services.team_config import TeamConfigMap, any_flag, get_team_configs, is_divisional
from gameday.utils.cache import TTLCache

logger = logging.getLogger(__name__)

# Ranking results are keyed by the exact feature batch sent to the model
_prediction_cache = TTLCache(ttl_seconds=settings.ranking_cache_ttl_seconds)

class RankingUnavailableError(Exception):
    """The ranking model could not produce a result for a bucket"""

def build_game_features(game: Game, records: Dict[str, TeamRecord], team_configs: TeamConfigMap) -> Dict[str, Any]:
    """Feature record for one game; missing records and configs fall back to zeros"""
    home_record = records.get(game.home_team)
    away_record = records.get(game.away_team)
    teams = (game.home_team, game.away_team)

    return {
        "game_id": game.model_game_id,
        "home_team": game.home_team,
        "away_team": game.away_team,
        "home_win_pct_pre": home_record.win_percentage if home_record else 0,
        "away_win_pct_pre": away_record.win_percentage if away_record else 0,
        "home_wins_pre": home_record.wins if home_record else 0,
        "away_wins_pre": away_record.wins if away_record else 0,
        "is_local_team": int(any_flag(team_configs, teams, "is_local_team")),
        "is_in_state_team": int(any_flag(team_configs, teams, "in_state_team")),
        "divisional_matchup": int(is_divisional(team_configs, game.home_team, game.away_team)),
    }

def index_records(team_records: Iterable[TeamRecord]) -> Dict[str, TeamRecord]:
    return {record.abbreviation: record for record in team_records}

def parse_group_prediction(body: Any) -> GroupPrediction:
    """Validate a ranking response; anything malformed raises RankingUnavailableError"""
    if not isinstance(body, dict):
        raise RankingUnavailableError("Ranking response is not a JSON object")

    try:
        predictions = {}
        for item in body.get("probabilities") or []:
            prediction = GamePrediction(
                game_id=str(item["game_id"]),
                probability=float(item["probability"]),
                score=float(item["score"]),
                probability_all=float(item["probability_all"]),
            )
            predictions[prediction.game_id] = prediction

        top_game_id = body.get("top_game_id")
        if top_game_id is not None and not isinstance(top_game_id, str):
            raise RankingUnavailableError(f"Malformed ranking response: top_game_id {top_game_id!r} is not a string")

        top_probability = body.get("top_probability")
        return GroupPrediction(
            top_game_id=top_game_id,
            top_probability=float(top_probability) if top_probability is not None else None,
            predictions=predictions,
            skipped=[str(s) for s in body.get("skipped") or []],
            local_enforced=bool(body.get("local_enforced", False)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise RankingUnavailableError(f"Malformed ranking response: {e}") from e

def merge_predictions(
    games: List[Game],
    prediction: Optional[GroupPrediction],
    local_override_ids: Optional[Set[str]] = None
) -> List[RankedGame]:
    """Attach the model output to each game; the top pick is whatever the model named"""
    local_override_ids = local_override_ids or set()
    ranked = []
    for game in games:
        ranked_game = RankedGame(game=game, local_override=game.id in local_override_ids)
        if prediction:
            model_id = game.model_game_id
            if model_id not in prediction.skipped:
                ranked_game.prediction = prediction.predictions.get(model_id)
            ranked_game.is_top_pick = prediction.top_game_id is not None and model_id == prediction.top_game_id
        ranked.append(ranked_game)
    return ranked

class RankingService:
    """Ranks TBD buckets against the hosted model"""

    def __init__(self, team_configs: TeamConfigMap, client: Optional[RankingAPIClient] = None):
        self.team_configs = team_configs
        self.client = client or RankingAPIClient()

    async def rank_group(self, games: List[Game], team_records: Iterable[TeamRecord]) -> GroupPrediction:
        """Send one bucket to the model as a single batch"""
        records = index_records(team_records)
        features = [build_game_features(game, records, self.team_configs) for game in games]

        cache_key = json.dumps(features, sort_keys=True)
        cached = _prediction_cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Using cached ranking for {len(games)} games")
            return cached

        try:
            body = await self.client.predict_top(features)
        except httpx.HTTPStatusError as e:
            raise RankingUnavailableError(f"Ranking model returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise RankingUnavailableError(f"Ranking model unreachable: {e}") from e
        except ValueError as e:
            raise RankingUnavailableError(f"Ranking model returned invalid JSON: {e}") from e

        prediction = parse_group_prediction(body)
        _prediction_cache.set(cache_key, prediction)
        logger.info(
            f"Ranked {len(games)} games, top pick {prediction.top_game_id} "
            f"({len(prediction.skipped)} skipped, local_enforced={prediction.local_enforced})"
        )
        return prediction

    async def _rank_bucket(self, key: str, games: List[Game], team_records: List[TeamRecord]) -> Bucket:
        try:
            prediction = await self.rank_group(games, team_records)
        except RankingUnavailableError as e:
            logger.warning(f"No ranking for bucket '{key}': {e}")
            return Bucket(key=key, games=merge_predictions(games, None), is_tbd=True, ranking_error=str(e))
        return Bucket(
            key=key,
            games=merge_predictions(games, prediction),
            is_tbd=True,
            local_enforced=prediction.local_enforced,
        )

    async def rank_buckets(self, groups: Dict[str, List[Game]], team_records: Iterable[TeamRecord]) -> List[Bucket]:
        """Rank every bucket concurrently; a failing bucket never affects the others"""
        team_records = list(team_records)
        tasks = [self._rank_bucket(key, games, team_records) for key, games in groups.items()]
        return list(await asyncio.gather(*tasks))

    async def close(self):
        await self.client.close()

def clear_prediction_cache():
    _prediction_cache.clear()

async def get_ranking_service(team_configs: TeamConfigMap = Depends(get_team_configs)):
    """Dependency yielding a ranking service whose client is closed after the request"""
    service = RankingService(team_configs)
    try:
        yield service
    finally:
        await service.close()
