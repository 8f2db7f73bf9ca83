from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
from gameday.database import get_db
from gameday.domain import Bucket
from gameday.services.broadcast_service import BroadcastService
from gameday.services.ranking_service import RankingService, get_ranking_service, merge_predictions
from gameday.services.schedule_service import ScheduleService
from gameday.services.team_config import TeamConfigMap, get_team_configs, parse_team_list
from gameday.services.team_records_service import TeamRecordsService
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class PredictionResponse(BaseModel):
    game_id: str
    probability: float
    score: float
    probability_all: float

class BroadcastGameResponse(BaseModel):
    id: str
    year: int
    week: int
    home_team: str
    away_team: str
    time_display: str
    broadcast: Optional[str] = None
    matchup: str
    status: str
    is_top_pick: bool = False
    local_override: bool = False
    prediction: Optional[PredictionResponse] = None

class BucketResponse(BaseModel):
    key: str
    display_name: str
    is_tbd: bool
    ranking_error: Optional[str] = None
    local_enforced: bool = False
    games: List[BroadcastGameResponse]

class BroadcastBoardResponse(BaseModel):
    year: int
    week: int
    total_games: int
    confirmed: List[BucketResponse]
    tbd: List[BucketResponse]

@router.get("", response_model=BroadcastBoardResponse)
async def get_broadcasts(
    year: int,
    week: int,
    teams: Optional[str] = None,
    db: Session = Depends(get_db),
    team_configs: TeamConfigMap = Depends(get_team_configs),
    ranking: RankingService = Depends(get_ranking_service)
):
    """Confirmed and TBD broadcast buckets for a week, with the model's top pick per TBD bucket"""
    try:
        games = ScheduleService(db).get_games(year, week, parse_team_list(teams))
        team_records = TeamRecordsService(db).get_records(season=year)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load schedule for {year} week {week}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load schedule")

    board = BroadcastService(team_configs).classify(games, year)

    confirmed = [
        Bucket(key=key, games=merge_predictions(bucket_games, None, board.local_override_ids))
        for key, bucket_games in board.confirmed.items()
    ]
    tbd = await ranking.rank_buckets(board.tbd, team_records)

    return {
        "year": year,
        "week": week,
        "total_games": len(games),
        "confirmed": [bucket.to_dict() for bucket in confirmed],
        "tbd": [bucket.to_dict() for bucket in tbd],
    }
