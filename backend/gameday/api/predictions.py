from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict, List, Optional
from gameday.domain import Game, TeamRecord
from gameday.services.ranking_service import RankingService, RankingUnavailableError, get_ranking_service
from gameday.services.team_config import normalize_team
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class GameInput(BaseModel):
    id: Optional[str] = None
    year: int
    week: int
    home_team: str
    away_team: str
    time_display: str = ""
    broadcast: Optional[str] = None
    status: str = "scheduled"

    def to_game(self) -> Game:
        home_team = normalize_team(self.home_team)
        away_team = normalize_team(self.away_team)
        return Game(
            id=self.id or f"{self.year}-{self.week}-{away_team}-{home_team}",
            year=self.year,
            week=self.week,
            home_team=home_team,
            away_team=away_team,
            time_display=self.time_display,
            broadcast=self.broadcast,
            status=self.status,
        )

class TeamRecordInput(BaseModel):
    abbreviation: str
    season: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    win_percentage: float = 0.0

    def to_record(self) -> TeamRecord:
        return TeamRecord(
            abbreviation=normalize_team(self.abbreviation),
            season=self.season,
            wins=self.wins,
            losses=self.losses,
            ties=self.ties,
            win_percentage=self.win_percentage,
        )

class PredictionRequest(BaseModel):
    games: Optional[List[GameInput]] = None
    team_records: Optional[List[TeamRecordInput]] = None

class ProbabilityResponse(BaseModel):
    game_id: str
    probability: float
    score: float
    probability_all: float

class PredictionResponse(BaseModel):
    top_game_id: Optional[str] = None
    top_probability: Optional[float] = None
    probabilities: List[ProbabilityResponse]
    skipped: List[str]
    local_enforced: bool
    original_games: List[Dict[str, Any]]

@router.post("", response_model=PredictionResponse)
async def predict_top_game(request: PredictionRequest, ranking: RankingService = Depends(get_ranking_service)):
    """Rank one batch of games with the hosted model"""
    if request.games is None:
        raise HTTPException(status_code=400, detail="Games array is required")
    if request.team_records is None:
        raise HTTPException(status_code=400, detail="Team records array is required")

    games = [g.to_game() for g in request.games]
    records = [r.to_record() for r in request.team_records]

    try:
        prediction = await ranking.rank_group(games, records)
    except RankingUnavailableError as e:
        logger.error(f"Ranking failed for {len(games)} games: {e}")
        raise HTTPException(status_code=502, detail="Failed to get ML predictions")

    return {
        "top_game_id": prediction.top_game_id,
        "top_probability": prediction.top_probability,
        "probabilities": [vars(p) for p in prediction.predictions.values()],
        "skipped": prediction.skipped,
        "local_enforced": prediction.local_enforced,
        "original_games": [g.to_dict() for g in games],
    }
