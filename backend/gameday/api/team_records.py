from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
from gameday.database import get_db
from gameday.services.team_config import parse_team_list
from gameday.services.team_records_service import TeamRecordsService
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class TeamRecordResponse(BaseModel):
    abbreviation: str
    season: int
    wins: int
    losses: int
    ties: int
    win_percentage: float

    class Config:
        from_attributes = True

class RecordSyncResponse(BaseModel):
    season: int
    total_teams: int
    success_count: int
    error_count: int
    errors: List[str]

@router.get("", response_model=List[TeamRecordResponse])
async def get_team_records(teams: Optional[str] = None, season: Optional[int] = None, db: Session = Depends(get_db)):
    """Get team records, optionally filtered by team list and season"""
    try:
        return TeamRecordsService(db).get_records(parse_team_list(teams), season)
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch team records: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch team records")

@router.post("/sync", response_model=RecordSyncResponse)
async def sync_team_records(season: int, record_season: Optional[int] = None, db: Session = Depends(get_db)):
    """Refresh every team's record for a season from ESPN"""
    service = TeamRecordsService(db)
    try:
        result = await service.sync_records(season, record_season)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    finally:
        await service.close()

    return RecordSyncResponse(season=season, **result)
