from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import httpx
from gameday.database import get_db
from gameday.services.schedule_service import ScheduleService
from gameday.services.team_config import parse_team_list
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class GameResponse(BaseModel):
    id: str
    year: int
    week: int
    home_team: str
    away_team: str
    time_display: str
    broadcast: Optional[str] = None
    matchup: str
    status: str

class SyncResponse(BaseModel):
    year: int
    week: int
    synced: int
    skipped: int

@router.get("", response_model=List[GameResponse])
async def get_schedule(
    year: Optional[int] = None,
    week: Optional[int] = None,
    teams: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Get schedule rows, optionally filtered by year, week and teams"""
    try:
        games = ScheduleService(db).get_games(year, week, parse_team_list(teams))
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch schedule: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch schedule")
    return [game.to_dict() for game in games]

@router.post("/sync", response_model=SyncResponse)
async def sync_schedule(year: int, week: int, db: Session = Depends(get_db)):
    """Pull one week of the ESPN scoreboard into the schedule table"""
    service = ScheduleService(db)
    try:
        result = await service.sync_week(year, week)
    except httpx.HTTPError as e:
        logger.error(f"ESPN scoreboard fetch failed for {year} week {week}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch ESPN scoreboard")
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Failed to store schedule")
    finally:
        await service.close()

    return SyncResponse(year=year, week=week, **result)
