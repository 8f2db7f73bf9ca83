from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import httpx
from gameday.database import get_db
from gameday.services.player_service import PlayerService
from gameday.services.sleeper_service import SleeperService, get_sleeper_service
from gameday.services.team_config import to_sleeper_team
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class PlayerResponse(BaseModel):
    player_id: str
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    team: Optional[str] = None
    status: Optional[str] = None
    active: bool = False
    fantasy_positions: Optional[List[str]] = None
    injury_status: Optional[str] = None
    depth_chart_position: Optional[str] = None
    depth_chart_order: Optional[int] = None
    search_rank: Optional[int] = None

    class Config:
        from_attributes = True

class StartersResponse(BaseModel):
    home_team: Dict[str, List[PlayerResponse]]
    away_team: Dict[str, List[PlayerResponse]]

class PlayerSyncResponse(BaseModel):
    success: bool
    players_processed: int

@router.get("", response_model=List[PlayerResponse])
async def get_players(
    ids: Optional[str] = None,
    team: Optional[str] = None,
    position: Optional[str] = None,
    active: Optional[bool] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Get synced players with optional filtering; ids is a comma separated list"""
    id_list = [i.strip() for i in ids.split(',') if i.strip()] if ids else None
    return PlayerService(db).get_players(id_list, team, position, active, search)

@router.get("/starters", response_model=StartersResponse)
async def get_starters(home_team: str, away_team: str, db: Session = Depends(get_db)):
    """Projected starters for both teams of a matchup"""
    return PlayerService(db).get_starters(to_sleeper_team(home_team), to_sleeper_team(away_team))

@router.post("/sync", response_model=PlayerSyncResponse)
async def sync_players(service: SleeperService = Depends(get_sleeper_service)):
    """Pull every NFL player from Sleeper into the players table"""
    try:
        processed = await service.sync_players()
    except httpx.HTTPError as e:
        logger.error(f"Sleeper player fetch failed: {e}")
        raise HTTPException(status_code=502, detail="Player sync failed")
    except Exception as e:
        logger.error(f"Player sync failed: {e}")
        raise HTTPException(status_code=500, detail="Player sync failed")

    return PlayerSyncResponse(success=True, players_processed=processed)
