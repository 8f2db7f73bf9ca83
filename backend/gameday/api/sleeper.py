from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import httpx
from gameday.config import settings
from gameday.database import get_db
from gameday.services.player_service import PlayerService
from gameday.services.sleeper_service import SleeperService, get_sleeper_service
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class UserSearchResponse(BaseModel):
    username: str
    user_id: str

class LeagueResponse(BaseModel):
    league_id: str
    name: Optional[str] = None
    season: Optional[str] = None
    status: Optional[str] = None
    total_rosters: Optional[int] = None
    roster_positions: Optional[list] = None

class MemberResponse(BaseModel):
    user_id: str
    username: Optional[str] = None
    display_name: Optional[str] = None

class RosterPlayerResponse(BaseModel):
    player_id: str
    name: str
    position: Optional[str] = None
    team: Optional[str] = None
    injury_status: Optional[str] = None
    is_starter: bool = False

class MemberRosterResponse(BaseModel):
    roster_id: int
    owner_id: str
    starters: List[str]
    players: List[RosterPlayerResponse]

class NFLStateResponse(BaseModel):
    week: Optional[int] = None
    display_week: Optional[int] = None
    season: Optional[str] = None
    season_type: Optional[str] = None
    leg: Optional[int] = None

def upstream_error(e: httpx.HTTPError, what: str) -> HTTPException:
    """Pass Sleeper's own status through, 502 when Sleeper could not be reached"""
    logger.error(f"Sleeper request failed while fetching {what}: {e}")
    if isinstance(e, httpx.HTTPStatusError):
        return HTTPException(status_code=e.response.status_code, detail=f"Failed to fetch {what}")
    return HTTPException(status_code=502, detail=f"Failed to fetch {what}")

@router.get("/user/{username}", response_model=UserSearchResponse)
async def find_user(username: str, service: SleeperService = Depends(get_sleeper_service)):
    """Resolve a Sleeper username to its user id"""
    try:
        user = await service.find_user(username)
    except httpx.HTTPError as e:
        raise upstream_error(e, "user")

    if not user or not user.get('user_id'):
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.get("/user/{user_id}/leagues", response_model=List[LeagueResponse])
async def get_user_leagues(
    user_id: str,
    season: str = settings.default_season,
    service: SleeperService = Depends(get_sleeper_service)
):
    """Get a user's NFL leagues for a season"""
    try:
        return await service.get_user_leagues(user_id, season)
    except httpx.HTTPError as e:
        raise upstream_error(e, "leagues")

@router.get("/league/{league_id}/members", response_model=List[MemberResponse])
async def get_league_members(league_id: str, service: SleeperService = Depends(get_sleeper_service)):
    """Get every roster owner in a league"""
    try:
        return await service.get_league_members(league_id)
    except httpx.HTTPError as e:
        raise upstream_error(e, f"rosters for league {league_id}")

@router.get("/league/{league_id}/rosters")
async def get_league_rosters(league_id: str, service: SleeperService = Depends(get_sleeper_service)):
    """Get the raw Sleeper rosters of a league"""
    try:
        return await service.get_league_rosters(league_id)
    except httpx.HTTPError as e:
        raise upstream_error(e, f"rosters for league {league_id}")

@router.get("/league/{league_id}/roster/{owner_id}", response_model=MemberRosterResponse)
async def get_member_roster(
    league_id: str,
    owner_id: str,
    service: SleeperService = Depends(get_sleeper_service),
    db: Session = Depends(get_db)
):
    """Get one member's roster with player details, starters first"""
    try:
        roster = await service.get_member_roster(league_id, owner_id)
    except httpx.HTTPError as e:
        raise upstream_error(e, f"rosters for league {league_id}")

    if not roster:
        raise HTTPException(status_code=404, detail="Roster not found")

    return MemberRosterResponse(
        roster_id=roster.get('roster_id', 0),
        owner_id=owner_id,
        starters=[s for s in roster.get('starters') or [] if s],
        players=PlayerService(db).build_roster_view(roster)
    )

@router.get("/nfl-state", response_model=NFLStateResponse)
async def get_nfl_state(service: SleeperService = Depends(get_sleeper_service)):
    """Get the current NFL week and season"""
    try:
        return await service.get_nfl_state()
    except httpx.HTTPError as e:
        raise upstream_error(e, "NFL state")
