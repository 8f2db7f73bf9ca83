from typing import Dict, List, Optional, Any
import asyncio
import logging
import httpx
from fastapi import Depends
from sqlalchemy.orm import Session
from gameday.config import settings
from gameday.database import get_db
from gameday.integrations.sleeper_api import SleeperAPIClient
from gameday.models.players import Player
from gameday.utils.cache import TTLCache

logger = logging.getLogger(__name__)

NFL_STATE_TTL_SECONDS = 3600
PLAYER_BATCH_SIZE = 50

_nfl_state_cache = TTLCache(ttl_seconds=NFL_STATE_TTL_SECONDS, max_entries=1)

def fallback_member(owner_id: str) -> Dict[str, Any]:
    return {
        'user_id': owner_id,
        'username': f"User {owner_id[-4:]}",
        'display_name': None,
    }

def member_sort_key(member: Dict[str, Any]) -> str:
    return (member.get('display_name') or member.get('username') or '').casefold()

class SleeperService:
    """Service for reading Sleeper accounts and syncing Sleeper players"""

    def __init__(self, db: Optional[Session] = None, client: Optional[SleeperAPIClient] = None):
        self.db = db
        self.client = client or SleeperAPIClient()

    async def find_user(self, username: str) -> Optional[Dict[str, Any]]:
        """Find a Sleeper user by username, None when Sleeper has no such user"""
        try:
            user = await self.client.get_user(username)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        # Sleeper answers unknown usernames with a literal null
        if not user:
            return None
        return {
            'username': user.get('username') or username,
            'user_id': user.get('user_id'),
        }

    async def get_user_leagues(self, user_id: str, season: str = settings.default_season) -> List[Dict[str, Any]]:
        return await self.client.get_user_leagues(user_id, season) or []

    async def get_league_rosters(self, league_id: str) -> List[Dict[str, Any]]:
        return await self.client.get_league_rosters(league_id) or []

    async def get_member_roster(self, league_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        """The roster owned by owner_id in a league"""
        for roster in await self.get_league_rosters(league_id):
            if roster.get('owner_id') == owner_id:
                return roster
        return None

    async def _fetch_member(self, owner_id: str) -> Dict[str, Any]:
        try:
            user = await self.client.get_user(owner_id)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Could not load Sleeper user {owner_id}: {e}")
            return fallback_member(owner_id)

        if not user:
            return fallback_member(owner_id)
        return {
            'user_id': user.get('user_id') or owner_id,
            'username': user.get('username'),
            'display_name': user.get('display_name'),
        }

    async def get_league_members(self, league_id: str) -> List[Dict[str, Any]]:
        """Owners of every roster in a league, sorted by display name

        Each owner is looked up concurrently; an owner whose lookup fails is
        still listed under a fallback name.
        """
        rosters = await self.get_league_rosters(league_id)
        owner_ids = [roster.get('owner_id') for roster in rosters if roster.get('owner_id')]
        if not owner_ids:
            return []

        members = await asyncio.gather(*[self._fetch_member(owner_id) for owner_id in owner_ids])
        return sorted(members, key=member_sort_key)

    async def get_nfl_state(self) -> Dict[str, Any]:
        """Current NFL week and season, cached for an hour"""
        cached = _nfl_state_cache.get('nfl')
        if cached is not None:
            return cached

        data = await self.client.get_nfl_state()
        state = {
            'week': data.get('week'),
            'display_week': data.get('display_week'),
            'season': data.get('season'),
            'season_type': data.get('season_type'),
            'leg': data.get('leg'),
        }
        _nfl_state_cache.set('nfl', state)
        return state

    async def sync_players(self, batch_size: int = PLAYER_BATCH_SIZE) -> int:
        """Sync all NFL players from Sleeper, committing one batch at a time"""
        players_data = await self.client.get_all_players()
        player_ids = list(players_data.keys())
        logger.info(f"Fetched {len(player_ids)} players from Sleeper")

        processed = 0
        try:
            for start in range(0, len(player_ids), batch_size):
                batch = player_ids[start:start + batch_size]
                for player_id in batch:
                    self._upsert_sleeper_player(player_id, players_data[player_id] or {})
                self.db.commit()
                processed += len(batch)
                logger.debug(f"Processed {processed}/{len(player_ids)} players")
        except Exception as e:
            logger.error(f"Failed to sync players after {processed}: {e}")
            self.db.rollback()
            raise

        logger.info(f"Synced {processed} players from Sleeper")
        return processed

    def _upsert_sleeper_player(self, player_id: str, player_data: Dict[str, Any]) -> Player:
        """Insert or update a Sleeper player"""
        full_name = player_data.get('full_name')
        first_name = player_data.get('first_name')
        last_name = player_data.get('last_name')
        if not full_name and first_name and last_name:
            full_name = f"{first_name} {last_name}"

        fields = {
            'full_name': full_name,
            'first_name': first_name,
            'last_name': last_name,
            'position': player_data.get('position'),
            'team': player_data.get('team'),
            'age': player_data.get('age'),
            'height': player_data.get('height'),
            'weight': player_data.get('weight'),
            'college': player_data.get('college'),
            'years_exp': player_data.get('years_exp'),
            'status': player_data.get('status'),
            'active': bool(player_data.get('active', False)),
            'fantasy_positions': player_data.get('fantasy_positions') or [],
            'injury_status': player_data.get('injury_status'),
            'injury_body_part': player_data.get('injury_body_part'),
            'injury_notes': player_data.get('injury_notes'),
            'depth_chart_position': player_data.get('depth_chart_position'),
            'depth_chart_order': player_data.get('depth_chart_order'),
            'search_rank': player_data.get('search_rank'),
            'espn_id': _as_str(player_data.get('espn_id')),
            'yahoo_id': _as_str(player_data.get('yahoo_id')),
            'rotowire_id': _as_str(player_data.get('rotowire_id')),
            'stats_id': _as_str(player_data.get('stats_id')),
            'fantasy_data_id': _as_str(player_data.get('fantasy_data_id')),
        }

        existing = self.db.get(Player, player_id)
        if existing:
            for name, value in fields.items():
                setattr(existing, name, value)
            return existing

        player = Player(player_id=player_id, **fields)
        self.db.add(player)
        return player

    async def close(self):
        """Close the API client"""
        await self.client.close()

def _as_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None

def clear_nfl_state_cache():
    _nfl_state_cache.clear()

async def get_sleeper_service(db: Session = Depends(get_db)):
    """Dependency yielding a Sleeper service whose client is closed after the request"""
    service = SleeperService(db)
    try:
        yield service
    finally:
        await service.close()
