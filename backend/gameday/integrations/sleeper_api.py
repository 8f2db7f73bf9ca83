from typing import Dict, List, Any, Optional
import httpx
from gameday.config import settings
from gameday.integrations.base_api import BaseAPIClient
import logging

logger = logging.getLogger(__name__)

class SleeperAPIClient(BaseAPIClient):
    """Client for Sleeper Fantasy Football API"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__("Sleeper", settings.sleeper_api_base, timeout=30.0, max_attempts=2, transport=transport)

    async def get_user(self, username_or_id: str) -> Dict[str, Any]:
        """Get user information by username or user id"""
        return await self._make_request(f"user/{username_or_id}")

    async def get_user_leagues(self, user_id: str, season: str = settings.default_season) -> List[Dict[str, Any]]:
        """Get all leagues for a user in a specific season"""
        return await self._make_request(f"user/{user_id}/leagues/nfl/{season}")

    async def get_league_rosters(self, league_id: str) -> List[Dict[str, Any]]:
        """Get all rosters in a league"""
        return await self._make_request(f"league/{league_id}/rosters")

    async def get_all_players(self) -> Dict[str, Any]:
        """Get all NFL players from Sleeper"""
        return await self._make_request("players/nfl")

    async def get_nfl_state(self) -> Dict[str, Any]:
        """Get current NFL season state"""
        return await self._make_request("state/nfl")
