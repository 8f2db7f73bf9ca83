from typing import Dict, Any, Optional
import httpx
from gameday.config import settings
from gameday.integrations.base_api import BaseAPIClient
import logging

logger = logging.getLogger(__name__)

REGULAR_SEASON = 2

class ESPNAPIClient(BaseAPIClient):
    """Client for ESPN's public NFL scoreboard and record APIs"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__("ESPN", settings.espn_site_api_base, timeout=15.0, max_attempts=2, transport=transport)

    async def get_scoreboard(self, year: int, week: int) -> Dict[str, Any]:
        """Get the regular season scoreboard for a week"""
        return await self._make_request(
            "scoreboard",
            params={"dates": year, "seasontype": REGULAR_SEASON, "week": week}
        )

    async def get_team_record(self, season: int, espn_team_id: int) -> Dict[str, Any]:
        """Get a team's regular season record"""
        url = (
            f"{settings.espn_core_api_base.rstrip('/')}/seasons/{season}"
            f"/types/{REGULAR_SEASON}/teams/{espn_team_id}/record"
        )
        return await self._make_request(url)
