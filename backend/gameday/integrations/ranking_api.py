from typing import Dict, List, Any, Optional
import httpx
from gameday.config import settings
from gameday.integrations.base_api import BaseAPIClient
import logging

logger = logging.getLogger(__name__)

class RankingAPIClient(BaseAPIClient):
    """Client for the hosted broadcast ranking model"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(
            "Broadcast ranking model",
            settings.ranking_api_url,
            timeout=settings.ranking_timeout_seconds,
            max_attempts=settings.ranking_max_attempts,
            backoff_seconds=settings.ranking_backoff_seconds,
            transport=transport
        )

    async def predict_top(self, games: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Score one batch of games and return the model's top pick"""
        return await self._make_request("", method="POST", json={"games": games})
