import asyncio
import httpx
import time
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

class BaseAPIClient:
    """Base class for all API integrations"""

    def __init__(
        self,
        source_name: str,
        base_url: str,
        timeout: float = 30.0,
        max_attempts: int = 1,
        backoff_seconds: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.source_name = source_name
        self.base_url = base_url
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.session = httpx.AsyncClient(timeout=timeout, transport=transport)

    def _build_url(self, endpoint: str) -> str:
        if not endpoint:
            return self.base_url
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    async def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict] = None
    ) -> Any:
        """Make API request with logging, bounded retry and error handling

        Transport errors and 5xx responses are retried with exponential
        backoff up to max_attempts; 4xx responses fail straight away.
        """
        url = self._build_url(endpoint)

        for attempt in range(1, self.max_attempts + 1):
            start_time = time.time()
            try:
                response = await self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json,
                    headers=headers
                )
            except httpx.TransportError as e:
                self._log_api_call(url, method, None, start_time, attempt, error_message=str(e))
                if attempt >= self.max_attempts:
                    raise
                await self._backoff(attempt)
                continue

            self._log_api_call(url, method, response.status_code, start_time, attempt)

            if response.status_code >= 500 and attempt < self.max_attempts:
                await self._backoff(attempt)
                continue

            if response.status_code >= 400:
                logger.error(f"{self.source_name} request failed: {response.status_code} - {response.text[:200]}")
                response.raise_for_status()

            return response.json()

    async def _backoff(self, attempt: int):
        await asyncio.sleep(self.backoff_seconds * (2 ** (attempt - 1)))

    def _log_api_call(
        self,
        url: str,
        method: str,
        status_code: Optional[int],
        start_time: float,
        attempt: int,
        error_message: Optional[str] = None
    ):
        response_time_ms = int((time.time() - start_time) * 1000)
        if error_message:
            logger.warning(
                f"{self.source_name} {method} {url} failed after {response_time_ms}ms "
                f"(attempt {attempt}/{self.max_attempts}): {error_message}"
            )
        else:
            logger.info(
                f"{self.source_name} {method} {url} -> {status_code} in {response_time_ms}ms "
                f"(attempt {attempt}/{self.max_attempts})"
            )

    async def close(self):
        """Close the HTTP session"""
        await self.session.aclose()
