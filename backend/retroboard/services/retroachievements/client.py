from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .config import RetroAchievementsConfig
from .exceptions import (
    RetroAchievementsAPIError,
    RetroAchievementsAuthError,
    RetroAchievementsNotFoundError,
    RetroAchievementsRateLimitError,
)
from .models import GameSummary, UserGameProgress

logger = logging.getLogger(__name__)


class RetroAchievementsClient:
    """Async client for the RetroAchievements web API."""

    def __init__(
        self,
        username: str,
        api_key: str,
        config: RetroAchievementsConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.username = username
        self.api_key = api_key
        self.config = config or RetroAchievementsConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> RetroAchievementsClient:
        limits = httpx.Limits(
            max_connections=self.config.max_connections,
            max_keepalive_connections=self.config.max_keepalive_connections,
        )
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            limits=limits,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Closed RetroAchievementsClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "RetroAchievementsClient must be used as async context manager"
            )
        return self._client

    def _auth_params(self) -> dict[str, str]:
        if not self.api_key:
            raise RetroAchievementsAuthError(
                "Authentication required. Configure a RetroAchievements API key."
            )
        return {"z": self.username, "y": self.api_key}

    async def _request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        query = {**self._auth_params(), **(params or {})}

        retry_count = 0
        last_error: Exception | None = None

        while retry_count < self.config.max_retries:
            try:
                response = await self.client.get(endpoint, params=query)

                if response.status_code in (401, 403):
                    raise RetroAchievementsAuthError(
                        "Authentication failed", status_code=response.status_code
                    )
                elif response.status_code == 404:
                    raise RetroAchievementsNotFoundError(
                        f"Resource not found: {endpoint}", status_code=404
                    )
                elif response.status_code == 429:
                    wait_time = 2 ** retry_count
                    logger.warning(f"Rate limited, waiting {wait_time}s...")
                    last_error = RetroAchievementsRateLimitError(
                        "Rate limit exceeded", status_code=429
                    )
                    await asyncio.sleep(wait_time)
                    retry_count += 1
                    continue
                elif response.status_code >= 500:
                    wait_time = 2 ** retry_count
                    logger.warning(
                        f"Server error {response.status_code}, "
                        f"retrying in {wait_time}s..."
                    )
                    last_error = RetroAchievementsAPIError(
                        f"Server error {response.status_code}",
                        status_code=response.status_code,
                    )
                    await asyncio.sleep(wait_time)
                    retry_count += 1
                    continue

                elif response.status_code >= 400:
                    raise RetroAchievementsAPIError(
                        f"Request to {endpoint} failed: {response.status_code}",
                        status_code=response.status_code,
                    )

                try:
                    data = response.json()
                except ValueError as e:
                    raise RetroAchievementsAPIError(
                        f"Invalid JSON from {endpoint}: {e}"
                    ) from e
                if not isinstance(data, dict):
                    raise RetroAchievementsAPIError(
                        f"Unexpected payload from {endpoint}"
                    )
                return data

            except httpx.TimeoutException as e:
                last_error = e
                retry_count += 1
                if retry_count < self.config.max_retries:
                    logger.warning(f"Timeout, retrying ({retry_count})...")
                    await asyncio.sleep(2)

            except httpx.RequestError as e:
                last_error = e
                logger.error(f"Network error: {e}")
                break

        if isinstance(last_error, RetroAchievementsRateLimitError):
            raise last_error
        raise RetroAchievementsAPIError(
            f"Request failed after {retry_count} retries: {last_error}"
        )

    async def get_game(self, game_id: int) -> GameSummary:
        data = await self._request("API_GetGame.php", {"i": game_id})
        return GameSummary.from_api(data, game_id=game_id)

    async def get_user_game_progress(
        self, username: str, game_id: int
    ) -> UserGameProgress:
        data = await self._request(
            "API_GetGameInfoAndUserProgress.php",
            {"g": game_id, "u": username, "a": 1},
        )
        return UserGameProgress.from_api(data, username=username, game_id=game_id)


def create_retroachievements_client(
    username: str,
    api_key: str,
    base_url: str | None = None,
    timeout_seconds: float | None = None,
    max_retries: int | None = None,
) -> RetroAchievementsClient:
    """Factory function to create a client from settings values."""
    overrides = {
        "base_url": base_url,
        "timeout_seconds": timeout_seconds,
        "max_retries": max_retries,
    }
    config = RetroAchievementsConfig(
        **{k: v for k, v in overrides.items() if v is not None}
    )
    return RetroAchievementsClient(username=username, api_key=api_key, config=config)
