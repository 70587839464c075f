"""Async OpenWeatherMap client with a short-lived per-city cache.

Owned by the application lifespan (``app.state.weather``) so the HTTP
session and cache have an explicit lifecycle.
"""
import asyncio
import logging
import time
from typing import Any, Optional

import aiohttp

logger = logging.getLogger(__name__)


class WeatherAPIError(Exception):
    """Upstream weather failure, already mapped to an API status and message."""

    def __init__(self, status: int, message: str, upstream_status: int = 0, code: str = "WEATHER_FETCH_FAILED"):
        self.status = status
        self.message = message
        self.upstream_status = upstream_status
        self.code = code
        super().__init__(message)


class WeatherClient:
    """Fetches current weather for a city, caching results for ``cache_seconds``."""

    def __init__(
        self, api_key: str, base_url: str,
        cache_seconds: int = 300,
        timeout: float = 10,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.cache_seconds = cache_seconds
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None
        self._cache: dict[str, tuple[float, dict]] = {}

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def open(self) -> None:
        """Open a persistent session for connection pooling."""
        if not self._session:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "WeatherClient":
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def get_current(self, city: str) -> dict:
        """Current weather for ``city`` as the dashboard widget payload."""
        cache_key = city.strip().lower()
        cached = self._cache.get(cache_key)
        now = time.monotonic()
        if cached and now - cached[0] < self.cache_seconds:
            return cached[1]

        data = await self._fetch(city)
        result = self._to_widget(data)
        self._cache[cache_key] = (now, result)
        return result

    async def _fetch(self, city: str) -> dict[str, Any]:
        params = {"q": city, "appid": self.api_key, "units": "metric"}
        if not self._session:
            await self.open()
        try:
            async with self._session.get(self.base_url, params=params) as resp:
                if resp.status == 401:
                    raise WeatherAPIError(500, "Weather API key is invalid", 401, code="WEATHER_KEY_INVALID")
                if resp.status == 404:
                    raise WeatherAPIError(404, f"City not found: {city}", 404, code="CITY_NOT_FOUND")
                if resp.status != 200:
                    raise WeatherAPIError(500, "Failed to fetch weather data", resp.status)
                return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Weather request failed for {city}: {e}")
            raise WeatherAPIError(500, "Failed to fetch weather data") from e

    @staticmethod
    def _to_widget(data: dict[str, Any]) -> dict:
        try:
            return {
                "city": data["name"],
                "country": data["sys"]["country"],
                "temperature": round(data["main"]["temp"]),
                "description": data["weather"][0]["description"],
                "humidity": data["main"]["humidity"],
                "wind_speed": data["wind"]["speed"],
                "icon": data["weather"][0]["icon"],
            }
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected weather payload: {e}")
            raise WeatherAPIError(500, "Failed to fetch weather data") from e
