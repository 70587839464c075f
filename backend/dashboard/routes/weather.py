"""Weather widget proxy route."""
import logging

from fastapi import APIRouter, Depends, Query

from dashboard.dependencies import get_current_user, get_weather_client
from dashboard.exceptions import InternalError, NotFoundError
from dashboard.models.user import User
from dashboard.schemas.weather import WeatherResponse
from dashboard.services.weather_client import WeatherAPIError, WeatherClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/weather", tags=["weather"])


@router.get("", response_model=WeatherResponse)
async def get_weather(
    city: str = Query("New York", min_length=1, max_length=200),
    user: User = Depends(get_current_user),
    weather: WeatherClient = Depends(get_weather_client),
):
    """Current weather for ``city`` via the server-held API key (cached 5 minutes)."""
    if not weather.configured:
        raise InternalError("Weather API key not configured", code="WEATHER_NOT_CONFIGURED")
    try:
        data = await weather.get_current(city)
    except WeatherAPIError as e:
        logger.warning(f"Weather lookup failed for {city}: upstream={e.upstream_status} {e.message}")
        if e.status == 404:
            raise NotFoundError(e.message, code=e.code) from e
        raise InternalError(e.message, code=e.code) from e
    return WeatherResponse(**data)
