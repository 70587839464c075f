"""FastAPI dependencies: caller identity and lifespan-owned services.

Usage:
    @router.get("/protected")
    async def protected(user: User = Depends(get_current_user)):
        return {"user_id": str(user.id)}
"""
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.database import get_db
from dashboard.exceptions import UnauthorizedError
from dashboard.models.user import User
from dashboard.services.auth import decode_access_token
from dashboard.services.file_storage import StorageBackend
from dashboard.services.weather_client import WeatherClient

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to a User, or raise UnauthorizedError."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    user_id = decode_access_token(credentials.credentials)
    user = await db.get(User, user_id)
    if user is None:
        logger.info(f"Token for unknown user {user_id}")
        raise UnauthorizedError()
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """The caller if a valid token was sent, otherwise None."""
    if credentials is None:
        return None
    try:
        return await get_current_user(credentials, db)
    except UnauthorizedError:
        return None


def get_storage(request: Request) -> StorageBackend:
    """The storage backend chosen at startup."""
    return request.app.state.storage


def get_weather_client(request: Request) -> WeatherClient:
    return request.app.state.weather
