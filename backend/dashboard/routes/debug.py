"""Configuration diagnostics route."""
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.config import settings
from dashboard.database import get_db
from dashboard.dependencies import get_optional_user
from dashboard.exceptions import UnauthorizedError
from dashboard.models.user import User

router = APIRouter(prefix="/api/debug", tags=["debug"])


@router.get("/config")
async def config_status(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Report which credentials are present (never their values) and DB reachability."""
    if settings.is_production and user is None:
        raise UnauthorizedError()

    config = {
        "environment": settings.ENVIRONMENT,
        "hasDbUrl": bool(settings.DATABASE_URL),
        "hasBlobToken": bool(settings.AZURE_STORAGE_CONNECTION_STRING),
        "hasSecretKey": bool(settings.SECRET_KEY),
        "hasWeatherApiKey": bool(settings.WEATHER_API_KEY),
        "storageBackend": request.app.state.storage.name,
    }

    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {e}"

    return {
        "config": config,
        "database": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
