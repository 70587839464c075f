"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from dashboard.config import settings
from dashboard.database import engine, get_db
from dashboard.exceptions import DashboardError, dashboard_exception_handler
from dashboard.models import Base
from dashboard.services.file_storage import LocalStorageBackend, select_storage_backend
from dashboard.services.weather_client import WeatherClient

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
for _noisy in ("azure", "aiohttp", "sqlalchemy.engine"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Chosen once; handlers receive it through dashboard.dependencies.get_storage
storage = select_storage_backend(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, open storage and the weather client; close them on shutdown."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await storage.open()
    app.state.storage = storage

    weather = WeatherClient(
        settings.WEATHER_API_KEY,
        settings.WEATHER_API_URL,
        cache_seconds=settings.WEATHER_CACHE_SECONDS,
    )
    await weather.open()
    app.state.weather = weather

    logger.info(f"Dashboard API started (storage={storage.name}, env={settings.ENVIRONMENT})")

    yield

    # Cleanup
    await weather.close()
    await storage.close()
    await engine.dispose()


app = FastAPI(
    title="Dashboard API",
    version="1.0.0",
    description="Backend API for the user dashboard: files, settings, profile, weather.",
    lifespan=lifespan,
)

app.add_exception_handler(DashboardError, dashboard_exception_handler)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health_check():
    """Verify API and database connectivity."""
    try:
        async for db in get_db():
            await db.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
    except Exception as e:
        return {"status": "error", "database": str(e)}


# Register routers
from dashboard.routes.auth import router as auth_router
from dashboard.routes.upload import router as upload_router
from dashboard.routes.user_files import router as user_files_router
from dashboard.routes.settings import router as settings_router
from dashboard.routes.profile import router as profile_router
from dashboard.routes.weather import router as weather_router
from dashboard.routes.debug import router as debug_router
app.include_router(auth_router)
app.include_router(upload_router)
app.include_router(user_files_router)
app.include_router(settings_router)
app.include_router(profile_router)
app.include_router(weather_router)
app.include_router(debug_router)

# Local uploads are served the way their recorded url (/uploads/<user>/<name>) expects
if isinstance(storage, LocalStorageBackend):
    storage.base_path.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=storage.base_path), name="uploads")
