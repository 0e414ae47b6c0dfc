"""Main FastAPI application entry point."""

from fastapi import FastAPI
from contextlib import asynccontextmanager
from weatherlookup.config import settings
from weatherlookup.core.location import (
    GEOLOCATION_HIGH_ACCURACY,
    GEOLOCATION_TIMEOUT_SECONDS,
)
from weatherlookup.core.session_manager import session_manager
from weatherlookup.middleware.session import SessionMiddleware
import logging

from weatherlookup.api.weather import router as weather_router
from weatherlookup.api.lookup import router as lookup_router
from weatherlookup.api.session import router as session_router

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages application startup and shutdown events."""
    logger.info("Starting Weather Lookup API")
    if not settings.use_proxy:
        logger.warning(
            "USE_PROXY is off: client-side fetchers call OpenWeather directly with the API key attached"
        )
    if not settings.openweather_api_key:
        logger.warning("OPENWEATHER_API_KEY is not set; the relay will answer 401")

    await session_manager.start()

    yield

    logger.info("Shutting down Weather Lookup API")
    await session_manager.stop()


app = FastAPI(
    title="Weather Lookup API",
    description="Current weather for the device location or a typed city",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(SessionMiddleware)

app.include_router(weather_router)
app.include_router(lookup_router)
app.include_router(session_router)


@app.get("/")
async def root():
    """Basic information about the running API and how clients should locate themselves."""
    return {
        "message": "Weather Lookup API",
        "status": "running",
        "mode": "proxied" if settings.use_proxy else "direct",
        "default_units": settings.default_units,
        "geolocation": {
            "timeout_ms": int(GEOLOCATION_TIMEOUT_SECONDS * 1000),
            "enable_high_accuracy": GEOLOCATION_HIGH_ACCURACY,
        },
    }


@app.get("/health")
async def health_check():
    """Health of the API."""
    return {
        "status": "healthy",
        "relay_configured": bool(settings.openweather_api_key),
        "active_sessions": session_manager.active_sessions,
    }
