"""Same-origin relay to OpenWeather that keeps the API key on the server."""

import logging
from typing import AsyncIterator, Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from weatherlookup.config import settings
from weatherlookup.models.weather import Units

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/weather", tags=["weather"])


async def get_upstream_client() -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client used to reach OpenWeather"""
    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds) as client:
        yield client


def _error(status_code: int, message: str) -> JSONResponse:
    # Same shape as OpenWeather's own error bodies
    return JSONResponse(
        status_code=status_code, content={"cod": status_code, "message": message}
    )


@router.get("")
async def relay_weather(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    q: Optional[str] = None,
    units: Optional[Units] = None,
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    """Forward a current-weather request upstream and mirror its status and body"""
    query = q.strip() if q else None
    has_coords = lat is not None and lon is not None
    any_coord = lat is not None or lon is not None
    if (query and any_coord) or not (query or has_coords):
        return _error(400, "Provide either lat and lon, or q")

    if not settings.openweather_api_key:
        logger.error("Relay called but OPENWEATHER_API_KEY is not configured")
        return _error(401, "Relay has no API key configured")

    params = {"lat": str(lat), "lon": str(lon)} if has_coords else {"q": query}
    params["units"] = (units or Units(settings.default_units)).value
    logger.info(f"Relaying weather request: {params}")
    params["appid"] = settings.openweather_api_key

    try:
        upstream = await client.get(f"{settings.openweather_base_url}/weather", params=params)
    except httpx.HTTPError as e:
        logger.error(f"Relay could not reach OpenWeather: {e}")
        return _error(502, "Upstream weather service unreachable")

    if not upstream.is_success:
        logger.warning(f"OpenWeather answered {upstream.status_code} to relayed request")

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )
