"""API endpoints for weather lookups triggered by user actions."""

import ipaddress
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from weatherlookup.core.location import ReportedLocationProvider
from weatherlookup.core.lookup import LookupResult, WeatherLookup
from weatherlookup.core.presenter import present_invalid_query
from weatherlookup.core.session_manager import UserSession, session_manager
from weatherlookup.core.weather_api import WeatherFetcher
from weatherlookup.models.lookup import (
    DisplayModel,
    LocationLookupRequest,
    LookupResponse,
    QueryLookupRequest,
    UnitsChangeRequest,
)
from weatherlookup.models.weather import InvalidQueryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lookup", tags=["lookup"])
weather_lookup = WeatherLookup(fetcher=WeatherFetcher(server_side=True))


def get_weather_lookup() -> WeatherLookup:
    """The lookup pipeline shared by all requests."""
    return weather_lookup


async def get_user_session(request: Request) -> UserSession:
    """FastAPI dependency resolving the caller's lookup session."""
    session_id = getattr(request.state, "session_id", None)
    if not session_id:
        raise HTTPException(status_code=400, detail="Session ID is missing.")
    return await session_manager.get_or_create_session(session_id)


def client_address(request: Request) -> Optional[str]:
    """Public address of the browser, as seen through any reverse proxy.

    Loopback and unparsable addresses give None; the IP lookup then locates
    this host, which is the browser's host in that case anyway.
    """
    forwarded = request.headers.get("X-Forwarded-For", "")
    candidate = forwarded.split(",")[0].strip() or (
        request.client.host if request.client else ""
    )
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return None
    if address.is_loopback or address.is_unspecified:
        return None
    return str(address)


def _respond(session: UserSession, result: LookupResult) -> LookupResponse:
    session.apply(result)
    return LookupResponse(
        generation=result.generation,
        superseded=result.superseded,
        state=session.tracker.state,
        display=result.display,
    )


@router.post("/location", response_model=LookupResponse)
async def lookup_location(
    body: LocationLookupRequest,
    request: Request,
    session: UserSession = Depends(get_user_session),
    lookup: WeatherLookup = Depends(get_weather_lookup),
):
    """Weather for the device position, falling back to IP geolocation."""
    units = body.units or session.units
    session.units = units
    provider = ReportedLocationProvider(body.device)

    result = await lookup.lookup_current_location(
        provider, units, session.tracker, client_ip=client_address(request)
    )
    return _respond(session, result)


@router.post("/query", response_model=LookupResponse)
async def lookup_query(
    body: QueryLookupRequest,
    session: UserSession = Depends(get_user_session),
    lookup: WeatherLookup = Depends(get_weather_lookup),
):
    """Weather for a city name or postal code typed by the user."""
    units = body.units or session.units
    session.units = units

    try:
        result = await lookup.lookup_query(body.query, units, session.tracker)
    except InvalidQueryError:
        logger.info(f"Rejected empty query for session {session.session_id}")
        response = LookupResponse(
            generation=session.tracker.generation,
            state=session.tracker.state,
            display=present_invalid_query(units),
        )
        return JSONResponse(status_code=422, content=response.model_dump(mode="json"))

    return _respond(session, result)


@router.post("/units", response_model=LookupResponse)
async def change_units(
    body: UnitsChangeRequest,
    session: UserSession = Depends(get_user_session),
    lookup: WeatherLookup = Depends(get_weather_lookup),
):
    """Switch unit system, re-running the last lookup if a result is showing."""
    session.units = body.units
    showing = session.display is not None and session.display.show_result
    if not showing or session.last_request is None:
        if session.display is not None:
            session.display = session.display.model_copy(update={"units": body.units})
        return LookupResponse(
            generation=session.tracker.generation,
            state=session.tracker.state,
            display=session.display or DisplayModel(units=body.units),
        )

    result = await lookup.refresh(session.last_request, body.units, session.tracker)
    return _respond(session, result)


@router.get("/current", response_model=LookupResponse)
async def current_display(session: UserSession = Depends(get_user_session)):
    """What the session is showing right now."""
    return LookupResponse(
        generation=session.tracker.generation,
        state=session.tracker.state,
        display=session.display or DisplayModel(units=session.units),
    )
