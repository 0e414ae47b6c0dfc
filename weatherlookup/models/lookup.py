"""Pydantic models for lookup API requests and the display model."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from weatherlookup.models.location import DeviceLocationReport
from weatherlookup.models.weather import LocationFailureReason, LocationSource, Units


class LookupState(str, Enum):
    """Where a single user action currently is."""

    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    DISPLAYING = "displaying"
    SHOWING_ERROR = "showing_error"


class DisplayModel(BaseModel):
    """Fields handed to the presentation layer."""

    state: LookupState = LookupState.IDLE
    show_result: bool = False
    message: Optional[str] = None
    message_type: Optional[str] = None
    hint: Optional[str] = None
    requires_manual_input: bool = False
    reasons: List[LocationFailureReason] = Field(default_factory=list)

    units: Units = Units.METRIC
    source: Optional[LocationSource] = None
    location_name: Optional[str] = None
    summary: Optional[str] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    icon_url: Optional[str] = None
    temperature: Optional[str] = None
    feels_like: Optional[str] = None
    humidity: Optional[str] = None
    pressure: Optional[str] = None
    wind_speed: Optional[str] = None


class LocationLookupRequest(BaseModel):
    """Automatic lookup: device report plus unit system."""

    device: DeviceLocationReport = Field(default_factory=DeviceLocationReport)
    units: Optional[Units] = None


class QueryLookupRequest(BaseModel):
    """Manual lookup by city name or postal code."""

    query: str = ""
    units: Optional[Units] = None


class UnitsChangeRequest(BaseModel):
    """Unit toggle: re-run the last lookup in the new unit system."""

    units: Units


class LookupResponse(BaseModel):
    """API response for a lookup action."""

    generation: int
    superseded: bool = False
    state: LookupState = LookupState.IDLE
    display: DisplayModel
