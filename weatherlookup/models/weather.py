"""Pydantic models for weather lookups: requests, normalized results and outcomes."""

import math
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class InvalidQueryError(ValueError):
    """Raised when a manual location query is empty or whitespace-only."""


class Units(str, Enum):
    """Unit system forwarded to the upstream API."""

    METRIC = "metric"
    IMPERIAL = "imperial"


class LocationSource(str, Enum):
    """Where the coordinates (or query) of a lookup came from."""

    DEVICE = "device"
    IP = "ip"
    MANUAL = "manual"


class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    @field_validator("latitude", "longitude")
    @classmethod
    def must_be_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("coordinates must be finite numbers")
        return value

    @field_validator("latitude")
    @classmethod
    def latitude_in_range(cls, value: float) -> float:
        if not -90.0 <= value <= 90.0:
            raise ValueError("latitude must be between -90 and 90")
        return value

    @field_validator("longitude")
    @classmethod
    def longitude_in_range(cls, value: float) -> float:
        if not -180.0 <= value <= 180.0:
            raise ValueError("longitude must be between -180 and 180")
        return value


class LocationQuery(BaseModel):
    """A city name or postal code typed by the user."""

    text: str

    @field_validator("text")
    @classmethod
    def must_not_be_blank(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("query must not be empty")
        return text

    @classmethod
    def parse(cls, raw: Optional[str]) -> "LocationQuery":
        """Trim and validate raw input, raising InvalidQueryError when blank."""
        text = (raw or "").strip()
        if not text:
            raise InvalidQueryError("Please enter a city or postal code.")
        return cls(text=text)


class WeatherRequest(BaseModel):
    """Exactly one of a coordinate or a query, plus units and source tag."""

    coordinate: Optional[Coordinate] = None
    query: Optional[LocationQuery] = None
    units: Units = Units.METRIC
    source: Optional[LocationSource] = None

    @model_validator(mode="after")
    def exactly_one_target(self) -> "WeatherRequest":
        if (self.coordinate is None) == (self.query is None):
            raise ValueError("a weather request needs either a coordinate or a query")
        return self

    @property
    def is_query(self) -> bool:
        return self.query is not None


class WeatherResult(BaseModel):
    """Normalized view of the upstream current-weather payload."""

    name: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    temperature: Optional[float] = None
    feels_like: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None


class LocationFailureReason(str, Enum):
    """Why an automatic location could not be determined."""

    PERMISSION_UNSUPPORTED = "permission_unsupported"
    PERMISSION_DENIED = "permission_denied"
    POSITION_TIMEOUT = "position_timeout"
    POSITION_UNAVAILABLE = "position_unavailable"
    IP_LOOKUP_FAILED = "ip_lookup_failed"


class NeedsManualInput(BaseModel):
    """A resolver could not produce coordinates; the user must type a location."""

    reason: LocationFailureReason


# --- Outcomes: every lookup attempt ends in exactly one of these ---


class Success(BaseModel):
    kind: Literal["success"] = "success"
    result: WeatherResult
    source: Optional[LocationSource] = None


class NotFound(BaseModel):
    kind: Literal["not_found"] = "not_found"
    query: Optional[str] = None


class Unauthorized(BaseModel):
    kind: Literal["unauthorized"] = "unauthorized"


class UpstreamError(BaseModel):
    kind: Literal["upstream_error"] = "upstream_error"
    status_code: int
    message: str = ""


class NetworkError(BaseModel):
    kind: Literal["network_error"] = "network_error"
    message: str


class PermissionDenied(BaseModel):
    kind: Literal["permission_denied"] = "permission_denied"
    reasons: List[LocationFailureReason] = Field(default_factory=list)
    requires_manual_input: bool = True


class LocationUnavailable(BaseModel):
    kind: Literal["location_unavailable"] = "location_unavailable"
    reasons: List[LocationFailureReason] = Field(default_factory=list)
    requires_manual_input: bool = True


OutcomeStatus = Annotated[
    Union[
        Success,
        NotFound,
        Unauthorized,
        UpstreamError,
        NetworkError,
        PermissionDenied,
        LocationUnavailable,
    ],
    Field(discriminator="kind"),
]
