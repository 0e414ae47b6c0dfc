"""Pydantic models describing what a device reported about its location."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from weatherlookup.models.weather import Coordinate


class PermissionState(str, Enum):
    """Geolocation permission state as reported by the platform."""

    GRANTED = "granted"
    PROMPT = "prompt"
    DENIED = "denied"


class PositionError(str, Enum):
    """Ways a position request can fail."""

    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    POSITION_UNAVAILABLE = "position_unavailable"


class DeviceLocationReport(BaseModel):
    """Result of the browser's own geolocation attempt, sent with a lookup.

    ``permission`` is None when the platform cannot query permissions.
    ``position`` and ``error`` are both None when no request was made.
    """

    supported: bool = True
    permission: Optional[PermissionState] = None
    position: Optional[Coordinate] = None
    error: Optional[PositionError] = None
