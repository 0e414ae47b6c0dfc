"""Device location resolution through an injectable location provider."""

import logging
from typing import Optional, Protocol, Union

from weatherlookup.models.location import (
    DeviceLocationReport,
    PermissionState,
    PositionError,
)
from weatherlookup.models.weather import (
    Coordinate,
    LocationFailureReason,
    NeedsManualInput,
)

logger = logging.getLogger(__name__)

GEOLOCATION_TIMEOUT_SECONDS = 10.0
GEOLOCATION_HIGH_ACCURACY = True

_POSITION_ERROR_REASONS = {
    PositionError.PERMISSION_DENIED: LocationFailureReason.PERMISSION_DENIED,
    PositionError.TIMEOUT: LocationFailureReason.POSITION_TIMEOUT,
    PositionError.POSITION_UNAVAILABLE: LocationFailureReason.POSITION_UNAVAILABLE,
}


class LocationProvider(Protocol):
    """Platform geolocation capability."""

    @property
    def is_available(self) -> bool:
        """Whether the platform can produce a device position at all."""
        ...

    async def query_permission(self) -> Optional[PermissionState]:
        """Current permission state, or None if it cannot be queried."""
        ...

    async def request_position(
        self, timeout: float, high_accuracy: bool
    ) -> Union[Coordinate, PositionError]:
        """Ask the device for its current position."""
        ...


class UnavailableLocationProvider:
    """Provider for platforms without any device geolocation."""

    @property
    def is_available(self) -> bool:
        return False

    async def query_permission(self) -> Optional[PermissionState]:
        return None

    async def request_position(
        self, timeout: float, high_accuracy: bool
    ) -> Union[Coordinate, PositionError]:
        return PositionError.POSITION_UNAVAILABLE


class ReportedLocationProvider:
    """Replays what a browser reported about its own geolocation attempt."""

    def __init__(self, report: DeviceLocationReport):
        self.report = report
        self.position_requested = False

    @property
    def is_available(self) -> bool:
        return self.report.supported

    async def query_permission(self) -> Optional[PermissionState]:
        return self.report.permission

    async def request_position(
        self, timeout: float, high_accuracy: bool
    ) -> Union[Coordinate, PositionError]:
        self.position_requested = True
        if self.report.position is not None:
            return self.report.position
        return self.report.error or PositionError.POSITION_UNAVAILABLE


class LocationResolver:
    """Resolves the device position, honouring the permission state first."""

    def __init__(self, provider: LocationProvider):
        self.provider = provider

    async def resolve(self) -> Union[Coordinate, NeedsManualInput]:
        """Return device coordinates or the reason the user must type a location."""
        if not self.provider.is_available:
            logger.warning("Geolocation is not supported on this platform")
            return NeedsManualInput(reason=LocationFailureReason.PERMISSION_UNSUPPORTED)

        try:
            permission = await self.provider.query_permission()
        except Exception as e:
            logger.warning(f"Permission query failed, requesting position anyway: {e}")
            permission = None

        # Some platforms block the request outright once denied.
        if permission == PermissionState.DENIED:
            logger.info("Geolocation permission is denied; skipping position request")
            return NeedsManualInput(reason=LocationFailureReason.PERMISSION_DENIED)

        result = await self.provider.request_position(
            timeout=GEOLOCATION_TIMEOUT_SECONDS,
            high_accuracy=GEOLOCATION_HIGH_ACCURACY,
        )
        if isinstance(result, Coordinate):
            logger.info("Resolved device position")
            return result

        logger.warning(f"Geolocation error: {result.value}")
        return NeedsManualInput(reason=_POSITION_ERROR_REASONS[result])
