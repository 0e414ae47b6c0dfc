"""Orchestrates location resolution, weather retrieval and presentation."""

import logging
from dataclasses import dataclass
from typing import Optional

from weatherlookup.core.ip_geolocation import IPGeolocationClient
from weatherlookup.core.location import LocationProvider, LocationResolver
from weatherlookup.core.presenter import present
from weatherlookup.core.weather_api import WeatherFetcher
from weatherlookup.models.lookup import DisplayModel, LookupState
from weatherlookup.models.weather import (
    Coordinate,
    LocationFailureReason,
    LocationQuery,
    LocationSource,
    LocationUnavailable,
    OutcomeStatus,
    PermissionDenied,
    Success,
    Units,
    WeatherRequest,
)

logger = logging.getLogger(__name__)


class ActionTracker:
    """Hands out one generation token per user action.

    Only the most recent action may update what is displayed; results of
    older actions that finish later are discarded.
    """

    def __init__(self):
        self.generation = 0
        self.state = LookupState.IDLE

    def begin(self) -> int:
        """Start a new action, superseding any in flight."""
        self.generation += 1
        self.state = LookupState.IDLE
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation

    def advance(self, token: int, state: LookupState):
        """Record a state transition if the action is still the latest."""
        if self.is_current(token):
            self.state = state


@dataclass
class LookupResult:
    """Everything a caller needs after one action finished."""

    generation: int
    outcome: OutcomeStatus
    display: DisplayModel
    request: Optional[WeatherRequest] = None
    superseded: bool = False

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, Success)


class WeatherLookup:
    """Device location, IP fallback, then weather; or weather for a typed query."""

    def __init__(
        self,
        fetcher: Optional[WeatherFetcher] = None,
        ip_client: Optional[IPGeolocationClient] = None,
    ):
        self.fetcher = fetcher or WeatherFetcher()
        self.ip_client = ip_client or IPGeolocationClient()

    async def lookup_current_location(
        self,
        provider: LocationProvider,
        units: Units = Units.METRIC,
        tracker: Optional[ActionTracker] = None,
        client_ip: Optional[str] = None,
    ) -> LookupResult:
        """Automatic path. Stops at a manual-input outcome if no position is found.

        ``client_ip`` is the address the IP fallback locates; None locates
        the host running this code.
        """
        tracker = tracker or ActionTracker()
        token = tracker.begin()
        tracker.advance(token, LookupState.RESOLVING)
        logger.info(f"Action {token}: resolving device location")

        resolved = await LocationResolver(provider).resolve()
        source = LocationSource.DEVICE
        reasons = []

        if not isinstance(resolved, Coordinate):
            reasons.append(resolved.reason)
            logger.info(f"Action {token}: falling back to IP-based location")
            resolved = await self.ip_client.locate(client_ip)
            source = LocationSource.IP
            if not isinstance(resolved, Coordinate):
                reasons.append(resolved.reason)

        if not isinstance(resolved, Coordinate):
            logger.warning(
                f"Action {token}: unable to determine location "
                f"({', '.join(reason.value for reason in reasons)})"
            )
            return self._finish(tracker, token, self._location_failure(reasons), units)

        request = WeatherRequest(coordinate=resolved, units=units, source=source)
        return await self._fetch(tracker, token, request)

    async def lookup_query(
        self,
        text: Optional[str],
        units: Units = Units.METRIC,
        tracker: Optional[ActionTracker] = None,
    ) -> LookupResult:
        """Manual path. Raises InvalidQueryError for blank input, before any fetch."""
        query = LocationQuery.parse(text)
        tracker = tracker or ActionTracker()
        token = tracker.begin()
        request = WeatherRequest(query=query, units=units, source=LocationSource.MANUAL)
        return await self._fetch(tracker, token, request)

    async def refresh(
        self,
        request: WeatherRequest,
        units: Units,
        tracker: Optional[ActionTracker] = None,
    ) -> LookupResult:
        """Re-issue a previous request in another unit system."""
        tracker = tracker or ActionTracker()
        token = tracker.begin()
        return await self._fetch(tracker, token, request.model_copy(update={"units": units}))

    async def _fetch(
        self, tracker: ActionTracker, token: int, request: WeatherRequest
    ) -> LookupResult:
        tracker.advance(token, LookupState.FETCHING)
        outcome = await self.fetcher.fetch(request)
        return self._finish(tracker, token, outcome, request.units, request)

    @staticmethod
    def _location_failure(reasons) -> OutcomeStatus:
        if LocationFailureReason.PERMISSION_DENIED in reasons:
            return PermissionDenied(reasons=reasons)
        return LocationUnavailable(reasons=reasons)

    @staticmethod
    def _finish(
        tracker: ActionTracker,
        token: int,
        outcome: OutcomeStatus,
        units: Units,
        request: Optional[WeatherRequest] = None,
    ) -> LookupResult:
        source = request.source if request else None
        display = present(outcome, units, source)
        superseded = not tracker.is_current(token)
        if superseded:
            logger.info(f"Action {token} finished after a newer action; discarding result")
        else:
            tracker.advance(token, display.state)
            logger.info(f"Action {token}: {outcome.kind}")

        return LookupResult(
            generation=token,
            outcome=outcome,
            display=display,
            request=request,
            superseded=superseded,
        )
