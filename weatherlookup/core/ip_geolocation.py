"""IP-based geolocation, used when the device cannot provide a position."""

import logging
from typing import Optional, Union

import httpx
from pydantic import ValidationError

from weatherlookup.config import settings
from weatherlookup.models.weather import (
    Coordinate,
    LocationFailureReason,
    NeedsManualInput,
)

logger = logging.getLogger(__name__)


class IPGeolocationClient:
    """Looks up an approximate position for the caller's public IP."""

    def __init__(
        self,
        url: Optional[str] = None,
        address_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.ip_geolocation_url
        self.address_url = address_url or settings.ip_geolocation_address_url
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._transport = transport

    def url_for(self, ip: Optional[str] = None) -> str:
        """Lookup URL for a client address, or for our own address when unknown."""
        return self.address_url.format(ip=ip) if ip else self.url

    async def locate(self, ip: Optional[str] = None) -> Union[Coordinate, NeedsManualInput]:
        """Single GET against the geolocation service; never raises."""
        failed = NeedsManualInput(reason=LocationFailureReason.IP_LOOKUP_FAILED)
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.get(self.url_for(ip))

            if response.status_code != 200:
                logger.warning(f"IP geolocation failed with HTTP {response.status_code}")
                return failed

            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"IP fallback failed: {e}")
            return failed

        if not isinstance(data, dict):
            logger.warning("IP geolocation returned an unexpected payload")
            return failed

        try:
            coordinate = Coordinate(
                latitude=data.get("latitude"), longitude=data.get("longitude")
            )
        except ValidationError:
            logger.warning("IP geolocation payload had no usable coordinates")
            return failed

        logger.info("Resolved position from IP geolocation")
        return coordinate
