"""Client for fetching current weather from OpenWeather, directly or via the relay."""

import logging
from typing import Any, Dict, Optional

import httpx

from weatherlookup.config import Settings, settings as default_settings
from weatherlookup.models.weather import (
    Coordinate,
    LocationQuery,
    LocationSource,
    NetworkError,
    NotFound,
    OutcomeStatus,
    Success,
    Unauthorized,
    Units,
    UpstreamError,
    WeatherRequest,
    WeatherResult,
)

logger = logging.getLogger(__name__)
# httpx logs full request URLs at INFO, appid included
logging.getLogger("httpx").setLevel(logging.WARNING)

REDACTED = "***"


def _number(value: Any) -> Optional[float]:
    """Numeric upstream value, or None when absent or not a number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def normalize_weather(data: Dict[str, Any]) -> WeatherResult:
    """Map an OpenWeather current-weather payload to a WeatherResult."""
    main = _section(data, "main")
    wind = _section(data, "wind")
    sys_info = _section(data, "sys")
    coord = _section(data, "coord")

    weather_list = data.get("weather")
    weather = {}
    if isinstance(weather_list, list) and weather_list and isinstance(weather_list[0], dict):
        weather = weather_list[0]

    return WeatherResult(
        name=_text(data.get("name")),
        country=_text(sys_info.get("country")),
        latitude=_number(coord.get("lat")),
        longitude=_number(coord.get("lon")),
        condition=_text(weather.get("main")),
        description=_text(weather.get("description")),
        icon=_text(weather.get("icon")),
        temperature=_number(main.get("temp")),
        feels_like=_number(main.get("feels_like")),
        humidity=_number(main.get("humidity")),
        pressure=_number(main.get("pressure")),
        wind_speed=_number(wind.get("speed")),
    )


class WeatherFetcher:
    """Builds the weather URL for the configured mode and classifies the response."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        server_side: bool = False,
    ):
        self.config = config or default_settings
        self._transport = transport
        # server-side fetchers hold the key and call OpenWeather directly
        self.server_side = server_side

    @property
    def proxied(self) -> bool:
        return self.config.use_proxy and not self.server_side

    def build_url(self, request: WeatherRequest) -> httpx.URL:
        """Request URL for one lookup; the key is only attached in direct mode."""
        params: Dict[str, str] = {}
        if request.coordinate is not None:
            params["lat"] = str(request.coordinate.latitude)
            params["lon"] = str(request.coordinate.longitude)
        else:
            params["q"] = request.query.text
        params["units"] = request.units.value

        if self.proxied:
            return httpx.URL(self.config.relay_url, params=params)

        params["appid"] = self.config.openweather_api_key or ""
        return httpx.URL(f"{self.config.openweather_base_url}/weather", params=params)

    @staticmethod
    def redact(url: httpx.URL) -> str:
        """URL safe for logs."""
        if "appid" in url.params:
            url = url.copy_set_param("appid", REDACTED)
        return str(url)

    async def fetch_by_coordinate(
        self,
        coordinate: Coordinate,
        units: Units = Units.METRIC,
        source: LocationSource = LocationSource.DEVICE,
    ) -> OutcomeStatus:
        """Current weather at a coordinate pair."""
        request = WeatherRequest(coordinate=coordinate, units=units, source=source)
        return await self.fetch(request)

    async def fetch_by_query(
        self, query: LocationQuery, units: Units = Units.METRIC
    ) -> OutcomeStatus:
        """Current weather for a city name or postal code."""
        request = WeatherRequest(query=query, units=units, source=LocationSource.MANUAL)
        return await self.fetch(request)

    async def fetch(self, request: WeatherRequest) -> OutcomeStatus:
        """Perform exactly one call and turn whatever happens into an outcome."""
        url = self.build_url(request)
        safe_url = self.redact(url)
        source = request.source.value if request.source else "unknown"

        if not self.proxied and not self.server_side:
            logger.warning(
                "Direct OpenWeather mode: the API key travels with every client request"
            )
        logger.info(f"Fetching weather ({source}) from {safe_url}")

        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.config.request_timeout_seconds
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Weather request to {safe_url} failed: {e}", exc_info=True)
            return NetworkError(message=f"{type(e).__name__}: {e}")

        return self._classify(request, response)

    def _classify(self, request: WeatherRequest, response: httpx.Response) -> OutcomeStatus:
        status = response.status_code

        if status == 401:
            logger.error(f"Weather API returned 401. Response body: {response.text}")
            return Unauthorized()

        if status == 404 and request.is_query:
            logger.info(f"Location not found for query '{request.query.text}'")
            return NotFound(query=request.query.text)

        if not response.is_success:
            logger.error(
                f"Weather API error: {status} {response.reason_phrase} {response.text}"
            )
            return UpstreamError(status_code=status, message=response.reason_phrase)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Weather API returned malformed JSON: {e}")
            return NetworkError(message="Malformed JSON in weather response")

        if not isinstance(data, dict):
            logger.error("Weather API returned a non-object JSON body")
            return NetworkError(message="Unexpected weather response shape")

        return Success(result=normalize_weather(data), source=request.source)
