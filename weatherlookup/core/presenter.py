"""Maps lookup outcomes to the display model. No I/O happens here."""

import math
from typing import Iterable, Optional

from weatherlookup.config import settings
from weatherlookup.models.lookup import DisplayModel, LookupState
from weatherlookup.models.weather import (
    LocationFailureReason,
    LocationSource,
    OutcomeStatus,
    Success,
    Units,
    UpstreamError,
    WeatherResult,
)

NOT_AVAILABLE = "N/A"

MESSAGES = {
    "not_found": "Location not found. Try a different city.",
    "unauthorized": (
        "Invalid API key (401). Check your API key and whether you are using a proxy."
    ),
    "network_error": "Network or parsing error retrieving weather.",
    "permission_denied": (
        "Location permission is denied. Enable it in your browser settings "
        "or enter a city or postal code."
    ),
    "location_unavailable": (
        "Unable to determine location. Please enter a city or postal code."
    ),
}
INVALID_QUERY_MESSAGE = "Please enter a city or postal code."

HINTS = {
    LocationFailureReason.PERMISSION_UNSUPPORTED: "Geolocation is not supported by this browser.",
    LocationFailureReason.PERMISSION_DENIED: (
        "User denied Geolocation. You can allow location in your browser "
        "or enter a city below."
    ),
    LocationFailureReason.POSITION_TIMEOUT: "Location request timed out.",
    LocationFailureReason.POSITION_UNAVAILABLE: "Unable to retrieve device location.",
    LocationFailureReason.IP_LOOKUP_FAILED: "IP-based location lookup failed.",
}

TEMPERATURE_GLYPHS = {Units.METRIC: "°C", Units.IMPERIAL: "°F"}
WIND_UNITS = {Units.METRIC: "m/s", Units.IMPERIAL: "mph"}


def format_temperature(value: Optional[float], units: Units) -> str:
    """Whole degrees with the unit glyph, e.g. ``15°C``."""
    if value is None:
        return NOT_AVAILABLE
    # halves round up, never to even
    return f"{math.floor(value + 0.5)}{TEMPERATURE_GLYPHS[units]}"


def _format_measure(value: Optional[float], suffix: str) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:g}{suffix}"


def location_label(result: WeatherResult) -> str:
    if result.name:
        return f"{result.name}, {result.country}" if result.country else result.name
    if result.latitude is not None and result.longitude is not None:
        return f"({result.latitude:.2f}, {result.longitude:.2f})"
    return "Unknown"


def icon_url(icon: Optional[str]) -> Optional[str]:
    if not icon:
        return None
    return f"{settings.icon_base_url}/{icon}@2x.png"


def _hint(reasons: Iterable[LocationFailureReason]) -> Optional[str]:
    hints = [HINTS[reason] for reason in reasons]
    return " ".join(hints) if hints else None


def present(
    outcome: OutcomeStatus,
    units: Units = Units.METRIC,
    source: Optional[LocationSource] = None,
) -> DisplayModel:
    """Build the display model for a finished lookup."""
    if isinstance(outcome, Success):
        result = outcome.result
        temperature = format_temperature(result.temperature, units)
        summary = f"{result.condition or 'Weather'} - {temperature}"
        if result.description:
            summary += f" ({result.description})"

        return DisplayModel(
            state=LookupState.DISPLAYING,
            show_result=True,
            units=units,
            source=outcome.source or source,
            location_name=location_label(result),
            summary=summary,
            condition=result.condition,
            description=result.description,
            icon_url=icon_url(result.icon),
            temperature=temperature,
            feels_like=format_temperature(result.feels_like, units),
            humidity=_format_measure(result.humidity, "%"),
            pressure=_format_measure(result.pressure, " hPa"),
            wind_speed=_format_measure(result.wind_speed, f" {WIND_UNITS[units]}"),
        )

    if isinstance(outcome, UpstreamError):
        message = f"Weather API error: {outcome.status_code} {outcome.message}".strip()
    else:
        message = MESSAGES[outcome.kind]

    reasons = list(getattr(outcome, "reasons", []))
    return DisplayModel(
        state=LookupState.SHOWING_ERROR,
        show_result=False,
        message=message,
        message_type="error",
        hint=_hint(reasons),
        requires_manual_input=getattr(outcome, "requires_manual_input", False),
        reasons=reasons,
        units=units,
        source=source,
    )


def present_invalid_query(units: Units = Units.METRIC) -> DisplayModel:
    """Display model for an empty manual query, produced before any fetch."""
    return DisplayModel(
        state=LookupState.SHOWING_ERROR,
        show_result=False,
        message=INVALID_QUERY_MESSAGE,
        message_type="error",
        requires_manual_input=True,
        units=units,
        source=LocationSource.MANUAL,
    )
