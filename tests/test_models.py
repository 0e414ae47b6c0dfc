"""Simple tests for Pydantic models."""

import math

import pytest
from pydantic import ValidationError

from weatherlookup.models.weather import (
    Coordinate,
    InvalidQueryError,
    LocationQuery,
    LocationSource,
    NotFound,
    Units,
    WeatherRequest,
)


def test_coordinate_creation():
    """Test creating a coordinate."""
    coord = Coordinate(latitude=51.5, longitude=-0.12)
    assert coord.latitude == 51.5
    assert coord.longitude == -0.12


@pytest.mark.parametrize(
    "latitude,longitude",
    [(91, 0), (-90.5, 0), (0, 180.1), (0, -181), (math.nan, 0), (0, math.inf)],
)
def test_coordinate_rejects_out_of_range(latitude, longitude):
    """Out-of-range or non-finite values are not coordinates."""
    with pytest.raises(ValidationError):
        Coordinate(latitude=latitude, longitude=longitude)


def test_location_query_is_trimmed():
    """Test that manual input is trimmed."""
    assert LocationQuery.parse("  Paris \n").text == "Paris"


@pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
def test_location_query_rejects_blank(raw):
    """Blank input never becomes a query."""
    with pytest.raises(InvalidQueryError):
        LocationQuery.parse(raw)


def test_weather_request_defaults_to_metric():
    """Test the default unit system."""
    request = WeatherRequest(query=LocationQuery(text="Paris"))
    assert request.units == Units.METRIC
    assert request.is_query


def test_weather_request_needs_exactly_one_target():
    """A request with both or neither target is a programming error."""
    with pytest.raises(ValidationError):
        WeatherRequest()
    with pytest.raises(ValidationError):
        WeatherRequest(
            coordinate=Coordinate(latitude=1, longitude=2),
            query=LocationQuery(text="Paris"),
            source=LocationSource.MANUAL,
        )


def test_outcome_kind_is_fixed():
    """Outcomes carry their discriminator."""
    assert NotFound(query="Paris").kind == "not_found"
