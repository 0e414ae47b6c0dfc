"""Tests for device location resolution and the IP fallback client."""

import asyncio

import httpx
import pytest

from weatherlookup.core.ip_geolocation import IPGeolocationClient
from weatherlookup.core.location import (
    GEOLOCATION_TIMEOUT_SECONDS,
    LocationResolver,
    ReportedLocationProvider,
    UnavailableLocationProvider,
)
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


class FakeProvider:
    """Scriptable location provider."""

    def __init__(self, available=True, permission=None, position=None, permission_error=None):
        self.available = available
        self.permission = permission
        self.position = position
        self.permission_error = permission_error
        self.calls = []

    @property
    def is_available(self):
        return self.available

    async def query_permission(self):
        if self.permission_error is not None:
            raise self.permission_error
        return self.permission

    async def request_position(self, timeout, high_accuracy):
        self.calls.append((timeout, high_accuracy))
        return self.position


def resolve(provider):
    return asyncio.run(LocationResolver(provider).resolve())


def test_unsupported_platform_needs_manual_input():
    """No geolocation capability at all."""
    result = resolve(UnavailableLocationProvider())
    assert result == NeedsManualInput(reason=LocationFailureReason.PERMISSION_UNSUPPORTED)


def test_denied_permission_never_requests_position():
    """A denied permission short-circuits before the position request."""
    provider = FakeProvider(
        permission=PermissionState.DENIED, position=Coordinate(latitude=1, longitude=1)
    )
    result = resolve(provider)
    assert result.reason == LocationFailureReason.PERMISSION_DENIED
    assert provider.calls == []


@pytest.mark.parametrize("permission", [PermissionState.GRANTED, PermissionState.PROMPT, None])
def test_position_requested_with_fixed_timeout(permission):
    """Granted, prompt and unknown permission states all ask for the position."""
    coord = Coordinate(latitude=48.85, longitude=2.35)
    provider = FakeProvider(permission=permission, position=coord)

    assert resolve(provider) == coord
    assert provider.calls == [(GEOLOCATION_TIMEOUT_SECONDS, True)]


def test_failing_permission_query_is_treated_as_unsupported_query():
    """An exception from the permission query does not stop the request."""
    coord = Coordinate(latitude=1, longitude=2)
    provider = FakeProvider(position=coord, permission_error=RuntimeError("no permissions API"))
    assert resolve(provider) == coord


@pytest.mark.parametrize(
    "error,reason",
    [
        (PositionError.PERMISSION_DENIED, LocationFailureReason.PERMISSION_DENIED),
        (PositionError.TIMEOUT, LocationFailureReason.POSITION_TIMEOUT),
        (PositionError.POSITION_UNAVAILABLE, LocationFailureReason.POSITION_UNAVAILABLE),
    ],
)
def test_position_errors_map_to_reasons(error, reason):
    """Each position error is tagged with its own reason."""
    result = resolve(FakeProvider(permission=PermissionState.PROMPT, position=error))
    assert result == NeedsManualInput(reason=reason)


def test_reported_provider_replays_report():
    """A browser report drives the resolver like a real device."""
    report = DeviceLocationReport(
        permission=PermissionState.GRANTED,
        position=Coordinate(latitude=40.71, longitude=-74.0),
    )
    provider = ReportedLocationProvider(report)

    assert resolve(provider) == report.position
    assert provider.position_requested


def test_reported_provider_denied_is_not_requested():
    """A denied report never touches the position request."""
    provider = ReportedLocationProvider(
        DeviceLocationReport(permission=PermissionState.DENIED)
    )
    resolve(provider)
    assert not provider.position_requested


def ip_client(handler):
    return IPGeolocationClient(
        url="https://ip.test/json/", timeout=1.0, transport=httpx.MockTransport(handler)
    )


def test_ip_lookup_success():
    """A valid payload yields a coordinate."""
    client = ip_client(
        lambda request: httpx.Response(200, json={"latitude": 52.52, "longitude": 13.4})
    )
    assert asyncio.run(client.locate()) == Coordinate(latitude=52.52, longitude=13.4)


def _raise_connect_error(request):
    raise httpx.ConnectError("dns failure")


@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(429, json={"error": True}),
        lambda request: httpx.Response(200, text="not json"),
        lambda request: httpx.Response(200, json={"city": "Berlin"}),
        lambda request: httpx.Response(200, json={"latitude": 200, "longitude": 0}),
        lambda request: httpx.Response(200, json=["latitude", "longitude"]),
        _raise_connect_error,
    ],
)
def test_ip_lookup_failures(handler):
    """Any failure becomes an IP lookup failure, never an exception."""
    result = asyncio.run(ip_client(handler).locate())
    assert result == NeedsManualInput(reason=LocationFailureReason.IP_LOOKUP_FAILED)


def test_ip_lookup_targets_client_address():
    """A known client address is looked up instead of our own."""
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json={"latitude": 40.7, "longitude": -74.0})

    client = IPGeolocationClient(
        url="https://ip.test/json/",
        address_url="https://ip.test/{ip}/json/",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )

    assert asyncio.run(client.locate("198.51.100.9")) == Coordinate(latitude=40.7, longitude=-74.0)
    asyncio.run(client.locate())

    assert str(seen[0]) == "https://ip.test/198.51.100.9/json/"
    assert str(seen[1]) == "https://ip.test/json/"
