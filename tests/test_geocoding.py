from __future__ import annotations

import httpx
import pytest

from route_planner.exceptions import InvalidLocationError
from route_planner.services.geocoding import GeocodingClient


def _response(payload) -> httpx.Response:
    return httpx.Response(
        200, json=payload, request=httpx.Request("GET", "https://ors.test/geocode/search")
    )


@pytest.fixture
def client(settings) -> GeocodingClient:
    settings.OPENROUTESERVICE_API_KEY = "test-key"
    settings.GEOCODING_BASE_URL = "https://ors.test"
    return GeocodingClient()


def test_geocode_returns_label_and_point(client, mocker) -> None:
    get = mocker.patch(
        "route_planner.services.geocoding.httpx.get",
        return_value=_response(
            {
                "features": [
                    {
                        "geometry": {"coordinates": [-97.7431, 30.2672]},
                        "properties": {"label": "Austin, TX, USA"},
                    }
                ]
            }
        ),
    )

    result = client.geocode("  Austin,   TX ")
    cached = client.geocode("austin, tx")

    assert result.query == "Austin, TX"
    assert result.label == "Austin, TX, USA"
    assert (result.point.latitude, result.point.longitude) == (30.2672, -97.7431)
    assert cached.point == result.point
    assert get.call_count == 1
    assert get.call_args.kwargs["params"] == {"text": "Austin, TX", "size": 1}


def test_geocode_miss_raises_invalid_location(client, mocker) -> None:
    mocker.patch(
        "route_planner.services.geocoding.httpx.get", return_value=_response({"features": []})
    )

    with pytest.raises(InvalidLocationError, match="Atlantis"):
        client.geocode("Atlantis")
