from __future__ import annotations

import httpx
import pytest

from route_planner.exceptions import (
    AlternativesUnsupportedError,
    ExternalServiceError,
    NoRouteFoundError,
)
from route_planner.services.ors import OpenRouteServiceClient
from route_planner.services.types import GeoPoint

WAYPOINTS = [
    GeoPoint(latitude=30.2672, longitude=-97.7431),
    GeoPoint(latitude=29.7604, longitude=-95.3698),
]
ENDPOINT = "https://ors.test/v2/directions/driving-car/geojson"


def _response(status_code: int, payload) -> httpx.Response:
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", ENDPOINT))


def _feature(distance: float, coordinates: list[list[float]]) -> dict:
    return {
        "type": "Feature",
        "properties": {"summary": {"distance": distance, "duration": distance / 25.0}},
        "geometry": {"type": "LineString", "coordinates": coordinates},
    }


@pytest.fixture
def client(settings) -> OpenRouteServiceClient:
    settings.OPENROUTESERVICE_API_KEY = "test-key"
    settings.ORS_BASE_URL = "https://ors.test/"
    settings.ORS_RETRY_COUNT = 1
    return OpenRouteServiceClient()


def test_parses_routes_and_swaps_coordinates(client, mocker) -> None:
    post = mocker.patch(
        "route_planner.services.ors.httpx.post",
        return_value=_response(
            200,
            {
                "features": [
                    _feature(265_000.0, [[-97.7431, 30.2672], [-96.5, 30.0], [-95.3698, 29.7604]]),
                    _feature(281_000.0, [[-97.7431, 30.2672], [-95.3698, 29.7604]]),
                ]
            },
        ),
    )

    routes = client.directions(WAYPOINTS, alternatives=True)

    assert len(routes) == 2
    assert routes[0].coordinates[1] == (30.0, -96.5)
    assert routes[0].distance_meters == 265_000.0
    assert routes[1].duration_seconds == pytest.approx(281_000.0 / 25.0)
    body = post.call_args.kwargs["json"]
    assert body["coordinates"][0] == [-97.7431, 30.2672]
    assert body["alternative_routes"]["target_count"] == 3
    assert post.call_args.kwargs["headers"]["Authorization"] == "test-key"
    assert post.call_args.args[0] == ENDPOINT


def test_single_route_request_omits_alternatives(client, mocker) -> None:
    post = mocker.patch(
        "route_planner.services.ors.httpx.post",
        return_value=_response(200, {"features": [_feature(1_000.0, [[0.0, 0.0], [0.01, 0.0]])]}),
    )

    client.directions(WAYPOINTS)

    assert "alternative_routes" not in post.call_args.kwargs["json"]


def test_rejected_alternatives_raise_distinct_error(client, mocker) -> None:
    post = mocker.patch(
        "route_planner.services.ors.httpx.post",
        return_value=_response(
            400,
            {
                "error": {
                    "code": 2004,
                    "message": "Request parameters exceed the server configuration limits. "
                    "The approximated route distance must not be greater than 100000.0 meters.",
                }
            },
        ),
    )

    with pytest.raises(AlternativesUnsupportedError):
        client.directions(WAYPOINTS, alternatives=True)
    assert post.call_count == 1


def test_upstream_failures_are_retried_then_surfaced(client, mocker) -> None:
    mocker.patch("route_planner.services.ors.time.sleep")
    post = mocker.patch(
        "route_planner.services.ors.httpx.post",
        return_value=_response(429, {"error": "Rate limit exceeded"}),
    )

    with pytest.raises(ExternalServiceError) as excinfo:
        client.directions(WAYPOINTS, alternatives=True)

    assert not isinstance(excinfo.value, AlternativesUnsupportedError)
    assert post.call_count == 2


def test_empty_feature_list_means_no_route(client, mocker) -> None:
    mocker.patch(
        "route_planner.services.ors.httpx.post", return_value=_response(200, {"features": []})
    )

    with pytest.raises(NoRouteFoundError):
        client.directions(WAYPOINTS)


def test_responses_are_cached(client, mocker) -> None:
    post = mocker.patch(
        "route_planner.services.ors.httpx.post",
        return_value=_response(200, {"features": [_feature(1_000.0, [[0.0, 0.0], [0.01, 0.0]])]}),
    )

    first = client.directions(WAYPOINTS)
    second = client.directions(WAYPOINTS)

    assert first == second
    assert post.call_count == 1


def test_missing_api_key_is_reported(settings) -> None:
    settings.OPENROUTESERVICE_API_KEY = ""

    with pytest.raises(ExternalServiceError):
        OpenRouteServiceClient().directions(WAYPOINTS)


@pytest.mark.parametrize(
    ("status_code", "payload"),
    [
        (404, {"error": {"code": 2010, "message": "Could not find routable point"}}),
        (400, {"error": {"code": 2009, "message": "Route could not be found"}}),
        (404, {"error": "Not found"}),
    ],
)
def test_unroutable_points_raise_no_route_without_retry(
    client, mocker, status_code: int, payload
) -> None:
    mocker.patch("route_planner.services.ors.time.sleep")
    post = mocker.patch(
        "route_planner.services.ors.httpx.post", return_value=_response(status_code, payload)
    )

    with pytest.raises(NoRouteFoundError):
        client.directions(WAYPOINTS)
    assert post.call_count == 1


def test_other_client_errors_are_still_upstream_failures(client, mocker) -> None:
    mocker.patch("route_planner.services.ors.time.sleep")
    mocker.patch(
        "route_planner.services.ors.httpx.post",
        return_value=_response(403, {"error": "Access to this API has been disallowed"}),
    )

    with pytest.raises(ExternalServiceError) as excinfo:
        client.directions(WAYPOINTS)
    assert not isinstance(excinfo.value, NoRouteFoundError)
