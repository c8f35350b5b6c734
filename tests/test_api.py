from __future__ import annotations

import json

import pytest

from route_planner.exceptions import (
    ExternalServiceError,
    InvalidLocationError,
    NoRouteFoundError,
)
from route_planner.models import ChargingStation
from route_planner.schemas import RoutePlanResponse, RoutePoint, RouteSummaryResponse


@pytest.mark.django_db
def test_health_endpoint_returns_station_counts(api_client) -> None:
    ChargingStation.objects.create(
        id=1,
        station_name="Station",
        city="Austin",
        state="TX",
        latitude=30.1,
        longitude=-97.1,
        ev_dc_fast_num=4,
    )
    ChargingStation.objects.create(
        id=2,
        station_name="Station 2",
        city="Dallas",
        state="TX",
        latitude=32.7,
        longitude=-96.8,
        ev_dc_fast_num=0,
    )

    response = api_client.get("/api/v1/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["stations"]["total"] == 2
    assert payload["stations"]["fast_charging"] == 1


def test_route_plan_validation_error_returns_400(api_client) -> None:
    response = api_client.post(
        "/api/v1/route",
        data=json.dumps({"start": "Austin, TX"}),
        content_type="application/json",
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"]["code"] == "validation_error"


def test_route_plan_rejects_too_many_waypoints(api_client) -> None:
    response = api_client.post(
        "/api/v1/route",
        data=json.dumps(
            {"start": "Austin, TX", "end": "Houston, TX", "waypoints": ["Waco, TX"] * 11}
        ),
        content_type="application/json",
    )

    assert response.status_code == 400


def test_route_plan_rejects_non_object_json(api_client) -> None:
    response = api_client.post("/api/v1/route", data="[1, 2]", content_type="application/json")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_json"


def test_route_plan_success_uses_planner_response(api_client, mocker) -> None:
    fake_response = RoutePlanResponse(
        points=[
            RoutePoint(query="Austin, TX", label="Austin, TX, USA", lat=30.2672, lng=-97.7431),
            RoutePoint(query="Houston, TX", label="Houston, TX, USA", lat=29.7604, lng=-95.3698),
        ],
        summary=RouteSummaryResponse(distance_meters=265_000.0, duration_seconds=9_600.0),
        geometry=[(30.2672, -97.7431), (29.7604, -95.3698)],
        corridor_miles=15.0,
        stations=[],
        auto_waypoints=[],
        preference="fastest",
        requested_preference="charger_optimized",
        candidates_evaluated=1,
        max_gap_miles=164.7,
    )

    planner = mocker.Mock()
    planner.plan.return_value = fake_response
    mocker.patch("route_planner.views.get_route_planner", return_value=planner)

    response = api_client.post(
        "/api/v1/route",
        data=json.dumps(
            {
                "start": "Austin, TX",
                "end": "Houston, TX",
                "preference": "charger_optimized",
                "range_miles": 250,
                "max_detour_factor": 1.3,
            }
        ),
        content_type="application/json",
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["preference"] == "fastest"
    assert payload["requested_preference"] == "charger_optimized"
    assert payload["geometry"][0] == [30.2672, -97.7431]
    route_request = planner.plan.call_args.args[0]
    assert route_request.range_miles == 250
    assert route_request.max_detour_factor == 1.3
    assert route_request.corridor_miles is None


@pytest.mark.parametrize(
    ("error", "status", "code"),
    [
        (InvalidLocationError('Could not geocode: "Atlantis"'), 404, "invalid_location"),
        (NoRouteFoundError("Could not compute route"), 502, "no_route"),
        (ExternalServiceError("OpenRouteService directions request failed"), 502, "upstream_error"),
    ],
)
def test_route_plan_maps_planner_errors(api_client, mocker, error, status, code) -> None:
    planner = mocker.Mock()
    planner.plan.side_effect = error
    mocker.patch("route_planner.views.get_route_planner", return_value=planner)

    response = api_client.post(
        "/api/v1/route",
        data=json.dumps({"start": "Atlantis", "end": "Houston, TX"}),
        content_type="application/json",
    )

    assert response.status_code == status
    assert response.json()["error"] == {"code": code, "message": str(error)}
