from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Preference = Literal["fastest", "charger_optimized"]


class RoutePlanRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    start: str = Field(min_length=1, max_length=300)
    end: str = Field(min_length=1, max_length=300)
    waypoints: list[str] = Field(default_factory=list, max_length=10)
    corridor_miles: float | None = Field(default=None, ge=0.0, le=100.0)
    include_stations: bool = True
    preference: Preference = "charger_optimized"
    range_miles: float | None = Field(default=None, gt=0.0, le=1000.0)
    max_detour_factor: float | None = Field(default=None, ge=1.0, le=3.0)


class RoutePoint(BaseModel):
    query: str
    label: str
    lat: float
    lng: float


class RouteSummaryResponse(BaseModel):
    distance_meters: float
    duration_seconds: float


class StationAlongRouteResponse(BaseModel):
    id: int
    station_name: str
    street_address: str | None
    city: str | None
    state: str | None
    zip: str | None
    latitude: float
    longitude: float
    ev_dc_fast_num: int | None
    ev_connector_types: list[str]
    facility_type: str | None
    status_code: str | None
    ev_pricing: str | None
    access_days_time: str | None
    max_power_kw: float | None
    distance_to_route_miles: float
    distance_along_route_miles: float
    distance_from_prev_miles: float
    distance_to_next_miles: float


class AutoWaypointResponse(BaseModel):
    id: int
    station_name: str
    latitude: float
    longitude: float


class RoutePlanResponse(BaseModel):
    points: list[RoutePoint]
    summary: RouteSummaryResponse
    geometry: list[tuple[float, float]]
    corridor_miles: float
    stations: list[StationAlongRouteResponse] | None = None
    auto_waypoints: list[AutoWaypointResponse]
    preference: Preference
    requested_preference: Preference
    candidates_evaluated: int
    max_gap_miles: float
    stations_query_degraded: bool = False
    warning: str | None = None
