from __future__ import annotations

import logging

from django.conf import settings

from route_planner.exceptions import AlternativesUnsupportedError
from route_planner.schemas import (
    AutoWaypointResponse,
    RoutePlanRequest,
    RoutePlanResponse,
    RoutePoint,
    RouteSummaryResponse,
    StationAlongRouteResponse,
)
from route_planner.services.geocoding import GeocodingClient
from route_planner.services.optimization import RouteEvaluator, RouteOptimizer, best_route
from route_planner.services.ors import DirectionsProvider, OpenRouteServiceClient
from route_planner.services.station_dataset import DjangoStationDataset, StationDataset
from route_planner.services.station_selection import StationSelector
from route_planner.services.types import (
    CandidateRoute,
    CorridorStation,
    GeocodeResult,
    OptimizerSettings,
    StationRecord,
)

logger = logging.getLogger(__name__)


class RoutePlannerService:
    def __init__(
        self,
        geocoding_client: GeocodingClient | None = None,
        directions_client: DirectionsProvider | None = None,
        dataset: StationDataset | None = None,
        optimizer_settings: OptimizerSettings | None = None,
    ) -> None:
        self.geocoding_client = geocoding_client or GeocodingClient()
        self.directions_client = directions_client or OpenRouteServiceClient()
        self.dataset = dataset or DjangoStationDataset()
        self.station_selector = StationSelector(self.dataset)
        self.optimizer_settings = optimizer_settings or OptimizerSettings.from_settings()

    def plan(self, request: RoutePlanRequest) -> RoutePlanResponse:
        """Plan a route; auto-waypoints are searched when alternatives were rejected
        or the provider returned a single route.
        """
        corridor_miles = _or_default(request.corridor_miles, settings.DEFAULT_CORRIDOR_MILES)
        range_miles = _or_default(request.range_miles, settings.DEFAULT_RANGE_MILES)
        max_detour_factor = _or_default(
            request.max_detour_factor, settings.DEFAULT_MAX_DETOUR_FACTOR
        )
        target_gap = self.optimizer_settings.target_gap_miles(range_miles)
        optimized = request.preference == "charger_optimized"

        queries = [request.start, *(stop for stop in request.waypoints if stop), request.end]
        points = [self.geocoding_client.geocode(query) for query in queries]
        via_points = tuple(point.point for point in points)

        run_optimizer = False
        try:
            routes = self.directions_client.directions(list(via_points), alternatives=optimized)
        except AlternativesUnsupportedError:
            logger.info("Alternatives unsupported for this trip, falling back to auto-waypoints")
            routes = self.directions_client.directions(list(via_points), alternatives=False)
            run_optimizer = True

        evaluator = RouteEvaluator(self.station_selector, corridor_miles)
        fastest = evaluator.evaluate(routes[0], via_points)
        chosen = fastest
        candidates_evaluated = 1
        auto_waypoints: list[StationRecord] = []

        if optimized:
            max_distance = fastest.distance_meters * max_detour_factor
            alternatives = [
                evaluator.evaluate(route, via_points)
                for route in routes[1:]
                if route.distance_meters <= max_distance
            ]
            candidates_evaluated += len(alternatives)
            chosen = best_route([fastest, *alternatives], target_gap) or fastest

            if run_optimizer or len(routes) == 1:
                optimizer = RouteOptimizer(
                    directions=self.directions_client,
                    station_selector=self.station_selector,
                    dataset=self.dataset,
                    optimizer_settings=self.optimizer_settings,
                )
                result = optimizer.optimize(
                    chosen,
                    corridor_miles=corridor_miles,
                    range_miles=range_miles,
                    max_detour_factor=max_detour_factor,
                )
                chosen = result.route
                auto_waypoints = result.auto_waypoints
                candidates_evaluated += result.candidates_evaluated

        preference_used = (
            "charger_optimized"
            if optimized and (chosen is not fastest or auto_waypoints)
            else "fastest"
        )

        return RoutePlanResponse(
            points=[_route_point(point) for point in points],
            summary=RouteSummaryResponse(
                distance_meters=round(chosen.distance_meters, 1),
                duration_seconds=round(chosen.route.duration_seconds, 1),
            ),
            geometry=chosen.route.coordinates,
            corridor_miles=corridor_miles,
            stations=(
                [_station_response(station) for station in chosen.stations]
                if request.include_stations
                else None
            ),
            auto_waypoints=[
                AutoWaypointResponse(
                    id=station.station_id,
                    station_name=station.station_name,
                    latitude=station.latitude,
                    longitude=station.longitude,
                )
                for station in auto_waypoints
            ],
            preference=preference_used,
            requested_preference=request.preference,
            candidates_evaluated=candidates_evaluated,
            max_gap_miles=round(chosen.max_gap_miles, 3),
            stations_query_degraded=chosen.stations_degraded,
            warning=_coverage_warning(chosen, target_gap, range_miles),
        )


def _or_default(value: float | None, default: float) -> float:
    return float(default) if value is None else float(value)


def _coverage_warning(route: CandidateRoute, target_gap: float, range_miles: float) -> str | None:
    if route.max_gap_miles <= target_gap:
        return None
    return (
        f"Largest charging gap is {route.max_gap_miles:.0f} mi, more than the "
        f"{target_gap:.0f} mi target for a {range_miles:.0f} mi range."
    )


def _route_point(result: GeocodeResult) -> RoutePoint:
    return RoutePoint(
        query=result.query,
        label=result.label,
        lat=result.point.latitude,
        lng=result.point.longitude,
    )


def _station_response(corridor_station: CorridorStation) -> StationAlongRouteResponse:
    station = corridor_station.station
    return StationAlongRouteResponse(
        id=station.station_id,
        station_name=station.station_name,
        street_address=station.street_address,
        city=station.city,
        state=station.state,
        zip=station.zip_code,
        latitude=station.latitude,
        longitude=station.longitude,
        ev_dc_fast_num=station.fast_charger_count,
        ev_connector_types=list(station.connector_types),
        facility_type=station.facility_type,
        status_code=station.status_code,
        ev_pricing=station.ev_pricing,
        access_days_time=station.access_days_time,
        max_power_kw=station.max_power_kw,
        distance_to_route_miles=round(corridor_station.lateral_miles, 3),
        distance_along_route_miles=round(corridor_station.along_route_miles, 3),
        distance_from_prev_miles=round(corridor_station.miles_from_prev, 3),
        distance_to_next_miles=round(corridor_station.miles_to_next, 3),
    )
