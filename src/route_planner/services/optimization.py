from __future__ import annotations

import enum
import logging

from route_planner.exceptions import NoRouteFoundError
from route_planner.services.gaps import largest_gaps, max_gap_miles
from route_planner.services.geo import meters_to_miles
from route_planner.services.ors import DirectionsProvider
from route_planner.services.route_index import RouteIndex, build_route_index, project_point
from route_planner.services.station_dataset import StationDataset
from route_planner.services.station_selection import StationSelector
from route_planner.services.types import (
    CandidateRoute,
    GeoPoint,
    OptimizationResult,
    OptimizerSettings,
    RouteData,
    StationRecord,
    WaypointCandidate,
)
from route_planner.services.waypoints import find_waypoint_candidates

logger = logging.getLogger(__name__)


def route_rank_key(candidate: CandidateRoute, target_gap_miles: float) -> tuple[float, ...]:
    """Sort key for candidate routes; smaller keys rank higher.

    A route whose largest gap fits within the target always outranks one that
    does not. Among routes meeting the target, more corridor stations win; among
    routes missing it, the smaller largest gap wins. Distance breaks the last tie.
    """
    if candidate.max_gap_miles <= target_gap_miles:
        return (0, -candidate.station_count, candidate.max_gap_miles, candidate.distance_meters)
    return (1, candidate.max_gap_miles, -candidate.station_count, candidate.distance_meters)


def is_better_route(
    candidate: CandidateRoute, incumbent: CandidateRoute, target_gap_miles: float
) -> bool:
    return route_rank_key(candidate, target_gap_miles) < route_rank_key(
        incumbent, target_gap_miles
    )


def best_route(
    candidates: list[CandidateRoute], target_gap_miles: float
) -> CandidateRoute | None:
    if not candidates:
        return None
    return min(candidates, key=lambda candidate: route_rank_key(candidate, target_gap_miles))


class RouteEvaluator:
    def __init__(self, station_selector: StationSelector, corridor_miles: float) -> None:
        self.station_selector = station_selector
        self.corridor_miles = corridor_miles

    def evaluate(
        self,
        route: RouteData,
        via_points: tuple[GeoPoint, ...],
        auto_waypoint: StationRecord | None = None,
    ) -> CandidateRoute:
        route_index = build_route_index(route.coordinates, route.distance_meters)
        corridor = self.station_selector.select_corridor_stations(
            geometry=route.coordinates,
            route_distance_meters=route.distance_meters,
            corridor_miles=self.corridor_miles,
            route_index=route_index,
        )
        return CandidateRoute(
            route=route,
            stations=corridor.stations,
            max_gap_miles=max_gap_miles(corridor.stations, route.distance_miles),
            via_points=via_points,
            auto_waypoint=auto_waypoint,
            stations_degraded=corridor.degraded,
        )


class OptimizerState(enum.Enum):
    BASE = "base"
    ITERATE = "iterate"
    DONE = "done"


class RouteOptimizer:
    """Bounded greedy search for a route with better charger coverage.

    Each round looks for stations near the largest coverage gaps, asks the
    directions provider for a route through each one, and adopts the best
    candidate if it strictly improves on the current route. Routes longer than
    the base distance times the detour factor are never considered.
    """

    def __init__(
        self,
        directions: DirectionsProvider,
        station_selector: StationSelector,
        dataset: StationDataset,
        optimizer_settings: OptimizerSettings | None = None,
    ) -> None:
        self.directions = directions
        self.station_selector = station_selector
        self.dataset = dataset
        self.settings = optimizer_settings or OptimizerSettings()

    def optimize(
        self,
        base: CandidateRoute,
        *,
        corridor_miles: float,
        range_miles: float,
        max_detour_factor: float,
    ) -> OptimizationResult:
        evaluator = RouteEvaluator(self.station_selector, corridor_miles)
        target_gap = self.settings.target_gap_miles(range_miles)
        max_distance = base.distance_meters * max_detour_factor

        state = OptimizerState.BASE
        current = base
        current_index: RouteIndex | None = None
        auto_waypoints: list[StationRecord] = []
        candidates_evaluated = 0
        directions_calls = 0
        iterations = 0

        while state is not OptimizerState.DONE:
            if state is OptimizerState.BASE:
                current_index = _route_index(current)
                state = OptimizerState.ITERATE
                continue

            if iterations >= self.settings.max_iterations:
                state = OptimizerState.DONE
                continue
            if current.max_gap_miles <= target_gap or current_index.is_empty:
                state = OptimizerState.DONE
                continue

            iterations += 1
            excluded = {station.station.station_id for station in current.stations}
            excluded.update(waypoint.station_id for waypoint in auto_waypoints)
            candidates = find_waypoint_candidates(
                route_index=current_index,
                gaps=largest_gaps(
                    current.stations, current.route.distance_miles, self.settings.target_gap_count
                ),
                corridor_miles=corridor_miles,
                excluded_ids=excluded,
                limit=self.settings.candidate_limit,
                dataset=self.dataset,
                optimizer_settings=self.settings,
            )
            if not candidates:
                logger.info("No waypoint candidates near the largest gaps, stopping")
                state = OptimizerState.DONE
                continue

            contenders: list[CandidateRoute] = []
            for candidate in candidates:
                via_points = self._insert_waypoint(current.via_points, candidate, current_index)
                if via_points is None:
                    continue

                directions_calls += 1
                try:
                    route = self.directions.directions(list(via_points), alternatives=False)[0]
                except NoRouteFoundError:
                    logger.debug("No route through station %s", candidate.station.station_id)
                    continue

                if route.distance_meters > max_distance:
                    logger.debug(
                        "Rejected station %s: %.0f m exceeds detour cap %.0f m",
                        candidate.station.station_id,
                        route.distance_meters,
                        max_distance,
                    )
                    continue

                contenders.append(evaluator.evaluate(route, via_points, candidate.station))

            candidates_evaluated += len(contenders)
            winner = best_route(contenders, target_gap)
            if winner is None or not is_better_route(winner, current, target_gap):
                state = OptimizerState.DONE
                continue

            logger.info(
                "Adopted auto-waypoint %s: max gap %.1f -> %.1f mi",
                winner.auto_waypoint.station_id,
                current.max_gap_miles,
                winner.max_gap_miles,
            )
            auto_waypoints.append(winner.auto_waypoint)
            current = winner
            current_index = _route_index(current)

        return OptimizationResult(
            route=current,
            auto_waypoints=auto_waypoints,
            candidates_evaluated=candidates_evaluated,
            directions_calls=directions_calls,
            iterations=iterations,
            target_gap_miles=target_gap,
        )

    @staticmethod
    def _insert_waypoint(
        via_points: tuple[GeoPoint, ...],
        candidate: WaypointCandidate,
        route_index: RouteIndex,
    ) -> tuple[GeoPoint, ...] | None:
        position = len(via_points) - 1
        for index, point in enumerate(via_points):
            projection = project_point(route_index, point.latitude, point.longitude)
            along_miles = meters_to_miles(projection.distance_along_route_meters)
            if along_miles > candidate.gap.midpoint_miles:
                position = max(1, index)
                break

        waypoint = candidate.station.point
        if via_points[position - 1] == waypoint or via_points[position] == waypoint:
            return None
        return (*via_points[:position], waypoint, *via_points[position:])


def _route_index(candidate: CandidateRoute) -> RouteIndex:
    return build_route_index(candidate.route.coordinates, candidate.distance_meters)
