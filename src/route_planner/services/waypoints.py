from __future__ import annotations

import logging

from route_planner.services.geo import haversine_miles, miles_to_meters
from route_planner.services.route_index import RouteIndex, point_at_distance
from route_planner.services.station_dataset import StationDataset
from route_planner.services.types import (
    Gap,
    OptimizerSettings,
    StationRecord,
    WaypointCandidate,
)

logger = logging.getLogger(__name__)


def search_radius_miles(corridor_miles: float, optimizer_settings: OptimizerSettings) -> float:
    return min(
        optimizer_settings.search_max_radius_miles,
        max(optimizer_settings.search_min_radius_miles, 2.0 * corridor_miles),
    )


def score_station(
    station: StationRecord, distance_miles: float, optimizer_settings: OptimizerSettings
) -> float:
    """Lower is better: proximity dominates, power and charger count break ties."""
    power_bonus = (station.max_power_kw or 0.0) / optimizer_settings.power_divisor_kw
    count_bonus = min(optimizer_settings.charger_bonus_cap, station.fast_charger_count or 0)
    return distance_miles * optimizer_settings.distance_weight - power_bonus - count_bonus


def find_waypoint_candidates(
    route_index: RouteIndex,
    gaps: list[Gap],
    corridor_miles: float,
    excluded_ids: set[int],
    limit: int,
    dataset: StationDataset,
    optimizer_settings: OptimizerSettings,
) -> list[WaypointCandidate]:
    radius = search_radius_miles(corridor_miles, optimizer_settings)
    seen: set[int] = set()
    candidates: list[WaypointCandidate] = []

    for gap in gaps:
        midpoint = point_at_distance(route_index, miles_to_meters(gap.midpoint_miles))
        for station in dataset.stations_near_point(midpoint, radius):
            if not station.has_fast_charger:
                continue
            if station.station_id in excluded_ids or station.station_id in seen:
                continue

            distance = haversine_miles(
                midpoint.latitude, midpoint.longitude, station.latitude, station.longitude
            )
            if distance > radius:
                continue

            seen.add(station.station_id)
            candidates.append(
                WaypointCandidate(
                    station=station,
                    gap=gap,
                    distance_miles=distance,
                    score=score_station(station, distance, optimizer_settings),
                )
            )

    candidates.sort(key=lambda candidate: candidate.score)
    logger.debug(
        "Found %d waypoint candidates near %d gaps (radius %.1f mi)",
        len(candidates),
        len(gaps),
        radius,
    )
    return candidates[: max(0, limit)]
