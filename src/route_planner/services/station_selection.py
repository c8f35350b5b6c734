from __future__ import annotations

import logging
from dataclasses import replace

from route_planner.services.geo import meters_to_miles, miles_to_meters
from route_planner.services.route_index import RouteIndex, build_route_index, project_point
from route_planner.services.station_dataset import DjangoStationDataset, StationDataset
from route_planner.services.types import CorridorResult, CorridorStation, StationRecord

logger = logging.getLogger(__name__)


class StationSelector:
    def __init__(self, dataset: StationDataset | None = None) -> None:
        self.dataset = dataset or DjangoStationDataset()

    def select_corridor_stations(
        self,
        geometry: list[tuple[float, float]],
        route_distance_meters: float,
        corridor_miles: float,
        route_index: RouteIndex | None = None,
    ) -> CorridorResult:
        if len(geometry) < 2:
            return CorridorResult(stations=[])

        if route_index is None:
            route_index = build_route_index(geometry, route_distance_meters)
        if route_index.is_empty:
            logger.debug("Route geometry has no measurable segments, no corridor stations")
            return CorridorResult(stations=[])

        corridor_meters = miles_to_meters(corridor_miles)
        query = self.dataset.stations_near_path(geometry, corridor_meters)

        candidates: list[CorridorStation] = []
        for station in query.stations:
            if not station.has_fast_charger:
                continue
            candidate = self._project_station(station, route_index, corridor_meters)
            if candidate is not None:
                candidates.append(candidate)

        stations = self._annotate_neighbors(candidates, meters_to_miles(route_distance_meters))
        return CorridorResult(stations=stations, degraded=query.degraded)

    @staticmethod
    def _project_station(
        station: StationRecord, route_index: RouteIndex, corridor_meters: float
    ) -> CorridorStation | None:
        projection = project_point(route_index, station.latitude, station.longitude)
        if projection.distance_to_route_meters > corridor_meters:
            return None

        return CorridorStation(
            station=station,
            lateral_miles=meters_to_miles(projection.distance_to_route_meters),
            along_route_miles=meters_to_miles(projection.distance_along_route_meters),
        )

    @staticmethod
    def _annotate_neighbors(
        candidates: list[CorridorStation], total_miles: float
    ) -> list[CorridorStation]:
        ordered = sorted(candidates, key=lambda candidate: candidate.along_route_miles)

        annotated: list[CorridorStation] = []
        for index, current in enumerate(ordered):
            prev_miles = ordered[index - 1].along_route_miles if index > 0 else 0.0
            next_miles = (
                ordered[index + 1].along_route_miles if index < len(ordered) - 1 else total_miles
            )
            annotated.append(
                replace(
                    current,
                    miles_from_prev=max(0.0, current.along_route_miles - prev_miles),
                    miles_to_next=max(0.0, next_miles - current.along_route_miles),
                )
            )
        return annotated
