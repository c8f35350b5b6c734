from __future__ import annotations

import logging
from typing import Iterable, Protocol

from django.conf import settings
from django.db import DatabaseError, transaction

from route_planner.models import ChargingStation
from route_planner.services.geo import (
    Bounds,
    compute_bounds,
    haversine_miles,
    miles_to_meters,
)
from route_planner.services.types import GeoPoint, StationQueryResult, StationRecord

logger = logging.getLogger(__name__)


class StationDataset(Protocol):
    def stations_in_bounds(self, bounds: Bounds) -> list[StationRecord]: ...

    def stations_near_path(
        self, geometry: list[tuple[float, float]], corridor_meters: float
    ) -> StationQueryResult: ...

    def stations_near_point(self, point: GeoPoint, radius_miles: float) -> list[StationRecord]: ...


def station_record_from_model(station: ChargingStation) -> StationRecord:
    connector_types = station.ev_connector_types or []
    return StationRecord(
        station_id=station.id,
        station_name=station.station_name,
        latitude=station.latitude,
        longitude=station.longitude,
        fast_charger_count=station.ev_dc_fast_num,
        max_power_kw=station.max_power_kw,
        facility_type=station.facility_type,
        status_code=station.status_code,
        street_address=station.street_address,
        city=station.city,
        state=station.state,
        zip_code=station.zip,
        connector_types=tuple(str(value) for value in connector_types),
        ev_pricing=station.ev_pricing,
        access_days_time=station.access_days_time,
    )


class DjangoStationDataset:
    """Station queries against the ``ChargingStation`` table.

    ``stations_near_path`` asks PostGIS for stations within a geodesic distance of
    the route line. Databases without PostGIS reject that query; the bounding box
    around the padded route is used instead and the result is flagged ``degraded``
    so callers know the candidate set was not pre-filtered by true distance.
    """

    def __init__(self, use_geodesic_query: bool | None = None) -> None:
        if use_geodesic_query is None:
            use_geodesic_query = settings.STATION_GEODESIC_QUERY
        self.use_geodesic_query = use_geodesic_query

    def stations_in_bounds(self, bounds: Bounds) -> list[StationRecord]:
        queryset = ChargingStation.objects.filter(
            latitude__gte=bounds.min_lat,
            latitude__lte=bounds.max_lat,
            longitude__gte=bounds.min_lng,
            longitude__lte=bounds.max_lng,
        )
        return [
            station_record_from_model(station) for station in queryset.iterator(chunk_size=1000)
        ]

    def stations_near_path(
        self, geometry: list[tuple[float, float]], corridor_meters: float
    ) -> StationQueryResult:
        if self.use_geodesic_query and len(geometry) >= 2:
            try:
                return StationQueryResult(
                    stations=self._stations_within_line_distance(geometry, corridor_meters)
                )
            except DatabaseError as exc:
                logger.warning(
                    "Geodesic station query unavailable, using bounding box: %s", exc
                )

        bounds = compute_bounds(geometry, corridor_meters)
        return StationQueryResult(stations=self.stations_in_bounds(bounds), degraded=True)

    def stations_near_point(self, point: GeoPoint, radius_miles: float) -> list[StationRecord]:
        bounds = compute_bounds([(point.latitude, point.longitude)], miles_to_meters(radius_miles))
        return [
            station
            for station in self.stations_in_bounds(bounds)
            if haversine_miles(point.latitude, point.longitude, station.latitude, station.longitude)
            <= radius_miles
        ]

    @staticmethod
    def _stations_within_line_distance(
        geometry: list[tuple[float, float]], corridor_meters: float
    ) -> list[StationRecord]:
        line_wkt = "LINESTRING({})".format(
            ", ".join(f"{lng:.6f} {lat:.6f}" for lat, lng in geometry)
        )
        table = ChargingStation._meta.db_table
        sql = (
            f"SELECT * FROM {table} "
            "WHERE ST_DWithin("
            "ST_SetSRID(ST_MakePoint(longitude, latitude), 4326)::geography, "
            "ST_GeomFromText(%s, 4326)::geography, %s)"
        )
        # Savepoint keeps a failed statement from poisoning the outer transaction.
        with transaction.atomic():
            rows = list(ChargingStation.objects.raw(sql, [line_wkt, corridor_meters]))
        return [station_record_from_model(station) for station in rows]


class InMemoryStationDataset:
    """Plain scan over preloaded station records."""

    def __init__(self, stations: Iterable[StationRecord]) -> None:
        self.stations = list(stations)

    def stations_in_bounds(self, bounds: Bounds) -> list[StationRecord]:
        return [
            station
            for station in self.stations
            if bounds.contains(station.latitude, station.longitude)
        ]

    def stations_near_path(
        self, geometry: list[tuple[float, float]], corridor_meters: float
    ) -> StationQueryResult:
        return StationQueryResult(
            stations=self.stations_in_bounds(compute_bounds(geometry, corridor_meters))
        )

    def stations_near_point(self, point: GeoPoint, radius_miles: float) -> list[StationRecord]:
        return [
            station
            for station in self.stations
            if haversine_miles(point.latitude, point.longitude, station.latitude, station.longitude)
            <= radius_miles
        ]
