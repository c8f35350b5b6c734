from __future__ import annotations

import bisect
import math
from dataclasses import dataclass

from route_planner.exceptions import DegenerateRouteError
from route_planner.services.geo import EARTH_RADIUS_METERS
from route_planner.services.types import GeoPoint


@dataclass(slots=True, frozen=True)
class RouteSegment:
    start_lat_rad: float
    start_lng_rad: float
    cos_lat: float
    dx: float
    dy: float
    length: float
    length_sq: float
    cum_start: float


@dataclass(slots=True, frozen=True)
class Projection:
    distance_to_route_meters: float
    distance_along_route_meters: float


@dataclass(slots=True, frozen=True)
class RouteIndex:
    """Queryable segment index over a route polyline.

    Segment lengths live in a local equirectangular plane (meters). Along-route
    positions are multiplied by ``scale`` so they agree with the authoritative
    distance reported by the directions provider rather than the polyline's own
    planar length.
    """

    segments: tuple[RouteSegment, ...]
    scale: float
    planar_length: float

    @property
    def total_meters(self) -> float:
        return self.planar_length * self.scale

    @property
    def is_empty(self) -> bool:
        return not self.segments


def build_route_index(
    geometry: list[tuple[float, float]], distance_meters: float | None = None
) -> RouteIndex:
    segments: list[RouteSegment] = []
    cumulative = 0.0

    for index in range(len(geometry) - 1):
        start_lat, start_lng = geometry[index]
        end_lat, end_lng = geometry[index + 1]

        start_lat_rad = math.radians(start_lat)
        start_lng_rad = math.radians(start_lng)
        end_lat_rad = math.radians(end_lat)
        end_lng_rad = math.radians(end_lng)

        cos_lat = math.cos((start_lat_rad + end_lat_rad) / 2.0)
        dx = (end_lng_rad - start_lng_rad) * cos_lat * EARTH_RADIUS_METERS
        dy = (end_lat_rad - start_lat_rad) * EARTH_RADIUS_METERS
        length_sq = dx * dx + dy * dy
        length = math.sqrt(length_sq)

        if not math.isfinite(length) or length <= 0:
            continue

        segments.append(
            RouteSegment(
                start_lat_rad=start_lat_rad,
                start_lng_rad=start_lng_rad,
                cos_lat=cos_lat,
                dx=dx,
                dy=dy,
                length=length,
                length_sq=length_sq,
                cum_start=cumulative,
            )
        )
        cumulative += length

    if cumulative > 0 and distance_meters is not None and distance_meters > 0:
        scale = distance_meters / cumulative
    else:
        scale = 1.0

    return RouteIndex(segments=tuple(segments), scale=scale, planar_length=cumulative)


def project_point(route_index: RouteIndex, latitude: float, longitude: float) -> Projection:
    """Closest point on the route to ``(latitude, longitude)``.

    Ties keep the first segment in travel order.
    """
    if route_index.is_empty:
        raise DegenerateRouteError("Route geometry has no segments")

    lat_rad = math.radians(latitude)
    lng_rad = math.radians(longitude)

    best_distance = math.inf
    best_along = 0.0

    for segment in route_index.segments:
        px = (lng_rad - segment.start_lng_rad) * segment.cos_lat * EARTH_RADIUS_METERS
        py = (lat_rad - segment.start_lat_rad) * EARTH_RADIUS_METERS

        t = (px * segment.dx + py * segment.dy) / segment.length_sq
        t = max(0.0, min(1.0, t))

        distance = math.hypot(px - t * segment.dx, py - t * segment.dy)
        if distance < best_distance:
            best_distance = distance
            best_along = (segment.cum_start + t * segment.length) * route_index.scale

    return Projection(
        distance_to_route_meters=best_distance,
        distance_along_route_meters=best_along,
    )


def point_at_distance(route_index: RouteIndex, along_route_meters: float) -> GeoPoint:
    """Inverse of the along-route measure: the route position at a given distance."""
    if route_index.is_empty:
        raise DegenerateRouteError("Route geometry has no segments")

    planar = along_route_meters / route_index.scale
    planar = max(0.0, min(route_index.planar_length, planar))

    starts = [segment.cum_start for segment in route_index.segments]
    position = max(0, bisect.bisect_right(starts, planar) - 1)
    segment = route_index.segments[position]
    t = max(0.0, min(1.0, (planar - segment.cum_start) / segment.length))

    lat_rad = segment.start_lat_rad + (t * segment.dy) / EARTH_RADIUS_METERS
    if segment.cos_lat == 0:
        lng_rad = segment.start_lng_rad
    else:
        lng_rad = segment.start_lng_rad + (t * segment.dx) / (EARTH_RADIUS_METERS * segment.cos_lat)

    return GeoPoint(latitude=math.degrees(lat_rad), longitude=math.degrees(lng_rad))
