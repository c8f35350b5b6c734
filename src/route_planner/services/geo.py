from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_MILES = 3958.7613
EARTH_RADIUS_METERS = 6_371_000.0
METERS_PER_MILE = 1609.344
METERS_PER_DEGREE_LAT = 111_320.0


@dataclass(slots=True, frozen=True)
class Bounds:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_lat <= latitude <= self.max_lat
            and self.min_lng <= longitude <= self.max_lng
        )


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2.0) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def compute_bounds(geometry: list[tuple[float, float]], padding_meters: float) -> Bounds:
    """Bounding box around (lat, lng) vertices, padded by a distance in meters.

    Longitude padding is scaled by the cosine of the box's mean latitude so the
    pad covers the same ground distance east-west as north-south.
    """
    lat_values = [lat for lat, _ in geometry]
    lng_values = [lng for _, lng in geometry]
    min_lat, max_lat = min(lat_values), max(lat_values)
    min_lng, max_lng = min(lng_values), max(lng_values)

    pad_lat = padding_meters / METERS_PER_DEGREE_LAT
    cos_lat = abs(math.cos(math.radians((min_lat + max_lat) / 2.0)))
    pad_lng = 180.0 if cos_lat == 0 else padding_meters / (METERS_PER_DEGREE_LAT * cos_lat)

    return Bounds(
        min_lat=max(-90.0, min_lat - pad_lat),
        max_lat=min(90.0, max_lat + pad_lat),
        min_lng=max(-180.0, min_lng - pad_lng),
        max_lng=min(180.0, max_lng + pad_lng),
    )
