from __future__ import annotations

from dataclasses import dataclass, field

from django.conf import settings

from route_planner.services.geo import meters_to_miles


@dataclass(slots=True, frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class GeocodeResult:
    query: str
    label: str
    point: GeoPoint


@dataclass(slots=True, frozen=True)
class RouteData:
    # (lat, lng) vertices in travel order
    coordinates: list[tuple[float, float]]
    distance_meters: float
    duration_seconds: float

    @property
    def distance_miles(self) -> float:
        return meters_to_miles(self.distance_meters)


@dataclass(slots=True, frozen=True)
class StationRecord:
    station_id: int
    station_name: str
    latitude: float
    longitude: float
    fast_charger_count: int | None = None
    max_power_kw: float | None = None
    facility_type: str | None = None
    status_code: str | None = None
    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    connector_types: tuple[str, ...] = ()
    ev_pricing: str | None = None
    access_days_time: str | None = None

    @property
    def has_fast_charger(self) -> bool:
        return self.fast_charger_count is not None and self.fast_charger_count > 0

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


@dataclass(slots=True, frozen=True)
class StationQueryResult:
    stations: list[StationRecord]
    degraded: bool = False


@dataclass(slots=True, frozen=True)
class CorridorStation:
    station: StationRecord
    lateral_miles: float
    along_route_miles: float
    miles_from_prev: float = 0.0
    miles_to_next: float = 0.0


@dataclass(slots=True, frozen=True)
class CorridorResult:
    stations: list[CorridorStation]
    degraded: bool = False


@dataclass(slots=True, frozen=True)
class Gap:
    start_miles: float
    end_miles: float

    @property
    def length_miles(self) -> float:
        return max(0.0, self.end_miles - self.start_miles)

    @property
    def midpoint_miles(self) -> float:
        return (self.start_miles + self.end_miles) / 2.0


@dataclass(slots=True, frozen=True)
class WaypointCandidate:
    station: StationRecord
    gap: Gap
    distance_miles: float
    score: float


@dataclass(slots=True, frozen=True)
class CandidateRoute:
    route: RouteData
    stations: list[CorridorStation]
    max_gap_miles: float
    via_points: tuple[GeoPoint, ...]
    auto_waypoint: StationRecord | None = None
    stations_degraded: bool = False

    @property
    def station_count(self) -> int:
        return len(self.stations)

    @property
    def distance_meters(self) -> float:
        return self.route.distance_meters


@dataclass(slots=True, frozen=True)
class OptimizerSettings:
    max_iterations: int = 2
    candidate_limit: int = 8
    target_gap_count: int = 2
    range_reserve_miles: float = 30.0
    search_min_radius_miles: float = 30.0
    search_max_radius_miles: float = 80.0
    distance_weight: float = 10.0
    power_divisor_kw: float = 100.0
    charger_bonus_cap: int = 10

    @classmethod
    def from_settings(cls) -> OptimizerSettings:
        return cls(
            max_iterations=int(settings.OPTIMIZER_MAX_ITERATIONS),
            candidate_limit=int(settings.OPTIMIZER_CANDIDATE_LIMIT),
            target_gap_count=int(settings.OPTIMIZER_TARGET_GAP_COUNT),
            range_reserve_miles=float(settings.RANGE_RESERVE_MILES),
            search_min_radius_miles=float(settings.WAYPOINT_SEARCH_MIN_RADIUS_MILES),
            search_max_radius_miles=float(settings.WAYPOINT_SEARCH_MAX_RADIUS_MILES),
            distance_weight=float(settings.WAYPOINT_DISTANCE_WEIGHT),
            power_divisor_kw=float(settings.WAYPOINT_POWER_DIVISOR_KW),
            charger_bonus_cap=int(settings.WAYPOINT_CHARGER_BONUS_CAP),
        )

    def target_gap_miles(self, range_miles: float) -> float:
        return max(0.0, range_miles - self.range_reserve_miles)


@dataclass(slots=True, frozen=True)
class OptimizationResult:
    route: CandidateRoute
    auto_waypoints: list[StationRecord] = field(default_factory=list)
    candidates_evaluated: int = 0
    directions_calls: int = 0
    iterations: int = 0
    target_gap_miles: float = 0.0

    @property
    def meets_target(self) -> bool:
        return self.route.max_gap_miles <= self.target_gap_miles
