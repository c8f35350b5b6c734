from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Protocol

import httpx
from django.conf import settings
from django.core.cache import cache

from route_planner.exceptions import (
    AlternativesUnsupportedError,
    ExternalServiceError,
    NoRouteFoundError,
)
from route_planner.services.types import GeoPoint, RouteData

logger = logging.getLogger(__name__)

# ORS: "Request parameters exceed the server configuration limits"
ORS_LIMITS_EXCEEDED_CODE = 2004
# ORS: "Route could not be found" and "Could not find routable point"
ORS_NO_ROUTE_CODES = frozenset({2009, 2010})


class DirectionsProvider(Protocol):
    def directions(
        self, waypoints: list[GeoPoint], *, alternatives: bool = False
    ) -> list[RouteData]: ...


class OpenRouteServiceClient:
    def __init__(self) -> None:
        self.base_url = settings.ORS_BASE_URL.rstrip("/")
        self.api_key = settings.OPENROUTESERVICE_API_KEY
        self.timeout = settings.ORS_TIMEOUT_SECONDS
        self.retry_count = settings.ORS_RETRY_COUNT
        self.alternative_count = settings.ORS_ALTERNATIVE_ROUTE_COUNT
        self.share_factor = settings.ORS_ALTERNATIVE_SHARE_FACTOR
        self.weight_factor = settings.ORS_ALTERNATIVE_WEIGHT_FACTOR

    def directions(
        self, waypoints: list[GeoPoint], *, alternatives: bool = False
    ) -> list[RouteData]:
        if len(waypoints) < 2:
            raise NoRouteFoundError("At least two route waypoints are required")
        if not self.api_key:
            raise ExternalServiceError("OPENROUTESERVICE_API_KEY is not configured")

        cache_key = self._cache_key(waypoints, alternatives)
        cached = cache.get(cache_key)
        if cached:
            return [
                RouteData(
                    coordinates=[tuple(coord) for coord in route["coordinates"]],
                    distance_meters=route["distance_meters"],
                    duration_seconds=route["duration_seconds"],
                )
                for route in cached
            ]

        body: dict[str, Any] = {
            "coordinates": [[point.longitude, point.latitude] for point in waypoints],
            "instructions": False,
        }
        if alternatives:
            body["alternative_routes"] = {
                "target_count": self.alternative_count,
                "share_factor": self.share_factor,
                "weight_factor": self.weight_factor,
            }

        endpoint = f"{self.base_url}/v2/directions/driving-car/geojson"
        headers = {
            "Accept": "application/geo+json",
            "Authorization": self.api_key,
            "Content-Type": "application/json",
        }

        for attempt in range(self.retry_count + 1):
            try:
                response = httpx.post(endpoint, json=body, headers=headers, timeout=self.timeout)
                if alternatives and self._alternatives_rejected(response):
                    raise AlternativesUnsupportedError(
                        "Alternative routes are not supported for this trip"
                    )
                if self._no_route(response):
                    raise NoRouteFoundError("Could not compute route between the given points")
                response.raise_for_status()
                routes = self._parse_response(response.json())
                cache.set(
                    cache_key,
                    [
                        {
                            "coordinates": route.coordinates,
                            "distance_meters": route.distance_meters,
                            "duration_seconds": route.duration_seconds,
                        }
                        for route in routes
                    ],
                    timeout=settings.ROUTE_CACHE_TTL_SECONDS,
                )
                return routes
            except (NoRouteFoundError, AlternativesUnsupportedError):
                raise
            except httpx.HTTPError as exc:
                if attempt >= self.retry_count:
                    raise ExternalServiceError(
                        "OpenRouteService directions request failed"
                    ) from exc
                logger.warning(
                    "Directions request failed (attempt %d/%d): %s",
                    attempt + 1,
                    self.retry_count + 1,
                    exc,
                )
                time.sleep(0.3 * (attempt + 1))

        raise ExternalServiceError("OpenRouteService directions request failed")

    @staticmethod
    def _cache_key(waypoints: list[GeoPoint], alternatives: bool) -> str:
        encoded = "|".join(
            f"{point.longitude:.6f},{point.latitude:.6f}" for point in waypoints
        )
        digest = hashlib.sha256(f"alt={int(alternatives)}|{encoded}".encode()).hexdigest()
        return f"directions:{digest}"

    @staticmethod
    def _alternatives_rejected(response: httpx.Response) -> bool:
        if not 400 <= response.status_code < 500 or response.status_code == 429:
            return False
        try:
            error = response.json().get("error", {})
        except ValueError:
            return False
        if not isinstance(error, dict):
            return False

        message = str(error.get("message", "")).lower()
        return error.get("code") == ORS_LIMITS_EXCEEDED_CODE or "alternative" in message

    @staticmethod
    def _no_route(response: httpx.Response) -> bool:
        if not 400 <= response.status_code < 500 or response.status_code == 429:
            return False
        if response.status_code == 404:
            return True
        try:
            error = response.json().get("error", {})
        except ValueError:
            return False
        return isinstance(error, dict) and error.get("code") in ORS_NO_ROUTE_CODES

    @staticmethod
    def _parse_response(payload: Any) -> list[RouteData]:
        if not isinstance(payload, dict):
            raise ExternalServiceError("Unexpected directions response")

        features = payload.get("features") or []
        routes: list[RouteData] = []
        for feature in features:
            summary = (feature.get("properties") or {}).get("summary") or {}
            line = (feature.get("geometry") or {}).get("coordinates") or []
            coordinates = [
                (float(point[1]), float(point[0]))
                for point in line
                if isinstance(point, (list, tuple)) and len(point) >= 2
            ]
            if len(coordinates) < 2:
                continue

            routes.append(
                RouteData(
                    coordinates=coordinates,
                    distance_meters=float(summary.get("distance", 0.0)),
                    duration_seconds=float(summary.get("duration", 0.0)),
                )
            )

        if not routes:
            raise NoRouteFoundError("Could not compute route")
        return routes
