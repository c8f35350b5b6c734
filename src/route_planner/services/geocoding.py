from __future__ import annotations

import hashlib
import logging
import time
from typing import Any

import httpx
from django.conf import settings
from django.core.cache import cache

from route_planner.exceptions import ExternalServiceError, InvalidLocationError
from route_planner.services.types import GeocodeResult, GeoPoint

logger = logging.getLogger(__name__)


class GeocodingClient:
    def __init__(self) -> None:
        self.base_url = settings.GEOCODING_BASE_URL.rstrip("/")
        self.api_key = settings.OPENROUTESERVICE_API_KEY
        self.timeout = settings.GEOCODING_TIMEOUT_SECONDS
        self.retry_count = settings.GEOCODING_RETRY_COUNT

    def geocode(self, query: str) -> GeocodeResult:
        query = normalize_query(query)
        cache_key = self._cache_key(query)
        cached = cache.get(cache_key)
        if cached:
            return GeocodeResult(
                query=query,
                label=cached["label"],
                point=GeoPoint(latitude=cached["latitude"], longitude=cached["longitude"]),
            )

        if not self.api_key:
            raise ExternalServiceError("OPENROUTESERVICE_API_KEY is not configured")

        params = {"text": query, "size": 1}
        for attempt in range(self.retry_count + 1):
            try:
                response = httpx.get(
                    f"{self.base_url}/geocode/search",
                    params=params,
                    timeout=self.timeout,
                    headers={
                        "Accept": "application/json",
                        "Authorization": self.api_key,
                    },
                )
                response.raise_for_status()
                result = self._parse_result(query, response.json())
                cache.set(
                    cache_key,
                    {
                        "label": result.label,
                        "latitude": result.point.latitude,
                        "longitude": result.point.longitude,
                    },
                    timeout=settings.GEOCODE_CACHE_TTL_SECONDS,
                )
                return result
            except InvalidLocationError:
                raise
            except httpx.HTTPError as exc:
                if attempt >= self.retry_count:
                    raise ExternalServiceError("Geocoding request failed") from exc
                logger.warning("Geocoding request failed (attempt %d): %s", attempt + 1, exc)
                time.sleep(0.3 * (attempt + 1))

        raise ExternalServiceError("Geocoding request failed")

    @staticmethod
    def _cache_key(query: str) -> str:
        digest = hashlib.sha256(f"geocode:v1:{query.lower()}".encode()).hexdigest()
        return f"geocode:{digest}"

    @staticmethod
    def _parse_result(query: str, payload: Any) -> GeocodeResult:
        features = payload.get("features") if isinstance(payload, dict) else None
        if not isinstance(features, list) or not features:
            raise InvalidLocationError(f'Could not geocode: "{query}"')

        first = features[0]
        try:
            longitude, latitude = (float(value) for value in first["geometry"]["coordinates"][:2])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidLocationError(f'Could not geocode: "{query}"') from exc

        label = (first.get("properties") or {}).get("label")
        return GeocodeResult(
            query=query,
            label=label if isinstance(label, str) else query,
            point=GeoPoint(latitude=latitude, longitude=longitude),
        )


def normalize_query(value: str) -> str:
    return " ".join(value.split())
