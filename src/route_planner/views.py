from __future__ import annotations

import json
import logging
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from pydantic import ValidationError

from route_planner.exceptions import (
    ExternalServiceError,
    InvalidLocationError,
    NoRouteFoundError,
    RoutePlannerError,
)
from route_planner.models import ChargingStation
from route_planner.schemas import RoutePlanRequest
from route_planner.services.planner import RoutePlannerService

logger = logging.getLogger(__name__)

_planner_service: RoutePlannerService | None = None


def get_route_planner() -> RoutePlannerService:
    global _planner_service
    if _planner_service is None:
        _planner_service = RoutePlannerService()
    return _planner_service


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    total_stations = ChargingStation.objects.count()
    fast_stations = ChargingStation.objects.filter(ev_dc_fast_num__gt=0).count()
    return JsonResponse(
        {
            "status": "ok",
            "stations": {
                "total": total_stations,
                "fast_charging": fast_stations,
            },
        }
    )


@csrf_exempt
@require_POST
def route_plan_view(request: HttpRequest) -> HttpResponse:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        route_request = RoutePlanRequest.model_validate(payload)
    except ValidationError as exc:
        return JsonResponse(
            {
                "error": {
                    "code": "validation_error",
                    "message": "Invalid request payload",
                    "details": exc.errors(include_url=False, include_context=False),
                }
            },
            status=400,
        )

    planner = get_route_planner()
    try:
        response = planner.plan(route_request)
    except InvalidLocationError as exc:
        return _error_response("invalid_location", str(exc), status=404)
    except NoRouteFoundError as exc:
        return _error_response("no_route", str(exc), status=502)
    except ExternalServiceError as exc:
        return _error_response("upstream_error", str(exc), status=502)
    except RoutePlannerError as exc:
        logger.exception("Route planning failed")
        return _error_response("route_error", str(exc), status=500)

    return JsonResponse(response.model_dump(mode="json"), status=200)


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "JSON body must be an object", status=400)

    return payload


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)
