class RoutePlannerError(Exception):
    """Base exception for route planning errors."""


class ExternalServiceError(RoutePlannerError):
    """Raised when an upstream API call fails."""


class AlternativesUnsupportedError(ExternalServiceError):
    """Raised when the directions provider refuses alternative routes for a trip."""


class InvalidLocationError(RoutePlannerError):
    """Raised when an input location cannot be geocoded."""


class NoRouteFoundError(RoutePlannerError):
    """Raised when a drivable route cannot be generated."""


class DegenerateRouteError(RoutePlannerError):
    """Raised when a route geometry has no measurable segments."""
