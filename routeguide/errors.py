"""
Exception hierarchy for the route guidance engine.
"""


class RouteGuideError(Exception):
    """Base class for all route guidance errors."""


class ConfigError(RouteGuideError):
    """Configuration file or value could not be used."""


class RouteDataError(RouteGuideError):
    """Static route data is malformed."""


class LocationError(RouteGuideError):
    """Base class for location-service failures."""


class LocationUnavailableError(LocationError):
    """No GPS capability or permission denied. Fatal for navigation."""


class LocationTimeoutError(LocationError):
    """A fix did not arrive in time. Transient."""


class OrientationUnavailableError(RouteGuideError):
    """No usable compass heading has been received."""


class FilterNotInitializedError(RouteGuideError):
    """The position filter has not received its first fix."""
