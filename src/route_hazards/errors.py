"""Exception types raised by the hazard analysis engine."""

from __future__ import annotations


class RouteHazardError(Exception):
    """Base class for engine errors."""


class ProviderError(RouteHazardError):
    """An external routing, geocoding or hazard service failed to answer."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class RouteUnavailableError(RouteHazardError):
    """Every configured route provider failed."""

    def __init__(self, message: str = "No route available between these points.") -> None:
        super().__init__(message)


class AddressNotFoundError(RouteHazardError):
    """A required address could not be geocoded."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Address not found: {address}")
        self.address = address


class AnalysisCancelledError(RouteHazardError):
    """The caller abandoned an in-flight analysis."""
