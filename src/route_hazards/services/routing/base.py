"""Contract for route provider implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...models.domain import GeoPoint, RouteOption


def route_display_name(index: int) -> str:
    return "Recommended Route" if index == 0 else f"Alternative {index}"


class RouteProvider(ABC):
    """Computes candidate routes through ordered waypoints.

    Implementations raise :class:`~route_hazards.errors.ProviderError` on any
    failure so the fallback chain can move on to the next provider.
    Returned routes carry geometry, totals and steps only; hazards are added
    by the analyzer.
    """

    name: str = "provider"

    @abstractmethod
    def compute_routes(
        self,
        start: GeoPoint,
        end: GeoPoint,
        waypoints: Sequence[GeoPoint] = (),
    ) -> list[RouteOption]:
        raise NotImplementedError
