"""Contract for hazard data sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...models.domain import BoundingBox, RawFeature


class HazardSource(ABC):
    """Fetches tagged infrastructure features inside a bounding box.

    An empty list is a valid answer. Failures raise
    :class:`~route_hazards.errors.ProviderError`.
    """

    name: str = "hazard-source"

    @abstractmethod
    def fetch_candidates(self, bbox: BoundingBox) -> list[RawFeature]:
        raise NotImplementedError
