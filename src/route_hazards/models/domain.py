"""Domain models for route hazard analysis."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Union


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 coordinate in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class LoadEnvelope:
    """Dimensions of the cargo itself (meters, tonnes)."""

    height: float
    width: float
    length: float
    weight: float


@dataclass(frozen=True, slots=True)
class VehicleEnvelope:
    """Dimensions of the loaded carrying vehicle."""

    total_height: float
    axle_weight: float
    number_of_axles: int
    turning_radius: float
    vehicle_length: float


class HazardKind(str, Enum):
    LOW_BRIDGE = "low-bridge"
    WEIGHT_RESTRICTION = "weight-restriction"
    WIDTH_RESTRICTION = "width-restriction"
    HEIGHT_RESTRICTION = "height-restriction"
    SHARP_TURN = "sharp-turn"
    OVERHEAD_LINES = "overhead-lines"
    NARROW_ROAD = "narrow-road"
    LEVEL_CROSSING = "level-crossing"
    TUNNEL = "tunnel"


class SeverityTier(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    UNSAFE = "unsafe"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {SeverityTier.SAFE: 0, SeverityTier.CAUTION: 1, SeverityTier.UNSAFE: 2}


def worst_severity(tiers: Iterable[SeverityTier]) -> SeverityTier:
    """Return the most severe tier, or ``SAFE`` for an empty input."""
    return max(tiers, key=lambda tier: tier.rank, default=SeverityTier.SAFE)


class TurnType(str, Enum):
    STRAIGHT = "straight"
    LEFT = "left"
    RIGHT = "right"
    U_TURN = "u-turn"
    SLIGHT_LEFT = "slight-left"
    SLIGHT_RIGHT = "slight-right"


@dataclass(frozen=True, slots=True)
class Clearance:
    meters: float


@dataclass(frozen=True, slots=True)
class WeightLimit:
    tonnes: float


@dataclass(frozen=True, slots=True)
class WidthLimit:
    meters: float


HazardLimit = Union[Clearance, WeightLimit, WidthLimit]


@dataclass(frozen=True, slots=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    def as_overpass(self) -> str:
        """Overpass QL bbox order: south, west, north, east."""
        return f"{self.south},{self.west},{self.north},{self.east}"


@dataclass(frozen=True, slots=True)
class RawFeature:
    """Tagged map feature as returned by the infrastructure database."""

    element_type: str
    element_id: int
    tags: dict[str, str]
    location: Optional[GeoPoint]


@dataclass(frozen=True, slots=True)
class HazardCandidate:
    """Parsed hazard awaiting severity classification."""

    id: str
    kind: HazardKind
    location: GeoPoint
    name: str
    description: str
    limit: Optional[HazardLimit] = None
    osm_id: Optional[str] = None
    recommended_speed: Optional[float] = None

    def classified(self, severity: SeverityTier) -> "Hazard":
        return Hazard(
            id=self.id,
            kind=self.kind,
            location=self.location,
            name=self.name,
            description=self.description,
            limit=self.limit,
            osm_id=self.osm_id,
            recommended_speed=self.recommended_speed,
            severity=severity,
        )


@dataclass(frozen=True, slots=True)
class Hazard:
    id: str
    kind: HazardKind
    location: GeoPoint
    name: str
    description: str
    severity: SeverityTier
    limit: Optional[HazardLimit] = None
    osm_id: Optional[str] = None
    recommended_speed: Optional[float] = None


@dataclass(frozen=True, slots=True)
class ItineraryStep:
    instruction: str
    distance: float
    duration: float
    location: GeoPoint
    road_name: str = ""
    turn_type: TurnType = TurnType.STRAIGHT
    hazards: tuple[Hazard, ...] = ()


@dataclass(frozen=True, slots=True)
class RouteOption:
    """Candidate route; hazard fields stay at their defaults until analysed."""

    id: str
    name: str
    geometry: tuple[GeoPoint, ...]
    distance: float
    duration: float
    steps: tuple[ItineraryStep, ...] = ()
    hazards: tuple[Hazard, ...] = ()
    overall_severity: SeverityTier = SeverityTier.SAFE
    safety_score: float = 100.0
    summary: str = ""
    provider: str = ""

    def with_analysis(
        self,
        *,
        hazards: tuple[Hazard, ...],
        steps: tuple[ItineraryStep, ...],
        overall_severity: SeverityTier,
        safety_score: float,
    ) -> "RouteOption":
        return replace(
            self,
            hazards=hazards,
            steps=steps,
            overall_severity=overall_severity,
            safety_score=safety_score,
        )


@dataclass(frozen=True, slots=True)
class RoutePlanResult:
    """Output handed to export and rendering collaborators."""

    routes: tuple[RouteOption, ...]
    load: LoadEnvelope
    vehicle: VehicleEnvelope
    metadata: dict = field(default_factory=dict)
