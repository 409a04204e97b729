"""Route planning request/response schemas."""

from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import (
    Clearance,
    GeoPoint,
    Hazard,
    HazardKind,
    ItineraryStep,
    LoadEnvelope,
    RouteOption,
    RoutePlanResult,
    SeverityTier,
    TurnType,
    VehicleEnvelope,
    WeightLimit,
    WidthLimit,
)


class GeoPointModel(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)

    def to_domain(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)

    @classmethod
    def from_domain(cls, point: GeoPoint) -> "GeoPointModel":
        return cls(lat=point.lat, lng=point.lng)


class LocationInput(BaseModel):
    """Either a coordinate pair or a free-text address to geocode."""

    address: Optional[str] = None
    location: Optional[GeoPointModel] = None

    @model_validator(mode="after")
    def _require_one(self) -> "LocationInput":
        if self.location is None and not (self.address and self.address.strip()):
            raise ValueError("Provide either 'location' or a non-empty 'address'.")
        return self

    def resolve_input(self) -> GeoPoint | str:
        return self.location.to_domain() if self.location is not None else self.address.strip()


class LoadSpecsModel(BaseModel):
    height: float = Field(3.0, ge=0, description="Cargo height (m).")
    width: float = Field(3.0, ge=0, description="Cargo width (m).")
    length: float = Field(12.0, ge=0, description="Cargo length (m).")
    weight: float = Field(40.0, ge=0, description="Cargo weight (t).")

    def to_domain(self) -> LoadEnvelope:
        return LoadEnvelope(height=self.height, width=self.width, length=self.length, weight=self.weight)


class VehicleSpecsModel(BaseModel):
    total_height: float = Field(4.5, ge=0, description="Loaded running height (m).")
    axle_weight: float = Field(10.0, ge=0, description="Weight per axle (t).")
    number_of_axles: int = Field(4, ge=1)
    turning_radius: float = Field(12.0, ge=0)
    vehicle_length: float = Field(18.0, ge=0)

    def to_domain(self) -> VehicleEnvelope:
        return VehicleEnvelope(
            total_height=self.total_height,
            axle_weight=self.axle_weight,
            number_of_axles=self.number_of_axles,
            turning_radius=self.turning_radius,
            vehicle_length=self.vehicle_length,
        )


class RoutePlanRequest(BaseModel):
    start: LocationInput
    end: LocationInput
    waypoints: List[LocationInput] = Field(default_factory=list)
    load: LoadSpecsModel = Field(default_factory=LoadSpecsModel)
    vehicle: VehicleSpecsModel = Field(default_factory=VehicleSpecsModel)


class HazardModel(BaseModel):
    id: str
    kind: HazardKind
    location: GeoPointModel
    name: str
    description: str
    severity: SeverityTier
    clearance_m: Optional[float] = None
    weight_limit_t: Optional[float] = None
    width_limit_m: Optional[float] = None
    osm_id: Optional[str] = None
    recommended_speed_kmh: Optional[float] = None


class StepModel(BaseModel):
    instruction: str
    distance: float = Field(..., ge=0)
    duration: float = Field(..., ge=0)
    location: GeoPointModel
    road_name: str = ""
    turn_type: TurnType = TurnType.STRAIGHT
    hazards: List[HazardModel] = Field(default_factory=list)


class CandidateRouteModel(BaseModel):
    """Route geometry supplied by a caller for (re-)analysis."""

    id: str
    name: str = "Route"
    geometry: List[GeoPointModel] = Field(..., min_length=1)
    distance: float = Field(0.0, ge=0)
    duration: float = Field(0.0, ge=0)
    steps: List[StepModel] = Field(default_factory=list)
    summary: str = ""

    def to_domain(self) -> RouteOption:
        return RouteOption(
            id=self.id,
            name=self.name,
            geometry=tuple(point.to_domain() for point in self.geometry),
            distance=self.distance,
            duration=self.duration,
            steps=tuple(
                ItineraryStep(
                    instruction=step.instruction,
                    distance=step.distance,
                    duration=step.duration,
                    location=step.location.to_domain(),
                    road_name=step.road_name,
                    turn_type=step.turn_type,
                )
                for step in self.steps
            ),
            summary=self.summary,
            provider="client",
        )


class RouteAnalysisRequest(BaseModel):
    routes: List[CandidateRouteModel] = Field(..., min_length=1)
    load: LoadSpecsModel = Field(default_factory=LoadSpecsModel)
    vehicle: VehicleSpecsModel = Field(default_factory=VehicleSpecsModel)


class RouteOptionModel(BaseModel):
    id: str
    name: str
    geometry: List[GeoPointModel]
    distance: float
    duration: float
    hazards: List[HazardModel]
    steps: List[StepModel]
    overall_severity: SeverityTier
    safety_score: float = Field(..., ge=0, le=100)
    summary: str
    provider: str


class RoutePlanResponse(BaseModel):
    routes: List[RouteOptionModel]
    load: LoadSpecsModel
    vehicle: VehicleSpecsModel
    metadata: dict = Field(default_factory=dict)


def hazard_to_model(hazard: Hazard) -> HazardModel:
    limit = hazard.limit
    return HazardModel(
        id=hazard.id,
        kind=hazard.kind,
        location=GeoPointModel.from_domain(hazard.location),
        name=hazard.name,
        description=hazard.description,
        severity=hazard.severity,
        clearance_m=limit.meters if isinstance(limit, Clearance) else None,
        weight_limit_t=limit.tonnes if isinstance(limit, WeightLimit) else None,
        width_limit_m=limit.meters if isinstance(limit, WidthLimit) else None,
        osm_id=hazard.osm_id,
        recommended_speed_kmh=hazard.recommended_speed,
    )


def route_to_model(route: RouteOption) -> RouteOptionModel:
    return RouteOptionModel(
        id=route.id,
        name=route.name,
        geometry=[GeoPointModel.from_domain(point) for point in route.geometry],
        distance=route.distance,
        duration=route.duration,
        hazards=[hazard_to_model(h) for h in route.hazards],
        steps=[
            StepModel(
                instruction=step.instruction,
                distance=step.distance,
                duration=step.duration,
                location=GeoPointModel.from_domain(step.location),
                road_name=step.road_name,
                turn_type=step.turn_type,
                hazards=[hazard_to_model(h) for h in step.hazards],
            )
            for step in route.steps
        ],
        overall_severity=route.overall_severity,
        safety_score=route.safety_score,
        summary=route.summary,
        provider=route.provider,
    )


def _serialize_metadata(metadata: dict) -> dict:
    serialized: dict = {}
    for key, value in metadata.items():
        if isinstance(value, GeoPoint):
            serialized[key] = GeoPointModel.from_domain(value).model_dump()
        elif isinstance(value, list):
            serialized[key] = [
                GeoPointModel.from_domain(item).model_dump() if isinstance(item, GeoPoint) else item
                for item in value
            ]
        else:
            serialized[key] = value
    return serialized


def plan_result_to_response(result: RoutePlanResult) -> RoutePlanResponse:
    return RoutePlanResponse(
        routes=[route_to_model(route) for route in result.routes],
        load=LoadSpecsModel(**asdict(result.load)),
        vehicle=VehicleSpecsModel(**asdict(result.vehicle)),
        metadata=_serialize_metadata(result.metadata),
    )
