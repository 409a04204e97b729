"""Geocoding endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from ...models.domain import GeoPoint
from ...schemas.geocoding import GeocodeResponse, ReverseGeocodeResponse
from ...schemas.routing import GeoPointModel
from ...services.geocoding.nominatim_client import NominatimClient

router = APIRouter(prefix="/geocode", tags=["geocoding"])


@router.get("", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
def geocode(q: str = Query(..., min_length=1, description="Free-text address.")) -> GeocodeResponse:
    match = NominatimClient().search(q)
    if match is None:
        return GeocodeResponse(query=q, found=False)
    return GeocodeResponse(
        query=q,
        found=True,
        location=GeoPointModel.from_domain(match.location),
        display_name=match.display_name,
    )


@router.get("/reverse", response_model=ReverseGeocodeResponse, status_code=status.HTTP_200_OK)
def reverse_geocode(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
) -> ReverseGeocodeResponse:
    point = GeoPoint(lat=lat, lng=lng)
    return ReverseGeocodeResponse(
        location=GeoPointModel.from_domain(point),
        label=NominatimClient().reverse_geocode(point),
    )
