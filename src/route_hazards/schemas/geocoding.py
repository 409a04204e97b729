"""Geocoding response schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .routing import GeoPointModel


class GeocodeResponse(BaseModel):
    query: str
    found: bool
    location: Optional[GeoPointModel] = None
    display_name: Optional[str] = None


class ReverseGeocodeResponse(BaseModel):
    location: GeoPointModel
    label: str
