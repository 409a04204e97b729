"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from shapely.geometry import MultiPoint

from ..models.domain import BoundingBox, GeoPoint

EARTH_RADIUS_METERS = 6_371_000.0
DEFAULT_BBOX_MARGIN_DEGREES = 0.01


def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points on a spherical Earth."""

    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def min_distance_to_polyline(point: GeoPoint, polyline: Sequence[GeoPoint]) -> float:
    """Minimum vertex distance from ``point`` to ``polyline`` in meters.

    Only vertices are considered, not the segments between them. Route geometry
    from the providers is dense enough that this is within the proximity
    buffers used by the analyzer. An empty polyline is infinitely far away.
    """

    if not polyline:
        return math.inf

    lats = np.radians(np.fromiter((p.lat for p in polyline), dtype=float, count=len(polyline)))
    lngs = np.radians(np.fromiter((p.lng for p in polyline), dtype=float, count=len(polyline)))
    phi = math.radians(point.lat)
    lam = math.radians(point.lng)

    h = np.sin((lats - phi) / 2) ** 2 + math.cos(phi) * np.cos(lats) * np.sin((lngs - lam) / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    distances = EARTH_RADIUS_METERS * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
    return float(distances.min())


def is_within(point: GeoPoint, polyline: Sequence[GeoPoint], buffer_meters: float) -> bool:
    return min_distance_to_polyline(point, polyline) <= buffer_meters


def bounding_box(
    points: Sequence[GeoPoint], margin_degrees: float = DEFAULT_BBOX_MARGIN_DEGREES
) -> BoundingBox:
    """Envelope of ``points`` expanded by ``margin_degrees`` on every side."""

    if not points:
        raise ValueError("At least one point is required to derive a bounding box.")
    west, south, east, north = MultiPoint([(p.lng, p.lat) for p in points]).bounds
    return BoundingBox(
        north=north + margin_degrees,
        south=south - margin_degrees,
        east=east + margin_degrees,
        west=west - margin_degrees,
    )


def format_coordinates(point: GeoPoint, precision: int = 5) -> str:
    return f"{point.lat:.{precision}f}, {point.lng:.{precision}f}"
