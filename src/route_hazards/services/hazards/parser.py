"""Classification of raw OSM-tagged features into hazard candidates."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from ...models.domain import (
    Clearance,
    HazardCandidate,
    HazardKind,
    RawFeature,
    WeightLimit,
    WidthLimit,
)

logger = logging.getLogger(__name__)

FEET_TO_METERS = 0.3048
INCHES_TO_METERS = 0.0254
MPH_TO_KMH = 1.609344

_DECIMAL_METERS = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(m|ft)?\s*$", re.IGNORECASE)
_FEET_INCHES = re.compile(r"^\s*(\d+)\s*'\s*(?:(\d+(?:\.\d+)?)\s*\")?\s*$")
_DECIMAL_TONNES = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(t)?\s*$", re.IGNORECASE)
_CONDITIONAL_WEIGHT = re.compile(r"weight\s*>=?\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
_SPEED = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(mph|km/h|kmh)?\s*$", re.IGNORECASE)


def parse_length(value: Optional[str]) -> Optional[float]:
    """Meters from a ``maxheight``/``maxwidth`` tag, ``None`` if unparsable."""
    if value is None:
        return None
    match = _DECIMAL_METERS.match(value)
    if match:
        number = float(match.group(1))
        unit = (match.group(2) or "m").lower()
        return number * FEET_TO_METERS if unit == "ft" else number
    match = _FEET_INCHES.match(value)
    if match:
        feet = float(match.group(1))
        inches = float(match.group(2) or 0.0)
        return round(feet * FEET_TO_METERS + inches * INCHES_TO_METERS, 3)
    return None


def parse_weight(value: Optional[str]) -> Optional[float]:
    """Tonnes from a ``maxweight`` tag, ``None`` if unparsable."""
    if value is None:
        return None
    match = _DECIMAL_TONNES.match(value)
    return float(match.group(1)) if match else None


def parse_conditional_weight(value: Optional[str]) -> Optional[float]:
    """Tonnes from an ``hgv:conditional`` value such as ``no @ (weight>7.5)``."""
    if value is None:
        return None
    match = _CONDITIONAL_WEIGHT.search(value)
    return float(match.group(1)) if match else None


def parse_speed(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    match = _SPEED.match(value)
    if not match:
        return None
    speed = float(match.group(1))
    if (match.group(2) or "").lower() == "mph":
        speed = round(speed * MPH_TO_KMH, 1)
    return speed


def _is_set(tags: dict[str, str], key: str) -> bool:
    return tags.get(key, "no") not in ("no", "")


def _fmt(value: float) -> str:
    return f"{value:g}"


def parse_feature(feature: RawFeature) -> Optional[HazardCandidate]:
    """Map ``feature`` to a single hazard candidate.

    Checks run in precedence order: height (tunnel, bridge, other), weight,
    width, level crossing, power line. A feature matching none of them, or
    one without a position, yields ``None``. Unparsable numeric tags keep the
    hazard but leave its limit empty.
    """

    if feature.location is None:
        return None

    tags = feature.tags
    name = tags.get("name")
    base = {
        "id": f"osm-{feature.element_type}-{feature.element_id}",
        "location": feature.location,
        "osm_id": f"{feature.element_type}/{feature.element_id}",
        "recommended_speed": parse_speed(tags.get("maxspeed")),
    }

    if "maxheight" in tags or tags.get("tunnel") == "yes":
        clearance = parse_length(tags.get("maxheight"))
        if "maxheight" in tags and clearance is None:
            logger.debug(f"Unparsable maxheight '{tags['maxheight']}' on {base['osm_id']}")
        if tags.get("tunnel") == "yes":
            kind, default_name = HazardKind.TUNNEL, "Tunnel"
        elif _is_set(tags, "bridge") or tags.get("man_made") == "bridge":
            kind, default_name = HazardKind.LOW_BRIDGE, "Bridge"
        else:
            kind, default_name = HazardKind.HEIGHT_RESTRICTION, "Height Restriction"
        description = (
            f"Height restriction: {_fmt(clearance)}m" if clearance is not None else "Height restriction: clearance unknown"
        )
        return HazardCandidate(
            kind=kind,
            name=name or default_name,
            description=description,
            limit=Clearance(clearance) if clearance is not None else None,
            **base,
        )

    if "maxweight" in tags or "hgv:conditional" in tags:
        weight = parse_weight(tags.get("maxweight"))
        if weight is None:
            weight = parse_conditional_weight(tags.get("hgv:conditional"))
        description = f"Weight limit: {_fmt(weight)}t" if weight is not None else "Weight limit: heavy vehicles restricted"
        return HazardCandidate(
            kind=HazardKind.WEIGHT_RESTRICTION,
            name=name or "Weight Restricted Road",
            description=description,
            limit=WeightLimit(weight) if weight is not None else None,
            **base,
        )

    if "maxwidth" in tags:
        width = parse_length(tags.get("maxwidth"))
        description = f"Width limit: {_fmt(width)}m" if width is not None else "Width limit: value unknown"
        return HazardCandidate(
            kind=HazardKind.WIDTH_RESTRICTION,
            name=name or "Width Restriction",
            description=description,
            limit=WidthLimit(width) if width is not None else None,
            **base,
        )

    if tags.get("railway") == "level_crossing":
        return HazardCandidate(
            kind=HazardKind.LEVEL_CROSSING,
            name="Railway Level Crossing",
            description="Slow down - railway crossing ahead",
            **base,
        )

    if tags.get("power") == "line":
        return HazardCandidate(
            kind=HazardKind.OVERHEAD_LINES,
            name="Overhead Power Lines",
            description="Caution: overhead power lines",
            **base,
        )

    return None


def parse_features(features: Iterable[RawFeature]) -> list[HazardCandidate]:
    """Parse every feature, dropping unmatched ones and repeated ids."""
    seen: set[str] = set()
    candidates: list[HazardCandidate] = []
    for feature in features:
        candidate = parse_feature(feature)
        if candidate is None or candidate.id in seen:
            continue
        seen.add(candidate.id)
        candidates.append(candidate)
    return candidates
