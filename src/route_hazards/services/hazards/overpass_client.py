"""HTTP client for the Overpass API infrastructure query."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from ...errors import ProviderError
from ...models.domain import BoundingBox, GeoPoint, RawFeature
from ..http import build_client, request_json
from .base import HazardSource

logger = logging.getLogger(__name__)

# Overpass QL filters, one statement each, evaluated against the route bbox.
HAZARD_FILTERS = (
    'way["bridge"="yes"]["maxheight"]',
    'way["man_made"="bridge"]["maxheight"]',
    'way["tunnel"="yes"]',
    'way["maxweight"]',
    'way["hgv:conditional"]',
    'way["maxwidth"]',
    'node["railway"="level_crossing"]',
    'way["power"="line"]',
)


def build_overpass_query(bbox: BoundingBox, server_timeout: int = 25) -> str:
    area = bbox.as_overpass()
    statements = "\n".join(f"  {flt}({area});" for flt in HAZARD_FILTERS)
    return f"[out:json][timeout:{server_timeout}];\n(\n{statements}\n);\nout center;"


class OverpassClient(HazardSource):
    name = "overpass"

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url or settings.overpass_url
        self.timeout = timeout if timeout is not None else settings.overpass_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return build_client(self.timeout, settings.user_agent, self._transport)

    def query(self, overpass_ql: str) -> dict:
        with self._get_client() as client:
            data = request_json(
                client,
                "POST",
                self.url,
                provider=self.name,
                max_retries=self.max_retries,
                backoff_seconds=self.backoff_seconds,
                data={"data": overpass_ql},
            )
        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected response payload")
        return data

    def fetch_candidates(self, bbox: BoundingBox) -> list[RawFeature]:
        server_timeout = max(1, int(self.timeout) - 5)
        data = self.query(build_overpass_query(bbox, server_timeout=server_timeout))
        features = [
            feature for feature in (_to_feature(element) for element in data.get("elements") or []) if feature
        ]
        logger.info(f"Overpass returned {len(features)} feature(s) for bbox {bbox.as_overpass()}")
        return features


def _to_feature(element: Any) -> RawFeature | None:
    if not isinstance(element, dict):
        return None
    try:
        element_id = int(element["id"])
    except (KeyError, TypeError, ValueError):
        return None
    source = element.get("center") or element
    try:
        location = GeoPoint(lat=float(source["lat"]), lng=float(source["lon"]))
    except (KeyError, TypeError, ValueError):
        location = None
    tags = element.get("tags")
    if not isinstance(tags, dict):
        tags = {}
    return RawFeature(
        element_type=str(element.get("type", "node")),
        element_id=element_id,
        tags={str(k): str(v) for k, v in tags.items()},
        location=location,
    )


def check_health(url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check Overpass reachability with a trivial count query."""
    client = OverpassClient(url=url, timeout=10.0, max_retries=0, transport=transport)
    try:
        client.query("[out:json][timeout:5];node(0,0,0.0001,0.0001);out count;")
        return True
    except ProviderError:
        return False
