from urllib.parse import parse_qs

import httpx
import pytest

from route_hazards.errors import ProviderError
from route_hazards.models.domain import BoundingBox, GeoPoint
from route_hazards.services.geocoding.nominatim_client import NominatimClient
from route_hazards.services.hazards.overpass_client import OverpassClient, check_health


def _nominatim(handler) -> NominatimClient:
    return NominatimClient(base_url="http://nominatim.test", transport=httpx.MockTransport(handler))


def test_geocode_returns_first_match() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["agent"] = request.headers.get("User-Agent")
        return httpx.Response(
            200,
            json=[
                {"lat": "51.5073219", "lon": "-0.1276474", "display_name": "London, Greater London, England"},
                {"lat": "42.98", "lon": "-81.24", "display_name": "London, Ontario"},
            ],
        )

    match = _nominatim(handler).search("London")

    assert match.location == GeoPoint(51.5073219, -0.1276474)
    assert match.display_name.startswith("London, Greater London")
    assert seen["params"] == {"format": "json", "q": "London", "limit": "1"}
    assert seen["agent"]


def test_geocode_no_match_returns_none() -> None:
    client = _nominatim(lambda request: httpx.Response(200, json=[]))
    assert client.geocode("nowhere at all") is None


def test_geocode_service_error_returns_none() -> None:
    client = _nominatim(lambda request: httpx.Response(500))
    assert client.geocode("London") is None


def test_geocode_blank_address_skips_lookup() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert _nominatim(handler).geocode("   ") is None


def test_reverse_geocode_returns_label() -> None:
    client = _nominatim(lambda request: httpx.Response(200, json={"display_name": "10 Downing Street"}))
    assert client.reverse_geocode(GeoPoint(51.5034, -0.1276)) == "10 Downing Street"


def test_reverse_geocode_falls_back_to_coordinates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    assert _nominatim(handler).reverse_geocode(GeoPoint(51.5, -0.1)) == "51.50000, -0.10000"


def test_reverse_geocode_without_label_falls_back() -> None:
    client = _nominatim(lambda request: httpx.Response(200, json={"error": "Unable to geocode"}))
    assert client.reverse_geocode(GeoPoint(0.0, 0.0)) == "0.00000, 0.00000"


def _overpass(handler) -> OverpassClient:
    return OverpassClient(
        url="http://overpass.test/api/interpreter",
        timeout=30.0,
        max_retries=0,
        transport=httpx.MockTransport(handler),
    )


def test_overpass_fetch_candidates_parses_nodes_and_ways() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["query"] = parse_qs(request.content.decode())["data"][0]
        return httpx.Response(
            200,
            json={
                "elements": [
                    {"type": "node", "id": 11, "lat": 51.5, "lon": -0.1, "tags": {"railway": "level_crossing"}},
                    {
                        "type": "way",
                        "id": 22,
                        "center": {"lat": 51.51, "lon": -0.11},
                        "tags": {"bridge": "yes", "maxheight": "4.2"},
                    },
                    {"type": "way", "id": 33, "tags": {"power": "line"}},
                    {"type": "relation"},
                ]
            },
        )

    bbox = BoundingBox(north=51.6, south=51.4, east=0.0, west=-0.2)
    features = _overpass(handler).fetch_candidates(bbox)

    assert "[timeout:25]" in seen["query"]
    assert "(51.4,-0.2,51.6,0.0)" in seen["query"]
    assert [(f.element_type, f.element_id) for f in features] == [("node", 11), ("way", 22), ("way", 33)]
    assert features[0].location == GeoPoint(51.5, -0.1)
    assert features[1].location == GeoPoint(51.51, -0.11)
    assert features[1].tags["maxheight"] == "4.2"
    assert features[2].location is None


def test_overpass_empty_result_is_valid() -> None:
    client = _overpass(lambda request: httpx.Response(200, json={"elements": []}))
    assert client.fetch_candidates(BoundingBox(north=1, south=0, east=1, west=0)) == []


def test_overpass_failure_raises_provider_error() -> None:
    client = _overpass(lambda request: httpx.Response(504))
    with pytest.raises(ProviderError):
        client.fetch_candidates(BoundingBox(north=1, south=0, east=1, west=0))


def test_overpass_health_check() -> None:
    assert check_health("http://overpass.test", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
    assert not check_health("http://overpass.test", transport=httpx.MockTransport(lambda r: httpx.Response(503)))


def _corrupt_gzip(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"definitely not gzip")


def test_geocode_undecodable_body_returns_none() -> None:
    assert _nominatim(_corrupt_gzip).geocode("London") is None


def test_reverse_geocode_undecodable_body_falls_back() -> None:
    assert _nominatim(_corrupt_gzip).reverse_geocode(GeoPoint(51.5, -0.1)) == "51.50000, -0.10000"


def test_overpass_undecodable_body_raises_provider_error() -> None:
    with pytest.raises(ProviderError):
        _overpass(_corrupt_gzip).fetch_candidates(BoundingBox(north=1, south=0, east=1, west=0))


def test_overpass_non_mapping_tags_are_ignored() -> None:
    payload = {
        "elements": [
            {"type": "way", "id": 1, "lat": 51.5, "lon": -0.1, "tags": ["x"]},
            {"type": "node", "id": 2, "lat": 51.5, "lon": -0.1, "tags": "railway=level_crossing"},
        ]
    }
    client = _overpass(lambda request: httpx.Response(200, json=payload))

    features = client.fetch_candidates(BoundingBox(north=52, south=51, east=0, west=-1))

    assert [(f.element_id, f.tags) for f in features] == [(1, {}), (2, {})]
