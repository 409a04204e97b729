import threading

import httpx
import pytest

from route_hazards.errors import AnalysisCancelledError, ProviderError
from route_hazards.models.domain import (
    BoundingBox,
    GeoPoint,
    ItineraryStep,
    LoadEnvelope,
    RawFeature,
    RouteOption,
    SeverityTier,
    VehicleEnvelope,
    worst_severity,
)
from route_hazards.services.analysis.analyzer import (
    AnalysisPolicy,
    RouteAnalyzer,
    compute_safety_score,
)
from route_hazards.services.hazards.base import HazardSource
from route_hazards.services.hazards.overpass_client import OverpassClient

# Degrees of latitude per meter on the 6,371 km sphere.
DEG_PER_METER = 1 / 111_194.93

LOAD = LoadEnvelope(height=3.0, width=3.0, length=12.0, weight=40.0)
VEHICLE = VehicleEnvelope(total_height=4.5, axle_weight=10.0, number_of_axles=4, turning_radius=12.0, vehicle_length=18.0)


def _geometry(lat: float, vertices: int = 21) -> tuple[GeoPoint, ...]:
    # ~69 m between vertices at these latitudes
    return tuple(GeoPoint(lat, round(-0.10 + i * 0.001, 6)) for i in range(vertices))


def _route(route_id: str, lat: float = 51.5, step_indices=(0, 10, 14)) -> RouteOption:
    geometry = _geometry(lat)
    steps = tuple(
        ItineraryStep(instruction=f"Step {i}", distance=69.0, duration=5.0, location=geometry[i]) for i in step_indices
    )
    return RouteOption(id=route_id, name=route_id, geometry=geometry, distance=1380.0, duration=100.0, steps=steps)


def _north_of(point: GeoPoint, meters: float) -> GeoPoint:
    return GeoPoint(point.lat + meters * DEG_PER_METER, point.lng)


def _feature(element_id: int, tags: dict, location: GeoPoint, element_type: str = "node") -> RawFeature:
    return RawFeature(element_type=element_type, element_id=element_id, tags=tags, location=location)


class DummySource(HazardSource):
    """Returns the features inside the requested bounding box."""

    def __init__(self, features):
        self.features = list(features)
        self.calls: list[BoundingBox] = []

    def fetch_candidates(self, bbox: BoundingBox):
        self.calls.append(bbox)
        return [
            f
            for f in self.features
            if bbox.south <= f.location.lat <= bbox.north and bbox.west <= f.location.lng <= bbox.east
        ]


class FailingSource(HazardSource):
    def fetch_candidates(self, bbox):
        raise ProviderError("overpass", "HTTP 504")


def test_hazard_beyond_route_buffer_is_excluded() -> None:
    route = _route("r1")
    near = _feature(1, {"railway": "level_crossing"}, _north_of(route.geometry[5], 50))
    far = _feature(2, {"railway": "level_crossing"}, _north_of(route.geometry[5], 150))
    analyzer = RouteAnalyzer(DummySource([near, far]), policy=AnalysisPolicy())

    result = analyzer.analyze_route(route, LOAD, VEHICLE)

    assert [h.id for h in result.hazards] == ["osm-node-1"]
    # the excluded hazard was inside the queried box
    bbox = analyzer.source.calls[0]
    assert bbox.south <= far.location.lat <= bbox.north


def test_hazards_are_classified_and_scored() -> None:
    route = _route("r1")
    bridge = _feature(1, {"bridge": "yes", "maxheight": "4.4"}, route.geometry[3], element_type="way")
    crossing = _feature(2, {"railway": "level_crossing"}, route.geometry[8])
    tall_bridge = _feature(3, {"bridge": "yes", "maxheight": "6.0"}, route.geometry[12], element_type="way")
    analyzer = RouteAnalyzer(DummySource([bridge, crossing, tall_bridge]), policy=AnalysisPolicy())

    result = analyzer.analyze_route(route, LOAD, VEHICLE)

    severities = {h.id: h.severity for h in result.hazards}
    assert severities == {
        "osm-way-1": SeverityTier.UNSAFE,
        "osm-node-2": SeverityTier.CAUTION,
        "osm-way-3": SeverityTier.SAFE,
    }
    assert result.safety_score == 75.0
    assert result.overall_severity is SeverityTier.UNSAFE


def test_hazards_attach_to_every_step_within_step_buffer() -> None:
    route = _route("r1", step_indices=(0, 10, 14))
    crossing = _feature(1, {"railway": "level_crossing"}, _north_of(route.geometry[10], 50))
    analyzer = RouteAnalyzer(DummySource([crossing]), policy=AnalysisPolicy())

    result = analyzer.analyze_route(route, LOAD, VEHICLE)

    assigned = [[h.id for h in step.hazards] for step in result.steps]
    assert assigned == [[], ["osm-node-1"], ["osm-node-1"]]
    assert [step.instruction for step in result.steps] == ["Step 0", "Step 10", "Step 14"]


def test_routes_sorted_by_safety_score() -> None:
    route_a = _route("a", lat=51.5)
    route_b = _route("b", lat=52.5)
    route_c = _route("c", lat=53.5)
    features = [
        _feature(1, {"bridge": "yes", "maxheight": "4.0"}, route_a.geometry[4], element_type="way"),
        _feature(2, {"railway": "level_crossing"}, route_b.geometry[2]),
        _feature(3, {"railway": "level_crossing"}, route_b.geometry[9]),
        _feature(4, {"power": "line"}, route_b.geometry[15], element_type="way"),
    ]
    analyzer = RouteAnalyzer(DummySource(features), policy=AnalysisPolicy(), max_workers=3)

    ranked = analyzer.analyze_routes([route_a, route_b, route_c], LOAD, VEHICLE)

    assert [r.id for r in ranked] == ["c", "b", "a"]
    assert [r.safety_score for r in ranked] == [100.0, 85.0, 80.0]
    assert [r.overall_severity for r in ranked] == [SeverityTier.SAFE, SeverityTier.CAUTION, SeverityTier.UNSAFE]


def test_equal_scores_keep_input_order() -> None:
    routes = [_route(f"r{i}", lat=50.0 + i) for i in range(4)]
    analyzer = RouteAnalyzer(DummySource([]), policy=AnalysisPolicy(), max_workers=4)

    ranked = analyzer.analyze_routes(routes, LOAD, VEHICLE)

    assert [r.id for r in ranked] == ["r0", "r1", "r2", "r3"]


def test_overall_severity_matches_worst_hazard() -> None:
    route = _route("r1")
    features = [
        _feature(1, {"maxwidth": "3.2"}, route.geometry[1], element_type="way"),
        _feature(2, {"maxweight": "100"}, route.geometry[6], element_type="way"),
    ]
    result = RouteAnalyzer(DummySource(features), policy=AnalysisPolicy()).analyze_route(route, LOAD, VEHICLE)

    assert result.overall_severity is worst_severity(h.severity for h in result.hazards)
    assert result.overall_severity is SeverityTier.CAUTION


def test_failing_hazard_source_degrades_to_safe() -> None:
    routes = [_route("r1"), _route("r2", lat=52.0)]
    analyzer = RouteAnalyzer(FailingSource(), policy=AnalysisPolicy(), max_workers=2)

    ranked = analyzer.analyze_routes(routes, LOAD, VEHICLE)

    assert [r.id for r in ranked] == ["r1", "r2"]
    for route in ranked:
        assert route.hazards == ()
        assert route.safety_score == 100.0
        assert route.overall_severity is SeverityTier.SAFE


def test_analysis_is_idempotent() -> None:
    route = _route("r1")
    features = [
        _feature(1, {"bridge": "yes", "maxheight": "4.6"}, route.geometry[3], element_type="way"),
        _feature(2, {"railway": "level_crossing"}, route.geometry[11]),
    ]
    analyzer = RouteAnalyzer(DummySource(features), policy=AnalysisPolicy())

    assert analyzer.analyze_route(route, LOAD, VEHICLE) == analyzer.analyze_route(route, LOAD, VEHICLE)


def test_route_buffer_is_configurable() -> None:
    route = _route("r1")
    feature = _feature(1, {"railway": "level_crossing"}, _north_of(route.geometry[5], 150))
    analyzer = RouteAnalyzer(DummySource([feature]), policy=AnalysisPolicy(route_buffer_m=200.0))

    assert len(analyzer.analyze_route(route, LOAD, VEHICLE).hazards) == 1


@pytest.mark.parametrize("max_workers", [1, 4])
def test_cancelled_analysis_raises(max_workers) -> None:
    cancel = threading.Event()
    cancel.set()
    analyzer = RouteAnalyzer(DummySource([]), policy=AnalysisPolicy(), max_workers=max_workers)

    with pytest.raises(AnalysisCancelledError):
        analyzer.analyze_routes([_route("r1"), _route("r2", lat=52.0)], LOAD, VEHICLE, cancel_event=cancel)


def test_empty_route_list() -> None:
    assert RouteAnalyzer(DummySource([]), policy=AnalysisPolicy()).analyze_routes([], LOAD, VEHICLE) == []


def test_safety_score_formula_and_clamp() -> None:
    assert compute_safety_score(0, 0) == 100.0
    assert compute_safety_score(1, 0) == 80.0
    assert compute_safety_score(0, 3) == 85.0
    assert compute_safety_score(6, 0) == 0.0
    assert compute_safety_score(2, 30) == 0.0


def test_safety_score_is_monotonic() -> None:
    for unsafe in range(8):
        for caution in range(25):
            score = compute_safety_score(unsafe, caution)
            assert 0.0 <= score <= 100.0
            assert compute_safety_score(unsafe + 1, caution) <= score
            assert compute_safety_score(unsafe, caution + 1) <= score


class BlockingSource(HazardSource):
    """Holds every lookup until ``release`` is set."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch_candidates(self, bbox):
        self.started.set()
        self.release.wait(timeout=5)
        return []


class CancellingSource(HazardSource):
    """Cancels the run from inside the first lookup."""

    def __init__(self, cancel_event: threading.Event):
        self.cancel_event = cancel_event
        self.calls = 0

    def fetch_candidates(self, bbox):
        self.calls += 1
        self.cancel_event.set()
        return []


def test_cancel_during_parallel_lookup_discards_results() -> None:
    source = BlockingSource()
    cancel = threading.Event()
    analyzer = RouteAnalyzer(source, policy=AnalysisPolicy(), max_workers=2)

    def cancel_once_started():
        source.started.wait(timeout=5)
        cancel.set()

    canceller = threading.Thread(target=cancel_once_started)
    canceller.start()
    result = None
    try:
        with pytest.raises(AnalysisCancelledError):
            result = analyzer.analyze_routes([_route("r1"), _route("r2", lat=52.0)], LOAD, VEHICLE, cancel_event=cancel)
    finally:
        source.release.set()
        canceller.join(timeout=5)

    assert result is None
    assert source.started.is_set()


def test_cancel_during_sequential_lookup_stops_the_run() -> None:
    cancel = threading.Event()
    source = CancellingSource(cancel)
    analyzer = RouteAnalyzer(source, policy=AnalysisPolicy(), max_workers=1)

    with pytest.raises(AnalysisCancelledError):
        analyzer.analyze_routes([_route("r1"), _route("r2", lat=52.0)], LOAD, VEHICLE, cancel_event=cancel)
    assert source.calls == 1


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"),
        httpx.Response(200, json={"elements": [{"type": "way", "id": 1, "lat": 51.5, "lon": -0.1, "tags": ["x"]}]}),
    ],
)
def test_bad_overpass_response_degrades_single_route(response) -> None:
    client = OverpassClient(
        url="http://overpass.test/api/interpreter",
        timeout=30.0,
        max_retries=0,
        transport=httpx.MockTransport(lambda request: response),
    )
    analyzer = RouteAnalyzer(client, policy=AnalysisPolicy(), max_workers=1)

    ranked = analyzer.analyze_routes([_route("r1")], LOAD, VEHICLE)

    assert [r.id for r in ranked] == ["r1"]
    assert ranked[0].hazards == ()
    assert ranked[0].safety_score == 100.0
