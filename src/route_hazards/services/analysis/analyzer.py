"""Hazard analysis and ranking of candidate routes."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from typing import Sequence

from ...config import Settings, settings as default_settings
from ...errors import AnalysisCancelledError, ProviderError
from ...models.domain import (
    Hazard,
    ItineraryStep,
    LoadEnvelope,
    RouteOption,
    SeverityTier,
    VehicleEnvelope,
    worst_severity,
)
from ..geospatial import bounding_box, haversine_meters, is_within
from ..hazards.base import HazardSource
from ..hazards.classifier import SeverityThresholds, classify
from ..hazards.parser import parse_features

logger = logging.getLogger(__name__)

# How often a parallel analysis checks its cancellation flag.
CANCEL_POLL_SECONDS = 0.1


@dataclass(frozen=True, slots=True)
class AnalysisPolicy:
    route_buffer_m: float = 100.0
    step_buffer_m: float = 500.0
    bbox_margin_deg: float = 0.01
    unsafe_penalty: float = 20.0
    caution_penalty: float = 5.0
    thresholds: SeverityThresholds = field(default_factory=SeverityThresholds)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "AnalysisPolicy":
        config = config or default_settings
        return cls(
            route_buffer_m=config.route_buffer_meters,
            step_buffer_m=config.step_buffer_meters,
            bbox_margin_deg=config.bbox_margin_degrees,
            unsafe_penalty=config.unsafe_penalty,
            caution_penalty=config.caution_penalty,
            thresholds=SeverityThresholds.from_settings(config),
        )


def compute_safety_score(unsafe_count: int, caution_count: int, policy: AnalysisPolicy | None = None) -> float:
    policy = policy or AnalysisPolicy()
    raw = 100.0 - policy.unsafe_penalty * unsafe_count - policy.caution_penalty * caution_count
    return max(0.0, min(100.0, raw))


def overall_severity(hazards: Sequence[Hazard]) -> SeverityTier:
    return worst_severity(hazard.severity for hazard in hazards)


def assign_hazards_to_steps(
    steps: Sequence[ItineraryStep], hazards: Sequence[Hazard], buffer_m: float
) -> tuple[ItineraryStep, ...]:
    """Attach every hazard to every step closer than ``buffer_m``."""
    return tuple(
        replace(
            step,
            hazards=tuple(h for h in hazards if haversine_meters(h.location, step.location) < buffer_m),
        )
        for step in steps
    )


class RouteAnalyzer:
    def __init__(
        self,
        source: HazardSource,
        policy: AnalysisPolicy | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.source = source
        self.policy = policy or AnalysisPolicy.from_settings()
        self.max_workers = max_workers or default_settings.max_parallel_requests

    def _fetch_hazards(
        self, route: RouteOption, load: LoadEnvelope, vehicle: VehicleEnvelope
    ) -> tuple[Hazard, ...]:
        if not route.geometry:
            return ()
        bbox = bounding_box(route.geometry, self.policy.bbox_margin_deg)
        try:
            features = self.source.fetch_candidates(bbox)
        except ProviderError as e:
            logger.warning(f"Hazard lookup failed for route '{route.id}', continuing without hazards: {e}")
            return ()

        hazards: list[Hazard] = []
        for candidate in parse_features(features):
            if not is_within(candidate.location, route.geometry, self.policy.route_buffer_m):
                continue
            severity = classify(candidate, load, vehicle, self.policy.thresholds)
            hazards.append(candidate.classified(severity))
        return tuple(hazards)

    def analyze_route(self, route: RouteOption, load: LoadEnvelope, vehicle: VehicleEnvelope) -> RouteOption:
        hazards = self._fetch_hazards(route, load, vehicle)
        unsafe_count = sum(1 for h in hazards if h.severity is SeverityTier.UNSAFE)
        caution_count = sum(1 for h in hazards if h.severity is SeverityTier.CAUTION)
        analyzed = route.with_analysis(
            hazards=hazards,
            steps=assign_hazards_to_steps(route.steps, hazards, self.policy.step_buffer_m),
            overall_severity=overall_severity(hazards),
            safety_score=compute_safety_score(unsafe_count, caution_count, self.policy),
        )
        logger.info(
            f"Route '{route.id}': {len(hazards)} hazard(s), "
            f"{unsafe_count} unsafe, {caution_count} caution, score {analyzed.safety_score:.0f}"
        )
        return analyzed

    def analyze_routes(
        self,
        routes: Sequence[RouteOption],
        load: LoadEnvelope,
        vehicle: VehicleEnvelope,
        cancel_event: threading.Event | None = None,
    ) -> list[RouteOption]:
        """Analyse every route and return them best score first.

        Hazard lookups run in parallel. Equal scores keep their input order.
        Setting ``cancel_event`` abandons the run: pending lookups are
        cancelled and :class:`AnalysisCancelledError` is raised.
        """

        if not routes:
            return []
        if len(routes) == 1 or self.max_workers == 1:
            analyzed = []
            for route in routes:
                _raise_if_cancelled(cancel_event)
                analyzed.append(self.analyze_route(route, load, vehicle))
            _raise_if_cancelled(cancel_event)
        else:
            analyzed = self._analyze_parallel(routes, load, vehicle, cancel_event)
        return sorted(analyzed, key=lambda route: route.safety_score, reverse=True)

    def _analyze_parallel(
        self,
        routes: Sequence[RouteOption],
        load: LoadEnvelope,
        vehicle: VehicleEnvelope,
        cancel_event: threading.Event | None,
    ) -> list[RouteOption]:
        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(routes)))
        futures: list[Future] = []
        try:
            futures = [executor.submit(self.analyze_route, route, load, vehicle) for route in routes]
            pending = set(futures)
            while pending:
                _raise_if_cancelled(cancel_event)
                _, pending = wait(pending, timeout=CANCEL_POLL_SECONDS, return_when=FIRST_COMPLETED)
            _raise_if_cancelled(cancel_event)
            return [future.result() for future in futures]
        except AnalysisCancelledError:
            for future in futures:
                future.cancel()
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)


def _raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Route analysis cancelled by caller")
        raise AnalysisCancelledError("Route analysis was cancelled.")
