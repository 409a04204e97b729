"""Severity classification of hazards against a load/vehicle envelope."""

from __future__ import annotations

from dataclasses import dataclass

from ...config import Settings, settings as default_settings
from ...models.domain import (
    Clearance,
    HazardCandidate,
    LoadEnvelope,
    SeverityTier,
    VehicleEnvelope,
    WeightLimit,
    WidthLimit,
)


@dataclass(frozen=True, slots=True)
class SeverityThresholds:
    clearance_caution_margin_m: float = 0.3
    width_caution_margin_m: float = 0.5
    weight_caution_ratio: float = 0.9

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "SeverityThresholds":
        config = config or default_settings
        return cls(
            clearance_caution_margin_m=config.clearance_caution_margin_m,
            width_caution_margin_m=config.width_caution_margin_m,
            weight_caution_ratio=config.weight_caution_ratio,
        )


DEFAULT_THRESHOLDS = SeverityThresholds()


def classify(
    candidate: HazardCandidate,
    load: LoadEnvelope,
    vehicle: VehicleEnvelope,
    thresholds: SeverityThresholds = DEFAULT_THRESHOLDS,
) -> SeverityTier:
    """Severity of ``candidate`` for this load and vehicle.

    Hazards without a numeric limit (level crossings, power lines, signs we
    could not read) are always ``CAUTION``.
    """

    limit = candidate.limit

    if isinstance(limit, Clearance):
        margin = limit.meters - vehicle.total_height
        # Zero clearance means contact.
        if margin <= 0:
            return SeverityTier.UNSAFE
        if margin < thresholds.clearance_caution_margin_m:
            return SeverityTier.CAUTION
        return SeverityTier.SAFE

    if isinstance(limit, WeightLimit):
        if load.weight > limit.tonnes:
            return SeverityTier.UNSAFE
        if load.weight > limit.tonnes * thresholds.weight_caution_ratio:
            return SeverityTier.CAUTION
        return SeverityTier.SAFE

    if isinstance(limit, WidthLimit):
        margin = limit.meters - load.width
        if margin < 0:
            return SeverityTier.UNSAFE
        if margin < thresholds.width_caution_margin_m:
            return SeverityTier.CAUTION
        return SeverityTier.SAFE

    return SeverityTier.CAUTION
