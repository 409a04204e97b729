"""Mapping of provider maneuver vocabularies onto :class:`TurnType`."""

from __future__ import annotations

from ...models.domain import TurnType

# OSRM maneuver types that carry a meaningful direction modifier.
_OSRM_TURNING_TYPES = {
    "turn",
    "end of road",
    "fork",
    "on ramp",
    "off ramp",
    "merge",
    "continue",
    "new name",
}

_MODIFIER_TURNS = {
    "uturn": TurnType.U_TURN,
    "sharp left": TurnType.LEFT,
    "left": TurnType.LEFT,
    "slight left": TurnType.SLIGHT_LEFT,
    "straight": TurnType.STRAIGHT,
    "slight right": TurnType.SLIGHT_RIGHT,
    "right": TurnType.RIGHT,
    "sharp right": TurnType.RIGHT,
}

# OpenRouteService instruction type codes.
_ORS_TURNS = {
    0: TurnType.LEFT,
    1: TurnType.RIGHT,
    2: TurnType.LEFT,
    3: TurnType.RIGHT,
    4: TurnType.SLIGHT_LEFT,
    5: TurnType.SLIGHT_RIGHT,
    6: TurnType.STRAIGHT,
    9: TurnType.U_TURN,
    12: TurnType.SLIGHT_LEFT,
    13: TurnType.SLIGHT_RIGHT,
}


def osrm_turn_type(maneuver_type: str | None, modifier: str | None) -> TurnType:
    if maneuver_type == "uturn" or modifier == "uturn":
        return TurnType.U_TURN
    if maneuver_type in _OSRM_TURNING_TYPES and modifier:
        return _MODIFIER_TURNS.get(modifier, TurnType.STRAIGHT)
    return TurnType.STRAIGHT


def ors_turn_type(instruction_type: int | None) -> TurnType:
    if instruction_type is None:
        return TurnType.STRAIGHT
    return _ORS_TURNS.get(instruction_type, TurnType.STRAIGHT)
