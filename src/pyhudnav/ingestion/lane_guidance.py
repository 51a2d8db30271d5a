"""Lane-assistance translation.

Turns the engine's lane-assistance callback payload into the normalized
:class:`~pyhudnav.models.lane_guidance.LaneGuidanceEvent` published to the
host layer. Stateless: the same payload always yields an equal event.
"""

from __future__ import annotations

from typing import Any

from pyhudnav.models.lane_guidance import (
    LaneAssistance,
    LaneGuidanceEvent,
    LaneInfo,
    LaneRecommendation,
    LaneRecommendationState,
)


def _translate_lane(lane: LaneRecommendation) -> LaneInfo:
    return LaneInfo(
        directions=tuple(direction.lower() for direction in lane.directions),
        recommended=lane.recommendation_state == LaneRecommendationState.RECOMMENDED,
    )


def translate_lane_assistance(payload: Any) -> LaneGuidanceEvent | None:
    """Translate an engine lane-assistance payload.

    Returns ``None`` for an absent payload; no event should be emitted.

    Raises
    ------
    pydantic.ValidationError
        If the payload does not carry a usable distance or lane list.
    """
    if payload is None:
        return None

    if isinstance(payload, LaneAssistance):
        assistance = payload
    else:
        assistance = LaneAssistance.model_validate(payload)

    return LaneGuidanceEvent(
        lanes=tuple(_translate_lane(lane) for lane in assistance.lanes_for_next_maneuver),
        distance_to_maneuver_meters=assistance.distance_to_maneuver_in_meters,
    )
