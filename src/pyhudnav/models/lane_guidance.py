"""Lane assistance models.

Two layers live here:

* Engine payload models (:class:`LaneAssistance`,
  :class:`LaneRecommendation`) that validate whatever the navigation
  engine hands to its lane-assistance callback: SDK objects read by
  attribute, or mappings with camelCase or snake_case keys.
* Normalized host models (:class:`LaneGuidanceEvent`, :class:`LaneInfo`)
  that are published on the event bus.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, ClassVar

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from pyhudnav._constants import LANE_GUIDANCE_UPDATED
from pyhudnav.ingestion.normalize import identifier_name, safe_int
from pyhudnav.models._base import HudNavBaseModel


class LaneRecommendationState(enum.StrEnum):
    """Engine judgment of a lane for the next maneuver.

    Values without a mapped member resolve to ``UNKNOWN`` instead of
    raising ``ValueError``.
    """

    RECOMMENDED = "RECOMMENDED"
    NOT_RECOMMENDED = "NOT_RECOMMENDED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value: object) -> LaneRecommendationState:
        return cls.UNKNOWN


def _coerce_state(value: Any) -> LaneRecommendationState:
    return LaneRecommendationState(identifier_name(value))


DirectionIdentifier = Annotated[str, BeforeValidator(identifier_name)]


class _EnginePayloadModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        from_attributes=True,
    )


class LaneRecommendation(_EnginePayloadModel):
    """One lane as reported by the engine."""

    directions: list[DirectionIdentifier] = Field(default_factory=list)
    recommendation_state: Annotated[LaneRecommendationState, BeforeValidator(_coerce_state)] = Field(
        default=LaneRecommendationState.UNKNOWN,
        validation_alias=AliasChoices("recommendation_state", "recommendationState", "state"),
    )


class LaneAssistance(_EnginePayloadModel):
    """Lane-assistance callback payload."""

    lanes_for_next_maneuver: list[LaneRecommendation] = Field(
        default_factory=list,
        validation_alias=AliasChoices("lanes_for_next_maneuver", "lanesForNextManeuver", "lanes"),
    )
    distance_to_maneuver_in_meters: int = Field(
        validation_alias=AliasChoices(
            "distance_to_maneuver_in_meters",
            "distanceToManeuverInMeters",
            "distance_to_maneuver",
            "distanceToManeuver",
        ),
    )

    @field_validator("distance_to_maneuver_in_meters", mode="before")
    @classmethod
    def _coerce_distance(cls, value: Any) -> Any:
        parsed = safe_int(value)
        return value if parsed is None else parsed


class LaneInfo(HudNavBaseModel):
    """A lane as presented to the host layer."""

    directions: tuple[str, ...]
    recommended: bool


class LaneGuidanceEvent(HudNavBaseModel):
    """Normalized lane guidance update."""

    event_name: ClassVar[str] = LANE_GUIDANCE_UPDATED

    lanes: tuple[LaneInfo, ...]
    distance_to_maneuver_meters: int

    def to_payload(self) -> dict[str, Any]:
        """Host wire shape with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
