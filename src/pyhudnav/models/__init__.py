"""Data models for navigation requests, positions and lane guidance."""

from pyhudnav.models._base import HudNavBaseModel
from pyhudnav.models.ack import Ack
from pyhudnav.models.geo import LocationSample, RouteRequest, TransportMode, VehicleProfile, Waypoint
from pyhudnav.models.lane_guidance import (
    LaneAssistance,
    LaneGuidanceEvent,
    LaneInfo,
    LaneRecommendation,
    LaneRecommendationState,
)

__all__ = [
    "Ack",
    "HudNavBaseModel",
    "LaneAssistance",
    "LaneGuidanceEvent",
    "LaneInfo",
    "LaneRecommendation",
    "LaneRecommendationState",
    "LocationSample",
    "RouteRequest",
    "TransportMode",
    "VehicleProfile",
    "Waypoint",
]
