"""pyhudnav - Async turn-by-turn navigation session with lane guidance events."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyhudnav")
except PackageNotFoundError:
    __version__ = "0+local"
from pyhudnav._constants import LANE_GUIDANCE_UPDATED, UNKNOWN_ROUTING_ERROR
from pyhudnav.client import NavigationClient
from pyhudnav.config import Credential, NavigationConfig, RequestOverlapPolicy
from pyhudnav.engine import NavigationEngineFactory, Navigator, RoutingEngine
from pyhudnav.events import LaneGuidanceBus, LaneGuidanceStream, Subscription
from pyhudnav.exceptions import (
    HudNavError,
    InitializationError,
    InvalidTransitionError,
    NavigationConfigError,
    NavigationError,
    NotInitializedError,
    RouteRequestCancelledError,
    RouteRequestPendingError,
    RouteRequestSupersededError,
    RouteTimeoutError,
    RoutingError,
)
from pyhudnav.ingestion.lane_guidance import translate_lane_assistance
from pyhudnav.models import (
    Ack,
    LaneAssistance,
    LaneGuidanceEvent,
    LaneInfo,
    LaneRecommendation,
    LaneRecommendationState,
    LocationSample,
    RouteRequest,
    VehicleProfile,
    Waypoint,
)
from pyhudnav.session import LifecycleState, Session

__all__ = [
    "__version__",
    "LANE_GUIDANCE_UPDATED",
    "UNKNOWN_ROUTING_ERROR",
    "Ack",
    "Credential",
    "HudNavError",
    "InitializationError",
    "InvalidTransitionError",
    "LaneAssistance",
    "LaneGuidanceBus",
    "LaneGuidanceEvent",
    "LaneGuidanceStream",
    "LaneInfo",
    "LaneRecommendation",
    "LaneRecommendationState",
    "LifecycleState",
    "LocationSample",
    "NavigationClient",
    "NavigationConfig",
    "NavigationConfigError",
    "NavigationEngineFactory",
    "NavigationError",
    "Navigator",
    "NotInitializedError",
    "RequestOverlapPolicy",
    "RouteRequest",
    "RouteRequestCancelledError",
    "RouteRequestPendingError",
    "RouteRequestSupersededError",
    "RouteTimeoutError",
    "RoutingEngine",
    "RoutingError",
    "Session",
    "Subscription",
    "VehicleProfile",
    "Waypoint",
    "translate_lane_assistance",
]
