"""Structural interface of the external navigation engine.

The engine (route calculation, lane assistance, map matching) is a black
box. These protocols describe the capability surface the client relies
on, so SDK bindings and test doubles can be passed in interchangeably.

Callbacks registered with the engine may be invoked on threads the engine
owns.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from pyhudnav.config import Credential
from pyhudnav.models.geo import LocationSample, VehicleProfile, Waypoint

#: ``callback(error, routes)``; invoked exactly once per ``calculate_route``.
RouteCalculationCallback = Callable[[Any | None, Sequence[Any] | None], None]

#: Receives the raw lane-assistance payload, which may be ``None``.
LaneAssistanceListener = Callable[[Any | None], None]


class RoutingEngine(Protocol):
    """Route-calculation handle."""

    def calculate_route(
        self,
        waypoints: Sequence[Waypoint],
        profile: VehicleProfile,
        callback: RouteCalculationCallback,
    ) -> None: ...


class Navigator(Protocol):
    """Navigation/guidance handle."""

    def set_route(self, route: Any | None) -> None: ...

    def set_lane_assistance_listener(self, listener: LaneAssistanceListener | None) -> None: ...

    def feed_location(self, sample: LocationSample) -> None: ...


class NavigationEngineFactory(Protocol):
    """Constructs engine handles. Every method is synchronous and may raise."""

    def create_engine(self, credential: Credential) -> Any: ...

    def create_routing_engine(self, engine: Any) -> RoutingEngine: ...

    def create_navigator(self, engine: Any) -> Navigator: ...
