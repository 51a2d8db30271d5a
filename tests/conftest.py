from __future__ import annotations

import asyncio
import threading
from collections.abc import Sequence
from typing import Any

import pytest

from pyhudnav.config import Credential, NavigationConfig
from pyhudnav.models.geo import LocationSample, VehicleProfile, Waypoint


class FakeRoutingEngine:
    """Records route requests; tests answer them via ``respond``."""

    def __init__(self, *, auto_routes: Sequence[Any] | None = None, raise_on_request: Exception | None = None) -> None:
        self.requests: list[tuple[list[Waypoint], VehicleProfile, Any]] = []
        self._auto_routes = auto_routes
        self._raise_on_request = raise_on_request

    def calculate_route(self, waypoints: Sequence[Waypoint], profile: VehicleProfile, callback: Any) -> None:
        if self._raise_on_request is not None:
            raise self._raise_on_request
        self.requests.append((list(waypoints), profile, callback))
        if self._auto_routes is not None:
            callback(None, list(self._auto_routes))

    def respond(self, error: Any = None, routes: Sequence[Any] | None = None, *, index: int = -1) -> None:
        _waypoints, _profile, callback = self.requests[index]
        callback(error, routes)

    def respond_from_thread(self, error: Any = None, routes: Sequence[Any] | None = None, *, index: int = -1) -> None:
        thread = threading.Thread(target=self.respond, args=(error, routes), kwargs={"index": index})
        thread.start()
        thread.join()


class FakeNavigator:
    def __init__(self) -> None:
        self.route_calls: list[Any] = []
        self.listener: Any = None
        self.listener_calls: list[Any] = []
        self.samples: list[LocationSample] = []
        self.feed_error: Exception | None = None

    @property
    def route(self) -> Any:
        return self.route_calls[-1] if self.route_calls else None

    def set_route(self, route: Any | None) -> None:
        self.route_calls.append(route)

    def set_lane_assistance_listener(self, listener: Any | None) -> None:
        self.listener = listener
        self.listener_calls.append(listener)

    def feed_location(self, sample: LocationSample) -> None:
        if self.feed_error is not None:
            raise self.feed_error
        self.samples.append(sample)

    def emit_lane_assistance(self, payload: Any) -> None:
        assert self.listener is not None
        self.listener(payload)

    def emit_from_thread(self, payload: Any) -> None:
        thread = threading.Thread(target=self.emit_lane_assistance, args=(payload,))
        thread.start()
        thread.join()


class FakeEngineFactory:
    def __init__(self) -> None:
        self.fail_engine: Exception | None = None
        self.fail_routing: Exception | None = None
        self.fail_navigator: Exception | None = None
        self.auto_routes: Sequence[Any] | None = None
        self.navigator_gate: threading.Event | None = None
        self.credentials: list[Credential] = []
        self.routing_engines: list[FakeRoutingEngine] = []
        self.navigators: list[FakeNavigator] = []

    @property
    def routing(self) -> FakeRoutingEngine:
        return self.routing_engines[-1]

    @property
    def navigator(self) -> FakeNavigator:
        return self.navigators[-1]

    def create_engine(self, credential: Credential) -> Any:
        self.credentials.append(credential)
        if self.fail_engine is not None:
            raise self.fail_engine
        return {"engine": len(self.credentials)}

    def create_routing_engine(self, engine: Any) -> FakeRoutingEngine:
        if self.fail_routing is not None:
            raise self.fail_routing
        routing = FakeRoutingEngine(auto_routes=self.auto_routes)
        self.routing_engines.append(routing)
        return routing

    def create_navigator(self, engine: Any) -> FakeNavigator:
        if self.navigator_gate is not None:
            self.navigator_gate.wait(timeout=5)
        if self.fail_navigator is not None:
            raise self.fail_navigator
        navigator = FakeNavigator()
        self.navigators.append(navigator)
        return navigator


async def settle(rounds: int = 5) -> None:
    """Let callbacks scheduled with call_soon_threadsafe run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def credential() -> Credential:
    return Credential(access_key_id="key-id", access_key_secret="key-secret")


@pytest.fixture
def config(credential: Credential) -> NavigationConfig:
    return NavigationConfig(credential=credential)


@pytest.fixture
def factory() -> FakeEngineFactory:
    return FakeEngineFactory()
