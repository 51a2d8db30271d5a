"""High-level async client for a turn-by-turn navigation session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pyhudnav._client.initialization import InitializationGateway
from pyhudnav._client.location import LocationFeed
from pyhudnav._client.routing import RouteRequestCoordinator, discard_pending
from pyhudnav._mqtt import HudMqttBridge
from pyhudnav.config import Credential, NavigationConfig
from pyhudnav.engine import NavigationEngineFactory
from pyhudnav.events import LaneGuidanceBus, LaneGuidanceCallback, LaneGuidanceStream, Subscription
from pyhudnav.exceptions import RouteRequestCancelledError
from pyhudnav.ingestion.lane_guidance import translate_lane_assistance
from pyhudnav.models.ack import Ack
from pyhudnav.session import LifecycleState, Session

_logger = logging.getLogger(__name__)


class NavigationClient:
    """Async client driving one navigation engine instance.

    Usage::

        async with NavigationClient(factory, NavigationConfig.from_env()) as nav:
            nav.on_lane_guidance(render)
            await nav.initialize()
            await nav.start_navigation(25.20, 55.27, 25.08, 55.14)
            nav.update_location(25.20, 55.27, 13.4, 90.0)
            ...
            nav.stop_navigation()

    Engine callbacks may arrive on engine-owned threads. Route results are
    marshalled onto the client's event loop; lane guidance is handed to the
    event bus without blocking the engine.
    """

    def __init__(
        self,
        factory: NavigationEngineFactory,
        config: NavigationConfig | None = None,
        *,
        on_lane_guidance: LaneGuidanceCallback | None = None,
    ) -> None:
        self._config = config or NavigationConfig()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._session = Session()
        self._bus = LaneGuidanceBus(buffer_size=self._config.event_buffer_size)
        self._gateway = InitializationGateway(
            session=self._session,
            factory=factory,
            lane_listener=self._on_lane_assistance,
            discard_pending=discard_pending,
            logger=_logger,
        )
        self._routes = RouteRequestCoordinator(session=self._session, config=self._config, logger=_logger)
        self._location = LocationFeed(session=self._session, logger=_logger)
        self._mqtt_bridge: HudMqttBridge | None = None
        self._mqtt_subscription: Subscription | None = None
        if on_lane_guidance is not None:
            self._bus.subscribe(on_lane_guidance)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> NavigationClient:
        self._bind_loop()
        await self._ensure_mqtt_started()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.stop_navigation()
        await self._stop_mqtt()
        # Listeners registered by the host outlive the context.
        self._bus.close_streams()
        self._bus.detach()
        self._loop = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> NavigationConfig:
        return self._config

    @property
    def state(self) -> LifecycleState:
        """Current lifecycle state."""
        return self._session.state

    @property
    def current_route(self) -> Any:
        """Engine route handle being navigated, or ``None``."""
        return self._session.current_route

    @property
    def has_pending_request(self) -> bool:
        return self._session.pending is not None

    @property
    def events(self) -> LaneGuidanceBus:
        """The lane guidance event bus."""
        return self._bus

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def initialize(self, credential: Credential | None = None) -> Ack:
        """Create the engine handles and wire lane guidance.

        Calling it again discards the previous handles, route and pending
        request before building new ones.

        Raises
        ------
        InitializationError
            If any handle cannot be constructed. The session is left
            ``UNINITIALIZED`` and the call may be retried.
        """
        loop = self._bind_loop()
        return await self._gateway.initialize(credential or self._config.credential, loop)

    async def start_navigation(
        self,
        origin_lat: float,
        origin_lng: float,
        dest_lat: float,
        dest_lng: float,
        *,
        timeout: float | None = None,
    ) -> Ack:
        """Calculate a route and start guidance along it.

        Raises
        ------
        NotInitializedError
            If ``initialize()`` has not completed.
        RoutingError
            If the engine reports an error or returns no route, or the
            request was superseded, cancelled or timed out.
        """
        loop = self._bind_loop()
        return await self._routes.start_navigation(
            origin_lat,
            origin_lng,
            dest_lat,
            dest_lng,
            loop=loop,
            timeout=timeout,
        )

    def update_location(self, lat: float, lng: float, speed: float, bearing: float) -> None:
        """Feed a position fix. A no-op unless navigating; never raises."""
        self._location.update_location(lat, lng, speed, bearing)

    def stop_navigation(self) -> None:
        """Clear the active route. Idempotent and safe from any state."""
        # Cleared under the session lock so a concurrent route result is never wiped.
        with self._session.lock:
            discarded = self._session.stop()
            navigator = discarded.navigator
            if navigator is not None:
                try:
                    navigator.set_route(None)
                except Exception:
                    _logger.debug("Clearing navigator route failed", exc_info=True)
        if discarded.pending is not None:
            discard_pending(discarded.pending, RouteRequestCancelledError("Navigation stopped"))

    # ------------------------------------------------------------------
    # Lane guidance
    # ------------------------------------------------------------------

    def on_lane_guidance(self, callback: LaneGuidanceCallback) -> Subscription:
        """Register *callback* for lane guidance events."""
        return self._bus.subscribe(callback)

    def lane_guidance_stream(self, maxsize: int | None = None) -> LaneGuidanceStream:
        """Async iterator over lane guidance events."""
        self._bind_loop()
        return self._bus.stream(maxsize if maxsize is not None else self._config.event_buffer_size)

    def _on_lane_assistance(self, payload: Any) -> None:
        """Lane-assistance listener registered with the navigator (engine thread)."""
        try:
            event = translate_lane_assistance(payload)
        except Exception:
            _logger.debug("Lane assistance payload rejected", exc_info=True)
            return
        if event is None:
            return
        self._bus.publish(event)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _bind_loop(self) -> asyncio.AbstractEventLoop:
        loop = self._loop
        if loop is None:
            loop = asyncio.get_running_loop()
            self._loop = loop
            self._bus.attach(loop)
        return loop

    async def _ensure_mqtt_started(self) -> None:
        """Best-effort MQTT startup (failures must not break navigation)."""
        if not self._config.mqtt_enabled:
            return
        if self._mqtt_bridge is not None and self._mqtt_bridge.is_running:
            return
        loop = self._bind_loop()
        bridge = HudMqttBridge.from_config(self._config, logger=_logger)
        try:
            await loop.run_in_executor(None, bridge.start)
        except Exception:
            _logger.debug("MQTT bridge startup failed", exc_info=True)
            return
        self._mqtt_bridge = bridge
        self._mqtt_subscription = self._bus.subscribe(bridge.publish_event)

    async def _stop_mqtt(self) -> None:
        subscription = self._mqtt_subscription
        self._mqtt_subscription = None
        if subscription is not None:
            subscription.remove()
        bridge = self._mqtt_bridge
        self._mqtt_bridge = None
        if bridge is None:
            return
        loop = self._loop or asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, bridge.stop)
        except Exception:
            _logger.debug("MQTT bridge stop failed", exc_info=True)
