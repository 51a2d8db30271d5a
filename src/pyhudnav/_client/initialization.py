"""Engine handle construction for :class:`pyhudnav.client.NavigationClient`.

Owns:
- building the engine, routing and navigator handles from a credential
- registering the lane-assistance listener before success is signaled
- releasing handles left over from a previous initialization
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pyhudnav._constants import INITIALIZED_MESSAGE
from pyhudnav._redact import redact_for_log
from pyhudnav.config import Credential
from pyhudnav.engine import LaneAssistanceListener, NavigationEngineFactory, Navigator, RoutingEngine
from pyhudnav.exceptions import InitializationError, RouteRequestCancelledError
from pyhudnav.models.ack import Ack
from pyhudnav.session import DiscardedHandles, PendingRouteRequest, Session


class InitializationGateway:
    def __init__(
        self,
        *,
        session: Session,
        factory: NavigationEngineFactory,
        lane_listener: LaneAssistanceListener,
        discard_pending: Callable[[PendingRouteRequest, BaseException], None],
        logger: logging.Logger,
    ) -> None:
        self._session = session
        self._factory = factory
        self._lane_listener = lane_listener
        self._discard_pending = discard_pending
        self._logger = logger
        self._lock = asyncio.Lock()

    def construct(self, credential: Credential) -> tuple[Any, RoutingEngine, Navigator]:
        """Build all engine handles. Blocking; each step is its own failure domain."""
        if not credential.is_complete:
            raise InitializationError("Credential is incomplete: access key id and secret are required")

        try:
            engine = self._factory.create_engine(credential)
        except Exception as exc:
            raise InitializationError(f"Failed to initialize engine: {exc}") from exc

        try:
            routing_engine = self._factory.create_routing_engine(engine)
        except Exception as exc:
            raise InitializationError(f"Failed to initialize routing engine: {exc}") from exc

        try:
            navigator = self._factory.create_navigator(engine)
            navigator.set_lane_assistance_listener(self._lane_listener)
        except Exception as exc:
            raise InitializationError(f"Failed to initialize navigator: {exc}") from exc

        return engine, routing_engine, navigator

    def release(self, discarded: DiscardedHandles) -> None:
        """Detach a navigator left over from a previous initialization."""
        navigator = discarded.navigator
        if navigator is not None:
            try:
                if discarded.had_route:
                    navigator.set_route(None)
                navigator.set_lane_assistance_listener(None)
            except Exception:
                self._logger.debug("Releasing previous navigator failed", exc_info=True)
        if discarded.pending is not None:
            self._discard_pending(
                discarded.pending,
                RouteRequestCancelledError("Route request discarded by re-initialization"),
            )

    def _release_orphan(self, construction: asyncio.Future[tuple[Any, RoutingEngine, Navigator]]) -> None:
        """Detach handles whose ``initialize()`` call was abandoned."""
        if construction.cancelled() or construction.exception() is not None:
            return
        _engine, _routing_engine, navigator = construction.result()
        self._logger.debug("Releasing navigator built after initialization was abandoned")
        self.release(DiscardedHandles(navigator=navigator))

    async def initialize(self, credential: Credential, loop: asyncio.AbstractEventLoop) -> Ack:
        async with self._lock:
            self._logger.debug("Initializing navigation engine credential=%s", redact_for_log(credential))
            discarded = self._session.begin_initialize()
            self.release(discarded)
            construction = loop.run_in_executor(None, self.construct, credential)
            try:
                engine, routing_engine, navigator = await asyncio.shield(construction)
            except BaseException:
                self._session.fail_initialize()
                if not construction.done():
                    # Cancelled mid-construction: the executor still finishes.
                    construction.add_done_callback(self._release_orphan)
                raise
            self._session.complete_initialize(engine, routing_engine, navigator)
            self._logger.debug("Navigation engine initialized")
            return Ack(message=INITIALIZED_MESSAGE)
