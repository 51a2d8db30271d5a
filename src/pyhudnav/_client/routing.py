"""Route request correlation for :class:`pyhudnav.client.NavigationClient`.

Owns:
- the single pending-request slot and its overlap policy
- marshalling the engine's route callback onto the event loop
- selecting the preferred route and entering ``NAVIGATING``
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import secrets
from collections.abc import Sequence
from typing import Any

from pyhudnav._constants import NAVIGATION_STARTED_MESSAGE, UNKNOWN_ROUTING_ERROR
from pyhudnav.config import NavigationConfig, RequestOverlapPolicy
from pyhudnav.engine import RouteCalculationCallback
from pyhudnav.exceptions import (
    NotInitializedError,
    RouteRequestPendingError,
    RouteRequestSupersededError,
    RouteTimeoutError,
    RoutingError,
)
from pyhudnav.models.ack import Ack
from pyhudnav.models.geo import RouteRequest, Waypoint
from pyhudnav.session import PendingRouteRequest, Session


def describe_routing_error(error: Any) -> str:
    """Human-readable description of an engine routing error.

    Falls back to ``"Unknown error"`` when the engine gives nothing usable.
    """
    if error is None:
        return UNKNOWN_ROUTING_ERROR
    if isinstance(error, enum.Enum):
        text = error.name
    elif isinstance(error, str):
        text = error
    else:
        description = getattr(error, "description", None) or getattr(error, "message", None)
        text = description if isinstance(description, str) else str(error)
    text = text.strip()
    return text or UNKNOWN_ROUTING_ERROR


def discard_pending(pending: PendingRouteRequest, exc: BaseException) -> None:
    """Reject *pending* from any thread."""
    loop = pending.future.get_loop()
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        pending.reject(exc)
        return
    # Owning loop already closed means nobody is waiting anymore.
    with contextlib.suppress(RuntimeError):
        loop.call_soon_threadsafe(pending.reject, exc)


class RouteRequestCoordinator:
    def __init__(
        self,
        *,
        session: Session,
        config: NavigationConfig,
        logger: logging.Logger,
    ) -> None:
        self._session = session
        self._config = config
        self._logger = logger

    async def start_navigation(
        self,
        origin_lat: float,
        origin_lng: float,
        dest_lat: float,
        dest_lng: float,
        *,
        loop: asyncio.AbstractEventLoop,
        timeout: float | None = None,
    ) -> Ack:
        session = self._session
        with session.lock:
            if not session.is_ready:
                raise NotInitializedError("Navigation engine not initialized. Call initialize() first.")
            routing_engine = session.routing_engine
            assert routing_engine is not None  # noqa: S101

            if session.pending is not None and self._config.overlap_policy == RequestOverlapPolicy.REJECT_NEW:
                raise RouteRequestPendingError("A route request is already pending")

            request = RouteRequest(
                origin=Waypoint(latitude=origin_lat, longitude=origin_lng),
                destination=Waypoint(latitude=dest_lat, longitude=dest_lng),
            )
            pending = PendingRouteRequest(
                token=secrets.token_hex(8),
                request=request,
                future=loop.create_future(),
            )
            previous = session.set_pending(pending)

        if previous is not None:
            self._logger.debug("Route request %s superseded by %s", previous.token, pending.token)
            discard_pending(previous, RouteRequestSupersededError("Route request superseded by a newer request"))

        token = pending.token
        self._logger.debug(
            "Route request %s submitted origin=(%s, %s) destination=(%s, %s)",
            token,
            origin_lat,
            origin_lng,
            dest_lat,
            dest_lng,
        )
        try:
            routing_engine.calculate_route(request.waypoints, request.profile, self._make_callback(loop, token))
        except Exception as exc:
            session.release_pending(token)
            raise RoutingError(describe_routing_error(str(exc)), engine_error=exc) from exc

        effective_timeout = timeout if timeout is not None else self._config.route_timeout
        try:
            if effective_timeout is None:
                return await pending.future
            return await asyncio.wait_for(pending.future, effective_timeout)
        except TimeoutError:
            raise RouteTimeoutError(f"Route calculation timed out after {effective_timeout:g}s") from None
        finally:
            session.release_pending(token)

    def _make_callback(self, loop: asyncio.AbstractEventLoop, token: str) -> RouteCalculationCallback:
        def _on_route_calculated(error: Any | None, routes: Sequence[Any] | None) -> None:
            # Called on an engine-owned thread.
            candidates = list(routes) if routes is not None else []
            try:
                loop.call_soon_threadsafe(self._complete, token, error, candidates)
            except RuntimeError:
                self._logger.debug("Event loop closed; route result for %s dropped", token)

        return _on_route_calculated

    def _complete(self, token: str, error: Any | None, routes: list[Any]) -> None:
        session = self._session
        failure: RoutingError | None = None
        with session.lock:
            pending = session.release_pending(token)
            if pending is None:
                self._logger.debug("Ignoring route result for stale request %s", token)
                return
            if pending.future.done():
                return

            if error is not None or not routes or routes[0] is None:
                failure = RoutingError(describe_routing_error(error), engine_error=error)
            else:
                # Engines may return several candidates; the first is preferred.
                route = routes[0]
                navigator = session.navigator
                try:
                    if navigator is not None:
                        navigator.set_route(route)
                except Exception as exc:
                    failure = RoutingError(describe_routing_error(str(exc)), engine_error=exc)
                else:
                    session.start_navigating(route)

        if failure is not None:
            self._logger.debug("Route request %s failed: %s", token, failure)
            pending.reject(failure)
            return
        self._logger.debug("Route request %s resolved; navigating", token)
        pending.future.set_result(Ack(message=NAVIGATION_STARTED_MESSAGE))
