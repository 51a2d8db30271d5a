"""Navigation session state.

A :class:`Session` is the single owner of the lifecycle state, the engine
handles, the current route and the pending route-request slot. Callers
and engine callback threads both touch it, so every mutation happens
under one re-entrant lock.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from pyhudnav.engine import Navigator, RoutingEngine
from pyhudnav.exceptions import InvalidTransitionError
from pyhudnav.models.ack import Ack
from pyhudnav.models.geo import RouteRequest

_logger = logging.getLogger(__name__)


class LifecycleState(enum.StrEnum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    NAVIGATING = "navigating"


#: States in which engine handles exist.
READY_STATES = frozenset({LifecycleState.INITIALIZED, LifecycleState.NAVIGATING})


@dataclass(slots=True)
class PendingRouteRequest:
    """The single in-flight route request.

    ``token`` correlates the engine's completion callback with this
    request; callbacks carrying any other token are ignored.
    """

    token: str
    request: RouteRequest
    future: asyncio.Future[Ack]
    created_at: float = field(default_factory=time.monotonic)

    def reject(self, exc: BaseException) -> None:
        """Fail the waiting caller. Safe to call from the owning loop only."""
        if not self.future.done():
            self.future.set_exception(exc)


@dataclass(slots=True)
class DiscardedHandles:
    """What a transition took away and the caller still has to clean up."""

    navigator: Navigator | None = None
    pending: PendingRouteRequest | None = None
    had_route: bool = False


class Session:
    """Mutable session state; see the module docstring for the locking rule."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._state = LifecycleState.UNINITIALIZED
        self._engine: Any = None
        self._routing_engine: RoutingEngine | None = None
        self._navigator: Navigator | None = None
        self._current_route: Any = None
        self._pending: PendingRouteRequest | None = None

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def engine(self) -> Any:
        return self._engine

    @property
    def routing_engine(self) -> RoutingEngine | None:
        return self._routing_engine

    @property
    def navigator(self) -> Navigator | None:
        return self._navigator

    @property
    def current_route(self) -> Any:
        return self._current_route

    @property
    def pending(self) -> PendingRouteRequest | None:
        return self._pending

    @property
    def is_ready(self) -> bool:
        return self._state in READY_STATES

    def _transition(self, target: LifecycleState) -> None:
        if self._state != target:
            _logger.debug("Session state %s -> %s", self._state, target)
        self._state = target

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def begin_initialize(self) -> DiscardedHandles:
        """Drop any previous handles and enter ``INITIALIZING``."""
        with self._lock:
            if self._state == LifecycleState.INITIALIZING:
                raise InvalidTransitionError("Initialization already in progress")
            discarded = DiscardedHandles(
                navigator=self._navigator,
                pending=self._pending,
                had_route=self._current_route is not None,
            )
            self._engine = None
            self._routing_engine = None
            self._navigator = None
            self._current_route = None
            self._pending = None
            self._transition(LifecycleState.INITIALIZING)
            return discarded

    def complete_initialize(self, engine: Any, routing_engine: RoutingEngine, navigator: Navigator) -> None:
        with self._lock:
            if self._state != LifecycleState.INITIALIZING:
                raise InvalidTransitionError(f"Cannot complete initialization from {self._state}")
            self._engine = engine
            self._routing_engine = routing_engine
            self._navigator = navigator
            self._transition(LifecycleState.INITIALIZED)

    def fail_initialize(self) -> None:
        with self._lock:
            self._engine = None
            self._routing_engine = None
            self._navigator = None
            self._current_route = None
            self._transition(LifecycleState.UNINITIALIZED)

    # ------------------------------------------------------------------
    # Pending route request slot
    # ------------------------------------------------------------------

    def set_pending(self, pending: PendingRouteRequest) -> PendingRouteRequest | None:
        """Occupy the pending slot, returning whatever it held before."""
        with self._lock:
            if not self.is_ready:
                raise InvalidTransitionError(f"Cannot issue a route request from {self._state}")
            previous = self._pending
            self._pending = pending
            return previous

    def release_pending(self, token: str) -> PendingRouteRequest | None:
        """Empty the slot if it still holds *token*."""
        with self._lock:
            pending = self._pending
            if pending is None or pending.token != token:
                return None
            self._pending = None
            return pending

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def start_navigating(self, route: Any) -> None:
        with self._lock:
            if not self.is_ready:
                raise InvalidTransitionError(f"Cannot start navigating from {self._state}")
            if route is None:
                raise InvalidTransitionError("Route handle must not be None")
            self._current_route = route
            self._transition(LifecycleState.NAVIGATING)

    def stop(self) -> DiscardedHandles:
        """Clear the route and pending request; ``NAVIGATING`` -> ``INITIALIZED``."""
        with self._lock:
            discarded = DiscardedHandles(
                navigator=self._navigator,
                pending=self._pending,
                had_route=self._current_route is not None,
            )
            self._current_route = None
            self._pending = None
            if self._state == LifecycleState.NAVIGATING:
                self._transition(LifecycleState.INITIALIZED)
            return discarded

    def try_navigation_target(self) -> Navigator | None:
        """Navigator to feed positions to, or ``None``.

        Never blocks: if the lock is held by a lifecycle transition the
        answer is ``None`` and the caller drops its sample.
        """
        if not self._lock.acquire(blocking=False):
            return None
        try:
            if self._state != LifecycleState.NAVIGATING or self._current_route is None:
                return None
            return self._navigator
        finally:
            self._lock.release()
