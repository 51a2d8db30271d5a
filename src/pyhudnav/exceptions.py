"""Custom exception hierarchy for pyhudnav."""

from __future__ import annotations

from typing import Any

from pyhudnav._constants import NOT_INITIALIZED, ROUTING_ERROR, SDK_INIT_ERROR


class HudNavError(Exception):
    """Base exception for all pyhudnav errors."""


class NavigationConfigError(HudNavError):
    """Invalid or missing configuration."""


class InvalidTransitionError(HudNavError):
    """A session lifecycle transition was attempted from the wrong state.

    This signals misuse of :class:`pyhudnav.session.Session` and is never
    raised by the public client methods.
    """


class NavigationError(HudNavError):
    """Failure surfaced to the host layer, tagged with a stable error code."""

    default_code: str = ""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        self.code = code if code is not None else self.default_code
        super().__init__(message)


class InitializationError(NavigationError):
    """Engine, routing or navigator handle construction failed.

    Retryable by calling ``initialize()`` again.
    """

    default_code = SDK_INIT_ERROR


class NotInitializedError(NavigationError):
    """An operation that needs engine handles ran before ``initialize()``."""

    default_code = NOT_INITIALIZED


class RoutingError(NavigationError):
    """Route calculation failed or returned no usable route."""

    default_code = ROUTING_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        engine_error: Any = None,
    ) -> None:
        self.engine_error = engine_error
        super().__init__(message, code=code)


class RouteRequestPendingError(RoutingError):
    """Rejected because another route request is still outstanding."""


class RouteRequestSupersededError(RoutingError):
    """A newer route request replaced this one before the engine answered."""


class RouteRequestCancelledError(RoutingError):
    """The request was discarded by ``stop_navigation()`` or re-initialization."""


class RouteTimeoutError(RoutingError):
    """The engine did not answer within the configured timeout."""
