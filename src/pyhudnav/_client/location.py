"""High-frequency position forwarding for :class:`pyhudnav.client.NavigationClient`."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pyhudnav.models.geo import LocationSample
from pyhudnav.session import Session


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class LocationFeed:
    """Forwards position samples to the navigator while a route is active.

    Outside ``NAVIGATING`` every call is a silent no-op. Nothing here
    blocks, buffers or raises; a sample the engine rejects is dropped.
    """

    def __init__(
        self,
        *,
        session: Session,
        logger: logging.Logger,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._session = session
        self._logger = logger
        self._clock = clock

    def update_location(self, lat: float, lng: float, speed: float, bearing: float) -> None:
        navigator = self._session.try_navigation_target()
        if navigator is None:
            return
        try:
            sample = LocationSample(
                latitude=lat,
                longitude=lng,
                speed_meters_per_second=speed,
                bearing_degrees=bearing,
                timestamp_millis=self._clock(),
            )
            navigator.feed_location(sample)
        except Exception:
            self._logger.debug("Location sample dropped", exc_info=True)
