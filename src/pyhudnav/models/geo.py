"""Geographic request and position models."""

from __future__ import annotations

import enum

from pydantic import Field

from pyhudnav.models._base import HudNavBaseModel


class TransportMode(enum.StrEnum):
    CAR = "car"


class Waypoint(HudNavBaseModel):
    """A WGS84 coordinate used as a route endpoint."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class VehicleProfile(HudNavBaseModel):
    """Vehicle options sent with a route request.

    Opaque to this library; the default car profile is always used.
    """

    transport_mode: TransportMode = TransportMode.CAR


class RouteRequest(HudNavBaseModel):
    """Origin/destination pair submitted to the routing engine."""

    origin: Waypoint
    destination: Waypoint
    profile: VehicleProfile = Field(default_factory=VehicleProfile)

    @property
    def waypoints(self) -> list[Waypoint]:
        return [self.origin, self.destination]


class LocationSample(HudNavBaseModel):
    """A position fix forwarded to the navigator.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    speed_meters_per_second : float
        Ground speed.
    bearing_degrees : float
        Heading in degrees.
    timestamp_millis : int
        Epoch milliseconds, stamped when the sample was received.
    """

    latitude: float
    longitude: float
    speed_meters_per_second: float
    bearing_degrees: float
    timestamp_millis: int
