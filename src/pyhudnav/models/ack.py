"""Acknowledgement returned by successful lifecycle operations."""

from __future__ import annotations

from pyhudnav.models._base import HudNavBaseModel


class Ack(HudNavBaseModel):
    """Successful completion of ``initialize`` or ``start_navigation``."""

    message: str
