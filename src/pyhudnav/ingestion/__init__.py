"""Ingestion layer.

This package contains adapters that receive payloads from the navigation
engine's callbacks and emit normalized domain events.
"""

__all__: list[str] = []
