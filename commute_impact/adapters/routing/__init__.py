"""Routing adapters - Implementations of RoutingPort.

Available implementations:
- GoogleMapsRoutingAdapter: Google geocoding, directions and place autocomplete
"""

from .google_maps_adapter import GoogleMapsRoutingAdapter

__all__ = ["GoogleMapsRoutingAdapter"]
