"""Routing port - Abstraction over the third-party mapping service.

This protocol defines the contract for geocoding, route distance and
place autocomplete, allowing the mapping provider to be swapped or
stubbed in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import LocationInfo, PlacePrediction, RouteInfo


class RoutingPort(Protocol):
    """Port for mapping services.

    Implementation: adapters/routing/google_maps_adapter.py

    Every call is a single bounded-timeout request with no automatic
    retry. Transport failures raise UpstreamUnavailableError; a lookup
    with no match returns None (or an empty sequence).
    """

    def geocode(self, address: str) -> Optional[LocationInfo]:
        """Geocode an address to coordinates.

        Args:
            address: Free-text address or place name.

        Returns:
            LocationInfo, or None if the address could not be found.
        """
        ...

    def route_info(self, origin: str, destination: str) -> Optional[RouteInfo]:
        """Look up the driving route between two places.

        Returns:
            RouteInfo with the distance in km, or None if no route exists.
        """
        ...

    def autocomplete(self, text: str) -> Sequence[PlacePrediction]:
        """Suggest places matching partially typed text."""
        ...
