"""Google Maps routing adapter.

Implements RoutingPort with:
- geopy's GoogleV3 geocoder behind a RateLimiter (no retries)
- requests.Session calls to the Directions and Places Autocomplete APIs
- Per-endpoint caching via injected CachePorts
- Bounded timeouts; transport failures become UpstreamUnavailableError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import GoogleV3

from ...config import RoutingConfig, get_config
from ...domain.errors import ConfigurationError, UpstreamUnavailableError
from ...domain.models import GeoLocation, LocationInfo, PlacePrediction, RouteInfo
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache

# Statuses meaning "the service answered, there is just nothing to return".
_EMPTY_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})


@dataclass
class GoogleMapsRoutingAdapter:
    """Mapping service adapter with caching and rate limiting.

    Attributes:
        config: Routing configuration (API key, region, timeouts, TTLs)
        geocode_cache: Cache for geocoding results
        directions_cache: Cache for route lookups
        autocomplete_cache: Cache for place predictions
        session: HTTP session used for Directions and Places calls
    """

    config: RoutingConfig = field(default_factory=lambda: get_config().routing)
    geocode_cache: CachePort[LocationInfo] = field(
        default_factory=lambda: InMemoryCache(name="geocode")
    )
    directions_cache: CachePort[RouteInfo] = field(
        default_factory=lambda: InMemoryCache(name="directions")
    )
    autocomplete_cache: CachePort[List[PlacePrediction]] = field(
        default_factory=lambda: InMemoryCache(name="autocomplete")
    )
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _require_api_key(self) -> str:
        if not self.config.api_key:
            raise ConfigurationError(
                "Mapping API key is not configured",
                setting_name="CIC_ROUTING_API_KEY",
                expected_type="str",
            )
        return self.config.api_key

    def _get_geocoder(self) -> Any:
        """Get or initialize the rate-limited geocoder."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        geolocator = GoogleV3(
            api_key=self._require_api_key(),
            timeout=self.config.timeout_seconds,
        )
        self._geocode_fn = RateLimiter(
            geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=0,
            swallow_exceptions=False,
        )
        return self._geocode_fn

    def _with_region(self, address: str) -> str:
        suffix = self.config.region_suffix
        if suffix and suffix.lower() not in address.lower():
            return f"{address}, {suffix}"
        return address

    def geocode(self, address: str) -> Optional[LocationInfo]:
        """Geocode an address within the configured region.

        Args:
            address: Free-text address or place name.

        Returns:
            LocationInfo, or None if nothing matched.

        Raises:
            ConfigurationError: If no API key is configured.
            UpstreamUnavailableError: If the geocoding service failed.
        """
        if not address or not address.strip():
            return None

        query = self._with_region(address.strip())
        cache_key = query.lower()

        cached = self.geocode_cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Geocode cache hit", extra={"query": query})
            return cached

        geocode_fn = self._get_geocoder()
        try:
            location = geocode_fn(query, region=self.config.region_code)
        except GeocoderTimedOut as e:
            self._logger.warning("Geocode timed out", extra={"query": query})
            raise UpstreamUnavailableError(
                "Geocoding service timed out",
                cause=e,
                service="geocode",
                is_timeout=True,
            )
        except GeocoderServiceError as e:
            self._logger.warning(
                "Geocode service error",
                extra={"query": query, "error": str(e)},
            )
            raise UpstreamUnavailableError(
                "Geocoding service unavailable",
                cause=e,
                service="geocode",
            )

        if location is None:
            self._logger.debug("Geocode returned no result", extra={"query": query})
            return None

        raw = location.raw or {}
        info = LocationInfo(
            formatted_address=raw.get("formatted_address", location.address),
            location=GeoLocation(
                latitude=float(location.latitude),
                longitude=float(location.longitude),
            ),
            place_id=raw.get("place_id", ""),
        )
        self.geocode_cache.set(cache_key, info, ttl=self.config.geocode_ttl_seconds)
        return info

    def route_info(self, origin: str, destination: str) -> Optional[RouteInfo]:
        """Look up the driving route between two places.

        Returns:
            RouteInfo, or None if the service found no route.
        """
        origin_q = self._with_region(origin.strip())
        destination_q = self._with_region(destination.strip())
        cache_key = f"{origin_q.lower()}|{destination_q.lower()}"

        cached = self.directions_cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Directions cache hit", extra={"key": cache_key})
            return cached

        payload = self._get_json(
            "directions",
            self.config.directions_url,
            {
                "origin": origin_q,
                "destination": destination_q,
                "mode": "driving",
                "region": self.config.region_code,
            },
        )
        if payload is None:
            return None

        routes = payload.get("routes") or []
        if not routes or not routes[0].get("legs"):
            return None

        leg = routes[0]["legs"][0]
        route = RouteInfo(
            distance_km=leg["distance"]["value"] / 1000,
            duration_minutes=round(leg["duration"]["value"] / 60, 1),
            polyline=routes[0].get("overview_polyline", {}).get("points", ""),
        )
        self._logger.info(
            "Route resolved",
            extra={"distance_km": route.distance_km, "minutes": route.duration_minutes},
        )
        self.directions_cache.set(
            cache_key, route, ttl=self.config.directions_ttl_seconds
        )
        return route

    def autocomplete(self, text: str) -> List[PlacePrediction]:
        """Suggest places in the configured region.

        Queries shorter than the configured minimum return an empty list
        without calling the service.
        """
        query = (text or "").strip()
        if len(query) < self.config.min_autocomplete_chars:
            return []

        cache_key = query.lower()
        cached = self.autocomplete_cache.get(cache_key)
        if cached is not None:
            return cached

        payload = self._get_json(
            "autocomplete",
            self.config.autocomplete_url,
            {
                "input": query,
                "location": self.config.autocomplete_location,
                "radius": self.config.autocomplete_radius_m,
                "components": f"country:{self.config.region_code}",
            },
        )
        if payload is None:
            return []

        predictions = [
            PlacePrediction(description=p["description"], place_id=p.get("place_id", ""))
            for p in payload.get("predictions", [])
            if p.get("description")
        ]
        self.autocomplete_cache.set(
            cache_key, predictions, ttl=self.config.autocomplete_ttl_seconds
        )
        return predictions

    def _get_json(
        self, service: str, url: str, params: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Single bounded GET. Returns None when the service reports no results."""
        params = {**params, "key": self._require_api_key()}
        try:
            response = self.session.get(
                url, params=params, timeout=self.config.timeout_seconds
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as e:
            self._logger.warning("Mapping request timed out", extra={"service": service})
            raise UpstreamUnavailableError(
                f"{service} request timed out",
                cause=e,
                service=service,
                is_timeout=True,
            )
        except (requests.RequestException, ValueError) as e:
            self._logger.warning(
                "Mapping request failed",
                extra={"service": service, "error": str(e)},
            )
            raise UpstreamUnavailableError(
                f"{service} request failed",
                cause=e,
                service=service,
            )

        status = payload.get("status", "OK")
        if status in _EMPTY_STATUSES:
            self._logger.debug("Mapping request found nothing", extra={"service": service})
            return None
        if status != "OK":
            self._logger.error(
                "Mapping service refused request",
                extra={
                    "service": service,
                    "status": status,
                    "error": payload.get("error_message", ""),
                },
            )
            raise UpstreamUnavailableError(
                f"{service} returned status {status}",
                service=service,
            )
        return payload
