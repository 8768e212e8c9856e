"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for web server contexts
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, TypeVar

from .config import AppConfig, get_config

if TYPE_CHECKING:
    from .adapters.cache import InMemoryCache

T = TypeVar("T")


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        service = container.resolve(CalculationService)

        # Testing
        container = Container()
        container.register(RoutingPort, lambda: FakeRouting())
        routing = container.resolve(RoutingPort)

    Attributes:
        config: Application configuration
        caches: Named caches shared by the adapters, cleared together
    """

    config: AppConfig = field(default_factory=get_config)
    caches: Dict[str, InMemoryCache[Any]] = field(default_factory=dict)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_caches(self) -> int:
        """Empty every registered cache.

        Returns:
            Total number of entries removed.
        """
        with self._lock:
            return sum(cache.clear() for cache in self.caches.values())

    def cache_stats(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [cache.stats() for cache in self.caches.values()]

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations, singletons and caches."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()
            self.caches.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import InMemoryCache
        from .adapters.routing import GoogleMapsRoutingAdapter
        from .adapters.storage import (
            SQLCalculationRecorder,
            SQLStorage,
            SQLVehicleRepository,
        )
        from .adapters.vehicles import CSVVehicleRepository
        from .ports.recorder import CalculationRecorderPort
        from .ports.routing import RoutingPort
        from .ports.vehicles import VehicleRepositoryPort
        from .services import CalculationService, ImpactScoringEngine

        config = config or get_config()
        container = cls(config=config)
        routing_config = config.routing

        # One cache per mapping endpoint, each with its own lifetime
        container.caches.update(
            geocode=InMemoryCache(
                name="geocode",
                default_ttl_seconds=routing_config.geocode_ttl_seconds,
                max_size=routing_config.cache_max_size,
            ),
            directions=InMemoryCache(
                name="directions",
                default_ttl_seconds=routing_config.directions_ttl_seconds,
                max_size=routing_config.cache_max_size,
            ),
            autocomplete=InMemoryCache(
                name="autocomplete",
                default_ttl_seconds=routing_config.autocomplete_ttl_seconds,
                max_size=routing_config.cache_max_size,
            ),
        )

        # Storage
        container.register(SQLStorage, lambda: SQLStorage(config.storage))
        container.register(
            CalculationRecorderPort,
            lambda: SQLCalculationRecorder(container.resolve(SQLStorage)),
        )

        # Vehicle reference data based on config
        def create_vehicle_repository() -> VehicleRepositoryPort:
            if config.storage.vehicles_from_db:
                return SQLVehicleRepository(container.resolve(SQLStorage))
            return CSVVehicleRepository(config.data)

        container.register(VehicleRepositoryPort, create_vehicle_repository)

        # Routing
        container.register(
            RoutingPort,
            lambda: GoogleMapsRoutingAdapter(
                config=routing_config,
                geocode_cache=container.caches["geocode"],
                directions_cache=container.caches["directions"],
                autocomplete_cache=container.caches["autocomplete"],
            ),
        )

        # Engine
        container.register(
            ImpactScoringEngine,
            lambda: ImpactScoringEngine(
                vehicles=container.resolve(VehicleRepositoryPort),
                disclaimer=config.methodology.disclaimer,
            ),
        )

        # Main service
        def create_calculation_service() -> CalculationService:
            return CalculationService(
                engine=container.resolve(ImpactScoringEngine),
                recorder=container.resolve(CalculationRecorderPort),
                routing=container.resolve(RoutingPort),
            )

        container.register(CalculationService, create_calculation_service)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
