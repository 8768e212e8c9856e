"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and external
adapters. They enable dependency injection and make the system testable.

This module follows the Hexagonal Architecture pattern:
- Input ports: How the application is driven (services, HTTP API)
- Output ports: How the application drives external systems (adapters)
"""

from .cache import CachePort
from .recorder import CalculationRecorderPort
from .routing import RoutingPort
from .vehicles import VehicleRepositoryPort

__all__ = [
    # Reference data
    "VehicleRepositoryPort",
    # Persistence
    "CalculationRecorderPort",
    # Mapping
    "RoutingPort",
    # Cache
    "CachePort",
]
