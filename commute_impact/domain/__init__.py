"""Domain layer - Core business models, methodology tables and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    CommuteImpactError,
    ConfigurationError,
    InvalidPatternError,
    NotFoundError,
    PersistenceError,
    ReferenceDataError,
    UpstreamUnavailableError,
    ValidationError,
)
from .models import (
    Alternative,
    CalculationInput,
    CalculationRecord,
    CalculationResult,
    Commute,
    Confidence,
    ConfidenceLevel,
    FrequencyClass,
    GeoLocation,
    LocationInfo,
    PlacePrediction,
    PrivateVehicle,
    RouteInfo,
    ScoreBand,
    ScoreBreakdown,
    SustainableMode,
    TimingClass,
    TravelPattern,
    UsageStats,
    VehicleCategory,
    VehicleClass,
)

__all__ = [
    # Models
    "VehicleCategory",
    "VehicleClass",
    "TimingClass",
    "FrequencyClass",
    "TravelPattern",
    "PrivateVehicle",
    "SustainableMode",
    "Commute",
    "CalculationInput",
    "ScoreBreakdown",
    "Confidence",
    "ConfidenceLevel",
    "ScoreBand",
    "Alternative",
    "CalculationResult",
    "CalculationRecord",
    "UsageStats",
    "GeoLocation",
    "LocationInfo",
    "RouteInfo",
    "PlacePrediction",
    # Errors
    "CommuteImpactError",
    "ValidationError",
    "InvalidPatternError",
    "NotFoundError",
    "UpstreamUnavailableError",
    "PersistenceError",
    "ConfigurationError",
    "ReferenceDataError",
]
