"""Services layer - Application use cases.

- ImpactScoringEngine: pure score, metrics and alternatives calculation
- CalculationService: routing, scoring and recording of one request
"""

from .alternatives import AlternativeContext, generate_alternatives
from .calculation_service import CalculationRequest, CalculationService
from .impact_engine import ImpactScoringEngine
from .travel_patterns import list_travel_patterns, resolve_travel_pattern

__all__ = [
    "AlternativeContext",
    "CalculationRequest",
    "CalculationService",
    "ImpactScoringEngine",
    "generate_alternatives",
    "list_travel_patterns",
    "resolve_travel_pattern",
]
