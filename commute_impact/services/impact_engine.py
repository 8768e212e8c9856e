"""Impact scoring engine.

Turns a validated calculation input into a bounded impact score,
monthly cost/emissions/time figures and ranked alternatives.

The engine is pure and synchronous: its only collaborator is the
read-only vehicle repository, so one instance can serve any number of
concurrent requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..domain import methodology as m
from ..domain.errors import ValidationError
from ..domain.models import (
    CalculationInput,
    CalculationResult,
    Confidence,
    ConfidenceLevel,
    PrivateVehicle,
    ScoreBand,
    ScoreBreakdown,
    SustainableMode,
    TravelPattern,
    VehicleCategory,
    VehicleClass,
    is_positive_distance,
)
from ..ports.vehicles import VehicleRepositoryPort
from .alternatives import AlternativeContext, generate_alternatives
from .travel_patterns import resolve_travel_pattern

CONFIDENCE_DESCRIPTIONS = {
    ConfidenceLevel.A: "High confidence - specific vehicle data and a measured route",
    ConfidenceLevel.B: "Good confidence - standard public and active transport figures",
    ConfidenceLevel.C: "Estimated - long route, figures are approximate",
}


@dataclass(frozen=True, slots=True)
class _MonthlyMetrics:
    trips: int
    emissions: int
    cost: int
    time_hours: float


@dataclass
class ImpactScoringEngine:
    """Deterministic impact calculator.

    Attributes:
        vehicles: Vehicle reference lookup
        disclaimer: Optional disclaimer attached to every result
    """

    vehicles: VehicleRepositoryPort
    disclaimer: Optional[str] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def calculate(self, calculation_input: CalculationInput) -> CalculationResult:
        """Score a commute.

        Args:
            calculation_input: The commute to score.

        Returns:
            The full calculation result (calculation_id is None).

        Raises:
            ValidationError: On non-positive distance, occupancy outside the
                mode's bound or a vehicle class of the wrong category.
            InvalidPatternError: If the travel pattern is unknown.
            NotFoundError: If the vehicle class does not exist.
        """
        pattern = self.validate(calculation_input)
        commute = calculation_input.commute

        if isinstance(commute, PrivateVehicle):
            vehicle = self.vehicles.get(commute.vehicle_class_id)
            if vehicle.category != commute.mode:
                raise ValidationError(
                    f"Vehicle type {vehicle.name!r} is not a {commute.mode.value}",
                    field_name="vehicle_class_id",
                )
            result = self._score_private(calculation_input, commute, vehicle, pattern)
        elif isinstance(commute, SustainableMode):
            result = self._score_sustainable(calculation_input, commute, pattern)
        else:
            raise ValidationError(
                f"Unsupported commute type: {type(commute).__name__}",
                field_name="transport_mode",
            )

        self._logger.debug(
            "Impact calculated",
            extra={
                "mode": commute.mode.value,
                "pattern": pattern.identifier,
                "score": result.score,
                "raw_score": result.breakdown.raw_score,
            },
        )
        return result

    def validate(self, calculation_input: CalculationInput) -> TravelPattern:
        """Check every input constraint before any arithmetic.

        Returns:
            The resolved travel pattern.
        """
        if not is_positive_distance(calculation_input.distance_km):
            raise ValidationError(
                f"Distance must be greater than zero, got {calculation_input.distance_km}",
                field_name="distance_km",
            )

        pattern = resolve_travel_pattern(calculation_input.travel_pattern)

        commute = calculation_input.commute
        occupancy = commute.occupancy
        ceiling = m.occupancy_ceiling(commute.mode)
        if isinstance(occupancy, bool) or not isinstance(occupancy, int):
            raise ValidationError(
                f"Occupancy must be a whole number, got {occupancy!r}",
                field_name="occupancy",
            )
        if not 1 <= occupancy <= ceiling:
            raise ValidationError(
                f"Occupancy for {commute.mode.value} must be between 1 and {ceiling}, "
                f"got {occupancy}",
                field_name="occupancy",
            )

        if isinstance(commute, PrivateVehicle) and commute.vehicle_class_id is None:
            raise ValidationError(
                f"A vehicle type is required when travelling by {commute.mode.value}",
                field_name="vehicle_class_id",
            )

        return pattern

    def _score_private(
        self,
        calculation_input: CalculationInput,
        commute: PrivateVehicle,
        vehicle: VehicleClass,
        pattern: TravelPattern,
    ) -> CalculationResult:
        distance = calculation_input.distance_km
        occupancy = commute.occupancy

        congestion = m.congestion_factor(distance)
        timing = m.timing_multiplier(pattern.timing)
        frequency = m.FREQUENCY_MULTIPLIERS[pattern.frequency]
        raw_score = (
            vehicle.base_impact_score * congestion * timing * frequency
        ) / occupancy
        score = clamp_score(raw_score)

        trips = m.MONTHLY_TRIPS[pattern.frequency]
        total_km = distance * 2 * trips
        metrics = _MonthlyMetrics(
            trips=trips,
            emissions=m.round_int(total_km * vehicle.emission_factor),
            cost=m.round_int(total_km * vehicle.fuel_cost_per_km / occupancy),
            time_hours=m.round_half_up(total_km / vehicle.avg_speed_kmh, 2),
        )

        breakdown = ScoreBreakdown(
            vehicle_impact=vehicle.base_impact_score,
            congestion_factor=congestion,
            timing_multiplier=timing,
            frequency_multiplier=frequency,
            occupancy=occupancy,
            raw_score=raw_score,
        )

        if distance < m.HIGH_CONFIDENCE_MAX_DISTANCE_KM:
            level = ConfidenceLevel.A
        else:
            level = ConfidenceLevel.C

        return self._build_result(calculation_input, pattern, score, breakdown, metrics, level)

    def _score_sustainable(
        self,
        calculation_input: CalculationInput,
        commute: SustainableMode,
        pattern: TravelPattern,
    ) -> CalculationResult:
        distance = calculation_input.distance_km
        mode = commute.mode
        base_score = m.SUSTAINABLE_BASE_SCORES.get(mode)
        if base_score is None:
            raise ValidationError(
                f"No fixed score for transport mode {mode.value!r}",
                field_name="transport_mode",
            )

        trips = m.MONTHLY_TRIPS[pattern.frequency]
        if mode == VehicleCategory.WALKING:
            emissions = 0
        else:
            emissions = m.round_int(distance * m.SUSTAINABLE_EMISSION_PER_KM * trips)

        metrics = _MonthlyMetrics(
            trips=trips,
            emissions=emissions,
            cost=m.round_int(m.SUSTAINABLE_FARE_PER_KM[mode] * distance * trips * 2),
            time_hours=m.round_half_up(distance / m.SUSTAINABLE_SPEED_KMH * trips * 2, 2),
        )

        breakdown = ScoreBreakdown(
            vehicle_impact=base_score,
            congestion_factor=1.0,
            timing_multiplier=1.0,
            frequency_multiplier=1.0,
            occupancy=1,
            raw_score=float(base_score),
        )

        return self._build_result(
            calculation_input,
            pattern,
            clamp_score(base_score),
            breakdown,
            metrics,
            ConfidenceLevel.B,
        )

    def _build_result(
        self,
        calculation_input: CalculationInput,
        pattern: TravelPattern,
        score: int,
        breakdown: ScoreBreakdown,
        metrics: _MonthlyMetrics,
        level: ConfidenceLevel,
    ) -> CalculationResult:
        alternatives = generate_alternatives(
            AlternativeContext(
                mode=calculation_input.transport_mode,
                score=score,
                occupancy=calculation_input.occupancy,
                timing=pattern.timing,
                distance_km=calculation_input.distance_km,
                monthly_trips=metrics.trips,
                monthly_cost=metrics.cost,
            )
        )

        return CalculationResult(
            score=score,
            confidence=Confidence(level=level, description=CONFIDENCE_DESCRIPTIONS[level]),
            breakdown=breakdown,
            monthly_emissions=metrics.emissions,
            monthly_cost=metrics.cost,
            monthly_time_hours=metrics.time_hours,
            alternatives=tuple(alternatives),
            methodology=m.METHODOLOGY_NOTE,
            transport_mode=calculation_input.transport_mode,
            score_band=ScoreBand.for_score(score),
            equivalent_commuters=m.round_int(score / 20),
            disclaimer=self.disclaimer,
        )


def clamp_score(raw_score: float) -> int:
    """Round half up and clamp to the 0-100 score range."""
    return min(100, max(0, m.round_int(raw_score)))
