"""Immutable domain models for the Commute Impact Calculator.

All models are frozen dataclasses with slots. They have no external
dependencies and represent the core business concepts: vehicle
reference data, travel patterns, the calculation request (as a tagged
commute variant) and the calculation result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from .errors import ValidationError


class VehicleCategory(str, Enum):
    """Transport mode / vehicle category selectable in the calculator."""

    CAR = "car"
    BIKE = "bike"
    BUS = "bus"
    METRO = "metro"
    AUTO = "auto"
    WALKING = "walking"

    @property
    def is_private(self) -> bool:
        """Private vehicles are scored from a vehicle class and occupancy."""
        return self in (VehicleCategory.CAR, VehicleCategory.BIKE)

    @classmethod
    def parse(cls, value: str) -> VehicleCategory:
        """Parse a transport mode string, raising ValidationError if unknown."""
        normalized = (value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(
                f"Unknown transport mode: {value!r}",
                field_name="transport_mode",
            )


class TimingClass(str, Enum):
    """When the trip happens relative to rush hours."""

    BOTH_PEAKS = "both-peaks"
    MORNING_PEAK = "morning-peak"
    EVENING_PEAK = "evening-peak"
    OFF_PEAK = "off-peak"
    NIGHT = "night"

    @property
    def is_peak(self) -> bool:
        return self in (
            TimingClass.BOTH_PEAKS,
            TimingClass.MORNING_PEAK,
            TimingClass.EVENING_PEAK,
        )


class FrequencyClass(str, Enum):
    """How often the trip recurs."""

    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    FREQUENT = "frequent"
    OCCASIONAL = "occasional"
    RARE = "rare"


class ConfidenceLevel(str, Enum):
    """Coarse display hint on how complete the input data was."""

    A = "A"
    B = "B"
    C = "C"


class ScoreBand(str, Enum):
    """Qualitative band for a final impact score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"

    @classmethod
    def for_score(cls, score: int) -> ScoreBand:
        if score <= 30:
            return cls.EXCELLENT
        if score <= 50:
            return cls.GOOD
        if score <= 70:
            return cls.MODERATE
        return cls.POOR


@dataclass(frozen=True, slots=True)
class VehicleClass:
    """One selectable vehicle configuration from the reference table.

    Attributes:
        id: Reference table identifier
        name: Display name (e.g. 'Hatchback (Swift, Baleno)')
        category: Vehicle category
        emission_factor: kg CO2 per km
        fuel_cost_per_km: Running cost per km in local currency
        avg_speed_kmh: Average urban speed
        base_impact_score: Stored severity score, 0-100
    """

    id: int
    name: str
    category: VehicleCategory
    emission_factor: float
    fuel_cost_per_km: float
    avg_speed_kmh: int
    base_impact_score: int

    def __post_init__(self) -> None:
        """Validate reference data ranges."""
        if self.emission_factor < 0:
            raise ValueError(
                f"Emission factor must be non-negative, got {self.emission_factor}"
            )
        if self.fuel_cost_per_km < 0:
            raise ValueError(
                f"Fuel cost per km must be non-negative, got {self.fuel_cost_per_km}"
            )
        if self.avg_speed_kmh <= 0:
            raise ValueError(
                f"Average speed must be positive, got {self.avg_speed_kmh}"
            )
        if not 0 <= self.base_impact_score <= 100:
            raise ValueError(
                f"Base impact score must be between 0 and 100, "
                f"got {self.base_impact_score}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "emissionFactor": self.emission_factor,
            "fuelCostPerKm": self.fuel_cost_per_km,
            "avgSpeedKmh": self.avg_speed_kmh,
            "baseImpactScore": self.base_impact_score,
        }


@dataclass(frozen=True, slots=True)
class TravelPattern:
    """A user-facing travel pattern and the two axes it resolves to."""

    identifier: str
    timing: TimingClass
    frequency: FrequencyClass


@dataclass(frozen=True, slots=True)
class PrivateVehicle:
    """Commute by car or bike: scored from a vehicle class and occupancy."""

    mode: VehicleCategory
    vehicle_class_id: int
    occupancy: int = 1


@dataclass(frozen=True, slots=True)
class SustainableMode:
    """Commute by shared or active transport: scored from the mode alone.

    Occupancy is carried for validation and record keeping only.
    """

    mode: VehicleCategory
    occupancy: int = 1


Commute = Union[PrivateVehicle, SustainableMode]


@dataclass(frozen=True, slots=True)
class CalculationInput:
    """A request to the impact scoring engine.

    Attributes:
        commute: Private-vehicle or sustainable-mode variant
        distance_km: One-way route distance
        travel_pattern: Travel pattern identifier (e.g. 'daily-commute')
        session_id: Opaque anonymous session identifier
        origin: Origin display string (not used in scoring)
        destination: Destination display string (not used in scoring)
    """

    commute: Commute
    distance_km: float
    travel_pattern: str
    session_id: str = ""
    origin: str = ""
    destination: str = ""

    @classmethod
    def create(
        cls,
        transport_mode: str,
        distance_km: float,
        travel_pattern: str,
        *,
        vehicle_class_id: Optional[int] = None,
        occupancy: Optional[int] = None,
        session_id: str = "",
        origin: str = "",
        destination: str = "",
    ) -> CalculationInput:
        """Build an input from flat request fields.

        The commute variant is decided here once, so the engine never
        re-tests the mode string. A vehicle_class_id sent with a bus,
        metro, auto or walking mode is ignored: those modes carry no
        vehicle class, and the form may still hold one from an earlier
        car or bike selection.

        Raises:
            ValidationError: If the mode is unknown or a car/bike request
                has no vehicle class.
        """
        mode = VehicleCategory.parse(transport_mode)
        seats = 1 if occupancy is None else occupancy

        commute: Commute
        if mode.is_private:
            if vehicle_class_id is None:
                raise ValidationError(
                    f"A vehicle type is required when travelling by {mode.value}",
                    field_name="vehicle_class_id",
                )
            commute = PrivateVehicle(
                mode=mode,
                vehicle_class_id=vehicle_class_id,
                occupancy=seats,
            )
        else:
            commute = SustainableMode(mode=mode, occupancy=seats)

        return cls(
            commute=commute,
            distance_km=distance_km,
            travel_pattern=travel_pattern,
            session_id=session_id,
            origin=origin,
            destination=destination,
        )

    @property
    def transport_mode(self) -> VehicleCategory:
        return self.commute.mode

    @property
    def occupancy(self) -> int:
        return self.commute.occupancy

    @property
    def vehicle_class_id(self) -> Optional[int]:
        if isinstance(self.commute, PrivateVehicle):
            return self.commute.vehicle_class_id
        return None


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """Factors behind a score. raw_score is kept un-clamped for auditing."""

    vehicle_impact: int
    congestion_factor: float
    timing_multiplier: float
    frequency_multiplier: float
    occupancy: int
    raw_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vehicleImpact": self.vehicle_impact,
            "congestionFactor": self.congestion_factor,
            "timingMultiplier": self.timing_multiplier,
            "frequencyMultiplier": self.frequency_multiplier,
            "occupancy": self.occupancy,
            "rawScore": self.raw_score,
        }


@dataclass(frozen=True, slots=True)
class Confidence:
    """Confidence label with its human-readable description."""

    level: ConfidenceLevel
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level.value, "description": self.description}


@dataclass(frozen=True, slots=True)
class Alternative:
    """A suggested substitute transport choice.

    Attributes:
        type: Tag such as 'metro', 'carpool', 'timing', 'electric'
        title: Short display title
        description: One-sentence explanation
        impact_reduction: Percentage reduction relative to the current score
        time_delta: Descriptive time change (e.g. '+15-20 minutes')
        cost_savings: Projected monthly savings, never negative
        new_score: Projected score after switching, 0-100
    """

    type: str
    title: str
    description: str
    impact_reduction: int
    time_delta: str
    cost_savings: int
    new_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "impactReduction": self.impact_reduction,
            "timeDelta": self.time_delta,
            "costSavings": self.cost_savings,
            "newScore": self.new_score,
        }


@dataclass(frozen=True, slots=True)
class CalculationResult:
    """Output of the impact scoring engine.

    The score is always an integer in [0, 100]; the breakdown keeps
    the un-clamped raw score. calculation_id stays None until the
    result has been recorded.
    """

    score: int
    confidence: Confidence
    breakdown: ScoreBreakdown
    monthly_emissions: int
    monthly_cost: int
    monthly_time_hours: float
    alternatives: tuple[Alternative, ...]
    methodology: str
    transport_mode: VehicleCategory
    score_band: ScoreBand
    equivalent_commuters: int
    disclaimer: Optional[str] = None
    calculation_id: Optional[int] = None

    def with_calculation_id(self, calculation_id: Optional[int]) -> CalculationResult:
        """Return a copy tagged with the stored calculation identifier."""
        return CalculationResult(
            score=self.score,
            confidence=self.confidence,
            breakdown=self.breakdown,
            monthly_emissions=self.monthly_emissions,
            monthly_cost=self.monthly_cost,
            monthly_time_hours=self.monthly_time_hours,
            alternatives=self.alternatives,
            methodology=self.methodology,
            transport_mode=self.transport_mode,
            score_band=self.score_band,
            equivalent_commuters=self.equivalent_commuters,
            disclaimer=self.disclaimer,
            calculation_id=calculation_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-compatible representation."""
        return {
            "score": self.score,
            "scoreBand": self.score_band.value,
            "confidence": self.confidence.to_dict(),
            "breakdown": self.breakdown.to_dict(),
            "equivalentCommuters": self.equivalent_commuters,
            "monthlyEmissions": self.monthly_emissions,
            "monthlyCost": self.monthly_cost,
            "monthlyTimeHours": self.monthly_time_hours,
            "alternatives": [alt.to_dict() for alt in self.alternatives],
            "methodology": self.methodology,
            "disclaimer": self.disclaimer,
            "transportMode": self.transport_mode.value,
            "calculationId": self.calculation_id,
        }


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class LocationInfo:
    """A geocoded address."""

    formatted_address: str
    location: GeoLocation
    place_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formattedAddress": self.formatted_address,
            "lat": self.location.latitude,
            "lng": self.location.longitude,
            "placeId": self.place_id,
        }


@dataclass(frozen=True, slots=True)
class RouteInfo:
    """Driving route between two places as reported by the mapping service."""

    distance_km: float
    duration_minutes: float
    polyline: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distanceKm": self.distance_km,
            "durationMinutes": self.duration_minutes,
            "polyline": self.polyline,
        }


@dataclass(frozen=True, slots=True)
class PlacePrediction:
    """One place autocomplete suggestion."""

    description: str
    place_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "placeId": self.place_id}


@dataclass(frozen=True, slots=True)
class CalculationRecord:
    """A stored calculation as read back from the recorder."""

    id: int
    session_id: str
    transport_mode: str
    vehicle_class_id: Optional[int]
    occupancy: int
    origin: str
    destination: str
    distance_km: float
    travel_pattern: str
    timing: str
    frequency: str
    impact_score: int
    confidence: Dict[str, Any]
    breakdown: Dict[str, Any]
    monthly_emissions: float
    monthly_cost: float
    monthly_time_hours: float
    alternatives: tuple[Dict[str, Any], ...]
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "transportMode": self.transport_mode,
            "vehicleTypeId": self.vehicle_class_id,
            "occupancy": self.occupancy,
            "origin": self.origin,
            "destination": self.destination,
            "distanceKm": self.distance_km,
            "travelPattern": self.travel_pattern,
            "timing": self.timing,
            "frequency": self.frequency,
            "impactScore": self.impact_score,
            "confidence": self.confidence,
            "breakdown": self.breakdown,
            "monthlyEmissions": self.monthly_emissions,
            "monthlyCost": self.monthly_cost,
            "monthlyTimeHours": self.monthly_time_hours,
            "alternatives": list(self.alternatives),
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class UsageStats:
    """Aggregate figures over every recorded calculation."""

    total_calculations: int = 0
    average_score: int = 0
    annual_co2_kg: int = 0
    annual_cost: int = 0
    average_distance_km: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCalculations": self.total_calculations,
            "avgImpactScore": self.average_score,
            "totalCO2Kg": self.annual_co2_kg,
            "totalMoney": self.annual_cost,
            "averageDistance": self.average_distance_km,
        }


def is_positive_distance(distance_km: float) -> bool:
    """True for finite, strictly positive distances."""
    if not isinstance(distance_km, (int, float)):
        return False
    return math.isfinite(distance_km) and distance_km > 0
