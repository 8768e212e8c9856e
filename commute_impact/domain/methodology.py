"""Fixed lookup tables of the impact scoring methodology.

These values are part of the published methodology and must not be
tuned per request. Multiplier tables (used in the score) and trip-count
tables (used in the monthly metrics) are deliberately kept apart.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping

from .models import FrequencyClass, TimingClass, VehicleCategory

# Linear congestion growth per kilometre of route.
CONGESTION_PER_KM = 0.02

PEAK_TIMING_MULTIPLIER = 1.35
OFF_PEAK_TIMING_MULTIPLIER = 1.10

FREQUENCY_MULTIPLIERS: Mapping[FrequencyClass, float] = MappingProxyType(
    {
        FrequencyClass.DAILY: 1.00,
        FrequencyClass.WEEKDAYS: 0.75,
        FrequencyClass.WEEKENDS: 0.40,
        FrequencyClass.FREQUENT: 0.50,
        FrequencyClass.OCCASIONAL: 0.25,
        FrequencyClass.RARE: 0.25,
    }
)

MONTHLY_TRIPS: Mapping[FrequencyClass, int] = MappingProxyType(
    {
        FrequencyClass.DAILY: 22,
        FrequencyClass.WEEKDAYS: 22,
        FrequencyClass.WEEKENDS: 8,
        FrequencyClass.FREQUENT: 16,
        FrequencyClass.OCCASIONAL: 8,
        FrequencyClass.RARE: 4,
    }
)

SUSTAINABLE_BASE_SCORES: Mapping[VehicleCategory, int] = MappingProxyType(
    {
        VehicleCategory.METRO: 15,
        VehicleCategory.BUS: 20,
        VehicleCategory.AUTO: 35,
        VehicleCategory.WALKING: 5,
    }
)

# Fare per km, from the seeded public transport reference rows.
SUSTAINABLE_FARE_PER_KM: Mapping[VehicleCategory, float] = MappingProxyType(
    {
        VehicleCategory.METRO: 2.50,
        VehicleCategory.BUS: 1.50,
        VehicleCategory.AUTO: 12.00,
        VehicleCategory.WALKING: 0.00,
    }
)

SUSTAINABLE_EMISSION_PER_KM = 0.05
SUSTAINABLE_SPEED_KMH = 20

OCCUPANCY_CEILINGS: Mapping[VehicleCategory, int] = MappingProxyType(
    {
        VehicleCategory.CAR: 7,
        VehicleCategory.BIKE: 3,
    }
)
DEFAULT_OCCUPANCY_CEILING = 4

TRAVEL_PATTERNS: Mapping[str, tuple[TimingClass, FrequencyClass]] = MappingProxyType(
    {
        "daily-commute": (TimingClass.BOTH_PEAKS, FrequencyClass.DAILY),
        "weekday-commute": (TimingClass.MORNING_PEAK, FrequencyClass.WEEKDAYS),
        "weekend-commute": (TimingClass.OFF_PEAK, FrequencyClass.WEEKENDS),
        "frequent-trips": (TimingClass.OFF_PEAK, FrequencyClass.FREQUENT),
        "occasional-trips": (TimingClass.OFF_PEAK, FrequencyClass.OCCASIONAL),
        "rare-trips": (TimingClass.OFF_PEAK, FrequencyClass.RARE),
    }
)

# Confidence level A requires a resolved vehicle class and a route shorter than this.
HIGH_CONFIDENCE_MAX_DISTANCE_KM = 50

MAX_ALTERNATIVES = 4

METHODOLOGY_NOTE = (
    "Score = base vehicle impact x congestion factor (1 + 2% per km) x "
    "timing multiplier x frequency multiplier / occupancy, clamped to 0-100. "
    "Public, shared and active modes use a fixed per-mode score."
)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, as the published figures do.

    The built-in round() rounds halves to even, which would make
    2.5 -> 2 instead of 3.
    """
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def round_int(value: float) -> int:
    """Round half up to an integer."""
    return int(round_half_up(value))


def timing_multiplier(timing: TimingClass) -> float:
    """Return the timing multiplier for a timing class."""
    if timing.is_peak:
        return PEAK_TIMING_MULTIPLIER
    return OFF_PEAK_TIMING_MULTIPLIER


def congestion_factor(distance_km: float) -> float:
    """Return the linear congestion multiplier for a route distance."""
    return 1 + distance_km * CONGESTION_PER_KM


def occupancy_ceiling(mode: VehicleCategory) -> int:
    """Return the maximum accepted occupancy for a mode."""
    return OCCUPANCY_CEILINGS.get(mode, DEFAULT_OCCUPANCY_CEILING)
