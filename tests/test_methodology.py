"""Tests for the methodology tables, rounding and travel patterns."""

import pytest

from commute_impact.domain import methodology as m
from commute_impact.domain.errors import InvalidPatternError, ValidationError
from commute_impact.domain.models import (
    CalculationInput,
    FrequencyClass,
    PrivateVehicle,
    ScoreBand,
    SustainableMode,
    TimingClass,
    VehicleCategory,
    VehicleClass,
)
from commute_impact.services.travel_patterns import (
    list_travel_patterns,
    resolve_travel_pattern,
)


@pytest.mark.parametrize(
    "value,expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (78.975, 79), (26.325, 26), (43.875, 44), (2.4999, 2)],
)
def test_round_int_rounds_halves_up(value, expected):
    assert m.round_int(value) == expected


def test_round_half_up_two_digits():
    assert m.round_half_up(26.4, 2) == pytest.approx(26.4)
    assert m.round_half_up(1.005 + 1e-9, 2) == pytest.approx(1.01)


def test_congestion_factor_is_linear():
    assert m.congestion_factor(0) == 1
    assert m.congestion_factor(15) == pytest.approx(1.30)
    assert m.congestion_factor(100) == pytest.approx(3.0)


def test_timing_multiplier():
    assert m.timing_multiplier(TimingClass.BOTH_PEAKS) == 1.35
    assert m.timing_multiplier(TimingClass.EVENING_PEAK) == 1.35
    assert m.timing_multiplier(TimingClass.OFF_PEAK) == 1.10
    assert m.timing_multiplier(TimingClass.NIGHT) == 1.10


def test_trip_table_is_separate_from_multiplier_table():
    assert m.MONTHLY_TRIPS[FrequencyClass.WEEKENDS] == 8
    assert m.FREQUENCY_MULTIPLIERS[FrequencyClass.WEEKENDS] == 0.40


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        m.FREQUENCY_MULTIPLIERS[FrequencyClass.DAILY] = 2.0


def test_occupancy_ceilings():
    assert m.occupancy_ceiling(VehicleCategory.CAR) == 7
    assert m.occupancy_ceiling(VehicleCategory.BIKE) == 3
    assert m.occupancy_ceiling(VehicleCategory.BUS) == 4


@pytest.mark.parametrize(
    "identifier,timing,frequency",
    [
        ("daily-commute", TimingClass.BOTH_PEAKS, FrequencyClass.DAILY),
        ("weekday-commute", TimingClass.MORNING_PEAK, FrequencyClass.WEEKDAYS),
        ("weekend-commute", TimingClass.OFF_PEAK, FrequencyClass.WEEKENDS),
        ("frequent-trips", TimingClass.OFF_PEAK, FrequencyClass.FREQUENT),
        ("occasional-trips", TimingClass.OFF_PEAK, FrequencyClass.OCCASIONAL),
        ("rare-trips", TimingClass.OFF_PEAK, FrequencyClass.RARE),
    ],
)
def test_resolve_travel_pattern(identifier, timing, frequency):
    pattern = resolve_travel_pattern(identifier)
    assert pattern.timing == timing
    assert pattern.frequency == frequency


@pytest.mark.parametrize("identifier", ["", "daily", "DAILY-COMMUTE", None])
def test_unknown_travel_pattern(identifier):
    with pytest.raises(InvalidPatternError) as exc_info:
        resolve_travel_pattern(identifier)
    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.field_name == "travel_pattern"


def test_list_travel_patterns_keeps_table_order():
    identifiers = [p.identifier for p in list_travel_patterns()]
    assert identifiers[0] == "daily-commute"
    assert len(identifiers) == 6


@pytest.mark.parametrize(
    "score,band",
    [(0, ScoreBand.EXCELLENT), (30, ScoreBand.EXCELLENT), (31, ScoreBand.GOOD),
     (50, ScoreBand.GOOD), (70, ScoreBand.MODERATE), (71, ScoreBand.POOR)],
)
def test_score_band(score, band):
    assert ScoreBand.for_score(score) == band


class TestCalculationInput:
    def test_private_mode_builds_private_variant(self):
        calc = CalculationInput.create("Car", 10, "daily-commute", vehicle_class_id=1)

        assert isinstance(calc.commute, PrivateVehicle)
        assert calc.transport_mode == VehicleCategory.CAR
        assert calc.occupancy == 1
        assert calc.vehicle_class_id == 1

    def test_sustainable_mode_ignores_vehicle_class(self):
        calc = CalculationInput.create("metro", 10, "daily-commute", vehicle_class_id=17)

        assert isinstance(calc.commute, SustainableMode)
        assert calc.vehicle_class_id is None

    def test_private_mode_requires_vehicle_class(self):
        with pytest.raises(ValidationError) as exc_info:
            CalculationInput.create("bike", 10, "daily-commute")
        assert exc_info.value.field_name == "vehicle_class_id"

    def test_unknown_mode(self):
        with pytest.raises(ValidationError) as exc_info:
            CalculationInput.create("helicopter", 10, "daily-commute")
        assert exc_info.value.field_name == "transport_mode"


def test_vehicle_class_rejects_out_of_range_score():
    with pytest.raises(ValueError):
        VehicleClass(1, "Bad", VehicleCategory.CAR, 0.1, 1.0, 20, 120)
