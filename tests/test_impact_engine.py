"""Tests for the impact scoring engine."""

from unittest.mock import MagicMock

import pytest

from commute_impact.domain.errors import (
    InvalidPatternError,
    NotFoundError,
    ValidationError,
)
from commute_impact.domain.models import (
    CalculationInput,
    ConfidenceLevel,
    PrivateVehicle,
    ScoreBand,
    SustainableMode,
    VehicleCategory,
    VehicleClass,
)
from commute_impact.services import ImpactScoringEngine

HATCHBACK_ID = 1
ELECTRIC_CAR_ID = 9
SCOOTER_ID = 10


def car_input(distance_km=15, occupancy=1, pattern="daily-commute", vehicle_id=HATCHBACK_ID):
    return CalculationInput.create(
        "car",
        distance_km,
        pattern,
        vehicle_class_id=vehicle_id,
        occupancy=occupancy,
        session_id="s-1",
    )


class TestPrivateVehicleScoring:
    def test_hatchback_daily_commute(self, engine):
        result = engine.calculate(car_input())

        assert result.breakdown.raw_score == pytest.approx(78.975)
        assert result.score == 79
        assert result.breakdown.vehicle_impact == 45
        assert result.breakdown.congestion_factor == pytest.approx(1.30)
        assert result.breakdown.timing_multiplier == 1.35
        assert result.breakdown.frequency_multiplier == 1.00
        assert result.score_band == ScoreBand.POOR

    def test_hatchback_monthly_metrics(self, engine):
        result = engine.calculate(car_input())

        # 15 km x 2 x 22 trips = 660 km
        assert result.monthly_emissions == 94
        assert result.monthly_cost == 4290
        assert result.monthly_time_hours == pytest.approx(26.4)

    def test_occupancy_three_divides_score_and_drops_carpool(self, engine):
        result = engine.calculate(car_input(occupancy=3))

        assert result.breakdown.raw_score == pytest.approx(26.325)
        assert result.score == 26
        assert result.monthly_cost == 1430
        assert "carpool" not in [a.type for a in result.alternatives]

    def test_electric_car(self, engine):
        result = engine.calculate(car_input(vehicle_id=ELECTRIC_CAR_ID))

        assert result.breakdown.raw_score == pytest.approx(43.875)
        assert result.score == 44

    def test_off_peak_pattern_uses_lower_multipliers(self, engine):
        result = engine.calculate(car_input(pattern="occasional-trips"))

        assert result.breakdown.timing_multiplier == 1.10
        assert result.breakdown.frequency_multiplier == 0.25
        # 45 x 1.3 x 1.1 x 0.25 = 16.0875
        assert result.score == 16
        assert result.score_band == ScoreBand.EXCELLENT

    def test_bike_scoring(self, engine):
        result = engine.calculate(
            CalculationInput.create(
                "bike", 10, "weekday-commute", vehicle_class_id=SCOOTER_ID, occupancy=2
            )
        )

        # 25 x 1.2 x 1.35 x 0.75 / 2 = 15.1875
        assert result.score == 15
        assert "electric" not in [a.type for a in result.alternatives]

    def test_confidence_high_for_short_route(self, engine):
        result = engine.calculate(car_input(distance_km=49.9))
        assert result.confidence.level == ConfidenceLevel.A

    def test_confidence_estimated_for_long_route(self, engine):
        result = engine.calculate(car_input(distance_km=50))
        assert result.confidence.level == ConfidenceLevel.C

    def test_score_is_clamped_to_100(self, engine):
        result = engine.calculate(car_input(distance_km=200))

        assert result.breakdown.raw_score > 100
        assert result.score == 100

    def test_score_never_decreases_with_distance(self, engine):
        scores = [engine.calculate(car_input(distance_km=d)).score for d in (1, 5, 10, 20, 40, 80)]
        assert scores == sorted(scores)

    def test_score_never_increases_with_occupancy(self, engine):
        scores = [engine.calculate(car_input(occupancy=o)).score for o in range(1, 8)]
        assert scores == sorted(scores, reverse=True)

    def test_same_input_gives_same_result(self, engine):
        calc = car_input()
        assert engine.calculate(calc) == engine.calculate(calc)


class TestSustainableScoring:
    def test_walking_has_fixed_score_and_no_emissions(self, engine):
        for distance in (1, 12.5, 80):
            for pattern in ("daily-commute", "rare-trips"):
                result = engine.calculate(CalculationInput.create("walking", distance, pattern))
                assert result.score == 5
                assert result.monthly_emissions == 0
                assert result.monthly_cost == 0

    @pytest.mark.parametrize("mode", ["walking", "metro", "bus", "auto"])
    def test_single_occupant_peak_commute_gets_carpool_and_timing(self, engine, mode):
        result = engine.calculate(CalculationInput.create(mode, 5, "daily-commute", occupancy=1))

        types = [a.type for a in result.alternatives]
        assert 2 <= len(types) <= 4
        assert "carpool" in types
        assert "timing" in types

    def test_walking_alternatives(self, engine):
        result = engine.calculate(CalculationInput.create("walking", 3, "daily-commute"))

        carpool, timing = result.alternatives
        # 5 / 3 = 1.67
        assert carpool.new_score == 2
        # 5 x 0.56 = 2.8
        assert timing.new_score == 3
        assert carpool.cost_savings == timing.cost_savings == 0

    def test_bus_is_not_told_to_take_public_transport(self, engine):
        result = engine.calculate(CalculationInput.create("bus", 10, "daily-commute"))
        assert "metro" not in [a.type for a in result.alternatives]

    def test_metro_figures(self, engine):
        result = engine.calculate(CalculationInput.create("metro", 10, "daily-commute"))

        assert result.score == 15
        assert result.confidence.level == ConfidenceLevel.B
        # 10 x 0.05 x 22 = 11
        assert result.monthly_emissions == 11
        # 2.50 x 10 x 22 x 2 = 1100
        assert result.monthly_cost == 1100
        # 10 / 20 x 22 x 2 = 22
        assert result.monthly_time_hours == pytest.approx(22.0)

    def test_sustainable_breakdown_is_neutral(self, engine):
        result = engine.calculate(CalculationInput.create("bus", 10, "daily-commute"))

        breakdown = result.breakdown
        assert breakdown.vehicle_impact == 20
        assert breakdown.raw_score == 20.0
        assert breakdown.congestion_factor == 1.0
        assert breakdown.timing_multiplier == 1.0
        assert breakdown.frequency_multiplier == 1.0
        assert breakdown.occupancy == 1

    def test_auto_offers_public_transport(self, engine):
        result = engine.calculate(CalculationInput.create("auto", 10, "weekday-commute"))

        assert result.score == 35
        assert [a.type for a in result.alternatives] == ["metro", "carpool", "timing"]
        metro, carpool, timing = result.alternatives
        # 5280 - 1100
        assert metro.cost_savings == 4180
        # 5280 x 2/3
        assert carpool.cost_savings == 3520
        # single peak: 35 x 0.67 = 23.45
        assert timing.new_score == 23

    def test_sustainable_modes_never_look_up_a_vehicle(self):
        vehicles = MagicMock()
        engine = ImpactScoringEngine(vehicles=vehicles)

        for mode in ("bus", "metro", "auto", "walking"):
            engine.calculate(CalculationInput.create(mode, 8, "weekday-commute"))

        vehicles.get.assert_not_called()

    def test_sustainable_score_ignores_distance_and_pattern(self, engine):
        scores = {
            engine.calculate(CalculationInput.create("bus", d, p)).score
            for d in (1, 30, 90)
            for p in ("daily-commute", "weekend-commute")
        }
        assert scores == {20}


class TestValidation:
    @pytest.mark.parametrize("distance", [0, -3, float("nan"), float("inf")])
    def test_invalid_distance_is_rejected(self, distance):
        vehicles = MagicMock()
        engine = ImpactScoringEngine(vehicles=vehicles)

        with pytest.raises(ValidationError) as exc_info:
            engine.calculate(car_input(distance_km=distance))

        assert exc_info.value.field_name == "distance_km"
        vehicles.get.assert_not_called()

    def test_unknown_pattern_is_rejected(self, engine):
        with pytest.raises(InvalidPatternError):
            engine.calculate(car_input(pattern="sometimes"))

    @pytest.mark.parametrize("occupancy", [0, 8])
    def test_car_occupancy_bounds(self, engine, occupancy):
        with pytest.raises(ValidationError) as exc_info:
            engine.calculate(car_input(occupancy=occupancy))
        assert exc_info.value.field_name == "occupancy"

    def test_bike_occupancy_ceiling_is_three(self, engine):
        with pytest.raises(ValidationError):
            engine.calculate(
                CalculationInput.create(
                    "bike", 5, "daily-commute", vehicle_class_id=SCOOTER_ID, occupancy=4
                )
            )

    def test_fractional_occupancy_is_rejected(self, engine):
        calc = CalculationInput(
            commute=PrivateVehicle(VehicleCategory.CAR, HATCHBACK_ID, occupancy=1.5),
            distance_km=10,
            travel_pattern="daily-commute",
        )
        with pytest.raises(ValidationError):
            engine.calculate(calc)

    def test_unknown_vehicle_class(self, engine):
        with pytest.raises(NotFoundError):
            engine.calculate(car_input(vehicle_id=999))

    def test_vehicle_class_of_other_category_is_rejected(self, engine):
        with pytest.raises(ValidationError) as exc_info:
            engine.calculate(car_input(vehicle_id=SCOOTER_ID))
        assert exc_info.value.field_name == "vehicle_class_id"

    def test_sustainable_occupancy_above_four_is_rejected(self, engine):
        calc = CalculationInput(
            commute=SustainableMode(VehicleCategory.AUTO, occupancy=5),
            distance_km=10,
            travel_pattern="daily-commute",
        )
        with pytest.raises(ValidationError):
            engine.calculate(calc)


def test_engine_uses_injected_vehicle_lookup():
    vehicles = MagicMock()
    vehicles.get.return_value = VehicleClass(
        id=42,
        name="Test Car",
        category=VehicleCategory.CAR,
        emission_factor=0.1,
        fuel_cost_per_km=5.0,
        avg_speed_kmh=20,
        base_impact_score=50,
    )
    engine = ImpactScoringEngine(vehicles=vehicles, disclaimer="Estimates only")

    result = engine.calculate(car_input(distance_km=10, vehicle_id=42))

    vehicles.get.assert_called_once_with(42)
    # 50 x 1.2 x 1.35 = 81
    assert result.score == 81
    assert result.disclaimer == "Estimates only"
    assert result.calculation_id is None
