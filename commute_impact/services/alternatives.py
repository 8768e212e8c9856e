"""Alternative generation and ranking.

Candidates are generated in a fixed relevance order (public transport,
carpool, off-peak timing, electric vehicle) and the list is cut to
MAX_ALTERNATIVES. The order is intentional and is not a savings sort.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..domain.methodology import (
    MAX_ALTERNATIVES,
    SUSTAINABLE_FARE_PER_KM,
    round_int,
)
from ..domain.models import Alternative, TimingClass, VehicleCategory

PUBLIC_TRANSPORT_SCORE = 20
CARPOOL_OCCUPANCY = 3
BOTH_PEAKS_REDUCTION = 44
SINGLE_PEAK_REDUCTION = 33
ELECTRIC_REDUCTION = 40
OFF_PEAK_COST_SAVING = 0.10

# Modes already on public or active transport. Any commute scoring at or
# below the public transport score is treated the same way.
OPTIMAL_MODES = frozenset({VehicleCategory.METRO, VehicleCategory.WALKING})


@dataclass(frozen=True, slots=True)
class AlternativeContext:
    """What the alternative rules need to know about the scored commute."""

    mode: VehicleCategory
    score: int
    occupancy: int
    timing: TimingClass
    distance_km: float
    monthly_trips: int
    monthly_cost: int


def _reduction_percent(current: int, new: int) -> int:
    if current <= 0:
        return 0
    return max(0, round_int((current - new) / current * 100))


def public_transport_alternative(ctx: AlternativeContext) -> Optional[Alternative]:
    if ctx.mode in OPTIMAL_MODES or ctx.score <= PUBLIC_TRANSPORT_SCORE:
        return None

    metro_fare = (
        SUSTAINABLE_FARE_PER_KM[VehicleCategory.METRO]
        * ctx.distance_km
        * ctx.monthly_trips
        * 2
    )
    return Alternative(
        type="metro",
        title="Switch to Metro or Bus",
        description="Public transport moves the same trip off the road.",
        impact_reduction=_reduction_percent(ctx.score, PUBLIC_TRANSPORT_SCORE),
        time_delta="+15-20 minutes",
        cost_savings=max(0, round_int(ctx.monthly_cost - metro_fare)),
        new_score=PUBLIC_TRANSPORT_SCORE,
    )


def carpool_alternative(ctx: AlternativeContext) -> Optional[Alternative]:
    if ctx.occupancy >= CARPOOL_OCCUPANCY:
        return None

    share = ctx.occupancy / CARPOOL_OCCUPANCY
    return Alternative(
        type="carpool",
        title=f"Carpool with {CARPOOL_OCCUPANCY} people",
        description="Sharing the ride divides the per-person impact and cost.",
        impact_reduction=round_int((1 - share) * 100),
        time_delta="+5-10 minutes",
        cost_savings=max(0, round_int(ctx.monthly_cost * (1 - share))),
        new_score=round_int(ctx.score * share),
    )


def off_peak_alternative(ctx: AlternativeContext) -> Optional[Alternative]:
    if not ctx.timing.is_peak:
        return None

    if ctx.timing == TimingClass.BOTH_PEAKS:
        reduction = BOTH_PEAKS_REDUCTION
    else:
        reduction = SINGLE_PEAK_REDUCTION

    return Alternative(
        type="timing",
        title="Travel outside peak hours",
        description="Shifting departure away from rush hour cuts congestion impact.",
        impact_reduction=reduction,
        time_delta="-10-20 minutes",
        cost_savings=max(0, round_int(ctx.monthly_cost * OFF_PEAK_COST_SAVING)),
        new_score=round_int(ctx.score * (100 - reduction) / 100),
    )


def electric_alternative(ctx: AlternativeContext) -> Optional[Alternative]:
    if ctx.mode != VehicleCategory.CAR:
        return None

    remaining = (100 - ELECTRIC_REDUCTION) / 100
    return Alternative(
        type="electric",
        title="Switch to an electric car",
        description="An EV removes tailpipe emissions and lowers running costs.",
        impact_reduction=ELECTRIC_REDUCTION,
        time_delta="Same time",
        cost_savings=max(0, round_int(ctx.monthly_cost * remaining)),
        new_score=round_int(ctx.score * remaining),
    )


GENERATORS = (
    public_transport_alternative,
    carpool_alternative,
    off_peak_alternative,
    electric_alternative,
)


def rank_alternatives(
    candidates: Sequence[Alternative], limit: int = MAX_ALTERNATIVES
) -> List[Alternative]:
    """Keep generation order and cut the list to ``limit`` entries."""
    return list(candidates[:limit])


def generate_alternatives(ctx: AlternativeContext) -> List[Alternative]:
    """Generate and rank alternatives for a scored commute.

    Args:
        ctx: Mode, score and monthly figures of the current commute.

    Returns:
        At most MAX_ALTERNATIVES alternatives in relevance order.
    """
    candidates = [alt for alt in (gen(ctx) for gen in GENERATORS) if alt is not None]
    return rank_alternatives(candidates)
