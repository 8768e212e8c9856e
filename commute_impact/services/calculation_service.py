"""Calculation service - Main orchestrator.

Sequences one calculation request: resolve the route distance when the
caller did not measure it, score the commute, then record the result
against the caller's anonymous session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..domain.errors import PersistenceError, ValidationError
from ..domain.models import (
    CalculationInput,
    CalculationRecord,
    CalculationResult,
    UsageStats,
)
from ..ports.recorder import CalculationRecorderPort
from ..ports.routing import RoutingPort
from .impact_engine import ImpactScoringEngine


@dataclass(frozen=True, slots=True)
class CalculationRequest:
    """Flat calculation request as submitted by a client.

    distance_km may be left out, in which case the route distance
    between origin and destination is looked up.
    """

    transport_mode: str
    travel_pattern: str
    session_id: str
    origin: str = ""
    destination: str = ""
    distance_km: Optional[float] = None
    vehicle_class_id: Optional[int] = None
    occupancy: Optional[int] = None


@dataclass
class CalculationService:
    """Orchestrates routing, scoring and recording.

    Attributes:
        engine: Impact scoring engine
        recorder: Calculation history store
        routing: Optional mapping service used when no distance is given
    """

    engine: ImpactScoringEngine
    recorder: CalculationRecorderPort
    routing: Optional[RoutingPort] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def calculate(self, request: CalculationRequest) -> CalculationResult:
        """Score and record one commute.

        Args:
            request: The client request.

        Returns:
            The calculation result, carrying the stored calculation id, or
            None as id when the history store could not be written.

        Raises:
            ValidationError: On invalid input or when no route exists.
            NotFoundError: If the vehicle class is unknown.
            UpstreamUnavailableError: If the mapping service failed.
        """
        origin = request.origin.strip()
        destination = request.destination.strip()
        if origin and destination and origin.lower() == destination.lower():
            raise ValidationError(
                "origin and destination cannot be the same location",
                field_name="destination",
            )

        distance_km = request.distance_km
        if distance_km is None:
            distance_km = self._resolve_distance(origin, destination)

        calculation_input = CalculationInput.create(
            transport_mode=request.transport_mode,
            distance_km=distance_km,
            travel_pattern=request.travel_pattern,
            vehicle_class_id=request.vehicle_class_id,
            occupancy=request.occupancy,
            session_id=request.session_id,
            origin=origin,
            destination=destination,
        )

        result = self.engine.calculate(calculation_input)
        self._logger.info(
            "Calculation scored",
            extra={
                "mode": result.transport_mode.value,
                "score": result.score,
                "distance_km": distance_km,
            },
        )

        try:
            calculation_id = self.recorder.record(calculation_input, result)
        except PersistenceError as e:
            self._logger.warning(
                "Calculation not recorded",
                extra={"operation": e.operation, "error": str(e)},
            )
            return result

        return result.with_calculation_id(calculation_id)

    def history(self, session_id: str) -> List[CalculationRecord]:
        """Return the calculations recorded for a session, newest first."""
        if not session_id or not session_id.strip():
            raise ValidationError("A session id is required", field_name="session_id")

        records = self.recorder.list_for_session(session_id.strip())
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    def usage_stats(self) -> UsageStats:
        return self.recorder.usage_stats()

    def _resolve_distance(self, origin: str, destination: str) -> float:
        if not origin or not destination:
            raise ValidationError(
                "Either a distance or both origin and destination are required",
                field_name="distance_km",
            )
        if self.routing is None:
            raise ValidationError(
                "Route lookup is not available, please enter the distance",
                field_name="distance_km",
            )

        route = self.routing.route_info(origin, destination)
        if route is None:
            raise ValidationError(
                f"Could not find a route from {origin!r} to {destination!r}",
                field_name="destination",
            )

        self._logger.debug(
            "Route distance resolved",
            extra={"distance_km": route.distance_km},
        )
        return route.distance_km
