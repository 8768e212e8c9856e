"""Recorder port - Persistence of calculation history."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import (
        CalculationInput,
        CalculationRecord,
        CalculationResult,
        UsageStats,
    )


class CalculationRecorderPort(Protocol):
    """Port for storing calculations keyed by anonymous session.

    Implementation: adapters/storage/sql_storage.py (SQLCalculationRecorder)
    """

    def record(
        self,
        calculation_input: CalculationInput,
        result: CalculationResult,
    ) -> int:
        """Persist a calculation and upsert its session record.

        Repeated calls with the same session id never create duplicate
        session records.

        Returns:
            The durable calculation identifier.

        Raises:
            PersistenceError: If the write fails.
        """
        ...

    def list_for_session(self, session_id: str) -> Sequence[CalculationRecord]:
        """Return every calculation recorded for a session, in any order."""
        ...

    def get(self, calculation_id: int) -> CalculationRecord:
        """Return one stored calculation.

        Raises:
            NotFoundError: If no calculation has this identifier.
        """
        ...

    def usage_stats(self) -> UsageStats:
        """Aggregate figures over all stored calculations."""
        ...
