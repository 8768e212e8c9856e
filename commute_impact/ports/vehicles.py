"""Vehicle reference port - Read-only lookup of vehicle classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import VehicleCategory, VehicleClass


class VehicleRepositoryPort(Protocol):
    """Port for the vehicle reference table.

    Implementations:
    - adapters/vehicles/csv_repository.py (CSVVehicleRepository)
    - adapters/storage/sql_storage.py (SQLVehicleRepository)

    Lookups are pure reads; the engine never mutates vehicle classes.
    """

    def get(self, vehicle_class_id: int) -> VehicleClass:
        """Get a vehicle class by identifier.

        Raises:
            NotFoundError: If the identifier is unknown.
        """
        ...

    def list_by_category(self, category: VehicleCategory) -> Sequence[VehicleClass]:
        """List vehicle classes of one category, in reference table order."""
        ...

    def list_all(self) -> Sequence[VehicleClass]:
        """List every vehicle class."""
        ...
