"""Storage adapters - SQL implementations of the recorder and vehicle ports.

Available implementations:
- SQLCalculationRecorder: Calculation history (CalculationRecorderPort)
- SQLVehicleRepository: Vehicle classes seeded into the database
"""

from .sql_storage import (
    SQLCalculationRecorder,
    SQLStorage,
    SQLVehicleRepository,
    seed_vehicle_classes,
)

__all__ = [
    "SQLCalculationRecorder",
    "SQLStorage",
    "SQLVehicleRepository",
    "seed_vehicle_classes",
]
