"""Vehicle reference adapters - Implementations of VehicleRepositoryPort.

Available implementations:
- CSVVehicleRepository: Loads vehicle classes from the seeded CSV file
"""

from .csv_repository import CSVVehicleRepository, parse_vehicle_row

__all__ = ["CSVVehicleRepository", "parse_vehicle_row"]
