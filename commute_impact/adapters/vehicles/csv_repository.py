"""CSV vehicle reference repository adapter.

Loads the seeded vehicle classes from a CSV file once and serves
lookups from memory:
- Configuration injection (path from config)
- Lazy loading with an in-instance cache
- Typed errors for unknown ids and malformed rows
"""

from __future__ import annotations

import csv
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ...config import ReferenceDataConfig, get_config
from ...domain.errors import NotFoundError, ReferenceDataError
from ...domain.models import VehicleCategory, VehicleClass


@dataclass
class CSVVehicleRepository:
    """Vehicle repository backed by a CSV file.

    This adapter implements VehicleRepositoryPort.

    Attributes:
        config: Reference data configuration (paths, file names)
    """

    config: ReferenceDataConfig = field(default_factory=lambda: get_config().data)
    _logger: logging.Logger = field(init=False, repr=False)

    # Cached data, keyed by id in file order
    _vehicles: Optional[Dict[int, VehicleClass]] = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def get(self, vehicle_class_id: int) -> VehicleClass:
        """Get a vehicle class by identifier.

        Raises:
            NotFoundError: If the identifier is unknown.
        """
        vehicle = self._load().get(vehicle_class_id)
        if vehicle is None:
            raise NotFoundError(
                f"Vehicle type not found: {vehicle_class_id}",
                resource="vehicle_class",
                identifier=str(vehicle_class_id),
            )
        return vehicle

    def list_by_category(self, category: VehicleCategory) -> Sequence[VehicleClass]:
        return [v for v in self._load().values() if v.category == category]

    def list_all(self) -> Sequence[VehicleClass]:
        return list(self._load().values())

    def _load(self) -> Dict[int, VehicleClass]:
        """Load vehicle classes from CSV on first use.

        Raises:
            ReferenceDataError: If the file is missing or a row is malformed.
        """
        if self._vehicles is not None:
            return self._vehicles

        with self._lock:
            if self._vehicles is not None:
                return self._vehicles

            path = self.config.vehicles_path
            self._logger.debug("Loading vehicle classes", extra={"path": str(path)})

            try:
                vehicles = {v.id: v for v in self._read_rows()}
            except OSError as e:
                raise ReferenceDataError(
                    "Failed to read vehicle reference data",
                    file_path=str(path),
                    cause=e,
                )

            self._vehicles = vehicles
            self._logger.info(
                "Vehicle classes loaded",
                extra={"count": len(vehicles)},
            )
            return vehicles

    def _read_rows(self) -> List[VehicleClass]:
        path = self.config.vehicles_path
        vehicles: List[VehicleClass] = []

        with path.open(encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for line_no, row in enumerate(reader, start=2):
                try:
                    vehicles.append(parse_vehicle_row(row))
                except (KeyError, ValueError, TypeError) as e:
                    raise ReferenceDataError(
                        f"Malformed vehicle row at line {line_no}",
                        file_path=str(path),
                        cause=e,
                    )

        return vehicles

    def clear_cache(self) -> None:
        """Drop loaded vehicle classes so the file is read again."""
        self._vehicles = None
        self._logger.debug("Vehicle cache cleared")


def parse_vehicle_row(row: Dict[str, str]) -> VehicleClass:
    """Build a VehicleClass from one CSV row.

    Raises:
        KeyError: If a column is missing.
        ValueError: If a value cannot be parsed or is out of range.
    """
    return VehicleClass(
        id=int(row["vehicle_class_id"]),
        name=row["name"].strip(),
        category=VehicleCategory(row["category"].strip().lower()),
        emission_factor=float(row["emission_factor"]),
        fuel_cost_per_km=float(row["fuel_cost_per_km"]),
        avg_speed_kmh=int(row["avg_speed_kmh"]),
        base_impact_score=int(row["base_impact_score"]),
    )
