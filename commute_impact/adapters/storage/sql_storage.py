"""SQL calculation store.

SQLAlchemy Core tables for sessions, vehicle classes and calculations.
SQLite is used by default; PostgreSQL is selected by the database URL.

Session records are upserted with the dialect's
``INSERT ... ON CONFLICT (session_id) DO NOTHING`` so concurrent first
requests of one session can never create duplicates.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    event,
    func,
    insert,
    select,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection, Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from ...config import StorageConfig, get_config
from ...domain.errors import NotFoundError, PersistenceError
from ...domain.models import (
    CalculationInput,
    CalculationRecord,
    CalculationResult,
    UsageStats,
    VehicleCategory,
    VehicleClass,
)
from ...domain.methodology import round_half_up, round_int
from ...services.travel_patterns import resolve_travel_pattern

metadata = MetaData()

sessions_table = Table(
    "sessions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("session_id", String(64), nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

vehicle_classes_table = Table(
    "vehicle_classes",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(200), nullable=False),
    Column("category", String(20), nullable=False, index=True),
    Column("emission_factor", Float, nullable=False),
    Column("fuel_cost_per_km", Float, nullable=False),
    Column("avg_speed_kmh", Integer, nullable=False),
    Column("base_impact_score", Integer, nullable=False),
)

calculations_table = Table(
    "calculations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "session_id",
        String(64),
        ForeignKey("sessions.session_id"),
        nullable=False,
        index=True,
    ),
    Column("transport_mode", String(20), nullable=False),
    Column("vehicle_class_id", Integer, nullable=True),
    Column("occupancy", Integer, nullable=False),
    Column("origin", String(500), nullable=False, default=""),
    Column("destination", String(500), nullable=False, default=""),
    Column("distance_km", Float, nullable=False),
    Column("travel_pattern", String(50), nullable=False),
    Column("timing", String(20), nullable=False),
    Column("frequency", String(20), nullable=False),
    Column("impact_score", Integer, nullable=False),
    Column("confidence", JSON, nullable=False),
    Column("breakdown", JSON, nullable=False),
    Column("monthly_emissions", Float, nullable=False),
    Column("monthly_cost", Float, nullable=False),
    Column("monthly_time_hours", Float, nullable=False),
    Column("alternatives", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SQLStorage:
    """Owns the engine and schema shared by the SQL adapters.

    Attributes:
        config: Storage configuration (database URL, echo flag)
    """

    config: StorageConfig = field(default_factory=lambda: get_config().storage)

    _engine: Optional[Engine] = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def engine(self) -> Engine:
        """Create the engine and schema on first use."""
        if self._engine is not None:
            return self._engine

        with self._lock:
            if self._engine is None:
                try:
                    engine = self._create_engine(self.config.url)
                except (SQLAlchemyError, ImportError, OSError) as e:
                    # Bad URL or missing driver
                    self._logger.error(
                        "Database engine creation failed",
                        extra={"error": str(e)},
                    )
                    raise PersistenceError(
                        f"Could not open database: {e}",
                        operation="connect",
                        cause=e,
                    )
                self._create_schema(engine)
                self._engine = engine
        return self._engine

    def _create_engine(self, url: str) -> Engine:
        if url.startswith("sqlite"):
            db_file = url.split(":///", 1)[1] if ":///" in url else ""
            if db_file and db_file != ":memory:":
                Path(db_file).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(
                url,
                echo=self.config.echo,
                connect_args={"check_same_thread": False},
            )

            @event.listens_for(engine, "connect")
            def set_sqlite_pragma(dbapi_conn: Any, connection_record: Any) -> None:
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        else:
            engine = create_engine(
                url,
                echo=self.config.echo,
                pool_size=5,
                max_overflow=10,
                pool_recycle=3600,
                pool_pre_ping=True,
            )

        self._logger.info(
            "Database engine created",
            extra={"dialect": engine.dialect.name},
        )
        return engine

    def _create_schema(self, engine: Engine) -> None:
        try:
            metadata.create_all(engine)
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Could not create database schema",
                cause=e,
                operation="create_schema",
            )

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def insert_ignoring_conflict(self, table: Table, conflict_column: str) -> Any:
        """Dialect-specific ``INSERT ... ON CONFLICT DO NOTHING``."""
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table).on_conflict_do_nothing(
                index_elements=[conflict_column]
            )
        if dialect == "sqlite":
            return sqlite.insert(table).on_conflict_do_nothing(
                index_elements=[conflict_column]
            )
        raise PersistenceError(
            f"Unsupported database dialect: {dialect}",
            operation="upsert",
        )


@dataclass
class SQLCalculationRecorder:
    """Implements CalculationRecorderPort on top of SQLStorage."""

    storage: SQLStorage

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def record(
        self,
        calculation_input: CalculationInput,
        result: CalculationResult,
    ) -> int:
        pattern = resolve_travel_pattern(calculation_input.travel_pattern)
        now = _utcnow()

        upsert_session = self.storage.insert_ignoring_conflict(
            sessions_table, "session_id"
        ).values(session_id=calculation_input.session_id, created_at=now)

        insert_calculation = insert(calculations_table).values(
            session_id=calculation_input.session_id,
            transport_mode=calculation_input.transport_mode.value,
            vehicle_class_id=calculation_input.vehicle_class_id,
            occupancy=calculation_input.occupancy,
            origin=calculation_input.origin,
            destination=calculation_input.destination,
            distance_km=float(calculation_input.distance_km),
            travel_pattern=pattern.identifier,
            timing=pattern.timing.value,
            frequency=pattern.frequency.value,
            impact_score=result.score,
            confidence=result.confidence.to_dict(),
            breakdown=result.breakdown.to_dict(),
            monthly_emissions=result.monthly_emissions,
            monthly_cost=result.monthly_cost,
            monthly_time_hours=result.monthly_time_hours,
            alternatives=[alt.to_dict() for alt in result.alternatives],
            created_at=now,
        )

        try:
            with self.storage.engine.begin() as conn:
                conn.execute(upsert_session)
                inserted = conn.execute(insert_calculation)
                calculation_id = int(inserted.inserted_primary_key[0])
        except SQLAlchemyError as e:
            self._logger.error(
                "Calculation write failed",
                extra={"session_id": calculation_input.session_id, "error": str(e)},
            )
            raise PersistenceError(
                "Could not record calculation",
                cause=e,
                operation="record",
            )

        self._logger.debug(
            "Calculation recorded",
            extra={"calculation_id": calculation_id},
        )
        return calculation_id

    def list_for_session(self, session_id: str) -> Sequence[CalculationRecord]:
        query = (
            select(calculations_table)
            .where(calculations_table.c.session_id == session_id)
            .order_by(calculations_table.c.id)
        )
        with self._read("list_for_session") as conn:
            rows = conn.execute(query).all()
        return [_row_to_record(row) for row in rows]

    def get(self, calculation_id: int) -> CalculationRecord:
        query = select(calculations_table).where(
            calculations_table.c.id == calculation_id
        )
        with self._read("get") as conn:
            row = conn.execute(query).first()
        if row is None:
            raise NotFoundError(
                f"Calculation {calculation_id} not found",
                resource="calculation",
                identifier=str(calculation_id),
            )
        return _row_to_record(row)

    def count_sessions(self) -> int:
        with self._read("count_sessions") as conn:
            count = conn.execute(select(func.count()).select_from(sessions_table))
            return int(count.scalar_one())

    def usage_stats(self) -> UsageStats:
        c = calculations_table.c
        query = select(
            func.count(),
            func.avg(c.impact_score),
            func.sum(c.monthly_emissions),
            func.sum(c.monthly_cost),
            func.avg(c.distance_km),
        ).select_from(calculations_table)

        with self._read("usage_stats") as conn:
            total, avg_score, co2, cost, avg_distance = conn.execute(query).one()

        return UsageStats(
            total_calculations=int(total or 0),
            average_score=round_int(float(avg_score or 0)),
            annual_co2_kg=round_int(float(co2 or 0) * 12),
            annual_cost=round_int(float(cost or 0) * 12),
            average_distance_km=round_half_up(float(avg_distance or 0), 2),
        )

    def _read(self, operation: str) -> "_ReadConnection":
        return _ReadConnection(self.storage, operation)


class _ReadConnection:
    """Connection context that turns driver errors into PersistenceError."""

    def __init__(self, storage: SQLStorage, operation: str) -> None:
        self._storage = storage
        self._operation = operation
        self._conn: Optional[Connection] = None

    def __enter__(self) -> Connection:
        try:
            self._conn = self._storage.engine.connect()
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Could not connect to the database",
                cause=e,
                operation=self._operation,
            )
        return self._conn

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        if self._conn is not None:
            self._conn.close()
        if isinstance(exc, SQLAlchemyError):
            raise PersistenceError(
                "Database read failed",
                cause=exc,
                operation=self._operation,
            ) from exc
        return False


def _row_to_record(row: Row[Any]) -> CalculationRecord:
    m = row._mapping
    return CalculationRecord(
        id=m["id"],
        session_id=m["session_id"],
        transport_mode=m["transport_mode"],
        vehicle_class_id=m["vehicle_class_id"],
        occupancy=m["occupancy"],
        origin=m["origin"],
        destination=m["destination"],
        distance_km=m["distance_km"],
        travel_pattern=m["travel_pattern"],
        timing=m["timing"],
        frequency=m["frequency"],
        impact_score=m["impact_score"],
        confidence=dict(m["confidence"]),
        breakdown=dict(m["breakdown"]),
        monthly_emissions=m["monthly_emissions"],
        monthly_cost=m["monthly_cost"],
        monthly_time_hours=m["monthly_time_hours"],
        alternatives=tuple(m["alternatives"]),
        created_at=m["created_at"],
    )


@dataclass
class SQLVehicleRepository:
    """Implements VehicleRepositoryPort over the vehicle_classes table."""

    storage: SQLStorage

    def get(self, vehicle_class_id: int) -> VehicleClass:
        query = select(vehicle_classes_table).where(
            vehicle_classes_table.c.id == vehicle_class_id
        )
        with _ReadConnection(self.storage, "get_vehicle_class") as conn:
            row = conn.execute(query).first()
        if row is None:
            raise NotFoundError(
                f"Vehicle type {vehicle_class_id} not found",
                resource="vehicle_class",
                identifier=str(vehicle_class_id),
            )
        return _row_to_vehicle(row)

    def list_by_category(self, category: VehicleCategory) -> List[VehicleClass]:
        query = (
            select(vehicle_classes_table)
            .where(vehicle_classes_table.c.category == category.value)
            .order_by(vehicle_classes_table.c.id)
        )
        with _ReadConnection(self.storage, "list_vehicle_classes") as conn:
            rows = conn.execute(query).all()
        return [_row_to_vehicle(row) for row in rows]

    def list_all(self) -> List[VehicleClass]:
        query = select(vehicle_classes_table).order_by(vehicle_classes_table.c.id)
        with _ReadConnection(self.storage, "list_vehicle_classes") as conn:
            rows = conn.execute(query).all()
        return [_row_to_vehicle(row) for row in rows]


def _row_to_vehicle(row: Row[Any]) -> VehicleClass:
    m = row._mapping
    return VehicleClass(
        id=m["id"],
        name=m["name"],
        category=VehicleCategory(m["category"]),
        emission_factor=m["emission_factor"],
        fuel_cost_per_km=m["fuel_cost_per_km"],
        avg_speed_kmh=m["avg_speed_kmh"],
        base_impact_score=m["base_impact_score"],
    )


def seed_vehicle_classes(storage: SQLStorage, vehicles: Sequence[VehicleClass]) -> int:
    """Replace the vehicle_classes table with the given reference rows.

    Returns:
        Number of rows written.
    """
    rows = [
        {
            "id": v.id,
            "name": v.name,
            "category": v.category.value,
            "emission_factor": v.emission_factor,
            "fuel_cost_per_km": v.fuel_cost_per_km,
            "avg_speed_kmh": v.avg_speed_kmh,
            "base_impact_score": v.base_impact_score,
        }
        for v in vehicles
    ]
    try:
        with storage.engine.begin() as conn:
            conn.execute(delete(vehicle_classes_table))
            if rows:
                conn.execute(insert(vehicle_classes_table), rows)
    except SQLAlchemyError as e:
        raise PersistenceError(
            "Could not seed vehicle classes",
            cause=e,
            operation="seed_vehicle_classes",
        )
    return len(rows)
