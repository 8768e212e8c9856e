"""Shared fixtures: reference data from the repository, a throwaway database."""

from pathlib import Path

import pytest

from commute_impact.adapters.storage import SQLCalculationRecorder, SQLStorage
from commute_impact.adapters.vehicles import CSVVehicleRepository
from commute_impact.config import ReferenceDataConfig, StorageConfig
from commute_impact.services import ImpactScoringEngine

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


@pytest.fixture
def vehicle_repo():
    return CSVVehicleRepository(ReferenceDataConfig(data_dir=DATA_DIR))


@pytest.fixture
def engine(vehicle_repo):
    return ImpactScoringEngine(vehicles=vehicle_repo)


@pytest.fixture
def storage(tmp_path):
    sql_storage = SQLStorage(StorageConfig(url=f"sqlite:///{tmp_path / 'test.db'}"))
    yield sql_storage
    sql_storage.dispose()


@pytest.fixture
def recorder(storage):
    return SQLCalculationRecorder(storage)
