import copy
from datetime import datetime, timezone

import pytest

from maritime_ai.api.examples import (
    FUEL_PREDICTION_EXAMPLE,
    MAINTENANCE_PREDICTION_EXAMPLE,
    ROUTE_OPTIMIZATION_EXAMPLE,
)
from maritime_ai.core.config import Settings

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        models_dir=tmp_path / "models",
        logs_dir=tmp_path / "logs",
        auto_train_models=False,
        route_training_samples=24,
        fuel_training_samples=24,
        maintenance_training_samples=24,
        training_epochs_override=2,
    )

@pytest.fixture
def route_payload():
    return copy.deepcopy(ROUTE_OPTIMIZATION_EXAMPLE)

@pytest.fixture
def fuel_payload():
    return copy.deepcopy(FUEL_PREDICTION_EXAMPLE)

@pytest.fixture
def maintenance_payload():
    return copy.deepcopy(MAINTENANCE_PREDICTION_EXAMPLE)
