import math

import numpy as np

from maritime_ai.ml.synthetic_data import (
    generate_fuel_training_data,
    generate_maintenance_training_data,
    generate_route_training_data,
    maintenance_targets,
    random_maintenance_input,
)

from tests.conftest import FIXED_NOW

def assert_well_formed(data, count, input_size, output_size):
    assert len(data) == count
    assert len(data.outputs) == count
    for row in data.inputs:
        assert len(row) == input_size
        assert all(math.isfinite(value) for value in row)
    for row in data.outputs:
        assert len(row) == output_size
        assert all(0.0 <= value <= 1.0 for value in row)

class TestSyntheticData:
    def test_route_training_data(self):
        data = generate_route_training_data(50, seed=1, now=FIXED_NOW)
        assert_well_formed(data, 50, 15, 4)
        assert data.validation_split == 0.2

    def test_fuel_training_data(self):
        assert_well_formed(generate_fuel_training_data(50, seed=2), 50, 20, 3)

    def test_maintenance_training_data(self):
        assert_well_formed(generate_maintenance_training_data(50, seed=3, now=FIXED_NOW), 50, 25, 5)

    def test_same_seed_same_data(self):
        first = generate_fuel_training_data(10, seed=42)
        second = generate_fuel_training_data(10, seed=42)
        third = generate_fuel_training_data(10, seed=43)

        assert first.inputs == second.inputs
        assert first.outputs == second.outputs
        assert first.inputs != third.inputs

    def test_zero_samples(self):
        assert len(generate_route_training_data(0, seed=1)) == 0

    def test_random_maintenance_input_is_valid(self):
        rng = np.random.default_rng(5)
        record = random_maintenance_input(rng, FIXED_NOW)
        assert record.component.last_maintenance_date <= FIXED_NOW
        assert record.sensors.last_readings is not None

    def test_maintenance_targets_stay_bounded(self):
        assert all(0.0 <= value <= 1.0 for value in maintenance_targets([5.0] * 25))
        assert all(0.0 <= value <= 1.0 for value in maintenance_targets([-5.0] * 25))
