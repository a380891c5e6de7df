import json
import threading
import time
import math
from datetime import timedelta
from unittest.mock import patch

import pytest
import torch

from maritime_ai.ml.base_model import (
    PredictionOutcome,
    ReadWriteLock,
    RegressionNetwork,
    TrainingData,
    spread_confidence,
)
from maritime_ai.ml.exceptions import (
    InvalidPredictionError,
    ModelLoadError,
    NotInitializedError,
    TrainingError,
)
from maritime_ai.ml.fuel_predictor import FUEL_DENSITY, CO2_FACTOR, FuelPredictor, summarize_fuel_trends
from maritime_ai.ml.maintenance_forecaster import (
    MaintenanceForecaster,
    determine_maintenance_type,
    maintenance_priority,
)
from maritime_ai.ml.route_optimizer import RouteOptimizer
from maritime_ai.models.schemas import MaintenanceType

from tests.conftest import FIXED_NOW

def small_config(model_cls, epochs=2):
    return model_cls.default_config.model_copy(update={"epochs": epochs})

def outcome(raw):
    return PredictionOutcome(raw=raw, confidence=0.9, model_version="1.0.0", timestamp=FIXED_NOW)

class TestNetworkHelpers:
    def test_network_output_is_bounded(self):
        network = RegressionNetwork(10, 3, [16, 8], dropouts=[0.2], batch_norm_first=True)
        network.eval()
        with torch.no_grad():
            output = network(torch.randn(4, 10) * 100)
        assert output.shape == (4, 3)
        assert bool(((output >= 0) & (output <= 1)).all())

    def test_spread_confidence(self):
        assert spread_confidence([0.5, 0.5, 0.5]) == 1.0
        assert spread_confidence([0.0, 0.0]) == 0.0
        assert spread_confidence([1.0, 0.0]) == 0.0
        assert spread_confidence([0.8, 0.4]) == pytest.approx(0.5)

    def test_read_locks_are_shared(self):
        lock = ReadWriteLock()
        with lock.read_lock():
            with lock.read_lock():
                assert lock._readers == 2
        with lock.write_lock():
            assert lock._writer is True
        assert lock._writer is False

    def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        order = []
        first_reader_in = threading.Event()
        release_first_reader = threading.Event()

        def first_reader():
            with lock.read_lock():
                first_reader_in.set()
                release_first_reader.wait(5)

        def writer():
            with lock.write_lock():
                order.append("writer")

        def late_reader():
            with lock.read_lock():
                order.append("reader")

        reader_thread = threading.Thread(target=first_reader)
        reader_thread.start()
        assert first_reader_in.wait(5)

        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        deadline = time.monotonic() + 5
        while lock._writers_waiting == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert lock._writers_waiting == 1

        late_thread = threading.Thread(target=late_reader)
        late_thread.start()
        time.sleep(0.1)
        assert order == []

        release_first_reader.set()
        for thread in (reader_thread, writer_thread, late_thread):
            thread.join(5)

        assert order == ["writer", "reader"]

class TestBaseModelLifecycle:
    def test_model_initialization(self, tmp_path):
        model = FuelPredictor(models_dir=tmp_path)
        assert model.network is None
        assert model.is_trained == False
        assert model.model_path == tmp_path / "fuel-predictor"

    def test_predict_before_initialize(self, tmp_path, fuel_payload):
        model = FuelPredictor(models_dir=tmp_path)
        with pytest.raises(NotInitializedError):
            model.predict(fuel_payload)

    def test_untrained_prediction_is_bounded(self, tmp_path, fuel_payload):
        model = FuelPredictor(models_dir=tmp_path)
        model.initialize()

        result = model.predict(fuel_payload)
        assert len(result.raw) == 3
        assert all(0.0 <= value <= 1.0 for value in result.raw)
        assert 0.0 <= result.confidence <= 1.0
        assert model.evaluate() == 0.5

    def test_predict_vector_rejects_bad_features(self, tmp_path):
        model = RouteOptimizer(models_dir=tmp_path)
        model.initialize()

        with pytest.raises(InvalidPredictionError):
            model.predict_vector([0.1] * 3)
        with pytest.raises(InvalidPredictionError):
            model.predict_vector([0.1] * 14 + [math.nan])

    def test_predict_waits_for_training(self, tmp_path):
        model = RouteOptimizer(config=small_config(RouteOptimizer), models_dir=tmp_path)
        model.initialize()
        data = model.generate_training_data(12, seed=1)
        fit_started = threading.Event()
        release_fit = threading.Event()
        original_fit = model._fit
        results = []

        def slow_fit(*args):
            fit_started.set()
            release_fit.wait(5)
            return original_fit(*args)

        with patch.object(model, "_fit", side_effect=slow_fit):
            trainer = threading.Thread(target=model.train, args=(data,))
            trainer.start()
            assert fit_started.wait(5)

            predictor = threading.Thread(target=lambda: results.append(model.predict_vector([0.1] * 15)))
            predictor.start()
            predictor.join(0.2)
            assert predictor.is_alive()
            assert results == []

            release_fit.set()
            trainer.join(10)
            predictor.join(10)

        assert len(results) == 1
        assert model.is_trained

    def test_train_rejects_empty_data(self, tmp_path):
        model = RouteOptimizer(config=small_config(RouteOptimizer), models_dir=tmp_path)
        with pytest.raises(TrainingError):
            model.train(TrainingData(inputs=[], outputs=[]))

    def test_train_rejects_wrong_row_length(self, tmp_path):
        model = RouteOptimizer(config=small_config(RouteOptimizer), models_dir=tmp_path)
        data = TrainingData(inputs=[[0.1] * 14] * 6, outputs=[[0.5] * 4] * 6)
        with pytest.raises(TrainingError):
            model.train(data)

        data = TrainingData(inputs=[[0.1] * 15] * 6, outputs=[[0.5] * 3] * 6)
        with pytest.raises(TrainingError):
            model.train(data)

    def test_train_records_history_and_saves(self, tmp_path):
        model = MaintenanceForecaster(config=small_config(MaintenanceForecaster, 3), models_dir=tmp_path)
        history = model.train(model.generate_training_data(30, seed=1))

        assert history.epochs == 3
        assert len(history.loss) == 3
        assert len(history.val_loss) == 3
        assert history.val_mae >= 0
        assert model.is_trained
        assert model.evaluate() == pytest.approx(max(0.0, 1 - history.val_mae))
        assert model.model_file.exists()

        metadata = json.loads(model.metadata_file.read_text())
        assert metadata["config"]["input_size"] == 25
        assert metadata["is_trained"] is True
        assert model.saved_at() is not None

    def test_save_and_load_reproduce_predictions(self, tmp_path, fuel_payload):
        model = FuelPredictor(config=small_config(FuelPredictor), models_dir=tmp_path)
        model.train(model.generate_training_data(24, seed=3))
        before = model.predict(fuel_payload).raw

        restored = FuelPredictor(config=small_config(FuelPredictor), models_dir=tmp_path)
        restored.initialize()
        after = restored.predict(fuel_payload).raw

        assert restored.is_trained
        assert after == pytest.approx(before, abs=1e-6)

    def test_load_missing_artifact(self, tmp_path):
        model = FuelPredictor(models_dir=tmp_path)
        with pytest.raises(ModelLoadError):
            model.load()

    def test_load_corrupt_weights(self, tmp_path):
        model = RouteOptimizer(models_dir=tmp_path)
        model.initialize()
        model.save()
        model.model_file.write_bytes(b"not a torch file")

        with pytest.raises(ModelLoadError):
            RouteOptimizer(models_dir=tmp_path).load()

    def test_load_shape_mismatch(self, tmp_path):
        model = RouteOptimizer(models_dir=tmp_path)
        model.initialize()
        model.save()

        metadata = json.loads(model.metadata_file.read_text())
        metadata["config"]["input_size"] = 99
        model.metadata_file.write_text(json.dumps(metadata))

        with pytest.raises(ModelLoadError):
            RouteOptimizer(models_dir=tmp_path).load()

    def test_dispose_releases_network(self, tmp_path):
        model = RouteOptimizer(models_dir=tmp_path)
        model.initialize()
        model.dispose()
        assert not model.is_initialized

    def test_model_info(self, tmp_path):
        model = MaintenanceForecaster(models_dir=tmp_path)
        info = model.get_model_info()
        assert info["model_name"] == "maintenance-forecaster"
        assert info["feature_count"] == 25
        assert info["is_initialized"] is False

class TestRouteOptimizer:
    def test_optimize_route(self, tmp_path, route_payload):
        model = RouteOptimizer(models_dir=tmp_path)
        model.initialize()

        result = model.optimize_route(route_payload, FIXED_NOW)

        assert result.optimized_route[0].latitude == pytest.approx(40.7128)
        assert result.optimized_route[-1].longitude == pytest.approx(-0.1278)
        assert len(result.optimized_route) >= 3
        assert result.total_distance == pytest.approx(3008, abs=15)
        assert 0.0 <= result.weather_risk_score <= 1.0
        assert 0.0 <= result.confidence <= 1.0

        base_time = result.total_distance / 25
        assert base_time <= result.estimated_time <= base_time * 1.5

    def test_alternative_routes(self, tmp_path, route_payload):
        model = RouteOptimizer(models_dir=tmp_path)
        model.initialize()

        alternatives = model.optimize_route(route_payload, FIXED_NOW).alternative_routes

        assert len(alternatives) == 2
        for alternative in alternatives:
            assert len(alternative.route) == 6
            assert alternative.risk == pytest.approx((15 + 2.5) / 30)
            assert alternative.time == pytest.approx(alternative.fuel / 0.35 / 20)

    def test_calculate_base_fuel(self, tmp_path):
        model = RouteOptimizer(models_dir=tmp_path)
        specs = model.codec.parse({
            "origin": {"latitude": 0, "longitude": 0},
            "destination": {"latitude": 0, "longitude": 1},
            "shipSpecs": {"maxSpeed": 20, "fuelCapacity": 1, "cargoCapacity": 100, "currentCargoWeight": 50},
            "weatherConditions": {"windSpeed": 0, "waveHeight": 0, "visibility": 10, "temperature": 15},
        }).ship_specs
        assert model.calculate_base_fuel(100, specs) == pytest.approx(100 * 0.3 * 1.1)

class TestFuelPredictor:
    @patch.object(FuelPredictor, "predict")
    def test_prediction_is_consistent(self, mock_predict, tmp_path, fuel_payload):
        mock_predict.return_value = outcome([0.0, 0.0, 0.5])
        model = FuelPredictor(models_dir=tmp_path)
        record = model.codec.parse(fuel_payload)

        result = model.predict_fuel_consumption(record)

        assert result.main_engine_consumption == pytest.approx(model.calculate_base_main_engine(record))
        assert result.auxiliary_consumption == pytest.approx(model.calculate_base_auxiliary(record))
        assert result.total_consumption == pytest.approx(
            result.main_engine_consumption + result.auxiliary_consumption
        )
        assert result.consumption_rate == pytest.approx(result.total_consumption / 120)
        assert result.efficiency == pytest.approx(result.total_consumption / 3000)
        assert result.co2_emissions == pytest.approx(result.total_consumption * FUEL_DENSITY * CO2_FACTOR)
        assert result.factors.load_impact == pytest.approx(10.5)

    def test_fuel_trends(self):
        increasing = summarize_fuel_trends([100, 100, 200, 200])
        assert increasing.trend == "increasing"
        assert increasing.average_consumption == pytest.approx(150)
        assert len(increasing.recommendations) == 3

        heavy = summarize_fuel_trends([2000, 2000])
        assert heavy.trend == "stable"
        assert "Consider fuel-efficient routing" in heavy.recommendations

        assert summarize_fuel_trends([200, 100]).trend == "decreasing"
        assert summarize_fuel_trends([]).analyzed_count == 0

    @patch.object(FuelPredictor, "predict")
    def test_trend_analysis_skips_invalid_points(self, mock_predict, tmp_path, fuel_payload):
        mock_predict.return_value = outcome([0.1, 0.1, 0.5])
        model = FuelPredictor(models_dir=tmp_path)

        analysis = model.analyze_fuel_trends([fuel_payload, {"voyage": {}}, fuel_payload])

        assert analysis.analyzed_count == 2
        assert analysis.trend == "stable"

class TestMaintenanceForecaster:
    def test_maintenance_type_is_monotonic_in_risk(self):
        order = [MaintenanceType.PREVENTIVE, MaintenanceType.CORRECTIVE, MaintenanceType.EMERGENCY]
        for urgency in (0.0, 0.5, 0.95):
            ranks = [order.index(determine_maintenance_type(step / 100, urgency)) for step in range(101)]
            assert ranks == sorted(ranks)

        assert determine_maintenance_type(0.2, 0.95) == MaintenanceType.EMERGENCY
        assert determine_maintenance_type(0.7, 0.1) == MaintenanceType.CORRECTIVE

    def test_maintenance_priority(self):
        assert maintenance_priority(0.9) == "critical"
        assert maintenance_priority(0.7) == "high"
        assert maintenance_priority(0.5) == "medium"
        assert maintenance_priority(0.1) == "low"

    @patch.object(MaintenanceForecaster, "predict")
    def test_low_risk_prediction(self, mock_predict, tmp_path, maintenance_payload):
        mock_predict.return_value = outcome([0.0, 0.0, 0.0, 0.0, 0.0])
        model = MaintenanceForecaster(models_dir=tmp_path)

        result = model.predict_maintenance(maintenance_payload, FIXED_NOW)

        assert result.maintenance_type == MaintenanceType.PREVENTIVE
        assert result.predicted_failure_date is None
        assert result.recommended_maintenance_date == FIXED_NOW + timedelta(days=365 * 1.2 * 0.7)
        assert result.estimated_cost == pytest.approx(5000)
        assert result.estimated_downtime == pytest.approx(8)
        assert len(result.alternative_schedules) == 2

    @patch.object(MaintenanceForecaster, "predict")
    def test_high_risk_prediction(self, mock_predict, tmp_path, maintenance_payload):
        mock_predict.return_value = outcome([0.95, 0.5, 0.2, 0.2, 0.5])
        model = MaintenanceForecaster(models_dir=tmp_path)

        result = model.predict_maintenance(maintenance_payload, FIXED_NOW)

        assert result.maintenance_type == MaintenanceType.EMERGENCY
        assert result.predicted_failure_date == FIXED_NOW + timedelta(days=365 * 1.2 * 0.5)
        assert result.estimated_cost == pytest.approx(35000 * 1.1)
        assert "Schedule immediate inspection" in result.recommendations
        assert "Prioritize emergency maintenance scheduling" in result.recommendations
        assert len(result.alternative_schedules) == 1

    def test_alternative_schedules(self):
        recommended = FIXED_NOW + timedelta(days=30)
        schedules = MaintenanceForecaster.generate_alternative_schedules(recommended, 1000.0, 0.5)

        assert [schedule.type for schedule in schedules] == ["Preventive (Early)", "Preventive (Delayed)"]
        assert schedules[0].date == recommended - timedelta(days=7)
        assert schedules[0].cost == pytest.approx(900)
        assert schedules[1].risk == pytest.approx(0.6)

    @patch.object(MaintenanceForecaster, "predict")
    def test_fleet_health_with_no_risk(self, mock_predict, tmp_path, maintenance_payload):
        mock_predict.return_value = outcome([0.0, 0.0, 0.0, 0.0, 0.0])
        model = MaintenanceForecaster(models_dir=tmp_path)

        health = model.analyze_fleet_health([maintenance_payload] * 3, FIXED_NOW)

        assert health.overall == 1.0
        assert health.trend == "improving"
        assert health.critical_issues == []
        assert health.upcoming_maintenance == []
        assert health.analyzed_count == 3

    @patch.object(MaintenanceForecaster, "predict")
    def test_fleet_health_flags_critical_components(self, mock_predict, tmp_path, maintenance_payload):
        mock_predict.return_value = outcome([0.85, 0.1, 0.1, 0.1, 0.1])
        model = MaintenanceForecaster(models_dir=tmp_path)

        health = model.analyze_fleet_health([maintenance_payload, {"ship": None}], FIXED_NOW)

        assert health.analyzed_count == 1
        assert health.failed_count == 1
        assert health.overall == pytest.approx(0.15)
        assert health.trend == "degrading"
        assert health.critical_issues == ["engine on ship ship-001 requires immediate attention"]
        assert health.upcoming_maintenance[0].component == "ship-001-engine"
        assert health.upcoming_maintenance[0].priority == "critical"
