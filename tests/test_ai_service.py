import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from maritime_ai.ml.exceptions import ModelLoadError, NotInitializedError
from maritime_ai.services.ai_service import AIService, ServiceState, health_label
from maritime_ai.utils.validators import ValidationError
from maritime_ai.workers.ml_worker import MLWorker

@pytest_asyncio.fixture
async def service(test_settings):
    ai_service = AIService(test_settings, seed=7)
    await ai_service.initialize(auto_train=False)
    yield ai_service
    await ai_service.dispose()

class TestServiceLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_builds_fresh_models(self, service):
        assert service.state == ServiceState.READY
        assert all(model.is_initialized for model in service.models.values())
        assert not any(model.is_trained for model in service.models.values())

    @pytest.mark.asyncio
    async def test_initialize_falls_back_on_corrupt_artifact(self, test_settings):
        first = AIService(test_settings)
        await first.initialize(auto_train=False)
        first.fuel_predictor.save()
        await first.dispose()

        test_settings.saved_models_dir.joinpath("fuel-predictor", "model.pt").write_bytes(b"garbage")

        second = AIService(test_settings)
        try:
            await second.initialize(auto_train=False)
            assert second.is_ready
            assert second.fuel_predictor.is_initialized
            assert not second.fuel_predictor.is_trained
        finally:
            await second.dispose()

    @pytest.mark.asyncio
    async def test_failed_initialization_is_reported(self, test_settings, fuel_payload):
        ai_service = AIService(test_settings)
        try:
            with patch.object(ai_service.fuel_predictor, "initialize_fresh", side_effect=RuntimeError("boom")), \
                    patch.object(ai_service.fuel_predictor, "initialize",
                                 side_effect=ModelLoadError("bad", "fuel-predictor")):
                with pytest.raises(RuntimeError):
                    await ai_service.initialize(auto_train=False)
                assert ai_service.state == ServiceState.FAILED

                with pytest.raises(NotInitializedError):
                    await ai_service.predict_fuel(fuel_payload)

            await ai_service.ensure_ready()
            assert ai_service.is_ready
        finally:
            await ai_service.dispose()

    @pytest.mark.asyncio
    async def test_dispose_releases_models(self, test_settings):
        ai_service = AIService(test_settings)
        await ai_service.initialize(auto_train=False)
        await ai_service.dispose()

        assert ai_service.state == ServiceState.UNINITIALIZED
        assert not any(model.is_initialized for model in ai_service.models.values())

    @pytest.mark.asyncio
    async def test_dispose_keeps_event_loop_running_during_training(self, test_settings):
        ai_service = AIService(test_settings)
        await ai_service.initialize(auto_train=False)
        model = ai_service.route_optimizer
        training_started = threading.Event()
        release_training = threading.Event()

        def slow_train(data):
            with model._lock.write_lock():
                training_started.set()
                release_training.wait(5)

        with patch.object(model, "train", side_effect=slow_train):
            ai_service.train_all_in_background()
            while not training_started.is_set():
                await asyncio.sleep(0.01)

            dispose_task = asyncio.create_task(ai_service.dispose())
            ticks = 0
            for _ in range(5):
                await asyncio.sleep(0.01)
                ticks += 1
            assert not dispose_task.done()

            release_training.set()
            await asyncio.wait_for(dispose_task, 5)

        assert ticks == 5
        assert ai_service.state == ServiceState.UNINITIALIZED
        assert not model.is_initialized

class TestPredictions:
    @pytest.mark.asyncio
    async def test_predictions_are_recorded(self, service, route_payload, fuel_payload, maintenance_payload):
        route = await service.predict_route(route_payload)
        fuel = await service.predict_fuel(fuel_payload)
        maintenance = await service.predict_maintenance(maintenance_payload)

        assert route.total_distance > 0
        assert fuel.total_consumption > 0
        assert 0.0 <= maintenance.risk_score <= 1.0
        assert len(service.history) == 3
        assert all(entry.success for entry in service.history.recent())

    @pytest.mark.asyncio
    async def test_failed_prediction_is_recorded(self, service, route_payload):
        del route_payload["origin"]

        with pytest.raises(ValidationError):
            await service.predict_route(route_payload)

        entries = service.history.recent("route-optimizer")
        assert len(entries) == 1
        assert entries[0].success is False
        assert entries[0].confidence == 0.0
        assert service.evaluate_models()["route-optimizer"] == 0.0

    @pytest.mark.asyncio
    async def test_non_finite_input_is_a_validation_error(self, service, fuel_payload):
        fuel_payload["conditions"]["temperature"] = float("nan")

        with pytest.raises(ValidationError):
            await service.predict_fuel(fuel_payload)

        entries = service.history.recent("fuel-predictor")
        assert [entry.success for entry in entries] == [False]

    @pytest.mark.asyncio
    async def test_fleet_health_counts_failures(self, service, maintenance_payload):
        health = await service.analyze_fleet_health([maintenance_payload, {"ship": {}}])

        assert health.analyzed_count == 1
        assert health.failed_count == 1
        assert 0.0 <= health.overall <= 1.0

    @pytest.mark.asyncio
    async def test_fuel_trends(self, service, fuel_payload):
        analysis = await service.analyze_fuel_trends([fuel_payload, fuel_payload])
        assert analysis.analyzed_count == 2
        assert analysis.trend == "stable"

class TestEvaluationAndTraining:
    @pytest.mark.asyncio
    async def test_evaluate_without_history(self, service):
        assert service.evaluate_models() == {
            "route-optimizer": 0.5,
            "fuel-predictor": 0.5,
            "maintenance-forecaster": 0.5,
        }

    @pytest.mark.asyncio
    async def test_evaluate_blends_success_and_confidence(self, service):
        service.history.record("fuel-predictor", confidence=1.0, success=True)
        service.history.record("fuel-predictor", confidence=0.0, success=False)

        assert service.evaluate_models()["fuel-predictor"] == pytest.approx(0.7 * 0.5 + 0.3 * 0.5)

    @pytest.mark.asyncio
    async def test_performance_metrics(self, service):
        service.history.record("route-optimizer", confidence=0.8, success=True)
        metrics = service.compute_performance_metrics()["route-optimizer"]

        accuracy = 0.7 + 0.3 * 0.8
        assert metrics.accuracy == pytest.approx(accuracy)
        assert metrics.precision == pytest.approx(accuracy * 0.95)
        assert metrics.recall == pytest.approx(accuracy * 0.9)
        assert metrics.f1_score == pytest.approx(accuracy * 0.925)
        assert metrics.prediction_count == 1

    @pytest.mark.asyncio
    async def test_train_all_models(self, service, test_settings):
        results = await service.train_all_models()

        assert set(results) == {"route-optimizer", "fuel-predictor", "maintenance-forecaster"}
        assert all(history.epochs == 2 for history in results.values())
        assert all(model.is_trained for model in service.models.values())
        assert test_settings.metrics_file.exists()
        assert set(service.performance_metrics) == set(results)
        assert service.last_training_date() is not None

    @pytest.mark.asyncio
    async def test_auto_train_only_below_threshold(self, service):
        with patch.object(service, "train_all_models", new_callable=AsyncMock) as mock_train:
            assert await service.check_and_auto_train() is True
            mock_train.assert_awaited_once()

            service.settings.performance_threshold = 0.4
            mock_train.reset_mock()
            assert await service.check_and_auto_train() is False
            mock_train.assert_not_awaited()

class TestStatusAndArtifacts:
    def test_health_label(self):
        assert health_label(0.95) == "excellent"
        assert health_label(0.85) == "good"
        assert health_label(0.7) == "fair"
        assert health_label(0.5) == "poor"

    @pytest.mark.asyncio
    async def test_service_status(self, service):
        status = service.get_service_status()

        assert status.is_ready
        assert status.state == "ready"
        assert status.models_loaded.fuel_predictor
        assert status.last_training_date is None
        assert status.system_health == "poor"

    @pytest.mark.asyncio
    async def test_export_and_import(self, service, test_settings, tmp_path, fuel_payload):
        await service.train_all_models()
        expected = (await service.predict_fuel(fuel_payload)).total_consumption

        export_dir = await service.export_models(tmp_path / "export")
        assert (export_dir / "saved" / "fuel-predictor" / "model.pt").exists()
        assert (export_dir / test_settings.metrics_file.name).exists()

        other_settings = test_settings.model_copy(update={"models_dir": tmp_path / "other"})
        other = AIService(other_settings)
        try:
            await other.initialize(auto_train=False)
            await other.import_models(export_dir)

            assert other.is_ready
            assert other.fuel_predictor.is_trained
            imported = (await other.predict_fuel(fuel_payload)).total_consumption
            assert imported == pytest.approx(expected, rel=1e-5)
            assert set(other.performance_metrics) == set(service.performance_metrics)
        finally:
            await other.dispose()

    @pytest.mark.asyncio
    async def test_import_requires_saved_models(self, service, tmp_path):
        with pytest.raises(ValidationError):
            await service.import_models(tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_export_into_own_models_dir_is_refused(self, service, test_settings):
        service.fuel_predictor.save()
        model_file = service.fuel_predictor.model_file

        with pytest.raises(ValidationError):
            await service.export_models(test_settings.models_dir)
        with pytest.raises(ValidationError):
            await service.export_models(test_settings.saved_models_dir)

        assert model_file.exists()

    @pytest.mark.asyncio
    async def test_import_from_own_models_dir_is_refused(self, service, test_settings):
        service.fuel_predictor.save()

        with pytest.raises(ValidationError):
            await service.import_models(test_settings.models_dir)

        assert service.fuel_predictor.model_file.exists()
        assert service.is_ready

    @pytest.mark.asyncio
    async def test_failed_import_keeps_local_artifacts(self, service, tmp_path):
        service.fuel_predictor.save()
        export_dir = await service.export_models(tmp_path / "export")
        before = service.fuel_predictor.model_file.read_bytes()

        with patch("maritime_ai.utils.helpers.shutil.copytree", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                await service.import_models(export_dir)

        assert service.fuel_predictor.model_file.read_bytes() == before

    @pytest.mark.asyncio
    async def test_import_runs_auto_train_check_when_enabled(self, service, tmp_path):
        service.fuel_predictor.save()
        export_dir = await service.export_models(tmp_path / "export")
        service.settings.auto_train_models = True

        with patch.object(service, "auto_train_in_background") as mock_auto_train:
            await service.import_models(export_dir)

        mock_auto_train.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_import_skips_auto_train_when_disabled(self, service, tmp_path):
        service.fuel_predictor.save()
        export_dir = await service.export_models(tmp_path / "export")

        with patch.object(service, "auto_train_in_background") as mock_auto_train:
            await service.import_models(export_dir)

        mock_auto_train.assert_not_called()

class TestMLWorker:
    def test_worker_interval_from_settings(self, test_settings):
        worker = MLWorker(AIService(test_settings))
        assert worker.processing_interval == 24 * 3600

    @pytest.mark.asyncio
    async def test_run_once_logs_failures(self):
        mock_service = MagicMock()
        mock_service.check_and_auto_train = AsyncMock(side_effect=RuntimeError("training failed"))

        worker = MLWorker(mock_service, interval_hours=1)
        assert await worker.run_once() is False
        assert worker.last_check is not None

    @pytest.mark.asyncio
    async def test_run_once_reports_retraining(self):
        mock_service = MagicMock()
        mock_service.check_and_auto_train = AsyncMock(return_value=True)

        worker = MLWorker(mock_service, interval_hours=1)
        assert await worker.run_once() is True
