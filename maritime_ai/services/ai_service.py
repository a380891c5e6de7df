"""
AI Service
Owns the three maritime models, records prediction outcomes and drives retraining
"""

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

import numpy as np

from maritime_ai.core.config import Settings, settings as default_settings
from maritime_ai.core.metrics_store import MetricsStore
from maritime_ai.ml.base_model import BaseMLModel, ModelConfig, TrainingHistory
from maritime_ai.ml.exceptions import ModelError, ModelLoadError, NotInitializedError
from maritime_ai.ml.fuel_predictor import FuelPredictor, summarize_fuel_trends
from maritime_ai.ml.maintenance_forecaster import MaintenanceForecaster, summarize_fleet_health
from maritime_ai.ml.route_optimizer import RouteOptimizer
from maritime_ai.models.ml_models import (
    FleetHealth,
    FuelPrediction,
    FuelTrendAnalysis,
    MaintenancePrediction,
    ModelName,
    ModelPerformance,
    ModelsLoaded,
    RouteOptimization,
    ServiceStatus,
)
from maritime_ai.services.prediction_history import PredictionHistory
from maritime_ai.utils.helpers import copy_file, replace_tree
from maritime_ai.utils.logger import log_prediction_event
from maritime_ai.utils.validators import ValidationError

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5

class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"

def _model_config(model_cls, epochs_override: Optional[int]) -> Optional[ModelConfig]:
    if epochs_override is None:
        return None
    return model_cls.default_config.model_copy(update={"epochs": epochs_override})

def health_label(mean_accuracy: float) -> str:
    if mean_accuracy > 0.9:
        return "excellent"
    if mean_accuracy > 0.8:
        return "good"
    if mean_accuracy > 0.6:
        return "fair"
    return "poor"

class AIService:
    def __init__(self, config: Optional[Settings] = None, seed: Optional[int] = None):
        self.settings = config or default_settings
        saved_dir = self.settings.saved_models_dir
        epochs = self.settings.training_epochs_override

        self.route_optimizer = RouteOptimizer(
            config=_model_config(RouteOptimizer, epochs),
            models_dir=saved_dir,
            rng=np.random.default_rng(seed),
        )
        self.fuel_predictor = FuelPredictor(config=_model_config(FuelPredictor, epochs), models_dir=saved_dir)
        self.maintenance_forecaster = MaintenanceForecaster(
            config=_model_config(MaintenanceForecaster, epochs), models_dir=saved_dir
        )
        self.models: Dict[str, BaseMLModel] = {
            ModelName.ROUTE_OPTIMIZER.value: self.route_optimizer,
            ModelName.FUEL_PREDICTOR.value: self.fuel_predictor,
            ModelName.MAINTENANCE_FORECASTER.value: self.maintenance_forecaster,
        }
        self.sample_sizes = {
            ModelName.ROUTE_OPTIMIZER.value: self.settings.route_training_samples,
            ModelName.FUEL_PREDICTOR.value: self.settings.fuel_training_samples,
            ModelName.MAINTENANCE_FORECASTER.value: self.settings.maintenance_training_samples,
        }

        self.history = PredictionHistory(self.settings.history_capacity)
        self.metrics_store = MetricsStore(self.settings.metrics_file)
        self.performance_metrics: Dict[str, ModelPerformance] = {}

        self.state = ServiceState.UNINITIALIZED
        self.last_error: Optional[BaseException] = None
        self.seed = seed

        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="maritime-ai")
        self._init_lock = asyncio.Lock()
        self._train_lock = asyncio.Lock()
        self._background_tasks: Set[asyncio.Task] = set()

    @property
    def is_ready(self) -> bool:
        return self.state == ServiceState.READY

    async def _run(self, func: Callable, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args, **kwargs))

    # Lifecycle

    async def initialize(self, auto_train: Optional[bool] = None):
        async with self._init_lock:
            if self.state == ServiceState.READY:
                return

            self.state = ServiceState.INITIALIZING
            logger.info("Initializing AI service")

            try:
                await asyncio.gather(*(
                    self._run(self._initialize_model, model) for model in self.models.values()
                ))
                self.performance_metrics = await self._run(self.metrics_store.load)
            except Exception as e:
                self.state = ServiceState.FAILED
                self.last_error = e
                logger.error(f"AI service initialization failed: {e}")
                raise

            self.state = ServiceState.READY
            self.last_error = None
            logger.info("AI service initialized")

        if self.settings.auto_train_models if auto_train is None else auto_train:
            await self.check_and_auto_train()

    @staticmethod
    def _initialize_model(model: BaseMLModel):
        try:
            model.initialize()
        except ModelLoadError as e:
            logger.warning(f"Stored {model.model_name} model unusable, building a fresh one: {e}")
            model.initialize_fresh()

    async def ensure_ready(self):
        if self.state == ServiceState.READY:
            return

        logger.info(f"AI service is {self.state.value}, retrying initialization")
        try:
            await self.initialize(auto_train=False)
        except Exception as e:
            raise NotInitializedError(f"AI service failed to initialize: {e}") from e

    async def dispose(self):
        for task in list(self._background_tasks):
            task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

        # waits in the executor for any training still holding a model lock
        await asyncio.gather(*(self._run(model.dispose) for model in self.models.values()))
        self._executor.shutdown(wait=False)
        self.state = ServiceState.UNINITIALIZED
        logger.info("AI service disposed")

    # Predictions

    async def _predict(self, model: BaseMLModel, predict_fn: Callable, data: Any):
        try:
            await self.ensure_ready()
            result = await self._run(predict_fn, data)
        except Exception as e:
            self.history.record(model.model_name, confidence=0.0, success=False)
            logger.error(f"{model.model_name} prediction failed: {e}")
            raise

        self.history.record(model.model_name, confidence=result.confidence, success=True)
        return result

    async def predict_route(self, data: Any) -> RouteOptimization:
        return await self._predict(self.route_optimizer, self.route_optimizer.optimize_route, data)

    async def predict_fuel(self, data: Any) -> FuelPrediction:
        return await self._predict(self.fuel_predictor, self.fuel_predictor.predict_fuel_consumption, data)

    async def predict_maintenance(self, data: Any) -> MaintenancePrediction:
        return await self._predict(
            self.maintenance_forecaster, self.maintenance_forecaster.predict_maintenance, data
        )

    async def analyze_fleet_health(self, inputs: Sequence[Any]) -> FleetHealth:
        await self.ensure_ready()
        codec = self.maintenance_forecaster.codec
        results = []
        failed = 0

        for data in inputs:
            try:
                prediction = await self.predict_maintenance(data)
                results.append((codec.parse(data), prediction))
            except (ValidationError, ModelError) as e:
                failed += 1
                logger.warning(f"Failed to analyze component health: {e}")

        health = summarize_fleet_health(results, failed)
        logger.info(
            f"Fleet health analyzed: overall={health.overall:.2f}, trend={health.trend}, "
            f"analyzed={health.analyzed_count}, failed={failed}"
        )
        return health

    async def analyze_fuel_trends(self, inputs: Sequence[Any]) -> FuelTrendAnalysis:
        await self.ensure_ready()
        consumptions: List[float] = []

        for data in inputs:
            try:
                consumptions.append((await self.predict_fuel(data)).total_consumption)
            except (ValidationError, ModelError) as e:
                logger.warning(f"Failed to predict fuel for historical data point: {e}")

        return summarize_fuel_trends(consumptions)

    # Evaluation and training

    def evaluate_models(self) -> Dict[str, float]:
        scores = {}
        for name in self.models:
            entries = self.history.recent(name, self.settings.evaluation_window)
            if not entries:
                scores[name] = NEUTRAL_SCORE
                continue

            success_rate = sum(1 for entry in entries if entry.success) / len(entries)
            mean_confidence = float(np.mean([entry.confidence for entry in entries]))
            scores[name] = 0.7 * success_rate + 0.3 * mean_confidence
        return scores

    def compute_performance_metrics(self) -> Dict[str, ModelPerformance]:
        scores = self.evaluate_models()
        now = datetime.now(timezone.utc)
        metrics = {}

        for name, model in self.models.items():
            entries = self.history.recent(name, self.settings.evaluation_window)
            accuracy = scores[name]
            metrics[name] = ModelPerformance(
                model_name=name,
                version=model.config.version,
                accuracy=accuracy,
                precision=accuracy * 0.95,
                recall=accuracy * 0.9,
                f1_score=accuracy * 0.925,
                last_evaluated=now,
                prediction_count=len(entries),
                average_confidence=float(np.mean([e.confidence for e in entries])) if entries else 0.0,
            )
        return metrics

    async def check_and_auto_train(self) -> bool:
        scores = self.evaluate_models()
        below = [name for name, score in scores.items() if score < self.settings.performance_threshold]
        if not below:
            logger.debug("All models above performance threshold")
            return False

        logger.info(f"Models below performance threshold: {', '.join(below)}, retraining all models")
        await self.train_all_models()
        return True

    async def train_all_models(self) -> Dict[str, TrainingHistory]:
        async with self._train_lock:
            await self.ensure_ready()
            logger.info("Starting training for all AI models")
            results = {}

            for name, model in self.models.items():
                samples = self.sample_sizes[name]
                data = await self._run(model.generate_training_data, samples, self.seed)
                history = await self._run(model.train, data)
                results[name] = history
                log_prediction_event(
                    logger,
                    "model_trained",
                    f"{name} trained",
                    {"samples": samples, "val_mae": history.val_mae, "epochs": history.epochs},
                )

            metrics = self.compute_performance_metrics()
            self.performance_metrics = await self._run(self.metrics_store.update, metrics)
            logger.info("Completed training for all AI models")
            return results

    def train_all_in_background(self) -> asyncio.Task:
        return self._spawn(self.train_all_models(), "Background model training")

    def auto_train_in_background(self) -> asyncio.Task:
        return self._spawn(self.check_and_auto_train(), "Background auto-training check")

    def _spawn(self, coro, label: str) -> asyncio.Task:
        async def runner():
            try:
                await coro
            except asyncio.CancelledError:
                logger.info(f"{label} cancelled")
                raise
            except Exception as e:
                logger.error(f"{label} failed: {e}", exc_info=True)

        task = asyncio.create_task(runner())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    # Status and artifacts

    def last_training_date(self) -> Optional[datetime]:
        dates = [date for date in (model.saved_at() for model in self.models.values()) if date]
        return max(dates) if dates else None

    def get_service_status(self) -> ServiceStatus:
        loaded = ModelsLoaded(
            route_optimizer=self.route_optimizer.is_initialized,
            fuel_predictor=self.fuel_predictor.is_initialized,
            maintenance_forecaster=self.maintenance_forecaster.is_initialized,
        )
        metrics = list(self.performance_metrics.values())
        accuracies = [metric.accuracy for metric in metrics] or list(self.evaluate_models().values())

        return ServiceStatus(
            is_ready=self.is_ready and all(loaded.model_dump().values()),
            state=self.state.value,
            models_loaded=loaded,
            last_training_date=self.last_training_date(),
            performance_metrics=metrics,
            system_health=health_label(float(np.mean(accuracies))),
        )

    def get_model_info(self) -> Dict[str, Dict[str, Any]]:
        return {name: model.get_model_info() for name, model in self.models.items()}

    async def export_models(self, path: Path) -> Path:
        destination = Path(path)
        self._check_external_path(destination)
        async with self._train_lock:
            await self._run(self._copy_artifacts, self.settings.models_dir, destination)
        logger.info(f"Models exported to {destination}")
        return destination

    async def import_models(self, path: Path):
        source = Path(path)
        self._check_external_path(source)
        if not (source / "saved").is_dir():
            raise ValidationError(f"No saved models found in {source}", "path")

        async with self._train_lock:
            await self._run(self._copy_artifacts, source, self.settings.models_dir)
            async with self._init_lock:
                self.state = ServiceState.UNINITIALIZED
            await self.initialize(auto_train=False)
        logger.info(f"Models imported from {source}")

        # must run outside the training lock
        if self.settings.auto_train_models:
            self.auto_train_in_background()

    def _check_external_path(self, path: Path):
        models_dir = self.settings.models_dir.resolve()
        target = path.resolve()
        if target in (models_dir, models_dir / "saved"):
            raise ValidationError(f"{path} is the service's own models directory", "path")

    def _copy_artifacts(self, source_dir: Path, destination_dir: Path):
        saved = source_dir / "saved"
        if saved.is_dir():
            replace_tree(saved, destination_dir / "saved")
        metrics_name = self.settings.metrics_file.name
        copy_file(source_dir / metrics_name, destination_dir / metrics_name)
