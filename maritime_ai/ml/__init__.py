"""
Maritime AI - Machine Learning Module
Regression models for route, fuel and maintenance prediction
"""

from maritime_ai.ml.base_model import (
    BaseMLModel,
    ModelConfig,
    PredictionOutcome,
    RegressionNetwork,
    TrainingData,
    TrainingHistory,
)
from maritime_ai.ml.exceptions import (
    InvalidPredictionError,
    ModelError,
    ModelLoadError,
    NotInitializedError,
    TrainingError,
)
from maritime_ai.ml.feature_engineer import (
    FeatureCodec,
    FuelFeatureCodec,
    MaintenanceFeatureCodec,
    RouteFeatureCodec,
    haversine_distance,
)
from maritime_ai.ml.fuel_predictor import FuelPredictor
from maritime_ai.ml.maintenance_forecaster import MaintenanceForecaster
from maritime_ai.ml.route_optimizer import RouteOptimizer

__all__ = [
    "BaseMLModel",
    "ModelConfig",
    "PredictionOutcome",
    "RegressionNetwork",
    "TrainingData",
    "TrainingHistory",
    "ModelError",
    "NotInitializedError",
    "ModelLoadError",
    "TrainingError",
    "InvalidPredictionError",
    "FeatureCodec",
    "RouteFeatureCodec",
    "FuelFeatureCodec",
    "MaintenanceFeatureCodec",
    "haversine_distance",
    "RouteOptimizer",
    "FuelPredictor",
    "MaintenanceForecaster",
]
