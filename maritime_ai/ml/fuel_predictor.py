"""
Fuel Consumption ML Model
Predicts main engine and auxiliary consumption for a voyage
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence

import numpy as np

from maritime_ai.ml.base_model import BaseMLModel, ModelConfig, RegressionNetwork, TrainingData
from maritime_ai.ml.exceptions import ModelError
from maritime_ai.ml.feature_engineer import FuelFeatureCodec
from maritime_ai.ml.synthetic_data import generate_fuel_training_data
from maritime_ai.models.ml_models import FuelImpactFactors, FuelPrediction, FuelTrendAnalysis, ModelName
from maritime_ai.models.schemas import FuelPredictionInput
from maritime_ai.utils.validators import ValidationError

logger = logging.getLogger(__name__)

FUEL_DENSITY = 0.845  # kg/L
CO2_FACTOR = 3.15  # kg CO2 per kg fuel
MAIN_ENGINE_SFC = 190  # g/kWh
AUXILIARY_SFC = 210  # g/kWh
TREND_THRESHOLD = 0.05
HIGH_CONSUMPTION = 1000

class FuelPredictor(BaseMLModel):
    default_config = ModelConfig(
        model_name=ModelName.FUEL_PREDICTOR.value,
        version="1.0.0",
        input_size=20,
        output_size=3,  # main_engine, auxiliary, efficiency
        learning_rate=0.0005,
        epochs=200,
        batch_size=64,
    )

    def create_codec(self) -> FuelFeatureCodec:
        return FuelFeatureCodec()

    def build_network(self) -> RegressionNetwork:
        return RegressionNetwork(
            input_size=self.config.input_size,
            output_size=self.config.output_size,
            hidden_sizes=[128, 64, 32, 16],
            dropouts=[0.3, 0.2, 0.1],
            batch_norm_first=True,
        )

    def generate_training_data(self, num_samples: int, seed: Optional[int] = None) -> TrainingData:
        return generate_fuel_training_data(num_samples, seed=seed, codec=self.codec)

    def predict_fuel_consumption(self, data: Any, now: Optional[datetime] = None) -> FuelPrediction:
        record = self.codec.parse(data)
        outcome = self.predict(record, now)
        main_correction, aux_correction = outcome.raw[0], outcome.raw[1]

        main_engine = self.calculate_base_main_engine(record) * (1 + main_correction * 0.5)
        auxiliary = self.calculate_base_auxiliary(record) * (1 + aux_correction * 0.3)
        total = main_engine + auxiliary

        prediction = FuelPrediction(
            total_consumption=total,
            consumption_rate=total / record.voyage.duration,
            main_engine_consumption=main_engine,
            auxiliary_consumption=auxiliary,
            efficiency=total / record.voyage.distance,
            co2_emissions=total * FUEL_DENSITY * CO2_FACTOR,
            confidence=outcome.confidence,
            factors=self.calculate_impact_factors(record),
        )

        logger.info(
            f"Fuel consumption predicted: total={total:.1f}, "
            f"efficiency={prediction.efficiency:.3f}, confidence={outcome.confidence:.2f}"
        )
        return prediction

    @staticmethod
    def calculate_base_main_engine(record: FuelPredictionInput) -> float:
        ship = record.ship
        operational = record.operational
        speed_ratio = operational.cruising_speed / ship.max_speed
        consumption = (ship.engine_power * operational.main_engine_load *
                       record.voyage.duration * MAIN_ENGINE_SFC / 1000)
        return consumption * speed_ratio ** 3 * (1 + operational.load_factor * 0.15)

    @staticmethod
    def calculate_base_auxiliary(record: FuelPredictionInput) -> float:
        operational = record.operational
        consumption = (record.ship.engine_power * 0.1 * operational.auxiliary_load *
                       record.voyage.duration * AUXILIARY_SFC / 1000)
        return consumption * (1 + operational.hvac_load * 0.2)

    @staticmethod
    def calculate_impact_factors(record: FuelPredictionInput) -> FuelImpactFactors:
        conditions = record.conditions
        operational = record.operational

        wind_impact = min(30, conditions.wind_speed / 30 * 15)
        wave_impact = min(20, conditions.wave_height / 8 * 12)
        speed_ratio = operational.cruising_speed / record.ship.max_speed

        return FuelImpactFactors(
            weather_impact=round(wind_impact + wave_impact, 2),
            load_impact=round(operational.load_factor * 15, 2),
            speed_impact=round((speed_ratio ** 3 - 0.7 ** 3) * 50, 2),
            sea_state_impact=round(conditions.sea_state / 9 * 10, 2),
        )

    def analyze_fuel_trends(self, inputs: Sequence[Any]) -> FuelTrendAnalysis:
        consumptions: List[float] = []

        for data in inputs:
            try:
                consumptions.append(self.predict_fuel_consumption(data).total_consumption)
            except (ValidationError, ModelError) as e:
                logger.warning(f"Failed to predict fuel for historical data point: {e}")

        return summarize_fuel_trends(consumptions)

def summarize_fuel_trends(consumptions: Sequence[float]) -> FuelTrendAnalysis:
    if not consumptions:
        return FuelTrendAnalysis(average_consumption=0.0, trend="stable", analyzed_count=0)

    average = float(np.mean(consumptions))
    trend = _consumption_trend(consumptions)

    recommendations = []
    if trend == "increasing":
        recommendations.append("Consider route optimization to reduce fuel consumption")
        recommendations.append("Review engine maintenance schedule")
        recommendations.append("Evaluate speed management strategies")
    if average > HIGH_CONSUMPTION:
        recommendations.append("Consider fuel-efficient routing")
        recommendations.append("Monitor weather patterns for optimal departure times")

    return FuelTrendAnalysis(
        average_consumption=average,
        trend=trend,
        seasonal_factors={},
        recommendations=recommendations,
        analyzed_count=len(consumptions),
    )

def _consumption_trend(consumptions: Sequence[float]) -> str:
    if len(consumptions) < 2:
        return "stable"

    half = len(consumptions) // 2
    first_avg = float(np.mean(consumptions[:half]))
    second_avg = float(np.mean(consumptions[half:]))
    if first_avg == 0:
        return "stable"

    change = (second_avg - first_avg) / first_avg
    if change > TREND_THRESHOLD:
        return "increasing"
    if change < -TREND_THRESHOLD:
        return "decreasing"
    return "stable"
