"""
Maintenance Forecasting ML Model
Predicts component failure risk and schedules maintenance
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from maritime_ai.ml.base_model import BaseMLModel, ModelConfig, RegressionNetwork, TrainingData
from maritime_ai.ml.exceptions import ModelError
from maritime_ai.ml.feature_engineer import (
    MaintenanceFeatureCodec,
    average_maintenance_interval,
    days_between,
)
from maritime_ai.ml.synthetic_data import generate_maintenance_training_data
from maritime_ai.models.ml_models import (
    AlternativeSchedule,
    FleetHealth,
    MaintenanceFactors,
    MaintenancePrediction,
    ModelName,
    UpcomingMaintenance,
)
from maritime_ai.models.schemas import ComponentType, MaintenanceInput, MaintenanceType
from maritime_ai.utils.validators import ValidationError

logger = logging.getLogger(__name__)

BASE_COSTS = {
    ComponentType.ENGINE: {"preventive": 5000, "corrective": 15000, "emergency": 35000},
    ComponentType.PROPELLER: {"preventive": 2000, "corrective": 8000, "emergency": 20000},
    ComponentType.HULL: {"preventive": 3000, "corrective": 12000, "emergency": 30000},
    ComponentType.NAVIGATION: {"preventive": 1500, "corrective": 5000, "emergency": 12000},
    ComponentType.ELECTRICAL: {"preventive": 1000, "corrective": 4000, "emergency": 10000},
    ComponentType.HYDRAULIC: {"preventive": 1200, "corrective": 4500, "emergency": 11000},
    ComponentType.HVAC: {"preventive": 800, "corrective": 2500, "emergency": 6000},
}

BASE_DOWNTIMES = {
    ComponentType.ENGINE: {"preventive": 8, "corrective": 24, "emergency": 72},
    ComponentType.PROPELLER: {"preventive": 12, "corrective": 36, "emergency": 96},
    ComponentType.HULL: {"preventive": 24, "corrective": 72, "emergency": 168},
    ComponentType.NAVIGATION: {"preventive": 4, "corrective": 12, "emergency": 24},
    ComponentType.ELECTRICAL: {"preventive": 6, "corrective": 18, "emergency": 48},
    ComponentType.HYDRAULIC: {"preventive": 8, "corrective": 20, "emergency": 56},
    ComponentType.HVAC: {"preventive": 4, "corrective": 10, "emergency": 24},
}

DEFAULT_BASE_COST = 1000.0
DEFAULT_BASE_DOWNTIME = 8.0
FAILURE_RISK_THRESHOLD = 0.8
MINIMUM_LEAD_DAYS = 7

def determine_maintenance_type(risk_score: float, urgency: float) -> MaintenanceType:
    if risk_score > 0.9 or urgency > 0.9:
        return MaintenanceType.EMERGENCY
    if risk_score > 0.6:
        return MaintenanceType.CORRECTIVE
    return MaintenanceType.PREVENTIVE

def maintenance_priority(risk_score: float) -> str:
    if risk_score > 0.8:
        return "critical"
    if risk_score > 0.6:
        return "high"
    if risk_score > 0.4:
        return "medium"
    return "low"

def base_cost(component: Any, maintenance_type: MaintenanceType) -> float:
    return float(BASE_COSTS.get(component, {}).get(maintenance_type.value, DEFAULT_BASE_COST))

def base_downtime(component: Any, maintenance_type: MaintenanceType) -> float:
    return float(BASE_DOWNTIMES.get(component, {}).get(maintenance_type.value, DEFAULT_BASE_DOWNTIME))

class MaintenanceForecaster(BaseMLModel):
    default_config = ModelConfig(
        model_name=ModelName.MAINTENANCE_FORECASTER.value,
        version="1.0.0",
        input_size=25,
        output_size=5,  # risk, days_to_failure, cost, downtime, urgency
        learning_rate=0.0008,
        epochs=250,
        batch_size=48,
    )

    def create_codec(self) -> MaintenanceFeatureCodec:
        return MaintenanceFeatureCodec()

    def build_network(self) -> RegressionNetwork:
        return RegressionNetwork(
            input_size=self.config.input_size,
            output_size=self.config.output_size,
            hidden_sizes=[128, 64, 32, 16],
            dropouts=[0.3, 0.25, 0.2],
            batch_norm_first=True,
        )

    def generate_training_data(self, num_samples: int, seed: Optional[int] = None) -> TrainingData:
        return generate_maintenance_training_data(num_samples, seed=seed, codec=self.codec)

    def predict_maintenance(self, data: Any, now: Optional[datetime] = None) -> MaintenancePrediction:
        now = now or datetime.now(timezone.utc)
        record = self.codec.parse(data)
        outcome = self.predict(record, now)
        risk_score, failure_factor, cost_factor, downtime_factor, urgency = outcome.raw[:5]

        history = record.component.maintenance_history
        base_days_to_failure = average_maintenance_interval(history) * 1.2
        days_to_failure = max(1.0, base_days_to_failure * (1 - failure_factor))

        predicted_failure_date = None
        if risk_score > FAILURE_RISK_THRESHOLD:
            predicted_failure_date = now + timedelta(days=days_to_failure)
        recommended_date = now + timedelta(days=max(MINIMUM_LEAD_DAYS, days_to_failure * 0.7))

        maintenance_type = determine_maintenance_type(risk_score, urgency)
        component = record.component.type
        estimated_cost = base_cost(component, maintenance_type) * (1 + cost_factor * 0.5)
        estimated_downtime = base_downtime(component, maintenance_type) * (1 + downtime_factor * 0.4)

        logger.info(
            f"Maintenance predicted for {component.value} on ship {record.ship.id}: "
            f"risk={risk_score:.2f}, type={maintenance_type.value}, cost={estimated_cost:.0f}"
        )

        return MaintenancePrediction(
            risk_score=risk_score,
            predicted_failure_date=predicted_failure_date,
            recommended_maintenance_date=recommended_date,
            maintenance_type=maintenance_type,
            estimated_cost=estimated_cost,
            estimated_downtime=estimated_downtime,
            confidence=outcome.confidence,
            factors=self.calculate_factor_scores(record),
            recommendations=self.generate_recommendations(record, risk_score, maintenance_type, now),
            alternative_schedules=self.generate_alternative_schedules(
                recommended_date, estimated_cost, risk_score
            ),
        )

    @staticmethod
    def calculate_factor_scores(record: MaintenanceInput) -> MaintenanceFactors:
        usage = record.usage
        conditions = record.component.operating_conditions
        readings = record.sensors.last_readings

        usage_score = (usage.daily_operating_hours / 16 * 0.5 +
                       usage.voyages_per_month / 20 * 0.3 +
                       usage.environmental_conditions.rough_sea_exposure * 0.2)
        condition_score = (conditions.average_load * 0.4 +
                           conditions.vibration / 10 * 0.3 +
                           conditions.temperature / 100 * 0.3)
        sensor_score = ((1 - readings.efficiency) * 0.5 +
                        readings.vibration / 10 * 0.3 +
                        readings.temperature / 100 * 0.2)

        return MaintenanceFactors(
            age_score=min(1.0, record.ship.age / 25),
            usage_score=min(1.0, usage_score),
            condition_score=min(1.0, condition_score),
            history_score=min(1.0, len(record.component.maintenance_history) / 20),
            sensor_score=min(1.0, sensor_score),
        )

    @staticmethod
    def generate_recommendations(
        record: MaintenanceInput,
        risk_score: float,
        maintenance_type: MaintenanceType,
        now: datetime,
    ) -> List[str]:
        recommendations = []

        if risk_score > 0.8:
            recommendations.append("Schedule immediate inspection")
            recommendations.append("Consider reducing operational load")

        if maintenance_type == MaintenanceType.EMERGENCY:
            recommendations.append("Prioritize emergency maintenance scheduling")
            recommendations.append("Prepare backup systems if available")

        if record.sensors.last_readings.efficiency < 0.7:
            recommendations.append("Component efficiency is below optimal - consider replacement")

        if record.component.operating_conditions.vibration > 7:
            recommendations.append("High vibration detected - check alignment and mounting")

        if days_between(record.component.last_maintenance_date, now) > 365:
            recommendations.append("Component overdue for scheduled maintenance")

        return recommendations

    @staticmethod
    def generate_alternative_schedules(
        recommended_date: datetime,
        cost: float,
        risk_score: float,
    ) -> List[AlternativeSchedule]:
        alternatives = [
            AlternativeSchedule(
                date=recommended_date - timedelta(days=7),
                type="Preventive (Early)",
                cost=cost * 0.9,
                risk=risk_score * 0.8,
            )
        ]

        if risk_score < 0.7:
            alternatives.append(AlternativeSchedule(
                date=recommended_date + timedelta(days=14),
                type="Preventive (Delayed)",
                cost=cost * 1.1,
                risk=risk_score * 1.2,
            ))

        return alternatives

    def analyze_fleet_health(self, inputs: Sequence[Any], now: Optional[datetime] = None) -> FleetHealth:
        results = []
        failed = 0

        for data in inputs:
            try:
                record = self.codec.parse(data)
                results.append((record, self.predict_maintenance(record, now)))
            except (ValidationError, ModelError) as e:
                failed += 1
                logger.warning(f"Failed to analyze component health: {e}")

        return summarize_fleet_health(results, failed)

def summarize_fleet_health(
    results: Sequence[Tuple[MaintenanceInput, MaintenancePrediction]],
    failed_count: int = 0,
) -> FleetHealth:
    critical_issues = []
    upcoming = []

    for record, prediction in results:
        component = record.component.type.value
        if prediction.risk_score > 0.8:
            critical_issues.append(
                f"{component} on ship {record.ship.id} requires immediate attention"
            )
        if prediction.risk_score > 0.5:
            upcoming.append(UpcomingMaintenance(
                component=f"{record.ship.id}-{component}",
                date=prediction.recommended_maintenance_date,
                priority=maintenance_priority(prediction.risk_score),
            ))

    if results:
        risks = [prediction.risk_score for _, prediction in results]
        overall = float(np.mean([1 - risk for risk in risks]))
        average_risk = float(np.mean(risks))
    else:
        overall = 1.0
        average_risk = 0.0

    if average_risk > 0.6:
        trend = "degrading"
    elif average_risk < 0.3:
        trend = "improving"
    else:
        trend = "stable"

    return FleetHealth(
        overall=overall,
        trend=trend,
        critical_issues=critical_issues,
        upcoming_maintenance=sorted(upcoming, key=lambda item: item.date),
        analyzed_count=len(results),
        failed_count=failed_count,
    )
