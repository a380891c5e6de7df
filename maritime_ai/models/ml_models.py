"""
Prediction result models returned by the AI service
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from maritime_ai.models.schemas import Coordinates, MaintenanceType

class ResultModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

class ModelName(str, Enum):
    ROUTE_OPTIMIZER = "route-optimizer"
    FUEL_PREDICTOR = "fuel-predictor"
    MAINTENANCE_FORECASTER = "maintenance-forecaster"

class AlternativeRoute(ResultModel):
    route: List[Coordinates]
    time: float
    fuel: float
    risk: float

class RouteOptimization(ResultModel):
    optimized_route: List[Coordinates]
    estimated_time: float
    estimated_fuel_consumption: float
    weather_risk_score: float
    total_distance: float
    confidence: float
    alternative_routes: List[AlternativeRoute] = []

class FuelImpactFactors(ResultModel):
    weather_impact: float
    load_impact: float
    speed_impact: float
    sea_state_impact: float

class FuelPrediction(ResultModel):
    total_consumption: float
    consumption_rate: float
    main_engine_consumption: float
    auxiliary_consumption: float
    efficiency: float
    co2_emissions: float
    confidence: float
    factors: FuelImpactFactors

class FuelTrendAnalysis(ResultModel):
    average_consumption: float
    trend: str
    seasonal_factors: Dict[str, float] = {}
    recommendations: List[str] = []
    analyzed_count: int = 0

class MaintenanceFactors(ResultModel):
    age_score: float
    usage_score: float
    condition_score: float
    history_score: float
    sensor_score: float

class AlternativeSchedule(ResultModel):
    date: datetime
    type: str
    cost: float
    risk: float

class MaintenancePrediction(ResultModel):
    risk_score: float
    predicted_failure_date: Optional[datetime]
    recommended_maintenance_date: datetime
    maintenance_type: MaintenanceType
    estimated_cost: float
    estimated_downtime: float
    confidence: float
    factors: MaintenanceFactors
    recommendations: List[str] = []
    alternative_schedules: List[AlternativeSchedule] = []

class UpcomingMaintenance(ResultModel):
    component: str
    date: datetime
    priority: str

class FleetHealth(ResultModel):
    overall: float
    trend: str
    critical_issues: List[str] = []
    upcoming_maintenance: List[UpcomingMaintenance] = []
    analyzed_count: int = 0
    failed_count: int = 0

class ModelPerformance(ResultModel):
    model_name: str
    version: str
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    last_evaluated: datetime
    prediction_count: int
    average_confidence: float

class ModelsLoaded(ResultModel):
    route_optimizer: bool
    fuel_predictor: bool
    maintenance_forecaster: bool

class ServiceStatus(ResultModel):
    is_ready: bool
    state: str
    models_loaded: ModelsLoaded
    last_training_date: Optional[datetime]
    performance_metrics: List[ModelPerformance] = []
    system_health: str
