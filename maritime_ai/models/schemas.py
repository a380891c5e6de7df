"""
Pydantic Schemas for Maritime AI
Typed prediction input records, parsed and validated at the service boundary
"""

import logging
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def _numeric_series(value: Any, name: str) -> List[float]:
    if value is None:
        logger.warning(f"{name} sensor data not provided, using empty array")
        return []
    if not isinstance(value, (list, tuple)):
        logger.warning(f"{name} sensor data is not an array, using empty array")
        return []

    series = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            continue
        if math.isfinite(item):
            series.append(float(item))

    if len(series) != len(value):
        logger.warning(f"Dropped {len(value) - len(series)} invalid {name} sensor values")
    return series

class InputRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )

class ShipType(str, Enum):
    CARGO = "cargo"
    TANKER = "tanker"
    CONTAINER = "container"
    BULK = "bulk"
    PASSENGER = "passenger"

class ComponentType(str, Enum):
    ENGINE = "engine"
    PROPELLER = "propeller"
    HULL = "hull"
    NAVIGATION = "navigation"
    ELECTRICAL = "electrical"
    HYDRAULIC = "hydraulic"
    HVAC = "hvac"

class MaintenanceType(str, Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    EMERGENCY = "emergency"

# Route optimization

class Coordinates(InputRecord):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

class RouteShipSpecs(InputRecord):
    max_speed: float = Field(gt=0)
    fuel_capacity: float = Field(ge=0)
    cargo_capacity: float = Field(gt=0)
    current_cargo_weight: float = Field(ge=0)

class WeatherConditions(InputRecord):
    wind_speed: float = Field(ge=0)
    wave_height: float = Field(ge=0)
    visibility: float = Field(ge=0)
    temperature: float

class RoutePreferences(InputRecord):
    prioritize_fuel: bool = False
    prioritize_time: bool = False
    avoid_rough_seas: bool = False

class RouteInput(InputRecord):
    origin: Coordinates
    destination: Coordinates
    ship_specs: RouteShipSpecs
    weather_conditions: WeatherConditions
    preferences: RoutePreferences = Field(default_factory=RoutePreferences)

# Fuel prediction

class VoyageInfo(InputRecord):
    distance: float = Field(gt=0)
    duration: float = Field(gt=0)
    average_speed: float = Field(ge=0)

class FuelShipSpecs(InputRecord):
    type: ShipType
    length: float = Field(gt=0)
    beam: float = Field(gt=0)
    displacement: float = Field(gt=0)
    engine_power: float = Field(gt=0)
    max_speed: float = Field(gt=0)
    cargo_weight: float = Field(ge=0)
    cargo_capacity: float = Field(gt=0)

class SeaConditions(InputRecord):
    wind_speed: float = Field(ge=0)
    wind_direction: float
    wave_height: float = Field(ge=0)
    current_speed: float = Field(ge=0)
    current_direction: float
    temperature: float
    sea_state: float = Field(ge=0, le=9)

class OperationalProfile(InputRecord):
    cruising_speed: float = Field(ge=0)
    load_factor: float = Field(ge=0, le=1)
    main_engine_load: float = Field(ge=0, le=1)
    auxiliary_load: float = Field(ge=0, le=1)
    hvac_load: float = Field(default=0.0, ge=0, le=1)

class FuelPredictionInput(InputRecord):
    voyage: VoyageInfo
    ship: FuelShipSpecs
    conditions: SeaConditions
    operational: OperationalProfile

# Maintenance forecasting

class MaintenanceShip(InputRecord):
    id: str = Field(min_length=1)
    type: ShipType
    age: float = Field(ge=0)
    length: float = Field(gt=0)
    engine_power: float = Field(gt=0)
    hours_operated: float = Field(ge=0)

class MaintenanceRecord(InputRecord):
    date: datetime
    type: MaintenanceType
    cost: float = Field(default=0.0, ge=0)
    downtime: float = Field(default=0.0, ge=0)
    description: str = ""

    @field_validator("date")
    @classmethod
    def date_to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

class OperatingConditions(InputRecord):
    average_load: float = Field(ge=0, le=1)
    temperature: float
    vibration: float = Field(ge=0, le=10)
    pressure: float = Field(ge=0)

class ComponentInfo(InputRecord):
    type: ComponentType
    last_maintenance_date: datetime
    maintenance_history: List[MaintenanceRecord] = Field(default_factory=list)
    operating_conditions: OperatingConditions

    @field_validator("last_maintenance_date")
    @classmethod
    def last_date_to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("maintenance_history", mode="before")
    @classmethod
    def lenient_history(cls, v: Any) -> List[Any]:
        if v is None or not isinstance(v, (list, tuple)):
            logger.warning("Maintenance history not provided, using empty array")
            return []

        records = []
        for entry in v:
            if isinstance(entry, MaintenanceRecord):
                records.append(entry)
                continue
            try:
                records.append(MaintenanceRecord.model_validate(entry))
            except ValueError as e:
                logger.warning(f"Skipping malformed maintenance history entry: {e}")
        return sorted(records, key=lambda record: record.date)

class EnvironmentalConditions(InputRecord):
    salt_water_exposure: float = Field(ge=0, le=1)
    temperature_variation: float = Field(ge=0)
    rough_sea_exposure: float = Field(ge=0, le=1)

class UsageProfile(InputRecord):
    daily_operating_hours: float = Field(ge=0, le=24)
    voyages_per_month: float = Field(default=0.0, ge=0)
    average_voyage_distance: float = Field(default=0.0, ge=0)
    environmental_conditions: EnvironmentalConditions

class SensorReadings(InputRecord):
    temperature: float = 0.0
    vibration: float = 0.0
    pressure: float = 0.0
    efficiency: float = 1.0

class SensorData(InputRecord):
    temperature: List[float] = Field(default_factory=list)
    vibration: List[float] = Field(default_factory=list)
    pressure: List[float] = Field(default_factory=list)
    efficiency: List[float] = Field(default_factory=list)
    last_readings: Optional[SensorReadings] = None

    @field_validator("temperature", "vibration", "pressure", "efficiency", mode="before")
    @classmethod
    def lenient_series(cls, v: Any, info) -> List[float]:
        return _numeric_series(v, info.field_name)

    @model_validator(mode="after")
    def default_last_readings(self) -> "SensorData":
        if self.last_readings is None:
            logger.warning("Last sensor readings not provided, using default values")
            self.last_readings = SensorReadings()
        return self

class MaintenanceInput(InputRecord):
    ship: MaintenanceShip
    component: ComponentInfo
    usage: UsageProfile
    sensors: Optional[SensorData] = None

    @model_validator(mode="after")
    def default_sensors(self) -> "MaintenanceInput":
        if self.sensors is None:
            logger.warning("Sensor data not provided, using empty series")
            self.sensors = SensorData()
        return self

# API requests

class FleetHealthRequest(InputRecord):
    maintenance_inputs: List[Any] = Field(min_length=1)

class FuelTrendsRequest(InputRecord):
    historical_data: List[Any] = Field(min_length=1)

class ExportModelsRequest(InputRecord):
    export_path: str = Field(min_length=1)

class ImportModelsRequest(InputRecord):
    import_path: str = Field(min_length=1)

class ApiResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Any = None
