"""
Feature Engineering for ML Models
Encodes vessel records into fixed-length normalized vectors and back
"""

import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

import numpy as np
import pydantic

from maritime_ai.models.schemas import (
    ComponentType,
    Coordinates,
    FuelPredictionInput,
    InputRecord,
    MaintenanceInput,
    MaintenanceRecord,
    RouteInput,
    ShipType,
)
from maritime_ai.utils.validators import ValidationError, from_pydantic_error

logger = logging.getLogger(__name__)

EARTH_RADIUS_NM = 3440.065
SECONDS_PER_DAY = 86400.0
DEFAULT_MAINTENANCE_INTERVAL_DAYS = 365.0

SHIP_TYPE_CODES = {
    ShipType.CARGO: 0.2,
    ShipType.TANKER: 0.4,
    ShipType.CONTAINER: 0.6,
    ShipType.BULK: 0.8,
    ShipType.PASSENGER: 1.0,
}

COMPONENT_TYPE_CODES = {
    ComponentType.ENGINE: 1.0,
    ComponentType.PROPELLER: 0.8,
    ComponentType.HULL: 0.6,
    ComponentType.NAVIGATION: 0.4,
    ComponentType.ELECTRICAL: 0.3,
    ComponentType.HYDRAULIC: 0.2,
    ComponentType.HVAC: 0.1,
}

RecordT = TypeVar("RecordT", bound=InputRecord)

def haversine_distance(point1: Coordinates, point2: Coordinates) -> float:
    """Great-circle distance in nautical miles."""
    lat1 = math.radians(point1.latitude)
    lat2 = math.radians(point2.latitude)
    delta_lat = math.radians(point2.latitude - point1.latitude)
    delta_lon = math.radians(point2.longitude - point1.longitude)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_NM * c

def route_distance(route: Sequence[Coordinates]) -> float:
    total = 0.0
    for previous, current in zip(route, route[1:]):
        total += haversine_distance(previous, current)
    return total

def encode_ship_type(ship_type: Any) -> float:
    return SHIP_TYPE_CODES.get(ship_type, 0.5)

def encode_component_type(component_type: Any) -> float:
    return COMPONENT_TYPE_CODES.get(component_type, 0.5)

def seasonal_factor(now: datetime) -> float:
    # month index 0-11
    return math.sin((now.month - 1) * math.pi / 6)

def days_between(earlier: datetime, later: datetime) -> int:
    return math.floor((later - earlier).total_seconds() / SECONDS_PER_DAY)

def average_maintenance_interval(history: Sequence[MaintenanceRecord]) -> float:
    if len(history) < 2:
        return DEFAULT_MAINTENANCE_INTERVAL_DAYS

    intervals = [
        days_between(previous.date, current.date)
        for previous, current in zip(history, history[1:])
    ]
    return sum(intervals) / len(intervals)

def maintenance_cost_trend(history: Sequence[MaintenanceRecord]) -> float:
    if len(history) < 3:
        return 0.0

    recent_avg = float(np.mean([record.cost for record in history[-3:]]))
    earlier_avg = float(np.mean([record.cost for record in history[:3]]))
    if earlier_avg == 0:
        return 0.0

    return float(np.clip((recent_avg - earlier_avg) / earlier_avg, -1.0, 1.0))

def sensor_trend(values: Sequence[float]) -> float:
    """Relative change between the first and last five readings, in [-1, 1]."""
    if len(values) < 3:
        logger.debug("Insufficient sensor values for trend calculation")
        return 0.0

    recent_avg = float(np.mean(values[-5:]))
    earlier_avg = float(np.mean(values[:5]))
    if earlier_avg == 0:
        logger.warning("Earlier sensor average is zero, cannot calculate trend")
        return 0.0

    return float(np.clip((recent_avg - earlier_avg) / earlier_avg, -1.0, 1.0))

def _nearest_code(codes: Dict[Any, float], value: float) -> str:
    best = min(codes.items(), key=lambda item: abs(item[1] - value))
    return best[0].value

class FeatureCodec(ABC, Generic[RecordT]):
    """Maps a domain record to a fixed-length vector and approximately back."""

    record_type: Type[RecordT]
    feature_names: List[str] = []

    @property
    def input_size(self) -> int:
        return len(self.feature_names)

    def parse(self, data: Any) -> RecordT:
        if isinstance(data, self.record_type):
            return data
        if data is None or not isinstance(data, dict):
            raise ValidationError(
                f"Invalid input: expected {self.record_type.__name__} object"
            )
        try:
            return self.record_type.model_validate(data)
        except pydantic.ValidationError as e:
            raise from_pydantic_error(e, self.record_type.__name__) from e

    @abstractmethod
    def encode(self, record: RecordT, now: Optional[datetime] = None) -> List[float]:
        pass

    @abstractmethod
    def decode(self, vector: Sequence[float]) -> Dict[str, Any]:
        pass

    def describe(self, vector: Sequence[float]) -> Dict[str, float]:
        return dict(zip(self.feature_names, (float(v) for v in vector)))

    def _check_length(self, vector: Sequence[float]):
        if len(vector) != self.input_size:
            raise ValidationError(
                f"Expected feature vector of length {self.input_size}, got {len(vector)}"
            )

class RouteFeatureCodec(FeatureCodec[RouteInput]):
    record_type = RouteInput
    feature_names = [
        "origin_latitude",
        "origin_longitude",
        "destination_latitude",
        "destination_longitude",
        "max_speed",
        "cargo_load_ratio",
        "wind_speed",
        "wave_height",
        "visibility",
        "temperature",
        "prioritize_fuel",
        "prioritize_time",
        "avoid_rough_seas",
        "distance",
        "seasonal_factor",
    ]

    MAX_SPEED_KNOTS = 30.0
    MAX_WIND_KNOTS = 50.0
    MAX_WAVE_M = 10.0
    MAX_VISIBILITY = 10.0
    MAX_TEMPERATURE_C = 50.0
    MAX_DISTANCE_NM = 10000.0

    def encode(self, record: RouteInput, now: Optional[datetime] = None) -> List[float]:
        now = now or datetime.now(timezone.utc)
        specs = record.ship_specs
        weather = record.weather_conditions
        prefs = record.preferences
        distance = haversine_distance(record.origin, record.destination)

        return [
            record.origin.latitude / 90,
            record.origin.longitude / 180,
            record.destination.latitude / 90,
            record.destination.longitude / 180,
            specs.max_speed / self.MAX_SPEED_KNOTS,
            specs.current_cargo_weight / specs.cargo_capacity,
            weather.wind_speed / self.MAX_WIND_KNOTS,
            weather.wave_height / self.MAX_WAVE_M,
            weather.visibility / self.MAX_VISIBILITY,
            weather.temperature / self.MAX_TEMPERATURE_C,
            1.0 if prefs.prioritize_fuel else 0.0,
            1.0 if prefs.prioritize_time else 0.0,
            1.0 if prefs.avoid_rough_seas else 0.0,
            distance / self.MAX_DISTANCE_NM,
            seasonal_factor(now),
        ]

    def decode(self, vector: Sequence[float]) -> Dict[str, Any]:
        self._check_length(vector)
        v = [float(x) for x in vector]
        return {
            "origin": {"latitude": v[0] * 90, "longitude": v[1] * 180},
            "destination": {"latitude": v[2] * 90, "longitude": v[3] * 180},
            "max_speed": v[4] * self.MAX_SPEED_KNOTS,
            "cargo_load_ratio": v[5],
            "wind_speed": v[6] * self.MAX_WIND_KNOTS,
            "wave_height": v[7] * self.MAX_WAVE_M,
            "visibility": v[8] * self.MAX_VISIBILITY,
            "temperature": v[9] * self.MAX_TEMPERATURE_C,
            "prioritize_fuel": v[10] >= 0.5,
            "prioritize_time": v[11] >= 0.5,
            "avoid_rough_seas": v[12] >= 0.5,
            "distance": v[13] * self.MAX_DISTANCE_NM,
            "seasonal_factor": v[14],
        }

class FuelFeatureCodec(FeatureCodec[FuelPredictionInput]):
    record_type = FuelPredictionInput
    feature_names = [
        "distance",
        "duration",
        "average_speed",
        "length",
        "beam",
        "displacement",
        "engine_power",
        "max_speed",
        "cargo_load_ratio",
        "wind_speed",
        "wind_direction_cos",
        "wind_direction_sin",
        "wave_height",
        "current_speed",
        "current_direction_cos",
        "temperature",
        "sea_state",
        "cruising_speed",
        "main_engine_load",
        "auxiliary_load",
    ]

    MAX_DISTANCE_NM = 10000.0
    MAX_DURATION_H = 500.0
    MAX_SPEED_KNOTS = 35.0
    MAX_LENGTH_M = 400.0
    MAX_BEAM_M = 60.0
    MAX_DISPLACEMENT_T = 100000.0
    MAX_ENGINE_POWER_KW = 50000.0
    MAX_WIND_KNOTS = 60.0
    MAX_WAVE_M = 15.0
    MAX_CURRENT_KNOTS = 10.0
    MAX_TEMPERATURE_C = 50.0
    MAX_SEA_STATE = 9.0

    def encode(self, record: FuelPredictionInput, now: Optional[datetime] = None) -> List[float]:
        voyage = record.voyage
        ship = record.ship
        conditions = record.conditions
        operational = record.operational
        wind_direction = math.radians(conditions.wind_direction)
        current_direction = math.radians(conditions.current_direction)

        return [
            voyage.distance / self.MAX_DISTANCE_NM,
            voyage.duration / self.MAX_DURATION_H,
            voyage.average_speed / self.MAX_SPEED_KNOTS,
            ship.length / self.MAX_LENGTH_M,
            ship.beam / self.MAX_BEAM_M,
            ship.displacement / self.MAX_DISPLACEMENT_T,
            ship.engine_power / self.MAX_ENGINE_POWER_KW,
            ship.max_speed / self.MAX_SPEED_KNOTS,
            ship.cargo_weight / ship.cargo_capacity,
            conditions.wind_speed / self.MAX_WIND_KNOTS,
            math.cos(wind_direction),
            math.sin(wind_direction),
            conditions.wave_height / self.MAX_WAVE_M,
            conditions.current_speed / self.MAX_CURRENT_KNOTS,
            math.cos(current_direction),
            conditions.temperature / self.MAX_TEMPERATURE_C,
            conditions.sea_state / self.MAX_SEA_STATE,
            operational.cruising_speed / self.MAX_SPEED_KNOTS,
            operational.main_engine_load,
            operational.auxiliary_load,
        ]

    def decode(self, vector: Sequence[float]) -> Dict[str, Any]:
        self._check_length(vector)
        v = [float(x) for x in vector]
        return {
            "distance": v[0] * self.MAX_DISTANCE_NM,
            "duration": v[1] * self.MAX_DURATION_H,
            "average_speed": v[2] * self.MAX_SPEED_KNOTS,
            "length": v[3] * self.MAX_LENGTH_M,
            "beam": v[4] * self.MAX_BEAM_M,
            "displacement": v[5] * self.MAX_DISPLACEMENT_T,
            "engine_power": v[6] * self.MAX_ENGINE_POWER_KW,
            "max_speed": v[7] * self.MAX_SPEED_KNOTS,
            "cargo_load_ratio": v[8],
            "wind_speed": v[9] * self.MAX_WIND_KNOTS,
            "wind_direction": math.degrees(math.atan2(v[11], v[10])) % 360,
            "wave_height": v[12] * self.MAX_WAVE_M,
            "current_speed": v[13] * self.MAX_CURRENT_KNOTS,
            # cosine only, so the side of the bow is lost
            "current_direction": math.degrees(math.acos(max(-1.0, min(1.0, v[14])))),
            "temperature": v[15] * self.MAX_TEMPERATURE_C,
            "sea_state": v[16] * self.MAX_SEA_STATE,
            "cruising_speed": v[17] * self.MAX_SPEED_KNOTS,
            "main_engine_load": v[18],
            "auxiliary_load": v[19],
        }

class MaintenanceFeatureCodec(FeatureCodec[MaintenanceInput]):
    record_type = MaintenanceInput
    feature_names = [
        "ship_age",
        "ship_length",
        "engine_power",
        "hours_operated",
        "ship_type",
        "component_type",
        "years_since_maintenance",
        "maintenance_count",
        "maintenance_cost_trend",
        "average_load",
        "operating_temperature",
        "operating_vibration",
        "operating_pressure",
        "daily_operating_hours",
        "voyages_per_month",
        "average_voyage_distance",
        "salt_water_exposure",
        "temperature_variation",
        "rough_sea_exposure",
        "sensor_temperature",
        "sensor_vibration",
        "sensor_pressure",
        "sensor_efficiency",
        "temperature_trend",
        "vibration_trend",
    ]

    MAX_AGE_YEARS = 50.0
    MAX_LENGTH_M = 400.0
    MAX_ENGINE_POWER_KW = 50000.0
    MAX_HOURS = 100000.0
    MAX_HISTORY_EVENTS = 50.0
    MAX_TEMPERATURE_C = 100.0
    MAX_VIBRATION = 10.0
    MAX_PRESSURE_BAR = 50.0
    MAX_VOYAGES = 30.0
    MAX_VOYAGE_NM = 10000.0
    MAX_TEMPERATURE_VARIATION_C = 50.0

    def encode(self, record: MaintenanceInput, now: Optional[datetime] = None) -> List[float]:
        now = now or datetime.now(timezone.utc)
        ship = record.ship
        component = record.component
        conditions = component.operating_conditions
        usage = record.usage
        environment = usage.environmental_conditions
        sensors = record.sensors
        readings = sensors.last_readings
        history = component.maintenance_history

        days_since = days_between(component.last_maintenance_date, now)

        return [
            ship.age / self.MAX_AGE_YEARS,
            ship.length / self.MAX_LENGTH_M,
            ship.engine_power / self.MAX_ENGINE_POWER_KW,
            ship.hours_operated / self.MAX_HOURS,
            encode_ship_type(ship.type),
            encode_component_type(component.type),
            days_since / 365,
            len(history) / self.MAX_HISTORY_EVENTS,
            maintenance_cost_trend(history),
            conditions.average_load,
            conditions.temperature / self.MAX_TEMPERATURE_C,
            conditions.vibration / self.MAX_VIBRATION,
            conditions.pressure / self.MAX_PRESSURE_BAR,
            usage.daily_operating_hours / 24,
            usage.voyages_per_month / self.MAX_VOYAGES,
            usage.average_voyage_distance / self.MAX_VOYAGE_NM,
            environment.salt_water_exposure,
            environment.temperature_variation / self.MAX_TEMPERATURE_VARIATION_C,
            environment.rough_sea_exposure,
            readings.temperature / self.MAX_TEMPERATURE_C,
            readings.vibration / self.MAX_VIBRATION,
            readings.pressure / self.MAX_PRESSURE_BAR,
            readings.efficiency,
            sensor_trend(sensors.temperature),
            sensor_trend(sensors.vibration),
        ]

    def decode(self, vector: Sequence[float]) -> Dict[str, Any]:
        self._check_length(vector)
        v = [float(x) for x in vector]
        return {
            "ship_age": v[0] * self.MAX_AGE_YEARS,
            "ship_length": v[1] * self.MAX_LENGTH_M,
            "engine_power": v[2] * self.MAX_ENGINE_POWER_KW,
            "hours_operated": v[3] * self.MAX_HOURS,
            "ship_type": _nearest_code(SHIP_TYPE_CODES, v[4]),
            "component_type": _nearest_code(COMPONENT_TYPE_CODES, v[5]),
            "days_since_maintenance": v[6] * 365,
            "maintenance_count": round(v[7] * self.MAX_HISTORY_EVENTS),
            "maintenance_cost_trend": v[8],
            "average_load": v[9],
            "operating_temperature": v[10] * self.MAX_TEMPERATURE_C,
            "operating_vibration": v[11] * self.MAX_VIBRATION,
            "operating_pressure": v[12] * self.MAX_PRESSURE_BAR,
            "daily_operating_hours": v[13] * 24,
            "voyages_per_month": v[14] * self.MAX_VOYAGES,
            "average_voyage_distance": v[15] * self.MAX_VOYAGE_NM,
            "salt_water_exposure": v[16],
            "temperature_variation": v[17] * self.MAX_TEMPERATURE_VARIATION_C,
            "rough_sea_exposure": v[18],
            "sensor_temperature": v[19] * self.MAX_TEMPERATURE_C,
            "sensor_vibration": v[20] * self.MAX_VIBRATION,
            "sensor_pressure": v[21] * self.MAX_PRESSURE_BAR,
            "sensor_efficiency": v[22],
            "temperature_trend": v[23],
            "vibration_trend": v[24],
        }
