"""
Synthetic Training Data
Seeded random vessel records encoded by the model codecs, with closed-form targets
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import numpy as np

from maritime_ai.ml.base_model import TrainingData
from maritime_ai.ml.feature_engineer import (
    FuelFeatureCodec,
    MaintenanceFeatureCodec,
    RouteFeatureCodec,
)
from maritime_ai.models.schemas import (
    ComponentInfo,
    ComponentType,
    Coordinates,
    EnvironmentalConditions,
    FuelPredictionInput,
    FuelShipSpecs,
    MaintenanceInput,
    MaintenanceRecord,
    MaintenanceShip,
    MaintenanceType,
    OperatingConditions,
    OperationalProfile,
    RouteInput,
    RoutePreferences,
    RouteShipSpecs,
    SeaConditions,
    SensorData,
    SensorReadings,
    ShipType,
    UsageProfile,
    VoyageInfo,
    WeatherConditions,
)
from maritime_ai.utils.helpers import clamp

VALIDATION_SPLIT = 0.2
SENSOR_SERIES_LENGTH = 10
MAX_HISTORY_EVENTS = 10

SHIP_TYPES = list(ShipType)
COMPONENT_TYPES = list(ComponentType)
MAINTENANCE_TYPES = list(MaintenanceType)

def _training_data(inputs: List[List[float]], outputs: List[List[float]]) -> TrainingData:
    return TrainingData(inputs=inputs, outputs=outputs, validation_split=VALIDATION_SPLIT)

def route_targets(features: List[float]) -> List[float]:
    """time_factor, fuel_factor, risk_score, route_efficiency."""
    speed = clamp(features[4])
    load = clamp(features[5])
    weather = (clamp(features[6]) + clamp(features[7])) / 2
    visibility = clamp(features[8])
    prioritize_fuel, prioritize_time, avoid_rough_seas = features[10], features[11], features[12]

    time_factor = clamp(speed * 0.4 + (1 - weather) * 0.4 + prioritize_time * 0.2)
    fuel_factor = clamp((1 - load) * 0.3 + (1 - weather) * 0.4 + prioritize_fuel * 0.3)
    risk_score = clamp(weather * 0.4 + (1 - visibility) * 0.3 + (1 - avoid_rough_seas) * 0.3)
    efficiency = clamp(time_factor * 0.35 + fuel_factor * 0.35 + (1 - risk_score) * 0.3)

    return [time_factor, fuel_factor, risk_score, efficiency]

def random_route_input(rng: np.random.Generator) -> RouteInput:
    cargo_capacity = rng.uniform(500, 2000)
    return RouteInput(
        origin=Coordinates(latitude=rng.uniform(-90, 90), longitude=rng.uniform(-180, 180)),
        destination=Coordinates(latitude=rng.uniform(-90, 90), longitude=rng.uniform(-180, 180)),
        ship_specs=RouteShipSpecs(
            max_speed=rng.uniform(15, 30),
            fuel_capacity=rng.uniform(3000, 7000),
            cargo_capacity=cargo_capacity,
            current_cargo_weight=rng.uniform(0, cargo_capacity),
        ),
        weather_conditions=WeatherConditions(
            wind_speed=rng.uniform(0, 50),
            wave_height=rng.uniform(0, 10),
            visibility=rng.uniform(0, 10),
            temperature=rng.uniform(-10, 30),
        ),
        preferences=RoutePreferences(
            prioritize_fuel=bool(rng.random() > 0.5),
            prioritize_time=bool(rng.random() > 0.5),
            avoid_rough_seas=bool(rng.random() > 0.5),
        ),
    )

def generate_route_training_data(
    num_samples: int,
    seed: Optional[int] = None,
    codec: Optional[RouteFeatureCodec] = None,
    now: Optional[datetime] = None,
) -> TrainingData:
    rng = np.random.default_rng(seed)
    codec = codec or RouteFeatureCodec()
    now = now or datetime.now(timezone.utc)

    inputs, outputs = [], []
    for _ in range(num_samples):
        features = codec.encode(random_route_input(rng), now)
        inputs.append(features)
        outputs.append(route_targets(features))

    return _training_data(inputs, outputs)

def fuel_targets(features: List[float]) -> List[float]:
    """main_engine, auxiliary, efficiency."""
    weather = (clamp(features[9]) + clamp(features[12])) / 2
    speed_ratio = features[17] / features[7] if features[7] > 0 else 0.0

    main_engine = clamp(
        clamp(features[0]) * 0.2 +
        clamp(features[2]) * 0.3 +
        clamp(features[5]) * 0.2 +
        features[18] * 0.2 +
        weather * 0.1
    )
    auxiliary = clamp(features[19] * 0.5 + clamp(features[15]) * 0.3 + clamp(features[8]) * 0.2)

    speed_efficiency = 1 - abs(0.8 - speed_ratio)  # optimal at 80% of max speed
    load_efficiency = 1 - abs(0.75 - clamp(features[8]))
    efficiency = clamp(speed_efficiency * 0.4 + load_efficiency * 0.4 + (1 - weather) * 0.2)

    return [main_engine, auxiliary, efficiency]

def random_fuel_input(rng: np.random.Generator) -> FuelPredictionInput:
    max_speed = rng.uniform(20, 30)
    cargo_capacity = rng.uniform(40000, 70000)
    return FuelPredictionInput(
        voyage=VoyageInfo(
            distance=rng.uniform(1000, 5000),
            duration=rng.uniform(48, 288),
            average_speed=rng.uniform(15, 25),
        ),
        ship=FuelShipSpecs(
            type=SHIP_TYPES[rng.integers(len(SHIP_TYPES))],
            length=rng.uniform(200, 400),
            beam=rng.uniform(30, 60),
            displacement=rng.uniform(30000, 70000),
            engine_power=rng.uniform(15000, 35000),
            max_speed=max_speed,
            cargo_weight=cargo_capacity * rng.uniform(0.4, 0.95),
            cargo_capacity=cargo_capacity,
        ),
        conditions=SeaConditions(
            wind_speed=rng.uniform(0, 40),
            wind_direction=rng.uniform(0, 360),
            wave_height=rng.uniform(0, 8),
            current_speed=rng.uniform(0, 4),
            current_direction=rng.uniform(0, 360),
            temperature=rng.uniform(10, 35),
            sea_state=int(rng.integers(0, 9)),
        ),
        operational=OperationalProfile(
            cruising_speed=max_speed * rng.uniform(0.7, 0.9),
            load_factor=rng.uniform(0.4, 0.9),
            main_engine_load=rng.uniform(0.5, 0.9),
            auxiliary_load=rng.uniform(0.3, 0.7),
            hvac_load=rng.uniform(0.2, 0.7),
        ),
    )

def generate_fuel_training_data(
    num_samples: int,
    seed: Optional[int] = None,
    codec: Optional[FuelFeatureCodec] = None,
) -> TrainingData:
    rng = np.random.default_rng(seed)
    codec = codec or FuelFeatureCodec()

    inputs, outputs = [], []
    for _ in range(num_samples):
        features = codec.encode(random_fuel_input(rng))
        inputs.append(features)
        outputs.append(fuel_targets(features))

    return _training_data(inputs, outputs)

def maintenance_targets(features: List[float]) -> List[float]:
    """risk, days_to_failure, cost, downtime, urgency."""
    age = clamp(features[0] * 2)  # saturates at 25 years
    usage = clamp(features[3])
    since = clamp(features[6])
    component = features[5]
    condition = (clamp(features[9]) + clamp(features[10]) + clamp(features[11])) / 3
    sensor_wear = (clamp(1 - features[22]) + clamp(features[20]) + clamp(features[24])) / 3

    risk = clamp(
        age * 0.15 +
        usage * 0.15 +
        since * 0.15 +
        component * 0.1 +
        condition * 0.2 +
        sensor_wear * 0.25
    )
    failure_proximity = clamp(age * 0.3 + since * 0.3 + sensor_wear * 0.4)
    urgency = clamp(risk * 0.2 + clamp(features[9]) * 0.3 + sensor_wear * 0.3 + since * 0.2)
    cost = clamp(component * 0.3 + age * 0.2 + condition * 0.3 + urgency * 0.2)
    downtime = clamp(
        component * 0.25 +
        (clamp(features[1]) + clamp(features[2])) / 2 * 0.25 +
        clamp(features[18]) * 0.25 +
        urgency * 0.25
    )

    return [risk, failure_proximity, cost, downtime, urgency]

def _sensor_series(rng: np.random.Generator, start: float, slope: float, noise: float) -> List[float]:
    steps = np.arange(SENSOR_SERIES_LENGTH)
    values = start + slope * steps + rng.normal(0, noise, SENSOR_SERIES_LENGTH)
    return [float(v) for v in np.maximum(values, 0.0)]

def random_maintenance_input(rng: np.random.Generator, now: datetime) -> MaintenanceInput:
    last_maintenance = now - timedelta(days=float(rng.uniform(0, 730)))

    history = []
    for _ in range(int(rng.integers(0, MAX_HISTORY_EVENTS))):
        history.append(MaintenanceRecord(
            date=last_maintenance - timedelta(days=float(rng.uniform(0, 3650))),
            type=MAINTENANCE_TYPES[rng.integers(len(MAINTENANCE_TYPES))],
            cost=rng.uniform(500, 20000),
            downtime=rng.uniform(2, 96),
        ))

    conditions = OperatingConditions(
        average_load=rng.uniform(0.4, 0.9),
        temperature=rng.uniform(40, 80),
        vibration=rng.uniform(1, 5),
        pressure=rng.uniform(20, 30),
    )

    temperature = _sensor_series(rng, conditions.temperature, rng.uniform(-1, 1), 0.5)
    vibration = [min(10.0, v) for v in _sensor_series(rng, conditions.vibration, rng.uniform(0, 0.3), 0.1)]
    pressure = _sensor_series(rng, conditions.pressure, rng.uniform(-0.2, 0.2), 0.2)
    efficiency = [clamp(v) for v in _sensor_series(rng, rng.uniform(0.6, 1.0), rng.uniform(-0.02, 0.01), 0.01)]

    return MaintenanceInput(
        ship=MaintenanceShip(
            id=f"SHIP-{int(rng.integers(1000, 9999))}",
            type=SHIP_TYPES[rng.integers(len(SHIP_TYPES))],
            age=rng.uniform(1, 25),
            length=rng.uniform(200, 400),
            engine_power=rng.uniform(15000, 35000),
            hours_operated=rng.uniform(1000, 100000),
        ),
        component=ComponentInfo(
            type=COMPONENT_TYPES[rng.integers(len(COMPONENT_TYPES))],
            last_maintenance_date=last_maintenance,
            maintenance_history=history,
            operating_conditions=conditions,
        ),
        usage=UsageProfile(
            daily_operating_hours=rng.uniform(8, 24),
            voyages_per_month=rng.uniform(0, 20),
            average_voyage_distance=rng.uniform(500, 5000),
            environmental_conditions=EnvironmentalConditions(
                salt_water_exposure=rng.uniform(0, 1),
                temperature_variation=rng.uniform(0, 40),
                rough_sea_exposure=rng.uniform(0, 1),
            ),
        ),
        sensors=SensorData(
            temperature=temperature,
            vibration=vibration,
            pressure=pressure,
            efficiency=efficiency,
            last_readings=SensorReadings(
                temperature=temperature[-1],
                vibration=vibration[-1],
                pressure=pressure[-1],
                efficiency=efficiency[-1],
            ),
        ),
    )

def generate_maintenance_training_data(
    num_samples: int,
    seed: Optional[int] = None,
    codec: Optional[MaintenanceFeatureCodec] = None,
    now: Optional[datetime] = None,
) -> TrainingData:
    rng = np.random.default_rng(seed)
    codec = codec or MaintenanceFeatureCodec()
    now = now or datetime.now(timezone.utc)

    inputs, outputs = [], []
    for _ in range(num_samples):
        features = codec.encode(random_maintenance_input(rng, now), now)
        inputs.append(features)
        outputs.append(maintenance_targets(features))

    return _training_data(inputs, outputs)
