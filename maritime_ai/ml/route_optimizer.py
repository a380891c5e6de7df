"""
Route Optimization ML Model
Estimates transit time, fuel and weather risk between two ports
"""

import logging
import threading
from datetime import datetime
from typing import Any, List, Optional

import numpy as np

from maritime_ai.ml.base_model import BaseMLModel, ModelConfig, RegressionNetwork, TrainingData
from maritime_ai.ml.feature_engineer import RouteFeatureCodec, haversine_distance, route_distance
from maritime_ai.ml.synthetic_data import generate_route_training_data
from maritime_ai.models.ml_models import AlternativeRoute, ModelName, RouteOptimization
from maritime_ai.models.schemas import Coordinates, RouteShipSpecs, WeatherConditions
from maritime_ai.utils.helpers import clamp

logger = logging.getLogger(__name__)

ALTERNATIVE_ROUTE_COUNT = 2
ALTERNATIVE_WAYPOINTS = 5
ALTERNATIVE_SPEED_KNOTS = 20.0
ALTERNATIVE_FUEL_PER_NM = 0.35

class RouteOptimizer(BaseMLModel):
    default_config = ModelConfig(
        model_name=ModelName.ROUTE_OPTIMIZER.value,
        version="1.0.0",
        input_size=15,
        output_size=4,  # time_factor, fuel_factor, risk_score, route_efficiency
        learning_rate=0.001,
        epochs=150,
        batch_size=32,
    )

    def __init__(self, config: Optional[ModelConfig] = None, models_dir=None,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(config, models_dir)
        self.rng = rng or np.random.default_rng()
        self._rng_lock = threading.Lock()

    def create_codec(self) -> RouteFeatureCodec:
        return RouteFeatureCodec()

    def build_network(self) -> RegressionNetwork:
        return RegressionNetwork(
            input_size=self.config.input_size,
            output_size=self.config.output_size,
            hidden_sizes=[64, 32, 16],
            dropouts=[0.2, 0.1],
        )

    def generate_training_data(self, num_samples: int, seed: Optional[int] = None) -> TrainingData:
        return generate_route_training_data(num_samples, seed=seed, codec=self.codec)

    def optimize_route(self, data: Any, now: Optional[datetime] = None) -> RouteOptimization:
        record = self.codec.parse(data)
        outcome = self.predict(record, now)
        time_factor, fuel_factor, risk_score, route_efficiency = outcome.raw[:4]

        distance = haversine_distance(record.origin, record.destination)
        base_time = self.calculate_base_time(distance, record.ship_specs.max_speed)
        base_fuel = self.calculate_base_fuel(distance, record.ship_specs)

        estimated_time = base_time * (1 + time_factor * 0.5)
        estimated_fuel = base_fuel * (1 + fuel_factor * 0.3)

        with self._rng_lock:
            optimized_route = self.generate_waypoints(
                record.origin, record.destination, record.weather_conditions, route_efficiency
            )
            alternatives = self.generate_alternative_routes(
                record.origin, record.destination, record.weather_conditions
            )

        logger.info(
            f"Route optimized: distance={distance:.1f}nm, time={estimated_time:.1f}h, "
            f"fuel={estimated_fuel:.1f}, risk={risk_score:.2f}, confidence={outcome.confidence:.2f}"
        )

        return RouteOptimization(
            optimized_route=optimized_route,
            estimated_time=estimated_time,
            estimated_fuel_consumption=estimated_fuel,
            weather_risk_score=risk_score,
            total_distance=distance,
            confidence=outcome.confidence,
            alternative_routes=alternatives,
        )

    @staticmethod
    def calculate_base_time(distance: float, speed: float) -> float:
        return distance / speed

    @staticmethod
    def calculate_base_fuel(distance: float, specs: RouteShipSpecs) -> float:
        cargo_factor = 1 + (specs.current_cargo_weight / specs.cargo_capacity) * 0.2
        speed_factor = (specs.max_speed / 20) ** 2
        return distance * 0.3 * cargo_factor * speed_factor

    def generate_waypoints(
        self,
        origin: Coordinates,
        destination: Coordinates,
        weather: WeatherConditions,
        efficiency: float,
    ) -> List[Coordinates]:
        segments = max(2, int(np.floor(efficiency * 10)))
        deviation = (weather.wind_speed + weather.wave_height) / 200

        waypoints = [origin]
        for i in range(1, segments):
            progress = i / segments
            lat, lon = _interpolate(origin, destination, progress)
            waypoints.append(_bounded_point(
                lat + self.rng.uniform(-deviation, deviation),
                lon + self.rng.uniform(-deviation, deviation),
            ))
        waypoints.append(destination)
        return waypoints

    def generate_alternative_routes(
        self,
        origin: Coordinates,
        destination: Coordinates,
        weather: WeatherConditions,
    ) -> List[AlternativeRoute]:
        risk = min(1.0, (weather.wind_speed + weather.wave_height) / 30)
        alternatives = []

        for i in range(ALTERNATIVE_ROUTE_COUNT):
            variation = 0.05 * (i + 1)
            route = []
            for j in range(ALTERNATIVE_WAYPOINTS + 1):
                lat, lon = _interpolate(origin, destination, j / ALTERNATIVE_WAYPOINTS)
                if 0 < j < ALTERNATIVE_WAYPOINTS:
                    lat += self.rng.uniform(-variation, variation)
                    lon += self.rng.uniform(-variation, variation)
                route.append(_bounded_point(lat, lon))

            distance = route_distance(route)
            alternatives.append(AlternativeRoute(
                route=route,
                time=distance / ALTERNATIVE_SPEED_KNOTS,
                fuel=distance * ALTERNATIVE_FUEL_PER_NM,
                risk=risk,
            ))

        return alternatives

def _interpolate(origin: Coordinates, destination: Coordinates, progress: float):
    lat = origin.latitude + (destination.latitude - origin.latitude) * progress
    lon = origin.longitude + (destination.longitude - origin.longitude) * progress
    return lat, lon

def _bounded_point(lat: float, lon: float) -> Coordinates:
    return Coordinates(latitude=clamp(lat, -90.0, 90.0), longitude=clamp(lon, -180.0, 180.0))
