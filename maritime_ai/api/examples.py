"""
Example request bodies for the AI endpoints
"""

ROUTE_OPTIMIZATION_EXAMPLE = {
    "origin": {"latitude": 40.7128, "longitude": -74.0060},
    "destination": {"latitude": 51.5074, "longitude": -0.1278},
    "shipSpecs": {
        "maxSpeed": 25,
        "fuelCapacity": 5000,
        "cargoCapacity": 1000,
        "currentCargoWeight": 600,
    },
    "weatherConditions": {
        "windSpeed": 15,
        "waveHeight": 2.5,
        "visibility": 8,
        "temperature": 20,
    },
    "preferences": {
        "prioritizeFuel": True,
        "prioritizeTime": False,
        "avoidRoughSeas": True,
    },
}

FUEL_PREDICTION_EXAMPLE = {
    "voyage": {"distance": 3000, "duration": 120, "averageSpeed": 22},
    "ship": {
        "type": "container",
        "length": 300,
        "beam": 45,
        "displacement": 50000,
        "enginePower": 25000,
        "maxSpeed": 25,
        "cargoWeight": 35000,
        "cargoCapacity": 50000,
    },
    "conditions": {
        "windSpeed": 20,
        "windDirection": 45,
        "waveHeight": 3,
        "currentSpeed": 2,
        "currentDirection": 90,
        "temperature": 18,
        "seaState": 4,
    },
    "operational": {
        "cruisingSpeed": 22,
        "loadFactor": 0.7,
        "mainEngineLoad": 0.8,
        "auxiliaryLoad": 0.6,
        "hvacLoad": 0.4,
    },
}

MAINTENANCE_PREDICTION_EXAMPLE = {
    "ship": {
        "id": "ship-001",
        "type": "container",
        "age": 12,
        "length": 300,
        "enginePower": 25000,
        "hoursOperated": 45000,
    },
    "component": {
        "type": "engine",
        "lastMaintenanceDate": "2024-01-15T00:00:00Z",
        "maintenanceHistory": [
            {
                "date": "2024-01-15T00:00:00Z",
                "type": "preventive",
                "cost": 15000,
                "downtime": 24,
                "description": "Regular engine maintenance",
            }
        ],
        "operatingConditions": {
            "averageLoad": 0.75,
            "temperature": 60,
            "vibration": 3.2,
            "pressure": 25,
        },
    },
    "usage": {
        "dailyOperatingHours": 18,
        "voyagesPerMonth": 8,
        "averageVoyageDistance": 2500,
        "environmentalConditions": {
            "saltWaterExposure": 0.9,
            "temperatureVariation": 30,
            "roughSeaExposure": 0.6,
        },
    },
    "sensors": {
        "temperature": [58, 60, 62, 59, 61],
        "vibration": [3.0, 3.2, 3.1, 3.3, 3.2],
        "pressure": [24, 25, 25, 26, 25],
        "efficiency": [0.85, 0.84, 0.83, 0.82, 0.81],
        "lastReadings": {
            "temperature": 61,
            "vibration": 3.2,
            "pressure": 25,
            "efficiency": 0.81,
        },
    },
}

def get_examples() -> dict:
    return {
        "routeOptimization": ROUTE_OPTIMIZATION_EXAMPLE,
        "fuelPrediction": FUEL_PREDICTION_EXAMPLE,
        "maintenancePrediction": MAINTENANCE_PREDICTION_EXAMPLE,
    }
