"""
AI API Endpoints
Route, fuel and maintenance predictions plus model management
"""

import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from maritime_ai.api.dependencies import get_ai_service
from maritime_ai.api.examples import get_examples
from maritime_ai.models.schemas import (
    ApiResponse,
    ExportModelsRequest,
    FleetHealthRequest,
    FuelPredictionInput,
    FuelTrendsRequest,
    ImportModelsRequest,
    MaintenanceInput,
    RouteInput,
)
from maritime_ai.services.ai_service import AIService

logger = logging.getLogger(__name__)

router = APIRouter()

def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")

@router.post("/route/optimize", response_model=ApiResponse)
async def optimize_route(
    payload: RouteInput,
    service: AIService = Depends(get_ai_service),
):
    optimization = await service.predict_route(payload)
    return ApiResponse(
        message="Route optimization completed successfully",
        data={"optimization": _dump(optimization)},
    )

@router.post("/fuel/predict", response_model=ApiResponse)
async def predict_fuel(
    payload: FuelPredictionInput,
    service: AIService = Depends(get_ai_service),
):
    prediction = await service.predict_fuel(payload)
    return ApiResponse(
        message="Fuel consumption prediction completed successfully",
        data={"prediction": _dump(prediction)},
    )

@router.post("/fuel/trends", response_model=ApiResponse)
async def analyze_fuel_trends(
    payload: FuelTrendsRequest,
    service: AIService = Depends(get_ai_service),
):
    analysis = await service.analyze_fuel_trends(payload.historical_data)
    return ApiResponse(
        message="Fuel trend analysis completed successfully",
        data={"analysis": _dump(analysis)},
    )

@router.post("/maintenance/predict", response_model=ApiResponse)
async def predict_maintenance(
    payload: MaintenanceInput,
    service: AIService = Depends(get_ai_service),
):
    prediction = await service.predict_maintenance(payload)
    return ApiResponse(
        message="Maintenance prediction completed successfully",
        data={"prediction": _dump(prediction)},
    )

@router.post("/fleet/health", response_model=ApiResponse)
async def analyze_fleet_health(
    payload: FleetHealthRequest,
    service: AIService = Depends(get_ai_service),
):
    health = await service.analyze_fleet_health(payload.maintenance_inputs)
    logger.info(
        f"Fleet health analysis completed: {len(payload.maintenance_inputs)} components, "
        f"overall={health.overall:.2f}"
    )
    return ApiResponse(
        message="Fleet health analysis completed successfully",
        data={"health": _dump(health)},
    )

@router.get("/status", response_model=ApiResponse)
async def get_status(service: AIService = Depends(get_ai_service)):
    return ApiResponse(
        message="AI service status retrieved successfully",
        data={"status": _dump(service.get_service_status())},
    )

@router.post("/models/train", response_model=ApiResponse, status_code=status.HTTP_202_ACCEPTED)
async def train_models(service: AIService = Depends(get_ai_service)):
    await service.ensure_ready()
    service.train_all_in_background()
    return ApiResponse(
        message="Model training initiated successfully",
        data={"status": "training_started"},
    )

@router.get("/models/evaluate", response_model=ApiResponse)
async def evaluate_models(service: AIService = Depends(get_ai_service)):
    return ApiResponse(
        message="Model evaluation completed successfully",
        data={"evaluation": service.evaluate_models()},
    )

@router.get("/models/info", response_model=ApiResponse)
async def get_model_info(service: AIService = Depends(get_ai_service)):
    return ApiResponse(
        message="Model information retrieved successfully",
        data={"models": service.get_model_info()},
    )

@router.post("/models/export", response_model=ApiResponse)
async def export_models(
    payload: ExportModelsRequest,
    service: AIService = Depends(get_ai_service),
):
    destination = await service.export_models(Path(payload.export_path))
    return ApiResponse(
        message="Models exported successfully",
        data={"exportPath": str(destination)},
    )

@router.post("/models/import", response_model=ApiResponse)
async def import_models(
    payload: ImportModelsRequest,
    service: AIService = Depends(get_ai_service),
):
    await service.import_models(Path(payload.import_path))
    return ApiResponse(
        message="Models imported successfully",
        data={"importPath": payload.import_path},
    )

@router.get("/examples", response_model=ApiResponse)
async def get_api_examples():
    return ApiResponse(
        message="AI API examples retrieved successfully",
        data={"examples": get_examples()},
    )
