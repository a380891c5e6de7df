"""
Maritime AI - Main FastAPI Application
HTTP entry point for route, fuel and maintenance predictions
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from maritime_ai import __version__
from maritime_ai.api.endpoints import ai
from maritime_ai.core.config import Settings, settings
from maritime_ai.ml.exceptions import ModelError, NotInitializedError
from maritime_ai.services.ai_service import AIService
from maritime_ai.utils.logger import configure_application_logging
from maritime_ai.utils.validators import ValidationError
from maritime_ai.workers.ml_worker import MLWorker

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management
    Builds the AI service, starts the retraining worker and disposes both at shutdown
    """
    config: Settings = app.state.settings
    logger.info("Starting Maritime AI service...")

    service = AIService(config)
    app.state.ai_service = service

    try:
        await service.initialize(auto_train=False)
        logger.info("AI models loaded successfully")
    except Exception as e:
        # requests retry initialization through ensure_ready
        logger.error(f"AI service failed to initialize: {e}")

    if config.auto_train_models and service.is_ready:
        service.auto_train_in_background()

    worker = MLWorker(service)
    worker_task = asyncio.create_task(worker.start())

    try:
        yield
    finally:
        logger.info("Shutting down Maritime AI service...")
        await worker.stop()
        worker_task.cancel()
        await asyncio.gather(worker_task, return_exceptions=True)
        await service.dispose()

def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or settings

    app = FastAPI(
        title=config.app_name,
        description="Route optimization, fuel prediction and maintenance forecasting for vessels",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        ai.router,
        prefix=f"{config.api_v1_str}/ai",
        tags=["AI"],
    )

    @app.get("/")
    async def root():
        """Root endpoint - System status"""
        return {
            "status": "operational",
            "system": config.app_name,
            "version": __version__,
        }

    @app.get("/health")
    async def health_check(request: Request):
        service: Optional[AIService] = getattr(request.app.state, "ai_service", None)
        return {
            "status": "healthy" if service is not None and service.is_ready else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "ai_service": service.state.value if service is not None else "unavailable",
        }

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": exc.message, "field": exc.field},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request body",
                "details": jsonable_encoder(
                    [{key: value for key, value in error.items() if key != "input"} for error in exc.errors()]
                ),
            },
        )

    @app.exception_handler(NotInitializedError)
    async def not_initialized_handler(request: Request, exc: NotInitializedError):
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "AI service is not available", "details": exc.message},
        )

    @app.exception_handler(ModelError)
    async def model_error_handler(request: Request, exc: ModelError):
        logger.error(f"Model error: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": exc.message, "model": exc.model_name},
        )

    return app

configure_application_logging()
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "maritime_ai.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
