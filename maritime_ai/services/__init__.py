from maritime_ai.services.ai_service import AIService, ServiceState
from maritime_ai.services.prediction_history import PredictionHistory, PredictionRecord

__all__ = [
    "AIService",
    "ServiceState",
    "PredictionHistory",
    "PredictionRecord",
]
