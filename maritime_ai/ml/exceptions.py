"""
Model lifecycle errors
"""

from typing import Optional

class ModelError(Exception):
    def __init__(self, message: str, model_name: Optional[str] = None):
        self.message = message
        self.model_name = model_name
        super().__init__(self.message)

class NotInitializedError(ModelError):
    pass

class ModelLoadError(ModelError):
    pass

class TrainingError(ModelError):
    pass

class InvalidPredictionError(ModelError):
    pass
