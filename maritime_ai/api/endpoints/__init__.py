from maritime_ai.api.endpoints import ai

__all__ = ["ai"]
