from maritime_ai.core.config import Settings, settings
from maritime_ai.core.metrics_store import MetricsStore

__all__ = ["Settings", "settings", "MetricsStore"]
