"""
Maritime AI
Route, fuel and maintenance prediction for commercial vessels
"""

__version__ = "1.0.0"
__description__ = "Route, fuel and maintenance prediction for commercial vessels"

from maritime_ai.core.config import Settings, settings

__all__ = [
    "Settings",
    "settings",
    "__version__",
]
