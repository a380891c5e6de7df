from maritime_ai.utils.logger import setup_logging
from maritime_ai.utils.validators import ValidationError

__all__ = ["setup_logging", "ValidationError"]
