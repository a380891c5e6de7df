"""
Prediction History
Bounded in-memory record of prediction outcomes per model
"""

import threading
from collections import deque
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

class PredictionRecord(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_name: str
    timestamp: datetime
    confidence: float
    success: bool

class PredictionHistory:
    def __init__(self, capacity: int = 1000):
        if capacity < 1:
            raise ValueError("History capacity must be positive")
        self.capacity = capacity
        self._entries = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(
        self,
        model_name: str,
        confidence: float,
        success: bool,
        timestamp: Optional[datetime] = None,
    ) -> PredictionRecord:
        entry = PredictionRecord(
            model_name=model_name,
            timestamp=timestamp or datetime.now(timezone.utc),
            confidence=confidence,
            success=success,
        )
        with self._lock:
            self._entries.append(entry)
        return entry

    def recent(self, model_name: Optional[str] = None, limit: Optional[int] = None) -> List[PredictionRecord]:
        """Oldest-first entries, optionally filtered by model and trimmed to the newest `limit`."""
        with self._lock:
            entries = list(self._entries)

        if model_name is not None:
            entries = [entry for entry in entries if entry.model_name == model_name]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
