"""
Performance metrics persistence
Single versioned JSON record of per-model metrics
"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Mapping

import pydantic

from maritime_ai.models.ml_models import ModelPerformance
from maritime_ai.utils.helpers import read_json, write_json_atomic

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

class MetricsStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> Dict[str, ModelPerformance]:
        with self._lock:
            return self._read()

    def save(self, metrics: Mapping[str, ModelPerformance]):
        with self._lock:
            self._write(dict(metrics))

    def update(self, metrics: Mapping[str, ModelPerformance]) -> Dict[str, ModelPerformance]:
        with self._lock:
            current = self._read()
            current.update(metrics)
            self._write(current)
            return current

    def _read(self) -> Dict[str, ModelPerformance]:
        try:
            payload = read_json(self.path, default=None)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read performance metrics from {self.path}: {e}")
            return {}

        if payload is None:
            return {}
        if not isinstance(payload, dict) or payload.get("version") != SCHEMA_VERSION:
            logger.warning(f"Ignoring performance metrics with unsupported format in {self.path}")
            return {}

        metrics = {}
        for name, data in payload.get("metrics", {}).items():
            try:
                metrics[name] = ModelPerformance.model_validate(data)
            except pydantic.ValidationError as e:
                logger.warning(f"Skipping malformed metrics for {name}: {e}")
        return metrics

    def _write(self, metrics: Dict[str, ModelPerformance]):
        payload = {
            "version": SCHEMA_VERSION,
            "updated_at": datetime.now(timezone.utc).isoformat(),
            "metrics": {
                name: metric.model_dump(mode="json") for name, metric in metrics.items()
            },
        }
        write_json_atomic(self.path, payload)
        logger.debug(f"Performance metrics saved to {self.path}")
