"""
Base ML Model Class and Common Functionality
Shared lifecycle for the regression models: initialize, train, predict, persist
"""

import json
import logging
import math
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn
from pydantic import BaseModel, ConfigDict, Field
from sklearn.metrics import mean_absolute_error
from sklearn.model_selection import train_test_split

from maritime_ai.core.config import settings
from maritime_ai.ml.exceptions import (
    InvalidPredictionError,
    ModelLoadError,
    NotInitializedError,
    TrainingError,
)
from maritime_ai.ml.feature_engineer import FeatureCodec
from maritime_ai.utils.helpers import write_json_atomic

logger = logging.getLogger(__name__)

MODEL_FILE = "model.pt"
METADATA_FILE = "metadata.json"
UNTRAINED_SCORE = 0.5

class ModelConfig(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_name: str
    version: str = "1.0.0"
    input_size: int = Field(gt=0)
    output_size: int = Field(gt=0)
    learning_rate: float = Field(gt=0)
    epochs: int = Field(ge=1)
    batch_size: int = Field(ge=1)

class TrainingData(BaseModel):
    inputs: List[List[float]]
    outputs: List[List[float]]
    validation_split: float = Field(default=0.2, ge=0, lt=1)

    def __len__(self) -> int:
        return len(self.inputs)

class TrainingHistory(BaseModel):
    loss: List[float] = []
    val_loss: List[float] = []
    val_mae: float
    epochs: int
    samples: int

class PredictionOutcome(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    raw: List[float]
    confidence: float = Field(ge=0, le=1)
    model_version: str
    timestamp: datetime

def spread_confidence(raw: Sequence[float]) -> float:
    high = max(raw)
    low = min(raw)
    if high == 0:
        return 0.0
    return max(0.0, min(1.0, 1 - (high - low) / high))

class ReadWriteLock:
    """Many concurrent readers or one exclusive writer. Queued writers go before new readers."""

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_lock(self):
        with self._condition:
            while self._writer or self._writers_waiting > 0:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write_lock(self):
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers > 0:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()

class RegressionNetwork(nn.Module):
    def __init__(
        self,
        input_size: int,
        output_size: int,
        hidden_sizes: Sequence[int],
        dropouts: Sequence[float] = (),
        batch_norm_first: bool = False,
    ):
        super(RegressionNetwork, self).__init__()
        layers: List[nn.Module] = []
        previous = input_size

        for index, size in enumerate(hidden_sizes):
            layers.append(nn.Linear(previous, size))
            if index == 0 and batch_norm_first:
                layers.append(nn.BatchNorm1d(size))
            layers.append(nn.ReLU())
            if index < len(dropouts) and dropouts[index] > 0:
                layers.append(nn.Dropout(dropouts[index]))
            previous = size

        layers.append(nn.Linear(previous, output_size))
        self.body = nn.Sequential(*layers)
        self.head = nn.Sigmoid()

    def forward(self, x):
        return self.head(self.body(x))

class BaseMLModel(ABC):
    default_config: ModelConfig

    def __init__(self, config: Optional[ModelConfig] = None, models_dir: Optional[Path] = None):
        self.config = config or self.default_config
        self.codec = self.create_codec()
        if self.codec.input_size != self.config.input_size:
            raise ValueError(
                f"{self.config.model_name}: codec produces {self.codec.input_size} features, "
                f"config expects {self.config.input_size}"
            )

        self.model_path = Path(models_dir or settings.saved_models_dir) / self.config.model_name
        self.network: Optional[RegressionNetwork] = None
        self.optimizer = None
        self.criterion = None
        self.is_trained = False
        self.last_val_mae: Optional[float] = None
        self.metadata: Dict[str, Any] = {}
        self._lock = ReadWriteLock()

    @property
    def model_name(self) -> str:
        return self.config.model_name

    @property
    def is_initialized(self) -> bool:
        return self.network is not None

    @property
    def model_file(self) -> Path:
        return self.model_path / MODEL_FILE

    @property
    def metadata_file(self) -> Path:
        return self.model_path / METADATA_FILE

    @abstractmethod
    def create_codec(self) -> FeatureCodec:
        pass

    @abstractmethod
    def build_network(self) -> RegressionNetwork:
        pass

    @abstractmethod
    def generate_training_data(self, num_samples: int, seed: Optional[int] = None) -> TrainingData:
        pass

    def initialize(self):
        with self._lock.write_lock():
            if self.model_file.exists():
                logger.info(f"Loading stored {self.model_name} model from {self.model_path}")
                self._load_unlocked()
            else:
                logger.info(f"No stored {self.model_name} model, building a new one")
                self._build_fresh()

    def initialize_fresh(self):
        with self._lock.write_lock():
            self._build_fresh()

    def _build_fresh(self):
        self.network = self.build_network()
        self.is_trained = False
        self.last_val_mae = None
        self.metadata = {}
        self._compile()
        logger.info(f"{self.model_name} network initialized")

    def _compile(self):
        self.optimizer = torch.optim.Adam(self.network.parameters(), lr=self.config.learning_rate)
        self.criterion = nn.MSELoss()

    def train(self, data: TrainingData) -> TrainingHistory:
        with self._lock.write_lock():
            if self.network is None:
                if self.model_file.exists():
                    self._load_unlocked()
                else:
                    self._build_fresh()

            self._check_training_data(data)
            X = np.asarray(data.inputs, dtype=np.float32)
            y = np.asarray(data.outputs, dtype=np.float32)

            if data.validation_split > 0 and len(X) >= 5:
                X_train, X_val, y_train, y_val = train_test_split(
                    X, y, test_size=data.validation_split, random_state=42
                )
            else:
                X_train, X_val, y_train, y_val = X, X, y, y

            try:
                history = self._fit(X_train, y_train, X_val, y_val)
            except (RuntimeError, ValueError) as e:
                raise TrainingError(f"{self.model_name} training failed: {e}", self.model_name) from e

            self.is_trained = True
            self.last_val_mae = history.val_mae
            self.metadata["last_trained"] = datetime.now(timezone.utc).isoformat()
            self.metadata["training_samples"] = len(data)

            try:
                self._save_unlocked()
            except OSError as e:
                raise TrainingError(f"Failed to persist {self.model_name}: {e}", self.model_name) from e

            logger.info(
                f"{self.model_name} trained on {len(data)} samples, val_mae={history.val_mae:.4f}"
            )
            return history

    def _check_training_data(self, data: TrainingData):
        if len(data) == 0:
            raise TrainingError("Training data is empty", self.model_name)
        if len(data.inputs) != len(data.outputs):
            raise TrainingError("Input and output row counts differ", self.model_name)

        for index, row in enumerate(data.inputs):
            if len(row) != self.config.input_size:
                raise TrainingError(
                    f"Input row {index} has length {len(row)}, expected {self.config.input_size}",
                    self.model_name,
                )
        for index, row in enumerate(data.outputs):
            if len(row) != self.config.output_size:
                raise TrainingError(
                    f"Output row {index} has length {len(row)}, expected {self.config.output_size}",
                    self.model_name,
                )

    def _fit(self, X_train, y_train, X_val, y_val) -> TrainingHistory:
        X_tensor = torch.from_numpy(X_train)
        y_tensor = torch.from_numpy(y_train)
        X_val_tensor = torch.from_numpy(X_val)
        y_val_tensor = torch.from_numpy(y_val)
        batch_size = self.config.batch_size

        losses = []
        val_losses = []

        for epoch in range(self.config.epochs):
            self.network.train()
            permutation = torch.randperm(len(X_tensor))
            epoch_loss = 0.0
            seen = 0

            for start in range(0, len(X_tensor), batch_size):
                indices = permutation[start:start + batch_size]
                # BatchNorm needs at least two rows
                if len(indices) < 2 and len(X_tensor) >= 2:
                    continue

                self.optimizer.zero_grad()
                outputs = self.network(X_tensor[indices])
                loss = self.criterion(outputs, y_tensor[indices])
                loss.backward()
                self.optimizer.step()

                epoch_loss += loss.item() * len(indices)
                seen += len(indices)

            losses.append(epoch_loss / max(seen, 1))
            val_losses.append(self._validation_loss(X_val_tensor, y_val_tensor))

            if (epoch + 1) % 10 == 0:
                logger.info(
                    f"{self.model_name} epoch {epoch + 1}/{self.config.epochs}: "
                    f"loss={losses[-1]:.4f}, val_loss={val_losses[-1]:.4f}"
                )

        self.network.eval()
        with torch.no_grad():
            predictions = self.network(X_val_tensor).numpy()
        val_mae = float(mean_absolute_error(y_val, predictions))

        return TrainingHistory(
            loss=losses,
            val_loss=val_losses,
            val_mae=val_mae,
            epochs=self.config.epochs,
            samples=len(X_train),
        )

    def _validation_loss(self, X_val, y_val) -> float:
        self.network.eval()
        with torch.no_grad():
            return float(self.criterion(self.network(X_val), y_val).item())

    def predict(self, record: Any, now: Optional[datetime] = None) -> PredictionOutcome:
        parsed = self.codec.parse(record)
        features = self.codec.encode(parsed, now)
        return self.predict_vector(features)

    def predict_vector(self, features: Sequence[float]) -> PredictionOutcome:
        with self._lock.read_lock():
            if self.network is None:
                raise NotInitializedError(f"{self.model_name} is not initialized", self.model_name)

            if len(features) != self.config.input_size:
                raise InvalidPredictionError(
                    f"Expected {self.config.input_size} features, got {len(features)}",
                    self.model_name,
                )
            if not all(math.isfinite(value) for value in features):
                raise InvalidPredictionError("Encoded features contain non-finite values", self.model_name)

            X_tensor = torch.tensor([list(features)], dtype=torch.float32)
            self.network.eval()
            with torch.no_grad():
                outputs = self.network(X_tensor)[0].tolist()

        if not all(math.isfinite(value) for value in outputs):
            raise InvalidPredictionError(f"{self.model_name} produced non-finite output", self.model_name)

        return PredictionOutcome(
            raw=outputs,
            confidence=spread_confidence(outputs),
            model_version=self.config.version,
            timestamp=datetime.now(timezone.utc),
        )

    def evaluate(self) -> float:
        if self.last_val_mae is None:
            return UNTRAINED_SCORE
        return max(0.0, 1 - self.last_val_mae)

    def save(self):
        with self._lock.write_lock():
            if self.network is None:
                raise NotInitializedError(f"{self.model_name} is not initialized", self.model_name)
            self._save_unlocked()

    def _save_unlocked(self):
        self.model_path.mkdir(parents=True, exist_ok=True)
        saved_at = datetime.now(timezone.utc).isoformat()

        metadata = {
            "config": self.config.model_dump(),
            "saved_at": saved_at,
            "library_version": torch.__version__,
            "val_mae": self.last_val_mae,
            "is_trained": self.is_trained,
        }

        fd, tmp_model = tempfile.mkstemp(dir=self.model_path, suffix=".pt.tmp")
        os.close(fd)
        try:
            torch.save(self.network.state_dict(), tmp_model)
            os.replace(tmp_model, self.model_file)
        finally:
            if os.path.exists(tmp_model):
                os.remove(tmp_model)

        write_json_atomic(self.metadata_file, metadata)
        self.metadata.update(metadata)
        logger.info(f"Model saved to {self.model_path}")

    def load(self):
        with self._lock.write_lock():
            self._load_unlocked()

    def _load_unlocked(self):
        if not self.model_file.exists() or not self.metadata_file.exists():
            raise ModelLoadError(f"No stored artifact for {self.model_name} in {self.model_path}", self.model_name)

        try:
            with open(self.metadata_file, "r", encoding="utf-8") as f:
                metadata = json.load(f)
            stored = metadata["config"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise ModelLoadError(f"Unreadable metadata for {self.model_name}: {e}", self.model_name) from e

        if (stored.get("input_size") != self.config.input_size or
                stored.get("output_size") != self.config.output_size):
            raise ModelLoadError(
                f"Stored {self.model_name} shape {stored.get('input_size')}x{stored.get('output_size')} "
                f"does not match {self.config.input_size}x{self.config.output_size}",
                self.model_name,
            )

        network = self.build_network()
        try:
            state_dict = torch.load(self.model_file, map_location="cpu", weights_only=True)
            network.load_state_dict(state_dict)
        except Exception as e:
            raise ModelLoadError(f"Unreadable weights for {self.model_name}: {e}", self.model_name) from e

        self.network = network
        self.is_trained = bool(metadata.get("is_trained", True))
        self.last_val_mae = metadata.get("val_mae")
        self.metadata = metadata
        self._compile()
        logger.info(f"Model loaded from {self.model_path}")

    def dispose(self):
        with self._lock.write_lock():
            self.network = None
            self.optimizer = None
            self.criterion = None
            logger.info(f"{self.model_name} disposed")

    def saved_at(self) -> Optional[datetime]:
        if not self.metadata_file.exists():
            return None
        try:
            with open(self.metadata_file, "r", encoding="utf-8") as f:
                return datetime.fromisoformat(json.load(f)["saved_at"])
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Could not read saved_at for {self.model_name}: {e}")
            return None

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "model_name": self.model_name,
            "version": self.config.version,
            "config": self.config.model_dump(),
            "is_initialized": self.is_initialized,
            "is_trained": self.is_trained,
            "feature_count": self.codec.input_size,
            "feature_names": list(self.codec.feature_names),
            "model_path": str(self.model_path),
            "metadata": dict(self.metadata),
        }
