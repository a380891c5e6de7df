from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from pathlib import Path

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MARITIME_AI_",
        env_file=".env",
        extra="ignore",
        protected_namespaces=(),
    )

    # Application Settings
    app_name: str = "Maritime AI"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # API Settings
    api_v1_str: str = "/api/v1"
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # AI Service Settings
    auto_train_models: bool = True
    model_update_interval: int = 24  # hours
    performance_threshold: float = 0.8
    history_capacity: int = 1000
    evaluation_window: int = 100

    # Synthetic training set sizes
    route_training_samples: int = 1000
    fuel_training_samples: int = 2000
    maintenance_training_samples: int = 1500
    training_epochs_override: Optional[int] = None

    # Paths
    base_dir: Path = Path.cwd()
    models_dir: Path = base_dir / "models"
    logs_dir: Path = base_dir / "logs"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Create necessary directories
        self.models_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def saved_models_dir(self) -> Path:
        return self.models_dir / "saved"

    @property
    def metrics_file(self) -> Path:
        return self.models_dir / "performance-metrics.json"

settings = Settings()
