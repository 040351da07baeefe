"""
ChromaSense Configuration
Manages environment variables and defaults for the palette engine and API.
"""
import os
from pathlib import Path
from typing import Literal, Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return int(value)


class Config:
    """Configuration class for ChromaSense services."""

    # Logging
    LOG_LEVEL: str = os.environ.get("CHROMASENSE_LOG_LEVEL", "INFO")

    # Persistence
    STORAGE_BACKEND: Literal["file", "memory"] = os.environ.get("CHROMASENSE_STORAGE_BACKEND", "file")
    STATE_PATH: str = os.environ.get(
        "CHROMASENSE_STATE_PATH", str(Path.home() / ".chromasense" / "state.json")
    )

    # Palette defaults
    PALETTE_SIZE: int = int(os.environ.get("CHROMASENSE_PALETTE_SIZE", "5"))
    HISTORY_LIMIT: int = int(os.environ.get("CHROMASENSE_HISTORY_LIMIT", "5"))
    DEFAULT_CREATIVITY: float = float(os.environ.get("CHROMASENSE_DEFAULT_CREATIVITY", "0.5"))

    # Learning engine
    MAX_DISLIKE_RETRIES: int = int(os.environ.get("CHROMASENSE_MAX_DISLIKE_RETRIES", "10"))
    SIMILARITY_THRESHOLD: float = float(os.environ.get("CHROMASENSE_SIMILARITY_THRESHOLD", "30"))
    TRAINING_ROUNDS: int = int(os.environ.get("CHROMASENSE_TRAINING_ROUNDS", "10"))
    RANDOM_SEED: Optional[int] = _optional_int("CHROMASENSE_RANDOM_SEED")

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get(
        "CHROMASENSE_ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
    )

    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("CHROMASENSE_METRICS_ENABLED", "1")))

    # Supported formats
    EXPORT_FORMATS = ["css", "scss", "tailwind", "hex", "json"]
    COLOR_FORMATS = ["HEX", "RGB", "HSL", "CSS", "TW"]

    @classmethod
    def allowed_origins(cls) -> list:
        """Parse the comma separated CORS origin list."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global config instance
config = Config()
