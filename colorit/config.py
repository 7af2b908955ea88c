"""
Colorit Configuration
Manages environment variables and defaults for the color analysis engine and API.
"""
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    """Configuration class for Colorit services."""

    # Logging
    LOG_LEVEL: str = os.environ.get("COLORIT_LOG_LEVEL", "INFO")

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("COLORIT_MAX_FILE_MB", "10"))
    MAX_EDGE: int = int(os.environ.get("COLORIT_MAX_EDGE", "200"))

    # Sampling and clustering defaults
    SAMPLE_GRID: int = int(os.environ.get("COLORIT_SAMPLE_GRID", "40"))
    PALETTE_K: int = int(os.environ.get("COLORIT_PALETTE_K", "5"))
    KMEANS_MAX_ITER: int = int(os.environ.get("COLORIT_KMEANS_MAX_ITER", "10"))
    KMEANS_EPSILON: float = float(os.environ.get("COLORIT_KMEANS_EPSILON", "0.5"))
    KMEANS_SEED: Optional[int] = _optional_int("COLORIT_KMEANS_SEED")

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("COLORIT_ALLOWED_ORIGINS", "*")

    # Supported image formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png"]
    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png"}

    # Palette size accepted by the API
    MIN_K: int = 1
    MAX_K: int = 12

    @classmethod
    def validate_k(cls, k: int) -> bool:
        """Validate requested palette size."""
        return cls.MIN_K <= k <= cls.MAX_K

    @classmethod
    def validate_max_edge(cls, max_edge: int) -> bool:
        """Validate max_edge parameter."""
        return 40 <= max_edge <= 4096

    @classmethod
    def allowed_origins(cls) -> List[str]:
        """Split the CORS origin list."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global config instance
config = Config()
