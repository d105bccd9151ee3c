"""Application configuration."""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # App settings
    app_name: str = "Label Verification API"
    debug: bool = False
    log_level: str = "INFO"
    
    # CORS - Allow all origins for prototype (restrict in production)
    cors_origins: list[str] = ["*"]
    
    # Upload limits
    max_upload_size_mb: int = 15
    allowed_extensions: set = {"png", "jpg", "jpeg", "webp"}
    min_image_dimension: int = 100  # Reject anything smaller than this
    max_image_dimension: int = 1600  # Downscale before OCR
    
    # OCR settings
    ocr_languages: list[str] = ["en"]
    ocr_gpu: bool = False
    ocr_model_dir: Optional[str] = None  # EasyOCR default when unset
    ocr_max_concurrent: int = 1  # CPU-bound, no benefit from concurrency
    ocr_min_box_confidence: float = 0.10  # Drop boxes below this
    
    # Verification policy
    # Government warning is advisory by default: a missing warning is reported
    # but does not fail the overall match. Set True for strict label review.
    require_government_warning: bool = False
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
