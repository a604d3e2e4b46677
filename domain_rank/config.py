from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Literal
from pathlib import Path
from functools import lru_cache

DEFAULT_SOURCE_URL: str = "https://s3.amazonaws.com/alexa-static/top-1m.csv.zip"


class Settings(BaseSettings):
    # ==== Remote source ====
    RANK_SOURCE_URL: str = Field(DEFAULT_SOURCE_URL, description="Remote ranking archive (zip with one CSV member)")

    # ==== Local cache ====
    RANK_CACHE_DIR: str = Field("cache", description="Directory holding the cached archive")
    RANK_CACHE_FILENAME: str = Field("top-1m.csv.zip", description="File name of the cached archive")
    RANK_FRESHNESS_DAYS: int = Field(15, gt=0, description="Maximum age of the cached archive before re-download")

    # ==== HTTP ====
    HTTP_TIMEOUT_SECONDS: int = Field(30, gt=0, description="Network timeout for the archive download")
    DOWNLOAD_CHUNK_BYTES: int = Field(64 * 1024, gt=0, description="Streaming chunk size for the download")

    # ==== Observability toggles ====
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def cache_path(self) -> Path:
        """Full path of the cached archive."""
        return Path(self.RANK_CACHE_DIR) / self.RANK_CACHE_FILENAME


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
