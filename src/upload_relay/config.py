from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ──────────────────────────────────────────────
# Settings (from environment variables / .env)
# ──────────────────────────────────────────────
class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # CORS settings
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000"
    cors_allow_credentials: bool = True
    cors_allow_methods: str = "GET,POST,OPTIONS"
    cors_allow_headers: str = "*"

    # File host settings
    upload_endpoint: str = "https://file.io/?auto=1"
    upload_timeout: float = 60.0
    archive_filename: str = "gan_photos.zip"
    body_preview_length: int = 300

    # Archive settings
    compression_level: int = Field(default=9, ge=0, le=9)
    dedupe_archive_names: bool = True
    max_upload_size: int = 100 * 1024 * 1024  # 100 MB across all files

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def cors_methods_list(self) -> list[str]:
        """Parse CORS methods from comma-separated string."""
        if self.cors_allow_methods == "*":
            return ["*"]
        return [method.strip() for method in self.cors_allow_methods.split(",")]

    @property
    def cors_headers_list(self) -> list[str]:
        """Parse CORS headers from comma-separated string."""
        if self.cors_allow_headers == "*":
            return ["*"]
        return [header.strip() for header in self.cors_allow_headers.split(",")]


# Global settings instance
settings = Settings()

# ──────────────────────────────────────────────
# Name resolution defaults
# ──────────────────────────────────────────────
NAMES_LIST_FIELD = "names[]"
NAMES_JSON_FIELD = "names"
PLACEHOLDER_TEMPLATE = "image_{index}.jpg"
ARCHIVE_CONTENT_TYPE = "application/zip"
