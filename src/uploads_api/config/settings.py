# src/uploads_api/config/settings.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Settings are read once when the app is created and never hot-reloaded.

    Usage:
        from uploads_api.config.settings import get_settings
        settings = get_settings()
        uploads_dir = settings.uploads_path
    """

    # Application Settings
    app_name: str = Field(
        default="uploads-api",
        description="Application name"
    )

    app_env: str = Field(
        default="development",
        description="Runtime environment: development or production"
    )

    port: int = Field(
        default=5001,
        description="Port the HTTP server listens on"
    )

    backend_url: Optional[str] = Field(
        default=None,
        description="Public base URL used to build links to locally stored files"
    )

    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Frontend origin allowed by CORS"
    )

    # Local Storage Configuration
    uploads_dir: str = Field(
        default="uploads",
        description="Directory holding locally stored uploads"
    )

    # Cloudinary Configuration
    cloudinary_api_key: Optional[str] = Field(default=None)
    cloudinary_api_secret: Optional[str] = Field(default=None)
    cloudinary_cloud_name: Optional[str] = Field(default=None)

    cloudinary_folder: str = Field(
        default="fileuploader",
        description="Cloudinary folder uploads are placed in"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("backend_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v:
            return v.rstrip("/")
        return v or None

    @field_validator("cloudinary_api_key", "cloudinary_api_secret", "cloudinary_cloud_name")
    @classmethod
    def blank_credentials_are_unset(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty or whitespace-only credentials as missing."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def public_base_url(self) -> str:
        """Base URL for local file links, defaulting to localhost on the configured port."""
        return self.backend_url or f"http://localhost:{self.port}"

    @property
    def uploads_path(self) -> Path:
        return Path(self.uploads_dir).expanduser().resolve()

    @property
    def remote_storage_configured(self) -> bool:
        """True only when all three Cloudinary credentials are present."""
        return all(
            (self.cloudinary_api_key, self.cloudinary_api_secret, self.cloudinary_cloud_name)
        )

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"

    def describe(self) -> dict:
        """Effective configuration with secrets masked, for display."""
        def _mask(value: Optional[str]) -> str:
            return "***" if value else "<unset>"

        return {
            "APP_ENV": self.app_env,
            "PORT": self.port,
            "BACKEND_URL": self.public_base_url,
            "FRONTEND_URL": self.frontend_url,
            "UPLOADS_DIR": str(self.uploads_path),
            "CLOUDINARY_CLOUD_NAME": self.cloudinary_cloud_name or "<unset>",
            "CLOUDINARY_API_KEY": _mask(self.cloudinary_api_key),
            "CLOUDINARY_API_SECRET": _mask(self.cloudinary_api_secret),
            "CLOUDINARY_FOLDER": self.cloudinary_folder,
            "LOG_LEVEL": self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
