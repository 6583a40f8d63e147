"""
Configuration management for Rx-Reader application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_ALLOWED_MEDIA_TYPES = [
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
]


def _parse_str_list(v):
    """Accept a JSON list or a comma separated string for list settings."""
    if isinstance(v, str):
        raw = v.strip()
        if raw.startswith("[") and raw.endswith("]"):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in raw.split(",") if item.strip()]
    return v


class MistralSettings(BaseSettings):
    """Mistral AI vision configuration settings."""

    model_config = SettingsConfigDict(env_prefix="MISTRAL_")

    api_key: str = Field(default="", description="Mistral API key")
    vision_model: str = Field(
        default="pixtral-12b-2409", description="Vision-capable model used for prescription reading"
    )
    max_tokens: int = Field(default=2000, description="Maximum tokens for responses")
    temperature: float = Field(default=0.1, description="Temperature for model responses")
    timeout_seconds: Optional[float] = Field(
        default=None,
        description="Deadline for a single vision call (unset = transport default)",
    )

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature."""
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Timeout must be a positive number of seconds")
        return v

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class UploadSettings(BaseSettings):
    """Prescription image upload configuration settings."""

    model_config = SettingsConfigDict(env_prefix="UPLOAD_")

    max_size_mb: int = Field(default=10, description="Maximum image size in MB")
    allowed_media_types: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MEDIA_TYPES),
        description="Accepted image media types",
    )
    staging_dir: str = Field(
        default=os.path.join(tempfile.gettempdir(), "rxreader_uploads"),
        description="Directory for transient prescription images",
    )

    @field_validator("max_size_mb")
    @classmethod
    def validate_max_size(cls, v: int) -> int:
        """Validate max file size."""
        if v <= 0 or v > 100:
            raise ValueError("Max file size must be between 1 and 100 MB")
        return v

    @field_validator("allowed_media_types", mode="before")
    @classmethod
    def parse_media_types(cls, v):
        """Parse allowed media types from string or list."""
        return [item.lower() for item in _parse_str_list(v)]

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


class ExtractionSettings(BaseSettings):
    """Model response extraction settings."""

    model_config = SettingsConfigDict(env_prefix="EXTRACTION_")

    strict_medicine_fields: bool = Field(
        default=False,
        description="Reject responses whose medicine entries are not objects of string fields",
    )


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: Annotated[List[str], NoDecode] = Field(default=["*"], description="Allowed CORS origins")
    allowed_methods: Annotated[List[str], NoDecode] = Field(
        default=["GET", "POST", "OPTIONS"], description="Allowed HTTP methods"
    )
    allowed_headers: Annotated[List[str], NoDecode] = Field(default=["*"], description="Allowed HTTP headers")

    @field_validator("allowed_origins", "allowed_methods", "allowed_headers", mode="before")
    @classmethod
    def parse_lists(cls, v):
        """Parse list values from string or list."""
        return _parse_str_list(v)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Rx-Reader", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    mistral: MistralSettings = Field(default_factory=MistralSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Sub-settings read their own prefixed environment variables
        self.mistral = MistralSettings()
        self.upload = UploadSettings()
        self.extraction = ExtractionSettings()
        self.cors = CORSSettings()
        self.logging = LoggingSettings()

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    Already-set environment variables always win over file values.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
