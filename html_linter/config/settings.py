"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="HTML Lint Engine", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Storage Configuration
    storage_path: Path = Field(default=Path("./storage"), description="Storage directory path")
    log_to_file: bool = Field(default=False, description="Write rotating log files under storage")

    # Lint Configuration
    default_preset: str = Field(default="recommended", description="Preset used without config")
    directive_prefix: str = Field(default="htmllint", description="Inline directive prefix")
    config_filenames: List[str] = Field(
        default=[".htmllintrc.yaml", ".htmllintrc.yml", ".htmllintrc.json"],
        description="Config file names searched upward from the working directory",
    )
    max_source_bytes: int = Field(default=2_000_000, description="Maximum source size in bytes")
    max_concurrency: int = Field(default=8, description="Files linted concurrently")
    markdown_enabled: bool = Field(default=True, description="Lint html blocks in Markdown")
    html_extensions: List[str] = Field(
        default=[".html", ".htm", ".xhtml"], description="Extensions linted as HTML"
    )
    markdown_extensions: List[str] = Field(
        default=[".md", ".markdown"], description="Extensions linted as Markdown"
    )

    # API Documentation Configuration
    enable_docs: bool = Field(default=True, description="Enable FastAPI docs endpoint")
    enable_redoc: bool = Field(default=True, description="Enable FastAPI redoc endpoint")

    # Security Configuration
    allowed_hosts: List[str] = Field(default=["*"], description="Allowed hosts for CORS")
    api_keys: List[str] = Field(default=["development-key"], description="Valid API keys")
    api_key_hashes: List[str] = Field(default=[], description="Valid API key hashes")
    skip_api_key_validation: bool = Field(
        default=True, description="Skip API key validation in development"
    )

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("max_concurrency", "max_source_bytes")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be positive")
        return v

    @field_validator("allowed_hosts", "api_keys", mode="before")
    @classmethod
    def parse_string_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse a list from a JSON-like or comma-separated string."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def log_path(self) -> Path:
        return self.storage_path / "logs"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="HTMLLINT_"
    )


# Global settings instance - will be initialized when needed
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
