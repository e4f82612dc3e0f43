"""Configuration settings for taildrop_host.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOST_NAME = "com.bitandbang.tailscale_image_sender"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the TAILDROP_HOST_
    prefix. The browser starts the host with no way to pass flags, so the
    environment (or a .env file next to the host) is the usual override.
    """

    model_config = SettingsConfigDict(
        env_prefix="TAILDROP_HOST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_file: Path = Field(
        default=Path("debug.log"),
        description="Append-only diagnostic log (relative to the working directory)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # External tool
    tailscale_bin: str = Field(
        default="tailscale",
        description="Name or path of the tailscale CLI",
    )

    # Temporary files
    temp_dir: Path | None = Field(
        default=None,
        description="Directory for staged files (uses system default if not set)",
    )
    temp_prefix: str = Field(
        default="tailscale-sender-",
        description="Filename prefix for staged files",
    )
    default_extension: str = Field(
        default=".jpg",
        description="Extension used when neither file name nor MIME type gives one",
    )

    # Native messaging manifest
    host_name: str = Field(
        default=DEFAULT_HOST_NAME,
        description="Native messaging host name registered with the browser",
    )
    host_description: str = Field(
        default="Tailscale Image Sender native host",
        description="Description written into the host manifest",
    )

    @field_validator("default_extension")
    @classmethod
    def validate_default_extension(cls, v: str) -> str:
        """Ensure the default extension starts with a dot."""
        if not v:
            raise ValueError("default_extension must not be empty")
        return v if v.startswith(".") else f".{v}"


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["DEFAULT_HOST_NAME", "Settings", "get_settings", "print_settings_json"]
