"""User configuration models."""

import logging
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from opcopy.models.base import OpcopyBaseModel


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ProfileConfig(OpcopyBaseModel):
    """Named backend profile.

    ``type`` selects the backend scheme; any other key is passed to the
    backend as an option (for example ``root`` for the filesystem backend).
    """

    type: str = Field(description="Backend scheme: 'fs', 'file' or 'memory'")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if not v:
            raise ValueError("Profile type must not be empty")
        return v.lower()

    def to_options(self) -> dict[str, str]:
        """All profile keys, ``type`` included, as strings."""
        data = self.model_dump(mode="json")
        return {key: str(value) for key, value in data.items()}


class UserConfigData(BaseSettings):
    """User configuration data model with automatic environment variable support.

    Precedence order (highest to lowest):
    1. Environment variables (highest)
    2. Constructor arguments (file data)
    3. .env file
    4. Default values (lowest)
    """

    model_config = SettingsConfigDict(
        env_prefix="OPCOPY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment variables override file configuration."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )

    log_level: str = Field(default="WARNING", description="Default log level")

    chunk_size_kb: int = Field(
        default=1024,
        gt=0,
        description="Read chunk size for the filesystem backend, in KB",
    )

    profiles: dict[str, ProfileConfig] = Field(
        default_factory=dict,
        description="Named backend profiles usable as '<profile>:<path>'",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        upper_v = v.strip().upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of {VALID_LOG_LEVELS}")
        return upper_v

    def get_log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        return int(getattr(logging, self.log_level, logging.WARNING))
