"""
Configuration settings for the trip assistant.

Values are read from environment variables prefixed with ``TRIP_ASSISTANT_``
(for example ``TRIP_ASSISTANT_THINKING_DELAY=0``) or from a local ``.env``
file, falling back to the defaults below.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValidationMode(str, Enum):
    """How the core reacts to unknown ids and broken date ranges."""

    LENIENT = "lenient"  # silent no-op, stored as-is
    STRICT = "strict"    # NotFoundError / ValidationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRIP_ASSISTANT_",
        env_file=".env",
        extra="ignore",
    )

    validation_mode: ValidationMode = ValidationMode.LENIENT

    # Simulated assistant latency, in seconds
    thinking_delay: float = Field(default=1.5, ge=0)

    title_max_length: int = Field(default=30, gt=0)
    title_ellipsis: str = "..."
    default_trip_title: str = "New Trip"

    # Route turns for the same trip through a FIFO queue
    serialize_turns: bool = False

    seed_demo_trips: bool = False

    log_level: str = "INFO"
    log_json: bool = False

    @property
    def strict(self) -> bool:
        return self.validation_mode == ValidationMode.STRICT


@lru_cache
def get_settings() -> Settings:
    """Returns the process-wide settings instance"""
    return Settings()
