"""Configuration management."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Generation defaults, overridable through PLATEMAP_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PLATEMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: Literal["console", "json"] = Field(
        default="console", description="Logging format (console or json)"
    )

    # Seeds and randomness
    plate_count: int = Field(default=5, ge=1, description="Number of plates chosen when no seeds are given")
    default_seed: str = Field(default="default", description="PRNG seed used when none is supplied")

    # Height propagation
    initial_height: float = Field(default=0.9, gt=0.0, description="Height assigned at each plate origin")
    height_decay_probability: float = Field(
        default=0.75, ge=0.0, le=1.0, description="Chance that height decays after a cell is assigned"
    )
    height_decay_min: float = Field(default=0.01, ge=0.0, description="Smallest decay step")
    height_decay_max: float = Field(default=0.1, gt=0.0, description="Upper bound (exclusive) of the decay step")
    stop_probability: float = Field(
        default=0.01, ge=0.0, le=1.0, description="Chance that a fill stops expanding after each cell"
    )
    height_floor: float = Field(default=0.1, ge=0.0, description="A fill stops expanding below this height")
    dedupe_visits: bool = Field(
        default=True, description="Skip cells already assigned by the same fill"
    )

    # Performance
    workers: int = Field(default=1, ge=1, description="Processes used for seed fills")


settings = Settings()
