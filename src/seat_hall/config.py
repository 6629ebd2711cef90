"""Runtime settings read from the environment."""
from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SEAT_HALL_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    data_file: Path = Path("students.dat")
    log_file: Path = Path("allocation_log.txt")
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return str(v).strip().upper()


def get_settings(**overrides) -> Settings:
    """Load settings, letting explicit non-None ``overrides`` win."""
    values = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**values)
