"""
Runtime configuration for the MMR accumulator tools.

Settings are read from ``MMR_``-prefixed environment variables:

    from mmr_accumulator.config import get_settings

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mmr_accumulator.core.hashing import DIGEST_SIZE


class Settings(BaseSettings):
    """Settings for logging and the demo command line."""
    model_config = SettingsConfigDict(env_prefix="MMR_")

    log_level: str = Field(
        default="WARNING",
        description="Root log level (DEBUG/INFO/WARNING/ERROR).",
    )
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Format string passed to logging.basicConfig.",
    )
    digest_preview_bytes: int = Field(
        default=4,
        ge=1,
        le=DIGEST_SIZE,
        description="Digest bytes shown when printing the root chain.",
    )
    demo_rounds: int = Field(
        default=10,
        ge=1,
        description="Elements added by the demo command.",
    )
    color: bool = Field(
        default=True,
        description="Colorize command line output.",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        v = (v or "WARNING").upper()
        if v == "WARN":
            v = "WARNING"
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor for Settings."""
    return Settings()
