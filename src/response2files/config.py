"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Parser configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Size guards
    max_response_size: int = Field(default=500_000, description="Max characters accepted by parse()")
    max_json_repair_size: int = Field(default=500_000, description="Max characters accepted by repair_json()")

    # Recovery
    aggressive_recovery: bool = Field(default=True)
    auto_repair_code: bool = Field(default=True, description="Run syntax auto-repair on JS/TS bodies")
    auto_repair_max_rounds: int = Field(default=3)

    # Extraction thresholds
    min_file_length: int = Field(default=10, description="Min cleaned length for JSON/fallback files")
    fallback_min_block_length: int = Field(default=50, description="Min length of an unlabeled code block")

    # Logging
    log_dir: Path = Field(default=Path("./logs"))
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "text", "both"] = Field(default="both")
    log_to_file: bool = Field(default=False)


def get_settings() -> Settings:
    """Get settings instance. Creates new instance each time to pick up env changes."""
    return Settings()


# Default singleton for convenience
settings = Settings()
