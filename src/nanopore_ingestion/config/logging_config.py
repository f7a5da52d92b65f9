# ============================================================================
# src/nanopore_ingestion/config/logging_config.py
# ============================================================================
"""
Logging Settings
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Emit logs as JSON lines"
    )
    LOG_FILE: Optional[Path] = Field(
        default=None,
        description="Optional log file path"
    )


logging_settings = LoggingSettings()
