# ============================================================================
# src/nanopore_ingestion/config/base_config.py
# ============================================================================
"""
Base Configuration
- Data directory
- Template directory
- Job database
- Default processing template
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseSettingsConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Working directory for local databases"
    )

    TEMPLATES_DIR: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent / "templates",
        description="Directory containing processing template JSON files"
    )

    JOB_DB_PATH: Path = Field(
        default=Path("data/jobs.db"),
        description="SQLite database for extraction job records"
    )

    DEFAULT_TEMPLATE: str = Field(
        default="nanopore_sample_form",
        description="Template used when a submission does not name one"
    )

    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted PDF upload"
    )

    def create_directories(self):
        """Create data directories if they don't exist"""
        for directory in (self.DATA_DIR, self.JOB_DB_PATH.parent):
            directory.mkdir(parents=True, exist_ok=True)


base_settings = BaseSettingsConfig()
