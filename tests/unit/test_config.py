# ============================================================================
# FILE: tests/unit/test_config.py
# ============================================================================
"""
Settings defaults and environment overrides
"""

import pytest
from pydantic import ValidationError

from nanopore_ingestion.config import (
    BaseSettingsConfig,
    OllamaSettings,
    ThresholdSettings,
    VectorSettings,
)


def test_ollama_defaults():
    settings = OllamaSettings(_env_file=None)

    assert settings.OLLAMA_HOST == "http://localhost:11434"
    assert settings.EXTRACTION_TEMPERATURE == 0.1
    assert settings.EXTRACTION_MAX_TOKENS == 1000
    assert settings.ANSWER_TEMPERATURE == 0.2
    assert settings.ANSWER_MAX_TOKENS == 800
    assert settings.OLLAMA_TIMEOUT == 30


def test_vector_defaults():
    settings = VectorSettings(_env_file=None)

    assert settings.QDRANT_COLLECTION == "nanopore_docs"
    assert settings.VECTOR_SIZE == 768
    assert settings.SEARCH_SCORE_THRESHOLD == 0.7


def test_threshold_defaults():
    settings = ThresholdSettings(_env_file=None)

    assert settings.LOW_CONFIDENCE_WARNING == 0.5
    assert settings.VALIDATION_SUGGESTION_THRESHOLD == 0.8
    assert settings.LINES_PER_PAGE == 50


def test_environment_override(monkeypatch):
    monkeypatch.setenv("OLLAMA_HOST", "http://gpu-box:11434")
    monkeypatch.setenv("VECTOR_SIZE", "384")

    assert OllamaSettings(_env_file=None).OLLAMA_HOST == "http://gpu-box:11434"
    assert VectorSettings(_env_file=None).VECTOR_SIZE == 384


def test_out_of_range_rejected():
    with pytest.raises(ValidationError):
        VectorSettings(_env_file=None, SEARCH_SCORE_THRESHOLD=1.5)


def test_create_directories(tmp_path):
    settings = BaseSettingsConfig(
        _env_file=None,
        DATA_DIR=tmp_path / "data",
        JOB_DB_PATH=tmp_path / "db" / "jobs.db",
    )
    settings.create_directories()

    assert (tmp_path / "data").is_dir()
    assert (tmp_path / "db").is_dir()
