"""
Convenient imports for all settings
"""

from .base_config import base_settings, BaseSettingsConfig
from .ollama_config import ollama_settings, OllamaSettings
from .vector_config import vector_settings, VectorSettings
from .thresholds_config import threshold_settings, ThresholdSettings
from .logging_config import logging_settings, LoggingSettings

__all__ = [
    "base_settings",
    "BaseSettingsConfig",
    "ollama_settings",
    "OllamaSettings",
    "vector_settings",
    "VectorSettings",
    "threshold_settings",
    "ThresholdSettings",
    "logging_settings",
    "LoggingSettings",
]
