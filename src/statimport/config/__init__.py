"""
Configuration management with typed Pydantic models.

Provides the sheet layout, store location and environment-aware
configuration loading.
"""

from statimport.config.loader import load_config
from statimport.config.settings import (
    AppConfig,
    DatabaseConfig,
    ImportConfig,
    LoggingConfig,
    TemplateConfig,
)

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "ImportConfig",
    "LoggingConfig",
    "TemplateConfig",
    "load_config",
]
