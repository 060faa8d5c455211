"""Configuration management for AI Credit News."""

from .loader import Config, load_config, load_sources, save_config, save_sources
from .models import (
    ConfigModel,
    DelayConfig,
    LLMConfig,
    LoggingConfig,
    PostgresConfig,
    ScrapeConfig,
    SourceConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "DelayConfig",
    "LLMConfig",
    "LoggingConfig",
    "PostgresConfig",
    "ScrapeConfig",
    "SourceConfig",
    "load_config",
    "load_sources",
    "save_config",
    "save_sources",
]
